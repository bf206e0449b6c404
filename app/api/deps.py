"""
API Dependencies
Common dependencies for API endpoints (sessions, principals, services).
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import (
    Principal,
    Role,
    get_current_principal,
    get_current_user,
    require_role,
)
from app.db.session import get_db
from app.services import payment_gateway
from app.services.application_lifecycle import ApplicationLifecycleService
from app.services.payment_gateway import PaymentGateway
from app.services.review_service import ReviewService

__all__ = [
    "Principal",
    "Role",
    "get_current_principal",
    "get_current_user",
    "get_db",
    "get_lifecycle_service",
    "get_payment_gateway",
    "get_review_service",
    "require_admin",
    "require_job_poster",
    "require_job_seeker",
]

# Role gates
require_admin = require_role(Role.ADMIN)
require_job_poster = require_role(Role.EMPLOYEE, Role.ADMIN)
require_job_seeker = require_role(Role.JOB_SEEKER)


async def get_payment_gateway(db: AsyncSession = Depends(get_db)) -> PaymentGateway:
    """Configured payment gateway bound to the request session."""
    return payment_gateway.get_payment_gateway(db)


async def get_lifecycle_service(
    db: AsyncSession = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
) -> ApplicationLifecycleService:
    return ApplicationLifecycleService(db, gateway)


async def get_review_service(db: AsyncSession = Depends(get_db)) -> ReviewService:
    return ReviewService(db)
