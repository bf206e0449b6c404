"""
Review Workflow

Employer-side handling of paid applications. Only the job's poster (or an
admin) may see or decide on applications to that job, and a decision is
one-shot: ``pending -> accepted | rejected``.
"""

from dataclasses import dataclass
from typing import List, Optional
from uuid import UUID

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.attributes import set_committed_value

from app.core.exceptions import InvalidStatus, NotReviewable, Unauthorized
from app.core.security import (
    Principal,
    can_manage_job,
    can_review_application,
    can_view_application,
)
from app.models.application import Application
from app.models.invoice import Invoice
from app.models.job import Job
from app.utils.constants import APPLICATION_PENDING, REVIEW_OUTCOMES
from app.utils.helpers import index_by

logger = structlog.get_logger(__name__)


@dataclass
class ApplicationWithInvoice:
    application: Application
    invoice: Optional[Invoice]


class ReviewService:
    """Post-payment employer actions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load_application(self, application_id: UUID) -> Optional[Application]:
        result = await self.db.execute(
            select(Application)
            .options(
                selectinload(Application.job).selectinload(Job.poster),
                selectinload(Application.applicant),
            )
            .where(Application.id == application_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _invoices_for(self, application_ids: List[UUID]) -> dict:
        if not application_ids:
            return {}
        result = await self.db.execute(
            select(Invoice).where(Invoice.application_id.in_(application_ids))
        )
        return index_by(result.scalars().all(), "application_id")

    async def list_for_job(self, job_id: UUID, principal: Principal) -> List[Application]:
        """Applications to one job, newest first."""
        job = await self.db.get(Job, job_id)
        if job is None or not can_manage_job(principal, job):
            raise Unauthorized("Job not found or unauthorized")

        result = await self.db.execute(
            select(Application)
            .options(selectinload(Application.applicant))
            .where(Application.job_id == job_id)
            .order_by(Application.created_at.desc())
        )
        return list(result.scalars().all())

    async def set_status(self, application_id: UUID, principal: Principal, new_status: str) -> Application:
        """Record the employer's decision on a paid application.

        Raises:
            InvalidStatus: ``new_status`` is not a review outcome.
            Unauthorized: unknown application or requester does not own its job.
            NotReviewable: payment not completed yet, or already decided.
        """
        if new_status not in REVIEW_OUTCOMES:
            raise InvalidStatus()

        application = await self._load_application(application_id)
        if application is None or not can_review_application(principal, application.job):
            raise Unauthorized("Application not found or unauthorized")

        if application.status != APPLICATION_PENDING:
            raise NotReviewable()

        result = await self.db.execute(
            update(Application)
            .where(
                Application.id == application_id,
                Application.status == APPLICATION_PENDING,
            )
            .values(status=new_status)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await self.db.rollback()
            logger.warning("review_race_lost", application_id=str(application_id))
            raise NotReviewable()

        await self.db.commit()
        set_committed_value(application, "status", new_status)

        logger.info(
            "application_reviewed",
            application_id=str(application_id),
            status=new_status,
            reviewer_id=str(principal.user_id),
        )
        return application

    async def list_for_employer(self, principal: Principal) -> List[ApplicationWithInvoice]:
        """Every application to jobs the principal posted, with invoices."""
        result = await self.db.execute(
            select(Application)
            .join(Job, Application.job_id == Job.id)
            .options(
                selectinload(Application.job).selectinload(Job.poster),
                selectinload(Application.applicant),
            )
            .where(Job.posted_by_user_id == principal.user_id)
            .order_by(Application.created_at.desc())
        )
        applications = list(result.scalars().all())
        invoices = await self._invoices_for([a.id for a in applications])
        return [ApplicationWithInvoice(a, invoices.get(a.id)) for a in applications]

    async def get_details(self, application_id: UUID, principal: Principal) -> ApplicationWithInvoice:
        """Single application as seen by its applicant, the job poster or an admin."""
        application = await self._load_application(application_id)
        if application is None or not can_view_application(principal, application, application.job):
            raise Unauthorized("Application not found or unauthorized")

        invoices = await self._invoices_for([application.id])
        return ApplicationWithInvoice(application, invoices.get(application.id))
