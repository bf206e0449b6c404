"""Per-company audit analytics for administrators."""

from typing import Any, Dict

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.application import Application
from app.models.invoice import Invoice
from app.models.job import Job
from app.utils.constants import (
    APPLICATION_ACCEPTED,
    APPLICATION_PENDING,
    APPLICATION_REJECTED,
    JOB_STATUS_CLOSED,
    JOB_STATUS_OPEN,
    PAYMENT_STATUS_SUCCESS,
)
from app.utils.helpers import index_by

logger = structlog.get_logger(__name__)

RECENT_APPLICATIONS_LIMIT = 5


async def get_company_analytics(db: AsyncSession, company: str) -> Dict[str, Any]:
    """Jobs, applications and payment totals for one company."""
    jobs_result = await db.execute(
        select(Job).where(Job.company_name == company).order_by(Job.created_at.desc())
    )
    jobs = list(jobs_result.scalars().all())
    job_ids = [job.id for job in jobs]

    applications = []
    if job_ids:
        apps_result = await db.execute(
            select(Application).where(Application.job_id.in_(job_ids))
        )
        applications = list(apps_result.scalars().all())

    invoice_map = {}
    if applications:
        invoices_result = await db.execute(
            select(Invoice).where(Invoice.application_id.in_([a.id for a in applications]))
        )
        invoice_map = index_by(invoices_result.scalars().all(), "application_id")

    def count_status(status: str) -> int:
        return sum(1 for a in applications if a.status == status)

    recent = sorted(applications, key=lambda a: a.created_at, reverse=True)[:RECENT_APPLICATIONS_LIMIT]

    analytics = {
        "company_name": company,
        "total_jobs": len(jobs),
        "active_jobs": sum(1 for j in jobs if j.status == JOB_STATUS_OPEN),
        "closed_jobs": sum(1 for j in jobs if j.status == JOB_STATUS_CLOSED),
        "total_applications": len(applications),
        "applications_by_status": {
            APPLICATION_PENDING: count_status(APPLICATION_PENDING),
            APPLICATION_ACCEPTED: count_status(APPLICATION_ACCEPTED),
            APPLICATION_REJECTED: count_status(APPLICATION_REJECTED),
        },
        "payment_analytics": {
            "total_revenue": sum(inv.payment_amount for inv in invoice_map.values()),
            "successful_payments": sum(
                1 for inv in invoice_map.values() if inv.payment_status == PAYMENT_STATUS_SUCCESS
            ),
            "pending_payments": sum(1 for a in applications if not a.is_paid),
        },
        "job_analytics": [
            {
                "job_id": job.id,
                "job_title": job.title,
                "status": job.status,
                "total_applications": sum(1 for a in applications if a.job_id == job.id),
                "created_at": job.created_at,
            }
            for job in jobs
        ],
        "recent_applications": [
            {
                "application_id": a.id,
                "job_id": a.job_id,
                "status": a.status,
                "is_paid": a.is_paid,
                "created_at": a.created_at,
                "invoice": invoice_map.get(a.id),
            }
            for a in recent
        ],
    }
    logger.info("company_analytics_computed", company=company, total_jobs=len(jobs))
    return analytics
