"""Admin audit endpoints: every application and job, per-company analytics."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.deps import Principal, get_db, require_admin
from app.models.application import Application
from app.models.job import Job
from app.schemas.admin import AdminApplicationResponse, CompanyAnalyticsResponse
from app.schemas.job import AdminJobResponse
from app.services.analytics_service import get_company_analytics
from app.utils.constants import APPLICATION_STATUSES, JOB_STATUSES
from app.utils.validators import validate_status_filter

router = APIRouter()


# ==================== Applications ====================

@router.get("/applications", response_model=List[AdminApplicationResponse])
async def list_all_applications(
    company: Optional[str] = Query(None, description="Filter by company"),
    status: Optional[str] = Query(None, description="Filter by application status"),
    job_id: Optional[UUID] = Query(None, description="Filter by job"),
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    """All applications with job and applicant, newest first."""
    query = (
        select(Application)
        .join(Job, Application.job_id == Job.id)
        .options(selectinload(Application.job), selectinload(Application.applicant))
        .order_by(Application.created_at.desc())
    )
    if company:
        query = query.where(Job.company_name == company)
    if status:
        validate_status_filter(status, APPLICATION_STATUSES)
        query = query.where(Application.status == status)
    if job_id:
        query = query.where(Application.job_id == job_id)

    result = await db.execute(query)
    return list(result.scalars().all())


# ==================== Jobs ====================

@router.get("/jobs", response_model=List[AdminJobResponse])
async def list_all_jobs(
    company: Optional[str] = Query(None, description="Filter by company"),
    status: Optional[str] = Query(None, description="Filter by job status"),
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    """All jobs with poster and application states."""
    query = (
        select(Job)
        .options(selectinload(Job.poster), selectinload(Job.applications))
        .order_by(Job.created_at.desc())
    )
    if company:
        query = query.where(Job.company_name == company)
    if status:
        validate_status_filter(status, JOB_STATUSES)
        query = query.where(Job.status == status)

    result = await db.execute(query)
    return list(result.scalars().all())


# ==================== Analytics ====================

@router.get("/analytics", response_model=CompanyAnalyticsResponse)
async def company_analytics(
    company: str = Query(..., min_length=1, description="Company name"),
    db: AsyncSession = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    """Jobs, applications and payments for one company."""
    return await get_company_analytics(db, company)
