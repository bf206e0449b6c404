"""Job endpoints - browse, post and manage jobs."""

from typing import List, Optional
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.api.deps import Principal, get_current_principal, get_db, require_job_poster
from app.core.exceptions import Unauthorized
from app.core.security import Role, can_manage_job
from app.models.job import Job
from app.schemas.job import JobCreate, JobResponse, JobUpdate
from app.schemas.user import MessageResponse
from app.utils.constants import JOB_STATUS_OPEN, JOB_STATUSES
from app.utils.validators import validate_status_filter

logger = structlog.get_logger(__name__)

router = APIRouter()


def _with_poster(query):
    return query.options(selectinload(Job.poster))


async def _get_manageable_job(db: AsyncSession, job_id: UUID, principal: Principal) -> Job:
    result = await db.execute(_with_poster(select(Job).where(Job.id == job_id)))
    job = result.scalar_one_or_none()
    if job is None or not can_manage_job(principal, job):
        raise Unauthorized("Job not found or unauthorized")
    return job


@router.get("/", response_model=List[JobResponse])
async def list_jobs(
    status_filter: Optional[str] = Query(JOB_STATUS_OPEN, alias="status", description="open or closed"),
    company: Optional[str] = Query(None, description="Filter by company"),
    db: AsyncSession = Depends(get_db),
):
    """Public job board, newest first."""
    query = _with_poster(select(Job)).order_by(Job.created_at.desc())
    if status_filter:
        validate_status_filter(status_filter, JOB_STATUSES)
        query = query.where(Job.status == status_filter)
    if company:
        query = query.where(Job.company_name == company)

    result = await db.execute(query)
    return list(result.scalars().all())


@router.get("/employee/jobs", response_model=List[JobResponse])
async def list_my_jobs(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_job_poster),
):
    """Jobs posted by the current user."""
    result = await db.execute(
        _with_poster(select(Job))
        .where(Job.posted_by_user_id == principal.user_id)
        .order_by(Job.created_at.desc())
    )
    return list(result.scalars().all())


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: UUID, db: AsyncSession = Depends(get_db)):
    """Get a single job."""
    result = await db.execute(_with_poster(select(Job).where(Job.id == job_id)))
    job = result.scalar_one_or_none()
    if job is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Job not found")
    return job


@router.post("/", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    request: JobCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_job_poster),
):
    """Post a job. Employees always post under their own company."""
    if principal.role == Role.EMPLOYEE:
        company_name = principal.company_name
    else:
        company_name = request.company_name

    if not company_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Company name is required",
        )

    job = Job(
        title=request.title,
        description=request.description,
        company_name=company_name,
        posted_by_user_id=principal.user_id,
        status=JOB_STATUS_OPEN,
    )
    db.add(job)
    await db.commit()

    result = await db.execute(_with_poster(select(Job).where(Job.id == job.id)))
    job = result.scalar_one()
    logger.info("job_created", job_id=str(job.id), company=company_name, posted_by=str(principal.user_id))
    return job


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(
    job_id: UUID,
    request: JobUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Update a job (poster or admin)."""
    job = await _get_manageable_job(db, job_id, principal)
    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    if principal.role != Role.ADMIN:
        changes.pop("company_name", None)

    for field, value in changes.items():
        setattr(job, field, value)
    await db.commit()

    logger.info("job_updated", job_id=str(job_id), fields=sorted(changes))
    return job


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(
    job_id: UUID,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    """Delete a job and its applications (poster or admin)."""
    job = await _get_manageable_job(db, job_id, principal)
    await db.delete(job)
    await db.commit()

    logger.info("job_deleted", job_id=str(job_id), deleted_by=str(principal.user_id))
    return MessageResponse(message="Job deleted successfully")
