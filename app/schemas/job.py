"""Job schemas."""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.user import UserBrief

JobStatus = Literal["open", "closed"]


class JobCreate(BaseModel):
    """Request to post a job.

    Employees post for their own company; ``company_name`` is only needed
    when an admin posts on a company's behalf.
    """

    title: str = Field(..., min_length=3, description="Job title must be at least 3 characters")
    description: str = Field(..., min_length=10, description="Job description must be at least 10 characters")
    company_name: Optional[str] = Field(None, min_length=2)


class JobUpdate(BaseModel):
    """Partial job update."""

    title: Optional[str] = Field(None, min_length=3)
    description: Optional[str] = Field(None, min_length=10)
    company_name: Optional[str] = Field(None, min_length=2)
    status: Optional[JobStatus] = None


class ApplicationStatusCount(BaseModel):
    id: UUID
    status: str

    class Config:
        from_attributes = True


class JobResponse(BaseModel):
    """Job details response."""

    id: UUID
    title: str
    description: str
    company_name: str
    posted_by_user_id: UUID
    status: str
    created_at: datetime
    poster: Optional[UserBrief] = None

    class Config:
        from_attributes = True


class AdminJobResponse(JobResponse):
    """Job with its applications' states, for audits."""

    applications: List[ApplicationStatusCount] = Field(default_factory=list)
