"""Admin audit schemas."""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from app.schemas.application import ApplicationResponse, InvoiceResponse
from app.schemas.user import UserBrief


class JobBrief(BaseModel):
    title: str
    company_name: str

    class Config:
        from_attributes = True


class AdminApplicationResponse(ApplicationResponse):
    job: Optional[JobBrief] = None
    applicant: Optional[UserBrief] = None


class PaymentAnalytics(BaseModel):
    total_revenue: int
    successful_payments: int
    pending_payments: int


class JobAnalytics(BaseModel):
    job_id: UUID
    job_title: str
    status: str
    total_applications: int
    created_at: datetime


class RecentApplication(BaseModel):
    application_id: UUID
    job_id: UUID
    status: str
    is_paid: bool
    created_at: datetime
    invoice: Optional[InvoiceResponse] = None

    class Config:
        from_attributes = True


class CompanyAnalyticsResponse(BaseModel):
    company_name: str
    total_jobs: int
    active_jobs: int
    closed_jobs: int
    total_applications: int
    applications_by_status: Dict[str, int]
    payment_analytics: PaymentAnalytics
    job_analytics: List[JobAnalytics]
    recent_applications: List[RecentApplication]
