"""Application, payment and invoice schemas."""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.schemas.job import JobResponse
from app.schemas.user import UserBrief


class InvoiceResponse(BaseModel):
    id: UUID
    user_id: Optional[UUID] = None
    application_id: UUID
    payment_amount: int
    payment_status: str
    payment_intent_id: Optional[str] = None
    paid_at: datetime

    class Config:
        from_attributes = True


class ApplicationResponse(BaseModel):
    id: UUID
    job_id: UUID
    user_id: UUID
    resume_file_url: str
    status: str
    is_paid: bool
    payment_intent_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ApplicationWithApplicant(ApplicationResponse):
    applicant: Optional[UserBrief] = None


class InitiateApplicationResponse(BaseModel):
    message: str
    application: ApplicationResponse
    payment_required: bool
    payment_amount: int


class PaymentIntentResponse(BaseModel):
    clientSecret: str
    paymentIntentId: str
    amount: int
    message: str


class ConfirmPaymentRequest(BaseModel):
    paymentIntentId: str = Field(..., min_length=1)


class ConfirmPaymentResponse(BaseModel):
    message: str
    application_id: UUID
    amount: int


class ApplicationStatusUpdate(BaseModel):
    """Employer decision. Anything other than accepted/rejected is a 400."""

    status: str


class ApplicationDetailResponse(ApplicationWithApplicant):
    job: Optional[JobResponse] = None
    invoice: Optional[InvoiceResponse] = None
    payment_status: Literal["paid", "pending"]
    payment_amount: int
