"""Application endpoints - apply, pay, review."""

from typing import List
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, File, UploadFile, status

from app.api.deps import (
    Principal,
    get_current_principal,
    get_lifecycle_service,
    get_review_service,
    require_job_poster,
    require_job_seeker,
)
from app.core.exceptions import IdentityMismatch
from app.core.security import is_self
from app.schemas.application import (
    ApplicationDetailResponse,
    ApplicationResponse,
    ApplicationStatusUpdate,
    ApplicationWithApplicant,
    ConfirmPaymentRequest,
    ConfirmPaymentResponse,
    InitiateApplicationResponse,
    InvoiceResponse,
    PaymentIntentResponse,
)
from app.schemas.job import JobResponse
from app.services.application_lifecycle import ApplicationLifecycleService
from app.services.resume_storage import ResumeStorage, get_resume_storage
from app.services.review_service import ApplicationWithInvoice, ReviewService
from app.utils.helpers import payment_status_label

logger = structlog.get_logger(__name__)

router = APIRouter()


def _ensure_self(principal: Principal, user_id: UUID) -> None:
    if not is_self(principal, user_id):
        logger.warning(
            "application_identity_mismatch",
            principal_id=str(principal.user_id),
            path_user_id=str(user_id),
        )
        raise IdentityMismatch()


def _detail_response(item: ApplicationWithInvoice, fee_fallback: int) -> ApplicationDetailResponse:
    application = item.application
    return ApplicationDetailResponse(
        **ApplicationWithApplicant.model_validate(application).model_dump(),
        job=JobResponse.model_validate(application.job) if application.job else None,
        invoice=InvoiceResponse.model_validate(item.invoice) if item.invoice else None,
        payment_status=payment_status_label(application.is_paid),
        payment_amount=item.invoice.payment_amount if item.invoice else fee_fallback,
    )


# ==================== Seeker: apply and pay ====================

@router.post(
    "/{job_id}/{user_id}/initiate",
    response_model=InitiateApplicationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def initiate_application(
    job_id: UUID,
    user_id: UUID,
    resume: UploadFile = File(None),
    principal: Principal = Depends(require_job_seeker),
    lifecycle: ApplicationLifecycleService = Depends(get_lifecycle_service),
    storage: ResumeStorage = Depends(get_resume_storage),
):
    """Create an application awaiting payment. The resume is uploaded as multipart ``resume``."""
    _ensure_self(principal, user_id)

    resume_ref = await storage.save(resume)
    try:
        result = await lifecycle.initiate(job_id, user_id, resume_ref)
    except Exception:
        storage.delete(resume_ref)
        raise

    return InitiateApplicationResponse(
        message="Application initiated. Please complete payment.",
        application=ApplicationResponse.model_validate(result.application),
        payment_required=result.payment_required,
        payment_amount=result.payment_amount,
    )


@router.post("/{job_id}/{user_id}/payment", response_model=PaymentIntentResponse)
async def create_payment(
    job_id: UUID,
    user_id: UUID,
    principal: Principal = Depends(require_job_seeker),
    lifecycle: ApplicationLifecycleService = Depends(get_lifecycle_service),
):
    """Issue a payment intent for the pending application."""
    _ensure_self(principal, user_id)

    payment = await lifecycle.request_payment(job_id, user_id)
    return PaymentIntentResponse(
        clientSecret=payment.client_secret,
        paymentIntentId=payment.payment_intent_id,
        amount=payment.amount,
        message="Payment intent created",
    )


@router.post("/{job_id}/{user_id}/confirm-payment", response_model=ConfirmPaymentResponse)
async def confirm_payment(
    job_id: UUID,
    user_id: UUID,
    request: ConfirmPaymentRequest,
    principal: Principal = Depends(require_job_seeker),
    lifecycle: ApplicationLifecycleService = Depends(get_lifecycle_service),
):
    """Confirm the payment and submit the application for review."""
    _ensure_self(principal, user_id)

    confirmation = await lifecycle.confirm_payment(job_id, user_id, request.paymentIntentId)
    return ConfirmPaymentResponse(
        message="Payment confirmed. Application submitted successfully.",
        application_id=confirmation.application_id,
        amount=confirmation.amount,
    )


# ==================== Employer: review ====================

@router.get("/job/{job_id}", response_model=List[ApplicationWithApplicant])
async def list_job_applications(
    job_id: UUID,
    principal: Principal = Depends(require_job_poster),
    reviews: ReviewService = Depends(get_review_service),
):
    """Applications to one of the caller's jobs, newest first."""
    return await reviews.list_for_job(job_id, principal)


@router.get("/user/applications", response_model=List[ApplicationDetailResponse])
async def list_employer_applications(
    principal: Principal = Depends(require_job_poster),
    reviews: ReviewService = Depends(get_review_service),
    lifecycle: ApplicationLifecycleService = Depends(get_lifecycle_service),
):
    """Every application to jobs the caller posted."""
    items = await reviews.list_for_employer(principal)
    return [_detail_response(item, lifecycle.fee) for item in items]


@router.put("/{application_id}/status", response_model=ApplicationResponse)
async def update_application_status(
    application_id: UUID,
    request: ApplicationStatusUpdate,
    principal: Principal = Depends(require_job_poster),
    reviews: ReviewService = Depends(get_review_service),
):
    """Accept or reject a paid application."""
    return await reviews.set_status(application_id, principal, request.status)


@router.get("/{application_id}", response_model=ApplicationDetailResponse)
async def get_application(
    application_id: UUID,
    principal: Principal = Depends(get_current_principal),
    reviews: ReviewService = Depends(get_review_service),
    lifecycle: ApplicationLifecycleService = Depends(get_lifecycle_service),
):
    """Application details for its applicant, the job's poster or an admin."""
    item = await reviews.get_details(application_id, principal)
    return _detail_response(item, lifecycle.fee)
