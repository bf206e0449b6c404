"""
Application Lifecycle Engine

Takes a job application through its payment-gated lifecycle:

    NONE -> pending_payment -> pending -> accepted | rejected

The seeker drives three separate calls (initiate, request_payment,
confirm_payment) with an arbitrary delay between them while the payer goes
through checkout. Every call re-reads the persisted application and every
state change is a conditional UPDATE guarded on the state the call observed,
so a concurrent request that got there first makes the write match zero rows
instead of silently overwriting it.
"""

import asyncio
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.config import settings
from app.core.exceptions import (
    AlreadyPaid,
    ConcurrentUpdateError,
    DuplicateApplication,
    GatewayTimeout,
    GatewayUnavailable,
    IntentNotFound,
    JobNotOpen,
    NoPendingApplication,
    PaymentNotConfirmed,
)
from app.models.application import Application
from app.models.job import Job
from app.services.invoice_service import InvoiceRecorder
from app.services.payment_gateway import PaymentGateway, PaymentIntentResult
from app.utils.constants import (
    APPLICATION_PENDING,
    APPLICATION_PENDING_PAYMENT,
    JOB_STATUS_OPEN,
)

logger = structlog.get_logger(__name__)


@dataclass
class InitiatedApplication:
    application: Application
    payment_required: bool
    payment_amount: int


@dataclass
class PaymentRequest:
    client_secret: str
    payment_intent_id: str
    amount: int


@dataclass
class PaymentConfirmation:
    application_id: UUID
    amount: int
    replayed: bool = False


class ApplicationLifecycleService:
    """State machine for a single (job, applicant) application."""

    def __init__(
        self,
        db: AsyncSession,
        gateway: PaymentGateway,
        invoices: Optional[InvoiceRecorder] = None,
        fee: Optional[int] = None,
        gateway_timeout: Optional[float] = None,
    ):
        self.db = db
        self.gateway = gateway
        self.invoices = invoices or InvoiceRecorder(db)
        self.fee = fee if fee is not None else settings.APPLICATION_FEE
        self.gateway_timeout = (
            gateway_timeout if gateway_timeout is not None else settings.PAYMENT_GATEWAY_TIMEOUT_SECONDS
        )

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    async def _find_application(self, job_id: UUID, applicant_id: UUID) -> Optional[Application]:
        result = await self.db.execute(
            select(Application).where(
                Application.job_id == job_id,
                Application.user_id == applicant_id,
            )
            # Conditional updates bypass the identity map
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _require_unpaid_application(self, job_id: UUID, applicant_id: UUID) -> Application:
        """Application awaiting payment for the pair, or the matching error."""
        application = await self._find_application(job_id, applicant_id)
        if application is None:
            raise NoPendingApplication()
        if application.is_paid:
            raise AlreadyPaid()
        if application.status != APPLICATION_PENDING_PAYMENT:
            raise NoPendingApplication()
        return application

    # ------------------------------------------------------------------
    # Gateway calls
    # ------------------------------------------------------------------

    async def _with_timeout(self, operation: str, awaitable):
        try:
            return await asyncio.wait_for(awaitable, timeout=self.gateway_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                "payment_gateway_timeout",
                operation=operation,
                timeout_seconds=self.gateway_timeout,
            )
            raise GatewayTimeout()

    @retry(
        stop=stop_after_attempt(settings.PAYMENT_GATEWAY_MAX_ATTEMPTS),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
        retry=retry_if_exception_type(GatewayUnavailable),
        reraise=True,
    )
    async def _create_intent(self) -> PaymentIntentResult:
        return await self._with_timeout("create_intent", self.gateway.create_intent(self.fee))

    # ------------------------------------------------------------------
    # Lifecycle steps
    # ------------------------------------------------------------------

    async def initiate(self, job_id: UUID, applicant_id: UUID, resume_ref: str) -> InitiatedApplication:
        """Create the application in ``pending_payment``.

        Raises:
            JobNotOpen: job missing or closed.
            DuplicateApplication: the applicant already applied to this job.
        """
        job = await self.db.get(Job, job_id)
        if job is None or job.status != JOB_STATUS_OPEN:
            raise JobNotOpen()

        if await self._find_application(job_id, applicant_id) is not None:
            raise DuplicateApplication()

        application = Application(
            job_id=job_id,
            user_id=applicant_id,
            resume_file_url=resume_ref,
            status=APPLICATION_PENDING_PAYMENT,
            is_paid=False,
        )
        self.db.add(application)
        try:
            await self.db.commit()
        except IntegrityError:
            # Lost a concurrent initiate for the same pair
            await self.db.rollback()
            raise DuplicateApplication()

        logger.info(
            "application_initiated",
            application_id=str(application.id),
            job_id=str(job_id),
            user_id=str(applicant_id),
        )
        return InitiatedApplication(
            application=application,
            payment_required=True,
            payment_amount=self.fee,
        )

    async def request_payment(self, job_id: UUID, applicant_id: UUID) -> PaymentRequest:
        """Issue a fresh payment intent for the pending application.

        Calling again before confirmation re-issues: the new intent replaces
        the stored one and the previous intent is canceled at the gateway.
        """
        application = await self._require_unpaid_application(job_id, applicant_id)
        application_id = application.id
        previous_intent_id = application.payment_intent_id

        try:
            intent = await self._create_intent()

            # Intent rows are written before the application row, matching confirm_payment
            if previous_intent_id and previous_intent_id != intent.intent_id:
                await self._with_timeout("cancel_intent", self.gateway.cancel_intent(previous_intent_id))

            result = await self.db.execute(
                update(Application)
                .where(
                    Application.id == application_id,
                    Application.status == APPLICATION_PENDING_PAYMENT,
                    Application.is_paid.is_(False),
                )
                .values(payment_intent_id=intent.intent_id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                # Paid by a concurrent confirmation in the meantime
                raise AlreadyPaid()

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "payment_intent_issued",
            application_id=str(application_id),
            intent_id=intent.intent_id,
            replaced_intent_id=previous_intent_id,
        )
        return PaymentRequest(
            client_secret=intent.client_secret,
            payment_intent_id=intent.intent_id,
            amount=self.fee,
        )

    async def confirm_payment(self, job_id: UUID, applicant_id: UUID, intent_id: str) -> PaymentConfirmation:
        """Confirm the payment and finalize the application.

        The paid flag, the status flip and the invoice are committed in one
        transaction; if any part fails the application stays unpaid.
        Re-confirming the intent that already paid the application returns
        success again without writing anything.
        """
        application = await self._find_application(job_id, applicant_id)
        if application is None:
            raise NoPendingApplication()
        # Rollback expires ORM instances, keep plain values for logging
        application_id = application.id

        if application.is_paid:
            if intent_id == application.payment_intent_id:
                invoice = await self.invoices.get_for_application(application_id)
                if invoice is not None:
                    logger.info(
                        "payment_confirmation_replayed",
                        application_id=str(application_id),
                        intent_id=intent_id,
                    )
                    return PaymentConfirmation(
                        application_id=application_id,
                        amount=invoice.payment_amount,
                        replayed=True,
                    )
            raise AlreadyPaid()

        if application.status != APPLICATION_PENDING_PAYMENT:
            raise NoPendingApplication()

        if not application.payment_intent_id or intent_id != application.payment_intent_id:
            # Unknown to this application, or superseded by a newer intent
            raise IntentNotFound()

        try:
            confirmed = await self._with_timeout("confirm_intent", self.gateway.confirm_intent(intent_id))
            if not confirmed:
                logger.info(
                    "payment_declined",
                    application_id=str(application_id),
                    intent_id=intent_id,
                )
                raise PaymentNotConfirmed()

            result = await self.db.execute(
                update(Application)
                .where(
                    Application.id == application_id,
                    Application.status == APPLICATION_PENDING_PAYMENT,
                    Application.is_paid.is_(False),
                    Application.payment_intent_id == intent_id,
                )
                .values(
                    is_paid=True,
                    status=APPLICATION_PENDING,
                    payment_intent_id=intent_id,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise ConcurrentUpdateError()

            await self.invoices.record(
                application_id=application_id,
                user_id=applicant_id,
                amount=self.fee,
                intent_id=intent_id,
            )
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            if isinstance(e, ConcurrentUpdateError):
                logger.error(
                    "payment_confirmation_race_lost",
                    application_id=str(application_id),
                    intent_id=intent_id,
                )
            raise

        logger.info(
            "payment_confirmed",
            application_id=str(application_id),
            intent_id=intent_id,
            amount=self.fee,
        )
        return PaymentConfirmation(application_id=application_id, amount=self.fee)
