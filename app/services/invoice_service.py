"""Invoice Recorder - one financial record per paid application."""

from datetime import datetime
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import DuplicateInvoice
from app.models.invoice import Invoice
from app.utils.constants import PAYMENT_STATUS_SUCCESS

logger = structlog.get_logger(__name__)


class InvoiceRecorder:
    """Writes invoices inside the caller's transaction.

    The recorder never commits; the lifecycle engine commits the invoice
    together with the application's paid flag.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_for_application(self, application_id: UUID) -> Invoice | None:
        result = await self.db.execute(
            select(Invoice).where(Invoice.application_id == application_id)
        )
        return result.scalar_one_or_none()

    async def record(
        self,
        application_id: UUID,
        user_id: UUID,
        amount: int,
        intent_id: str,
    ) -> Invoice:
        """Create the invoice for a freshly paid application.

        Raises:
            DuplicateInvoice: an invoice already exists for the application,
                either found up front or rejected by the unique constraint.
        """
        if await self.get_for_application(application_id) is not None:
            logger.error("duplicate_invoice_detected", application_id=str(application_id))
            raise DuplicateInvoice()

        invoice = Invoice(
            user_id=user_id,
            application_id=application_id,
            payment_amount=amount,
            payment_status=PAYMENT_STATUS_SUCCESS,
            payment_intent_id=intent_id,
            paid_at=datetime.utcnow(),
        )
        self.db.add(invoice)
        try:
            await self.db.flush()
        except IntegrityError as e:
            logger.error(
                "duplicate_invoice_constraint",
                application_id=str(application_id),
                error=str(e.orig),
            )
            raise DuplicateInvoice() from e

        logger.info(
            "invoice_recorded",
            invoice_id=str(invoice.id),
            application_id=str(application_id),
            amount=amount,
        )
        return invoice
