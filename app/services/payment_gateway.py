"""
Payment Gateway Adapter

Two-call payment protocol used by the application lifecycle:

1. ``create_intent(amount)`` registers a charge and returns the client secret
   the payer's checkout UI needs, plus the intent id.
2. ``confirm_intent(intent_id)`` confirms the charge once the payer has gone
   through checkout. ``False`` means the payment was declined and may be
   retried; unknown or superseded intents raise ``IntentNotFound``.

Confirming an intent that already succeeded returns ``True`` again without
side effects, so a client may safely retry after a dropped response.

Implementations:
- ``DatabasePaymentGateway``: simulated processor whose intent registry lives
  in the ``payment_intents`` table, so every worker process sees the same
  intents.
- ``InMemoryPaymentGateway``: test double, process-local.
"""

import secrets
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Optional, Set

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import IntentNotFound
from app.models.payment_intent import PaymentIntent
from app.utils.constants import (
    INTENT_CANCELED,
    INTENT_REQUIRES_CONFIRMATION,
    INTENT_SUCCEEDED,
)

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PaymentIntentResult:
    """What the payer needs to complete checkout."""

    client_secret: str
    intent_id: str


def _new_intent_credentials() -> PaymentIntentResult:
    intent_id = f"pi_{secrets.token_hex(12)}"
    client_secret = f"{intent_id}_secret_{secrets.token_urlsafe(18)}"
    return PaymentIntentResult(client_secret=client_secret, intent_id=intent_id)


def to_minor_units(amount: int) -> int:
    """Fee units to the processor's smallest currency unit."""
    return amount * 100


class PaymentGateway(ABC):
    """Abstract payment processor."""

    @abstractmethod
    async def create_intent(self, amount: int) -> PaymentIntentResult:
        """Register a pending charge of ``amount`` fee units."""

    @abstractmethod
    async def confirm_intent(self, intent_id: str) -> bool:
        """Confirm a charge; False when the processor declines it."""

    @abstractmethod
    async def cancel_intent(self, intent_id: str) -> None:
        """Invalidate an intent that has been superseded by a newer one."""


class DatabasePaymentGateway(PaymentGateway):
    """Simulated processor backed by the ``payment_intents`` table.

    Shares the caller's session so intent bookkeeping commits or rolls back
    together with the application row it belongs to.
    """

    def __init__(self, db: AsyncSession, currency: Optional[str] = None):
        self.db = db
        self.currency = currency or settings.PAYMENT_CURRENCY

    async def create_intent(self, amount: int) -> PaymentIntentResult:
        result = _new_intent_credentials()
        self.db.add(
            PaymentIntent(
                intent_id=result.intent_id,
                client_secret=result.client_secret,
                amount=to_minor_units(amount),
                currency=self.currency,
                status=INTENT_REQUIRES_CONFIRMATION,
            )
        )
        await self.db.flush()
        logger.info("payment_intent_created", intent_id=result.intent_id, amount=amount)
        return result

    async def confirm_intent(self, intent_id: str) -> bool:
        row = await self.db.execute(
            select(PaymentIntent).where(PaymentIntent.intent_id == intent_id)
        )
        intent = row.scalar_one_or_none()
        if intent is None or intent.status == INTENT_CANCELED:
            raise IntentNotFound()

        if intent.status == INTENT_SUCCEEDED:
            return True

        await self.db.execute(
            update(PaymentIntent)
            .where(
                PaymentIntent.intent_id == intent_id,
                PaymentIntent.status == INTENT_REQUIRES_CONFIRMATION,
            )
            .values(status=INTENT_SUCCEEDED)
        )
        logger.info("payment_intent_succeeded", intent_id=intent_id)
        return True

    async def cancel_intent(self, intent_id: str) -> None:
        await self.db.execute(
            update(PaymentIntent)
            .where(
                PaymentIntent.intent_id == intent_id,
                PaymentIntent.status == INTENT_REQUIRES_CONFIRMATION,
            )
            .values(status=INTENT_CANCELED)
        )
        logger.info("payment_intent_canceled", intent_id=intent_id)


@dataclass
class InMemoryPaymentGateway(PaymentGateway):
    """Process-local gateway for tests.

    ``decline`` holds intent ids the processor should refuse.
    """

    intents: Dict[str, dict] = field(default_factory=dict)
    decline: Set[str] = field(default_factory=set)
    confirm_calls: int = 0

    async def create_intent(self, amount: int) -> PaymentIntentResult:
        result = _new_intent_credentials()
        self.intents[result.intent_id] = {
            "id": result.intent_id,
            "status": INTENT_REQUIRES_CONFIRMATION,
            "amount": to_minor_units(amount),
            "client_secret": result.client_secret,
        }
        return result

    async def confirm_intent(self, intent_id: str) -> bool:
        self.confirm_calls += 1
        intent = self.intents.get(intent_id)
        if intent is None or intent["status"] == INTENT_CANCELED:
            raise IntentNotFound()
        if intent["status"] == INTENT_SUCCEEDED:
            return True
        if intent_id in self.decline:
            return False
        intent["status"] = INTENT_SUCCEEDED
        return True

    async def cancel_intent(self, intent_id: str) -> None:
        intent = self.intents.get(intent_id)
        if intent is not None and intent["status"] == INTENT_REQUIRES_CONFIRMATION:
            intent["status"] = INTENT_CANCELED


def get_payment_gateway(db: AsyncSession) -> PaymentGateway:
    """Gateway selected by ``PAYMENT_GATEWAY``."""
    gateway_type = settings.PAYMENT_GATEWAY.lower()
    if gateway_type == "database":
        return DatabasePaymentGateway(db)
    if gateway_type == "memory":
        return _shared_memory_gateway
    raise ValueError(f"Unknown payment gateway: {settings.PAYMENT_GATEWAY}")


_shared_memory_gateway = InMemoryPaymentGateway()
