"""Payment intent model."""

from sqlalchemy import Column, Integer, String

from app.db.base import Base


class PaymentIntent(Base):
    """Intent registry for the simulated payment processor."""

    __tablename__ = "payment_intents"

    intent_id = Column(String(255), unique=True, index=True, nullable=False)
    client_secret = Column(String(255), nullable=False)
    amount = Column(Integer, nullable=False)  # Minor units (fee * 100)
    currency = Column(String(10), nullable=False, default="bdt")
    status = Column(String(30), nullable=False, default="requires_confirmation")  # requires_confirmation, succeeded, canceled

    def __repr__(self):
        return f"<PaymentIntent {self.intent_id} ({self.status})>"
