"""Invoice model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import relationship

from app.db.base import Base


class Invoice(Base):
    """Financial record of a successful application payment."""

    __tablename__ = "invoices"

    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    application_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,  # One invoice per application
        index=True,
    )
    payment_amount = Column(Integer, nullable=False, default=100)
    payment_status = Column(String(20), nullable=False, default="success", index=True)  # success, failed, refunded
    payment_intent_id = Column(String(255), nullable=True, index=True)
    paid_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    # Relationships
    application = relationship("Application", back_populates="invoice")

    def __repr__(self):
        return f"<Invoice {self.application_id} {self.payment_amount} ({self.payment_status})>"
