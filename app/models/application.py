"""Application model."""

from sqlalchemy import Boolean, Column, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from app.db.base import Base


class Application(Base):
    """Job application model.

    ``status`` and ``is_paid`` move together: an application is unpaid only
    while it is ``pending_payment``.
    """

    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("job_id", "user_id", name="unique_job_applicant"),
    )

    job_id = Column(Uuid(as_uuid=True), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    resume_file_url = Column(Text, nullable=False)

    # Status tracking
    status = Column(String(20), nullable=False, default="pending_payment", index=True)  # pending_payment, pending, accepted, rejected

    # Payment
    is_paid = Column(Boolean, nullable=False, default=False)
    payment_intent_id = Column(String(255), nullable=True)  # Latest issued intent

    # Relationships
    job = relationship("Job", back_populates="applications")
    applicant = relationship("User", back_populates="applications")
    invoice = relationship(
        "Invoice", back_populates="application", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self):
        return f"<Application {self.user_id} -> {self.job_id} ({self.status})>"
