"""User model."""

from sqlalchemy import Boolean, Column, String
from sqlalchemy.orm import relationship

from app.db.base import Base


class User(Base):
    """User model for authentication."""

    __tablename__ = "users"

    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="job_seeker", index=True)  # admin, employee, job_seeker
    company_name = Column(String(255), nullable=True)  # Set for employees
    is_active = Column(Boolean, default=True, nullable=False)

    # Relationships
    jobs = relationship("Job", back_populates="poster", cascade="all, delete-orphan")
    applications = relationship("Application", back_populates="applicant", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email} ({self.role})>"
