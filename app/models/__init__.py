"""Database models."""

# Import all models in dependency order to ensure proper relationship initialization
# This prevents SQLAlchemy circular dependency errors

# Base models (no foreign keys)
from app.models.user import User
from app.models.payment_intent import PaymentIntent

# Models with foreign keys to base models
from app.models.job import Job

# Models with foreign keys to other models
from app.models.application import Application
from app.models.invoice import Invoice

# Export all models
__all__ = [
    "User",
    "PaymentIntent",
    "Job",
    "Application",
    "Invoice",
]
