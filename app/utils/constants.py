"""Common constants."""

# Job statuses
JOB_STATUS_OPEN = "open"
JOB_STATUS_CLOSED = "closed"
JOB_STATUSES = [JOB_STATUS_OPEN, JOB_STATUS_CLOSED]

# Application statuses (in lifecycle order)
APPLICATION_PENDING_PAYMENT = "pending_payment"
APPLICATION_PENDING = "pending"
APPLICATION_ACCEPTED = "accepted"
APPLICATION_REJECTED = "rejected"
APPLICATION_STATUSES = [
    APPLICATION_PENDING_PAYMENT,
    APPLICATION_PENDING,
    APPLICATION_ACCEPTED,
    APPLICATION_REJECTED,
]

# Outcomes an employer may set during review
REVIEW_OUTCOMES = [APPLICATION_ACCEPTED, APPLICATION_REJECTED]

# Invoice payment statuses
PAYMENT_STATUS_SUCCESS = "success"

# Payment intent statuses
INTENT_REQUIRES_CONFIRMATION = "requires_confirmation"
INTENT_SUCCEEDED = "succeeded"
INTENT_CANCELED = "canceled"

# File extensions
ALLOWED_RESUME_EXTENSIONS = ["pdf", "doc", "docx"]
