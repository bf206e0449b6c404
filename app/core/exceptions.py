"""Domain errors raised by the application services.

Every error carries the HTTP status it maps to and a stable ``error_code``;
``app.main`` renders them as ``{"detail": ..., "error": ...}``.
"""

from fastapi import status


class JobBoardError(Exception):
    """Base class for all domain errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    error_code: str = "job_board_error"
    default_message: str = "Request could not be processed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


# Validation -----------------------------------------------------------------

class ValidationFailure(JobBoardError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "validation_error"
    default_message = "Invalid request"


class InvalidStatus(ValidationFailure):
    error_code = "invalid_status"
    default_message = "Invalid status. Must be accepted or rejected"


class InvalidResumeFile(ValidationFailure):
    error_code = "invalid_resume_file"
    default_message = "Resume file is missing or not an allowed type"


class EmailAlreadyRegistered(ValidationFailure):
    error_code = "email_already_registered"
    default_message = "Email already registered"


class LastAdminDeletion(ValidationFailure):
    error_code = "last_admin"
    default_message = "Cannot delete the last admin user"


# Authorization --------------------------------------------------------------

class AuthorizationFailure(JobBoardError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "forbidden"
    default_message = "Not allowed"


class IdentityMismatch(AuthorizationFailure):
    error_code = "identity_mismatch"
    default_message = "Unauthorized: User ID mismatch"


class Unauthorized(AuthorizationFailure):
    """Requester does not own the resource.

    Reported as 404 so that callers cannot discover resources they do not own.
    """

    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found_or_unauthorized"
    default_message = "Not found or unauthorized"


# Not found / state conflicts ------------------------------------------------

class StateConflict(JobBoardError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "state_conflict"


class NotFound(StateConflict):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"
    default_message = "Not found"


class JobNotOpen(NotFound):
    error_code = "job_not_open"
    default_message = "Job not found or not open for applications"


class NoPendingApplication(NotFound):
    error_code = "no_pending_application"
    default_message = "No pending application found for this job"


class DuplicateApplication(StateConflict):
    error_code = "duplicate_application"
    default_message = "You have already applied for this job"


class AlreadyPaid(StateConflict):
    error_code = "already_paid"
    default_message = "Payment already processed for this application"


class NotReviewable(StateConflict):
    error_code = "not_reviewable"
    default_message = "Application is not awaiting review"


# Gateway failures -----------------------------------------------------------

class GatewayFailure(JobBoardError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "gateway_failure"
    default_message = "Payment gateway error"


class PaymentNotConfirmed(GatewayFailure):
    error_code = "payment_not_confirmed"
    default_message = "Payment confirmation failed. Please try again."


class IntentNotFound(GatewayFailure):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "intent_not_found"
    default_message = "Payment intent not found"


class GatewayUnavailable(GatewayFailure):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "gateway_unavailable"
    default_message = "Payment gateway is unavailable. Please try again later."


class GatewayTimeout(GatewayFailure):
    status_code = status.HTTP_504_GATEWAY_TIMEOUT
    error_code = "gateway_timeout"
    default_message = "Payment gateway timed out. Please retry the confirmation."


# Invariant violations -------------------------------------------------------

class InvariantViolation(JobBoardError):
    """A persistence race was not guarded; never swallowed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "invariant_violation"
    default_message = "Internal consistency error"


class DuplicateInvoice(InvariantViolation):
    error_code = "duplicate_invoice"
    default_message = "An invoice already exists for this application"


class ConcurrentUpdateError(InvariantViolation):
    error_code = "concurrent_update"
    default_message = "Application was modified by a concurrent request"
