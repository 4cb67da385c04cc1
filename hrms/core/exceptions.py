class DomainError(Exception):
    """Base exception for business rule violations.

    Carries the HTTP status and machine-readable code the API boundary
    renders into the response envelope. ``detail`` is optional extra
    context shown next to the error, never in place of it.
    """

    status_code = 500
    error_code = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None, *, detail: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.detail = detail


class UnauthorizedError(DomainError):
    """Raised when no valid identity accompanies the request."""

    status_code = 401
    error_code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class ForbiddenError(DomainError):
    """Raised when an identity lacks the permission for an action."""

    status_code = 403
    error_code = "FORBIDDEN"
    default_message = "Forbidden"


class ProtectedRoleError(ForbiddenError):
    """Raised on attempts to edit the super-admin role's grants."""

    status_code = 400
    default_message = "Cannot modify Super Admin permissions"


class NotFoundError(DomainError):
    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Resource not found"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    status_code = 400
    error_code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class InvalidTransitionError(DomainError):
    status_code = 400
    error_code = "INVALID_TRANSITION"

    def __init__(self, current_state: str, action: str) -> None:
        super().__init__(f"Cannot {action} a leave application in state {current_state}")
        self.current_state = current_state
        self.action = action


class OverlappingLeaveError(DomainError):
    status_code = 400
    error_code = "OVERLAPPING_LEAVE"
    default_message = "Leave dates overlap with an existing leave application"


class RateLimitExceededError(DomainError):
    status_code = 429
    error_code = "RATE_LIMIT_EXCEEDED"
    default_message = "Rate limit exceeded. Please try again later."

    def __init__(self, retry_after: int, message: str | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after
