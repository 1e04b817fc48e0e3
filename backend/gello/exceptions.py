"""Application exceptions.

Services raise these; the exception handlers installed by ``create_app`` turn
them into ``{"error": code, "message": message}`` responses with the class's
HTTP status.
"""

from typing import Any, Optional


class GelloError(Exception):
    """Base exception for domain errors."""

    status_code: int = 500
    default_message: str = "Internal server error"
    default_code: str = "internal_error"

    def __init__(self, message: Optional[str] = None, code: Optional[str] = None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        super().__init__(self.message)


class ValidationError(GelloError):
    """Malformed or missing input."""

    status_code = 400
    default_message = "Validation error"
    default_code = "validation_error"

    def __init__(self, message: Optional[str] = None, details: Optional[list[Any]] = None):
        self.details = details
        super().__init__(message)


class AuthenticationError(GelloError):
    """No valid session accompanies the request."""

    status_code = 401
    default_message = "Unauthorized"
    default_code = "unauthorized"


class InvalidCredentialsError(GelloError):
    """Login attempt with a wrong e-mail/password pair."""

    status_code = 401
    default_message = "Invalid email or password"
    default_code = "invalid_credentials"


class ForbiddenError(GelloError):
    """Role or ownership violation."""

    status_code = 403
    default_message = "Forbidden"
    default_code = "forbidden"


class ResourceNotFoundError(GelloError):
    """The requested entity does not exist (or is hidden by row-level security)."""

    status_code = 404
    default_message = "Resource not found"
    default_code = "not_found"


class DuplicateUserError(GelloError):
    """Registration conflicts with an existing account."""

    status_code = 409
    default_message = "User with this email already exists"
    default_code = "duplicate_user"


class InsufficientPointsError(GelloError):
    """A shop redemption costs more than the user's balance."""

    status_code = 422
    default_message = "Insufficient points"
    default_code = "insufficient_points"

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(f"Insufficient points: {required} required, {available} available")


class DataServiceError(GelloError):
    """The hosted data/auth service failed or was unreachable.

    Surfaced to the caller as-is; the request path never retries.
    """

    status_code = 502
    default_message = "Data service unavailable"
    default_code = "data_service_error"

    def __init__(self, message: Optional[str] = None, service_code: Optional[str] = None):
        self.service_code = service_code
        super().__init__(message)
