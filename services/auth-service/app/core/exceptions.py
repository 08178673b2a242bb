"""
Auth Service — Domain errors

Raised by AuthService; app.api.errors turns them into HTTP responses.
The message is always safe to show to the caller.
"""


class AuthServiceError(Exception):
    """Base class for every error the auth service reports to a caller."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(AuthServiceError):
    """Missing or malformed input."""

    status_code = 400
    default_message = "Invalid request"


class UnauthorizedError(AuthServiceError):
    status_code = 401
    default_message = "Invalid credentials"


class NotFoundError(AuthServiceError):
    status_code = 404
    default_message = "Not found"


class ConflictError(AuthServiceError):
    """A natural key (student_id, username, email) is already taken."""

    status_code = 409
    default_message = "Student ID, username, or email already exists"


class InternalError(AuthServiceError):
    """Store or crypto failure. The underlying cause is logged, never returned."""

    status_code = 500


class NotImplementedFeatureError(AuthServiceError):
    status_code = 501
    default_message = "Not implemented"
