"""Auth domain exceptions.

Authentication and authorization related exceptions.
"""

from app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ValidationError,
)


# Authentication errors (401)
class InvalidCredentialsError(AuthenticationError):
    """Raised when email/password combination is invalid.

    Unknown email, password-less account and wrong password all raise this
    with the same message so responses never reveal whether an account exists.
    """

    error_type = "invalid_credentials"

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class InvalidTokenError(AuthenticationError):
    """Raised when a session, verification or reset token is invalid or expired."""

    error_type = "invalid_token"

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message)


class InvalidAssertionError(AuthenticationError):
    """Raised when a Google ID token fails verification.

    `reason` lets client developers tell a malformed token apart from a
    tampered or expired one. It never carries token contents.
    """

    error_type = "invalid_assertion"

    def __init__(
        self,
        message: str = "Google token verification failed",
        reason: str = "invalid",
    ):
        self.reason = reason
        super().__init__(message)


# Authorization errors (403)
class EmailNotVerifiedError(AuthorizationError):
    """Raised on password login before the email address is verified."""

    error_type = "email_not_verified"

    def __init__(
        self, message: str = "Please verify your email before logging in"
    ):
        super().__init__(message)


class ForbiddenOperationError(AuthorizationError):
    """Raised when an operation is not allowed for this kind of account."""

    error_type = "forbidden_operation"

    def __init__(self, message: str = "Operation not allowed"):
        super().__init__(message)


class AdminRequiredError(AuthorizationError):
    """Raised when admin privileges are required."""

    error_type = "admin_required"

    def __init__(self, message: str = "Admin privileges required"):
        super().__init__(message)


# Validation errors (400) - auth specific
class WeakPasswordError(ValidationError):
    """Raised when password does not meet strength requirements."""

    error_type = "weak_password"

    def __init__(self, message: str = "Password is too weak"):
        super().__init__(message)
