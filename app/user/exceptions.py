"""User domain exceptions.

User-related exceptions for not found, deleted, and conflict scenarios.
"""

from app.core.exceptions import BadRequestError, ConflictError, NotFoundError


class UserNotFoundError(NotFoundError):
    """Raised when user cannot be found (or has been soft-deleted)."""

    error_type = "user_not_found"

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class EmailExistsError(ConflictError):
    """Raised when attempting to register with an existing email."""

    error_type = "email_exists"

    def __init__(self, message: str = "Email already registered"):
        super().__init__(message)


class AdminDeletionError(BadRequestError):
    """Raised when an admin account is targeted by a soft delete."""

    error_type = "admin_deletion_forbidden"

    def __init__(self, message: str = "Admin accounts cannot be deleted"):
        super().__init__(message)
