"""Auth domain schemas.

Request and response schemas for authentication operations.
Emails are normalized to lower case and new passwords are strength-checked
here, before any service code runs.
"""

import uuid
from typing import Annotated

from pydantic import AfterValidator, BaseModel, EmailStr, Field

from app.auth.exceptions import WeakPasswordError
from app.core.security import validate_password_strength
from app.user.models import Department
from app.user.schemas import ClassYear, UserRead


def _normalize_email(value: str) -> str:
    return value.strip().lower()


def _check_new_password(value: str) -> str:
    try:
        return validate_password_strength(value)
    except WeakPasswordError as e:
        raise ValueError(e.message) from e


NormalizedEmail = Annotated[EmailStr, AfterValidator(_normalize_email)]
NewPassword = Annotated[str, AfterValidator(_check_new_password)]


class RegisterRequest(BaseModel):
    """Request schema for email/password registration."""

    email: NormalizedEmail
    password: NewPassword
    name: str = Field(min_length=1, max_length=100)
    department: Department
    class_year: ClassYear


class LoginRequest(BaseModel):
    """Request schema for email/password login."""

    email: NormalizedEmail
    password: str = Field(min_length=1)


class EmailRequest(BaseModel):
    """Request schema for flows keyed only by email (resend, forgot password)."""

    email: NormalizedEmail


class ResetPasswordRequest(BaseModel):
    """Request schema for redeeming a password reset token."""

    token: str = Field(min_length=1)
    new_password: NewPassword


class ChangePasswordRequest(BaseModel):
    """Request schema for changing a password.

    `user_id` defaults to the caller; only admins may target another account.
    """

    user_id: uuid.UUID | None = None
    current_password: str | None = None
    new_password: NewPassword


class GoogleAuthRequest(BaseModel):
    """Request schema for Google login with an ID token."""

    token: str = Field(min_length=1)


class GoogleRegisterRequest(BaseModel):
    """Request schema for Google registration with an ID token."""

    token: str = Field(min_length=1)
    department: Department
    class_year: ClassYear


class AuthMessage(BaseModel):
    """Generic auth message response."""

    message: str


class RegisterResponse(BaseModel):
    """Response schema for registration."""

    message: str
    user: UserRead


class AuthResponse(BaseModel):
    """Response schema for successful login.

    Tokens are also set as httponly cookies; the body copy serves API clients.
    """

    message: str
    user: UserRead
    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class RefreshRequest(BaseModel):
    """Optional body for refresh; the refresh_token cookie is used otherwise."""

    refresh_token: str | None = None


class RefreshResponse(BaseModel):
    message: str
    access_token: str
    token_type: str = "bearer"


class GoogleAuthUrlResponse(BaseModel):
    message: str
    auth_url: str
