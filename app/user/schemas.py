"""User domain schemas.

Request and response schemas for user operations.

Security notes:
- password_hash, google_id and single-use tokens are internal-only, never
  exposed in responses
- UserUpdateMe is restricted to prevent privilege escalation
"""

import uuid
from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator, EmailStr, Field, field_serializer, field_validator
from sqlmodel import SQLModel

from app.user.models import (
    AuthMethod,
    Department,
    EmploymentLevel,
    IncomeRange,
    Industry,
    Role,
)

MIN_CLASS_YEAR = 1960


def _check_class_year(value: int) -> int:
    current_year = datetime.now(UTC).year
    if not MIN_CLASS_YEAR <= value <= current_year:
        raise ValueError(
            f"Class year must be between {MIN_CLASS_YEAR} and {current_year}"
        )
    return value


ClassYear = Annotated[int, AfterValidator(_check_class_year)]


def _format_utc(value: datetime) -> str:
    """Format datetime as ISO 8601 string in UTC with Z suffix.

    Naive values come from SQLite and are already UTC.
    """
    if value.tzinfo is not None:
        utc_value = value.astimezone(UTC)
    else:
        utc_value = value.replace(tzinfo=UTC)
    return utc_value.replace(microsecond=0).isoformat().replace("+00:00", "Z")


class AlumniProfileRead(SQLModel):
    """Response schema for the alumni profile attached to a user."""

    full_name: str
    department: Department
    class_year: int
    student_id: str | None = None
    city: str | None = None
    industry: Industry | None = None
    employment_level: EmploymentLevel | None = None
    income_range: IncomeRange | None = None
    job_title: str | None = None
    company_name: str | None = None
    linkedin_url: str | None = None


class UserRead(SQLModel):
    """Response schema for user data, self or admin context."""

    id: uuid.UUID
    email: EmailStr
    name: str
    role: Role
    auth_method: AuthMethod
    email_verified: bool
    created_at: datetime
    updated_at: datetime
    profile: AlumniProfileRead | None = None

    @field_serializer("created_at", "updated_at")
    def serialize_datetime(self, value: datetime) -> str:
        return _format_utc(value)


class UserAdminRead(UserRead):
    """Admin listing schema; also shows the soft-delete marker."""

    deleted_at: datetime | None = None

    @field_serializer("deleted_at")
    def serialize_deleted_at(self, value: datetime | None) -> str | None:
        return _format_utc(value) if value is not None else None


class UserUpdateMe(SQLModel):
    """Schema for users updating their own profile.

    Intentionally limited to prevent privilege escalation.
    Users cannot modify: email, role, auth_method, email_verified.
    """

    name: str | None = Field(default=None, min_length=1, max_length=100)
    full_name: str | None = Field(default=None, min_length=1, max_length=100)
    department: Department | None = None
    class_year: ClassYear | None = None
    student_id: str | None = Field(
        default=None, min_length=1, max_length=13, pattern=r"^\d+$"
    )
    city: str | None = Field(default=None, max_length=100)
    industry: Industry | None = None
    employment_level: EmploymentLevel | None = None
    income_range: IncomeRange | None = None
    job_title: str | None = Field(default=None, max_length=100)
    company_name: str | None = Field(default=None, max_length=100)
    linkedin_url: str | None = Field(default=None, max_length=255)

    @field_validator("name", "full_name", "department", "class_year")
    @classmethod
    def _not_null(cls, value):
        # May be omitted, but never cleared.
        if value is None:
            raise ValueError("must not be null")
        return value


class RoleUpdate(SQLModel):
    """Schema for admin changing a user's role."""

    role: Role
