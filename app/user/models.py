"""User domain models.

SQLModel table definitions for User and its 1:1 AlumniProfile.
"""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import EmailStr
from sqlalchemy import Column, DateTime, ForeignKey, Uuid
from sqlmodel import Field, Relationship, SQLModel

from app.core.mixins import SoftDeleteMixin, TimestampMixin


class Role(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class AuthMethod(str, Enum):
    """How the account authenticates.

    - EMAIL: email + password (password_hash required to log in)
    - GOOGLE: Google ID token (password_hash may be absent)
    """

    EMAIL = "EMAIL"
    GOOGLE = "GOOGLE"


class Department(str, Enum):
    TEP = "TEP"
    TPN = "TPN"
    TIN = "TIN"


class Industry(str, Enum):
    AGRICULTURE = "AGRICULTURE"
    FOOD_TECH = "FOOD_TECH"
    BIOTECH = "BIOTECH"
    RESEARCH = "RESEARCH"
    EDUCATION = "EDUCATION"
    ENGINEERING = "ENGINEERING"
    BUSINESS = "BUSINESS"
    MARKETING = "MARKETING"
    FINANCE = "FINANCE"
    GOVERNMENT = "GOVERNMENT"
    FREELANCE = "FREELANCE"
    OTHER = "OTHER"


class EmploymentLevel(str, Enum):
    INTERN = "INTERN"
    STAFF = "STAFF"
    SUPERVISOR = "SUPERVISOR"
    MANAGER = "MANAGER"
    SENIOR_MANAGER = "SENIOR_MANAGER"
    DIRECTOR = "DIRECTOR"
    VP = "VP"
    C_LEVEL = "C_LEVEL"
    FOUNDER = "FOUNDER"
    OTHER = "OTHER"


class IncomeRange(str, Enum):
    BELOW_5M = "BELOW_5M"
    RANGE_5_10M = "RANGE_5_10M"
    RANGE_10_20M = "RANGE_10_20M"
    ABOVE_20M = "ABOVE_20M"
    UNKNOWN = "UNKNOWN"


class User(TimestampMixin, SoftDeleteMixin, SQLModel, table=True):
    """User database model.

    Note: password_hash, google_id and the single-use token fields are
    internal-only and must never be exposed in API responses.
    """

    __tablename__: str = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    email: EmailStr = Field(index=True, unique=True, max_length=255)
    name: str = Field(default="", max_length=100)

    password_hash: str | None = Field(default=None, max_length=255)
    google_id: str | None = Field(default=None, index=True, unique=True)
    auth_method: AuthMethod = Field(default=AuthMethod.EMAIL, max_length=20)
    role: Role = Field(default=Role.USER, max_length=20)

    email_verified: bool = Field(default=False)
    verification_token: str | None = Field(default=None, index=True, max_length=128)
    verification_token_expires_at: datetime | None = Field(
        default=None, sa_type=DateTime(timezone=True)
    )
    reset_token: str | None = Field(default=None, index=True, max_length=128)
    reset_token_expires_at: datetime | None = Field(
        default=None, sa_type=DateTime(timezone=True)
    )

    profile: "AlumniProfile" = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"uselist": False, "cascade": "all, delete-orphan"},
    )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def has_password(self) -> bool:
        return bool(self.password_hash)


class AlumniProfile(TimestampMixin, SQLModel, table=True):
    """Academic and career details owned 1:1 by a User."""

    __tablename__: str = "alumni_profiles"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: uuid.UUID = Field(
        sa_column=Column(
            Uuid,
            ForeignKey("users.id", ondelete="CASCADE"),
            unique=True,
            nullable=False,
        )
    )
    full_name: str = Field(default="", max_length=100)
    department: Department = Field(max_length=10)
    class_year: int
    student_id: str | None = Field(default=None, max_length=13)

    city: str | None = Field(default=None, max_length=100)
    industry: Industry | None = Field(default=None, max_length=30)
    employment_level: EmploymentLevel | None = Field(default=None, max_length=30)
    income_range: IncomeRange | None = Field(default=None, max_length=30)
    job_title: str | None = Field(default=None, max_length=100)
    company_name: str | None = Field(default=None, max_length=100)
    linkedin_url: str | None = Field(default=None, max_length=255)

    user: User = Relationship(back_populates="profile")
