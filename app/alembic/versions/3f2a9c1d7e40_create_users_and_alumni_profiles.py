"""create_users_and_alumni_profiles

Revision ID: 3f2a9c1d7e40
Revises:
Create Date: 2026-10-18 10:12:31.482913

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
import sqlmodel


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7e40'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

role_enum = sa.Enum('USER', 'ADMIN', name='role')
auth_method_enum = sa.Enum('EMAIL', 'GOOGLE', name='authmethod')
department_enum = sa.Enum('TEP', 'TPN', 'TIN', name='department')
industry_enum = sa.Enum(
    'AGRICULTURE', 'FOOD_TECH', 'BIOTECH', 'RESEARCH', 'EDUCATION',
    'ENGINEERING', 'BUSINESS', 'MARKETING', 'FINANCE', 'GOVERNMENT',
    'FREELANCE', 'OTHER',
    name='industry',
)
employment_level_enum = sa.Enum(
    'INTERN', 'STAFF', 'SUPERVISOR', 'MANAGER', 'SENIOR_MANAGER', 'DIRECTOR',
    'VP', 'C_LEVEL', 'FOUNDER', 'OTHER',
    name='employmentlevel',
)
income_range_enum = sa.Enum(
    'BELOW_5M', 'RANGE_5_10M', 'RANGE_10_20M', 'ABOVE_20M', 'UNKNOWN',
    name='incomerange',
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('CURRENT_TIMESTAMP'),
            nullable=False,
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            server_default=sa.text('CURRENT_TIMESTAMP'),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=False),
        sa.Column('name', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('password_hash', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
        sa.Column('google_id', sqlmodel.sql.sqltypes.AutoString(), nullable=True),
        sa.Column('auth_method', auth_method_enum, nullable=False),
        sa.Column('role', role_enum, nullable=False),
        sa.Column('email_verified', sa.Boolean(), nullable=False),
        sa.Column('verification_token', sqlmodel.sql.sqltypes.AutoString(length=128), nullable=True),
        sa.Column('verification_token_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reset_token', sqlmodel.sql.sqltypes.AutoString(length=128), nullable=True),
        sa.Column('reset_token_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_google_id'), 'users', ['google_id'], unique=True)
    op.create_index(op.f('ix_users_verification_token'), 'users', ['verification_token'], unique=False)
    op.create_index(op.f('ix_users_reset_token'), 'users', ['reset_token'], unique=False)

    op.create_table(
        'alumni_profiles',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('full_name', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=False),
        sa.Column('department', department_enum, nullable=False),
        sa.Column('class_year', sa.Integer(), nullable=False),
        sa.Column('student_id', sqlmodel.sql.sqltypes.AutoString(length=13), nullable=True),
        sa.Column('city', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=True),
        sa.Column('industry', industry_enum, nullable=True),
        sa.Column('employment_level', employment_level_enum, nullable=True),
        sa.Column('income_range', income_range_enum, nullable=True),
        sa.Column('job_title', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=True),
        sa.Column('company_name', sqlmodel.sql.sqltypes.AutoString(length=100), nullable=True),
        sa.Column('linkedin_url', sqlmodel.sql.sqltypes.AutoString(length=255), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('alumni_profiles')
    op.drop_index(op.f('ix_users_reset_token'), table_name='users')
    op.drop_index(op.f('ix_users_verification_token'), table_name='users')
    op.drop_index(op.f('ix_users_google_id'), table_name='users')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')

    # Drop the enum types (PostgreSQL)
    bind = op.get_bind()
    for enum in (
        income_range_enum,
        employment_level_enum,
        industry_enum,
        department_enum,
        role_enum,
        auth_method_enum,
    ):
        enum.drop(bind, checkfirst=True)
