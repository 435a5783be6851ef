"""User domain router.

Self-service profile routes and admin user management. Admin deletion is a
soft delete: the row and its alumni profile stay and can be restored.
"""

import logging
import uuid

from fastapi import APIRouter, Depends, Query, Response, status
from sqlmodel import col, or_, select

from app.auth.dependencies import (
    AdminUserDep,
    CurrentUserDep,
    require_admin,
    require_auth,
)
from app.core.constants import CommonResponses, Cookies, Routes
from app.core.deps import SessionDep
from app.core.exceptions import BadRequestError
from app.user.exceptions import AdminDeletionError, UserNotFoundError
from app.user.models import AlumniProfile, Role, User
from app.user.schemas import RoleUpdate, UserAdminRead, UserRead, UserUpdateMe

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix=Routes.USER.prefix,
    tags=[Routes.USER.tag],
    dependencies=[Depends(require_auth)],
    responses={
        **CommonResponses.UNAUTHORIZED,
        **CommonResponses.FORBIDDEN,
    },
)


def _get_user_or_404(
    session: SessionDep, user_id: uuid.UUID, *, deleted: bool = False
) -> User:
    user = session.get(User, user_id)
    if user is None or user.is_deleted != deleted:
        raise UserNotFoundError(
            "Deleted user not found" if deleted else "User not found"
        )
    return user


@router.get("/me", response_model=UserRead)
async def read_me(user: CurrentUserDep):
    """Get current authenticated user with their alumni profile."""
    return user


@router.patch("/me", response_model=UserRead)
async def update_me(
    user: CurrentUserDep, user_update: UserUpdateMe, session: SessionDep
):
    """Update current authenticated user's name and alumni profile.

    For security, users cannot modify email, role or sign-in method.
    """
    update_data = user_update.model_dump(exclude_unset=True)

    if "name" in update_data:
        user.name = update_data.pop("name")

    if update_data:
        profile = user.profile
        if profile is None:
            if "department" not in update_data or "class_year" not in update_data:
                raise BadRequestError(
                    "department and class_year are required to create a profile"
                )
            profile = AlumniProfile(
                user_id=user.id,
                full_name=update_data.get("full_name", user.name),
                department=update_data["department"],
                class_year=update_data["class_year"],
            )
        for key, value in update_data.items():
            setattr(profile, key, value)
        session.add(profile)

    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@router.delete(
    "/me",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**CommonResponses.BAD_REQUEST},
)
async def delete_me(user: CurrentUserDep, session: SessionDep, response: Response):
    """Deactivate the current user's account and clear the session cookies."""
    if user.is_admin:
        raise AdminDeletionError()
    user.soft_delete()
    session.add(user)
    session.commit()
    logger.info("User %s deactivated their account", user.id)

    response.delete_cookie(key=Cookies.ACCESS_TOKEN, path=Cookies.ACCESS_TOKEN_PATH)
    response.delete_cookie(
        key=Cookies.REFRESH_TOKEN, path=Cookies.REFRESH_TOKEN_PATH
    )


@router.get(
    "/", response_model=list[UserAdminRead], dependencies=[Depends(require_admin)]
)
async def list_users(
    session: SessionDep,
    search: str | None = None,
    role: Role | None = None,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
):
    """List active users, newest first. Admin only.

    `search` matches name or email case-insensitively.
    """
    statement = select(User).where(col(User.deleted_at).is_(None))
    if search:
        pattern = f"%{search.strip()}%"
        statement = statement.where(
            or_(col(User.name).ilike(pattern), col(User.email).ilike(pattern))
        )
    if role is not None:
        statement = statement.where(User.role == role)
    statement = (
        statement.order_by(col(User.created_at).desc()).offset(offset).limit(limit)
    )
    return session.exec(statement).all()


@router.get(
    "/deleted",
    response_model=list[UserAdminRead],
    dependencies=[Depends(require_admin)],
)
async def list_deleted_users(
    session: SessionDep,
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
):
    """List soft-deleted users, most recently deleted first. Admin only."""
    statement = (
        select(User)
        .where(col(User.deleted_at).is_not(None))
        .order_by(col(User.deleted_at).desc())
        .offset(offset)
        .limit(limit)
    )
    return session.exec(statement).all()


@router.get(
    "/{user_id}",
    response_model=UserAdminRead,
    dependencies=[Depends(require_admin)],
    responses={**CommonResponses.NOT_FOUND},
)
async def get_user(user_id: uuid.UUID, session: SessionDep):
    """Get a user by ID. Admin only."""
    return _get_user_or_404(session, user_id)


@router.put(
    "/{user_id}/role",
    response_model=UserAdminRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def update_user_role(
    user_id: uuid.UUID,
    role_update: RoleUpdate,
    admin: AdminUserDep,
    session: SessionDep,
):
    """Change a user's role. Admin only."""
    user = _get_user_or_404(session, user_id)
    user.role = role_update.role
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info(
        "Admin %s set role of user %s to %s", admin.id, user.id, user.role.value
    )
    return user


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={**CommonResponses.NOT_FOUND, **CommonResponses.BAD_REQUEST},
)
async def delete_user(user_id: uuid.UUID, admin: AdminUserDep, session: SessionDep):
    """Soft delete a user. Admin only; admin accounts cannot be deleted."""
    user = _get_user_or_404(session, user_id)
    if user.is_admin:
        raise AdminDeletionError()
    user.soft_delete()
    session.add(user)
    session.commit()
    logger.info("Admin %s deleted user %s", admin.id, user.id)


@router.put(
    "/{user_id}/restore",
    response_model=UserAdminRead,
    responses={**CommonResponses.NOT_FOUND},
)
async def restore_user(user_id: uuid.UUID, admin: AdminUserDep, session: SessionDep):
    """Restore a soft-deleted user. Admin only."""
    user = _get_user_or_404(session, user_id, deleted=True)
    user.restore()
    session.add(user)
    session.commit()
    session.refresh(user)
    logger.info("Admin %s restored user %s", admin.id, user.id)
    return user
