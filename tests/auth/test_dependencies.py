"""Tests for app/auth/dependencies.py - get_current_user dependency."""

import uuid
from unittest.mock import MagicMock

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from app.auth.dependencies import get_admin_user, get_current_user
from app.auth.exceptions import (
    AdminRequiredError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from app.user.exceptions import UserNotFoundError
from app.user.models import User


def create_mock_request(cookies: dict[str, str] | None = None):
    """Create a request stand-in carrying cookies and a writable state."""
    mock_request = MagicMock()
    mock_request.cookies = cookies or {}
    return mock_request


def bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


def test_get_current_user_valid_bearer_token(session, test_user, token_issuer):
    """Test get_current_user with a valid bearer token returns the user."""
    request = create_mock_request()
    token = token_issuer.issue_access(test_user)

    result = get_current_user(request, session, token_issuer, bearer(token))

    assert result.id == test_user.id
    assert request.state.user_id == str(test_user.id)


def test_get_current_user_cookie_token(session, test_user, token_issuer):
    """Test get_current_user falls back to the access_token cookie."""
    request = create_mock_request(
        {"access_token": token_issuer.issue_access(test_user)}
    )

    result = get_current_user(request, session, token_issuer, None)

    assert result.id == test_user.id


def test_bearer_token_takes_priority_over_cookie(
    session, test_user, admin_user, token_issuer
):
    request = create_mock_request(
        {"access_token": token_issuer.issue_access(admin_user)}
    )
    token = token_issuer.issue_access(test_user)

    result = get_current_user(request, session, token_issuer, bearer(token))

    assert result.id == test_user.id


def test_get_current_user_without_token(session, token_issuer):
    """Test get_current_user without any token raises InvalidCredentialsError."""
    with pytest.raises(InvalidCredentialsError, match="Not authenticated") as exc_info:
        get_current_user(create_mock_request(), session, token_issuer, None)

    assert exc_info.value.status_code == 401


def test_get_current_user_invalid_token(session, token_issuer):
    with pytest.raises(InvalidTokenError) as exc_info:
        get_current_user(
            create_mock_request(), session, token_issuer, bearer("invalid-token")
        )

    assert exc_info.value.status_code == 401


def test_get_current_user_rejects_refresh_token(session, test_user, token_issuer):
    token = token_issuer.issue_refresh(test_user)

    with pytest.raises(InvalidTokenError):
        get_current_user(create_mock_request(), session, token_issuer, bearer(token))


def test_get_current_user_not_found(session, token_issuer):
    """Test a valid token for a user missing from the DB raises UserNotFoundError."""
    ghost = User(id=uuid.uuid4(), email="ghost@example.com", name="Ghost")
    token = token_issuer.issue_access(ghost)

    with pytest.raises(UserNotFoundError) as exc_info:
        get_current_user(create_mock_request(), session, token_issuer, bearer(token))

    assert exc_info.value.status_code == 404


def test_get_current_user_deactivated(session, test_user, token_issuer):
    """Test a soft-deleted user is treated as missing."""
    token = token_issuer.issue_access(test_user)
    test_user.soft_delete()
    session.add(test_user)
    session.commit()

    with pytest.raises(UserNotFoundError):
        get_current_user(create_mock_request(), session, token_issuer, bearer(token))


def test_get_admin_user(admin_user):
    assert get_admin_user(admin_user) is admin_user


def test_get_admin_user_rejects_regular_user(test_user):
    with pytest.raises(AdminRequiredError) as exc_info:
        get_admin_user(test_user)

    assert exc_info.value.status_code == 403
