"""Tests for app/admin/auth.py - SQLAdmin authentication."""

import uuid
from unittest.mock import MagicMock

import pytest

from app.admin.auth import SESSION_KEY, AdminAuth, authenticate_admin
from app.user.models import Role

TEST_PASSWORD = "Passw0rd!"  # make_user default


@pytest.fixture
def admin_auth(session, monkeypatch):
    """Create AdminAuth bound to the test database."""
    monkeypatch.setattr("app.admin.auth.engine", session.get_bind())
    return AdminAuth()


@pytest.fixture
def mock_request():
    """Create a mock Starlette request with session."""
    request = MagicMock()
    request.session = {}
    return request


def with_form(request, **fields):
    async def mock_form():
        return fields

    request.form = mock_form
    return request


def test_authenticate_admin(session, admin_user, test_user):
    assert authenticate_admin(session, admin_user.email, TEST_PASSWORD).id == (
        admin_user.id
    )
    assert authenticate_admin(session, admin_user.email, "WrongPassw0rd") is None
    assert authenticate_admin(session, test_user.email, TEST_PASSWORD) is None
    assert authenticate_admin(session, "nobody@example.com", TEST_PASSWORD) is None


def test_authenticate_admin_rejects_deleted_admin(session, admin_user):
    admin_user.soft_delete()
    session.add(admin_user)
    session.commit()

    assert authenticate_admin(session, admin_user.email, TEST_PASSWORD) is None


@pytest.mark.asyncio
async def test_admin_login_success(admin_auth, mock_request, admin_user):
    """Test AdminAuth.login() with valid admin credentials returns True."""
    with_form(mock_request, username="  Admin@Example.com ", password=TEST_PASSWORD)

    result = await admin_auth.login(mock_request)

    assert result is True
    assert mock_request.session[SESSION_KEY] == str(admin_user.id)


@pytest.mark.asyncio
async def test_admin_login_with_email_field(admin_auth, mock_request, admin_user):
    """Test AdminAuth.login() falls back to email field."""
    with_form(mock_request, email=admin_user.email, password=TEST_PASSWORD)

    assert await admin_auth.login(mock_request) is True


@pytest.mark.asyncio
async def test_admin_login_regular_user(admin_auth, mock_request, test_user):
    """Test AdminAuth.login() refuses users without the ADMIN role."""
    with_form(mock_request, username=test_user.email, password=TEST_PASSWORD)

    assert await admin_auth.login(mock_request) is False
    assert SESSION_KEY not in mock_request.session


@pytest.mark.asyncio
async def test_admin_login_invalid_password(admin_auth, mock_request, admin_user):
    """Test AdminAuth.login() with invalid password returns False."""
    with_form(mock_request, username=admin_user.email, password="wrong-password")

    assert await admin_auth.login(mock_request) is False
    assert SESSION_KEY not in mock_request.session


@pytest.mark.asyncio
async def test_admin_logout(admin_auth, mock_request):
    """Test AdminAuth.logout() clears session and returns True."""
    mock_request.session[SESSION_KEY] = str(uuid.uuid4())
    mock_request.session["other_data"] = "test"

    result = await admin_auth.logout(mock_request)

    assert result is True
    assert mock_request.session == {}


@pytest.mark.asyncio
async def test_admin_authenticate_with_session(admin_auth, mock_request, admin_user):
    """Test AdminAuth.authenticate() accepts a stored, still-active admin."""
    mock_request.session[SESSION_KEY] = str(admin_user.id)

    assert await admin_auth.authenticate(mock_request) is True


@pytest.mark.asyncio
async def test_admin_authenticate_after_demotion(
    admin_auth, mock_request, admin_user, session
):
    """Test AdminAuth.authenticate() re-checks the role on every request."""
    mock_request.session[SESSION_KEY] = str(admin_user.id)
    admin_user.role = Role.USER
    session.add(admin_user)
    session.commit()

    assert await admin_auth.authenticate(mock_request) is False


@pytest.mark.asyncio
async def test_admin_authenticate_without_session(admin_auth, mock_request):
    """Test AdminAuth.authenticate() returns False when no admin in session."""
    assert await admin_auth.authenticate(mock_request) is False
