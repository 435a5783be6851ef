import inspect
import os
from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

# Settings are read at import time (engine, cached singletons), so the test
# environment has to be in place before anything from `app` is imported.
os.environ.setdefault("ENV_NAME", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SESSION_SECRET_KEY", "test-session-secret")
os.environ.setdefault("ACCESS_TOKEN_SECRET", "test-access-secret")
os.environ.setdefault("REFRESH_TOKEN_SECRET", "test-refresh-secret")
# base64 of 32 ASCII "0" bytes
os.environ.setdefault(
    "ENCRYPTION_KEY", "MDAwMDAwMDAwMDAwMDAwMDAwMDAwMDAwMDAwMDAwMDA="
)
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id.apps.googleusercontent.com")
os.environ.setdefault("GOOGLE_REDIRECT_URI", "http://localhost:3000/auth/callback")
os.environ.setdefault("LOG_REQUESTS", "false")

import anyio  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402
from sqlmodel.pool import StaticPool  # noqa: E402

from app.auth.google import (  # noqa: E402
    GoogleIdentity,
    GoogleIdentityVerifier,
    get_google_verifier,
)
from app.auth.service import AuthService  # noqa: E402
from app.auth.tokens import SessionTokenIssuer, get_token_issuer  # noqa: E402
from app.core.email import EmailSender, get_email_sender  # noqa: E402
from app.core.security import hash_password  # noqa: E402
from app.core.settings import AuthConfig, get_settings  # noqa: E402
from app.db.engine import get_session  # noqa: E402
from app.main import app  # noqa: E402
from app.user.models import (  # noqa: E402
    AlumniProfile,
    AuthMethod,
    Department,
    Role,
    User,
)

TEST_PASSWORD = "Passw0rd!"


def pytest_configure(config: pytest.Config) -> None:
    # Tests use @pytest.mark.asyncio, but we intentionally rely on anyio.
    config.addinivalue_line(
        "markers",
        "asyncio: run async tests using anyio (project-local hook)",
    )


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Run @pytest.mark.asyncio tests with anyio.

    This avoids adding an external pytest-asyncio dependency.
    """
    if pyfuncitem.get_closest_marker("asyncio") is None:
        return None

    test_func = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_func):
        return None

    funcargs = {
        name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames
    }

    async def _run_async_test() -> None:
        await test_func(**funcargs)

    anyio.run(_run_async_test)
    return True


@pytest.fixture(name="session")
def session_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture(name="auth_config")
def auth_config_fixture() -> AuthConfig:
    return get_settings().auth_config()


@pytest.fixture(name="token_issuer")
def token_issuer_fixture() -> SessionTokenIssuer:
    """The same issuer the app uses, so fixture tokens are accepted by routes."""
    return get_token_issuer()


@pytest.fixture(name="mock_mailer")
def mock_mailer_fixture():
    """Create a mock EmailSender."""
    return MagicMock(spec=EmailSender)


@pytest.fixture(name="mock_google")
def mock_google_fixture():
    """Create a mock GoogleIdentityVerifier returning a verified identity."""
    mock_verifier = MagicMock(spec=GoogleIdentityVerifier)
    mock_verifier.verify = AsyncMock(
        return_value=GoogleIdentity(
            subject_id="google-sub-123",
            email="google.user@gmail.com",
            name="Google User",
            email_verified=True,
        )
    )
    mock_verifier.build_authorization_url.return_value = (
        "https://accounts.google.com/o/oauth2/v2/auth?client_id=test"
    )
    return mock_verifier


@pytest.fixture(name="auth_service")
def auth_service_fixture(
    session: Session,
    auth_config: AuthConfig,
    token_issuer: SessionTokenIssuer,
    mock_google: MagicMock,
    mock_mailer: MagicMock,
) -> AuthService:
    return AuthService(
        session=session,
        config=auth_config,
        tokens=token_issuer,
        google=mock_google,
        mailer=mock_mailer,
    )


@pytest.fixture(name="make_user")
def make_user_fixture(session: Session) -> Callable[..., User]:
    """Factory creating a user (with alumni profile) directly in the database."""

    def _make_user(
        email: str = "alumni@example.com",
        password: str | None = TEST_PASSWORD,
        *,
        name: str = "Test Alumni",
        auth_method: AuthMethod = AuthMethod.EMAIL,
        role: Role = Role.USER,
        email_verified: bool = True,
        google_id: str | None = None,
        **fields,
    ) -> User:
        user = User(
            email=email,
            name=name,
            password_hash=hash_password(password, rounds=4) if password else None,
            auth_method=auth_method,
            role=role,
            email_verified=email_verified,
            google_id=google_id,
            **fields,
        )
        session.add(user)
        session.flush()
        session.add(
            AlumniProfile(
                user_id=user.id,
                full_name=name,
                department=Department.TEP,
                class_year=2020,
            )
        )
        session.commit()
        session.refresh(user)
        return user

    return _make_user


@pytest.fixture(name="test_user")
def test_user_fixture(make_user) -> User:
    """A verified EMAIL user with password TEST_PASSWORD."""
    return make_user()


@pytest.fixture(name="admin_user")
def admin_user_fixture(make_user) -> User:
    return make_user("admin@example.com", name="Admin", role=Role.ADMIN)


@pytest.fixture(name="google_user")
def google_user_fixture(make_user) -> User:
    """A GOOGLE user without a password."""
    return make_user(
        "google.user@gmail.com",
        None,
        name="Google User",
        auth_method=AuthMethod.GOOGLE,
        google_id="google-sub-123",
    )


@pytest.fixture(name="auth_headers")
def auth_headers_fixture(token_issuer: SessionTokenIssuer):
    """Build an Authorization header with a fresh access token for a user."""

    def _auth_headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {token_issuer.issue_access(user)}"}

    return _auth_headers


@pytest.fixture(name="client")
def client_fixture(
    session: Session,
    mock_google: MagicMock,
    mock_mailer: MagicMock,
):
    """Create a test client with overridden dependencies.

    Authentication is real: send `auth_headers(user)` to act as a user.
    """

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_google_verifier] = lambda: mock_google
    app.dependency_overrides[get_email_sender] = lambda: mock_mailer

    client = TestClient(app, raise_server_exceptions=False)
    yield client

    app.dependency_overrides.clear()
