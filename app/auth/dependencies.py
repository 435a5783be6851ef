"""Auth domain dependencies.

Authentication dependencies for FastAPI routes including get_current_user,
the auth service factory and type aliases for authenticated user injection.
"""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from app.auth.exceptions import AdminRequiredError, InvalidCredentialsError
from app.auth.google import GoogleIdentityVerifier, get_google_verifier
from app.auth.service import AuthService
from app.auth.tokens import SessionTokenIssuer, get_token_issuer
from app.core.constants import Cookies
from app.core.deps import EmailSenderDep, SessionDep, SettingsDep
from app.user.exceptions import UserNotFoundError
from app.user.models import User

security = HTTPBearer(auto_error=False)

TokenIssuerDep = Annotated[SessionTokenIssuer, Depends(get_token_issuer)]
GoogleVerifierDep = Annotated[GoogleIdentityVerifier, Depends(get_google_verifier)]


def get_auth_service(
    session: SessionDep,
    settings: SettingsDep,
    tokens: TokenIssuerDep,
    google: GoogleVerifierDep,
    mailer: EmailSenderDep,
) -> AuthService:
    """Build a request-scoped auth service around the request's DB session."""
    return AuthService(
        session=session,
        config=settings.auth_config(),
        tokens=tokens,
        google=google,
        mailer=mailer,
    )


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


def get_current_user(
    request: Request,
    session: SessionDep,
    tokens: TokenIssuerDep,
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(security)
    ] = None,
) -> User:
    """Verify the access token and return the local User.

    Supports two token sources (in priority order):
    1. Bearer token from the Authorization header (API clients)
    2. `access_token` cookie (web apps)

    Raises:
        InvalidCredentialsError: If no token was sent
        InvalidTokenError: If the token is invalid or expired
        UserNotFoundError: If the user no longer exists or is deactivated
    """
    token = credentials.credentials if credentials is not None else None
    if not token:
        token = request.cookies.get(Cookies.ACCESS_TOKEN)

    if not token:
        raise InvalidCredentialsError("Not authenticated")

    claims = tokens.decode_access(token)

    user = session.get(User, claims.user_id)
    if user is None or user.is_deleted:
        raise UserNotFoundError()

    request.state.user_id = str(user.id)
    return user


# Type aliases for dependency injection
CurrentUserDep = Annotated[User, Depends(get_current_user)]


def require_auth(_user: CurrentUserDep) -> None:
    """Require authentication without injecting user into path operation.

    Use as a router-level dependency when all routes require auth:
        router = APIRouter(dependencies=[Depends(require_auth)])
    """
    pass  # Authentication already validated by CurrentUserDep


def get_admin_user(user: CurrentUserDep) -> User:
    """Verify the current user has the ADMIN role.

    Raises:
        AdminRequiredError: If user is not an admin
    """
    if not user.is_admin:
        raise AdminRequiredError()
    return user


AdminUserDep = Annotated[User, Depends(get_admin_user)]


def require_admin(_user: AdminUserDep) -> None:
    """Require admin privileges without injecting user into path operation.

    Use as a router-level or endpoint-level dependency:
        router = APIRouter(dependencies=[Depends(require_admin)])
    """
    pass  # Admin check already validated by AdminUserDep
