"""Auth domain router.

Routes for registration, login, token refresh, logout, email verification
and password management, plus the Google sign-in routes. Handlers are thin:
they validate input, call `AuthService` and place session tokens in cookies.
Handlers that hash passwords or send email are plain functions, so FastAPI
runs them in its threadpool.
"""

from fastapi import APIRouter, Request, Response, status

from app.auth.dependencies import AuthServiceDep, CurrentUserDep, GoogleVerifierDep
from app.auth.exceptions import InvalidCredentialsError
from app.auth.schemas import (
    AuthMessage,
    AuthResponse,
    ChangePasswordRequest,
    EmailRequest,
    GoogleAuthRequest,
    GoogleAuthUrlResponse,
    GoogleRegisterRequest,
    LoginRequest,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
)
from app.auth.service import AuthResult
from app.core.constants import CommonResponses, Cookies, Routes
from app.core.deps import SettingsDep
from app.core.exceptions import ConfigurationError
from app.core.settings import Settings
from app.user.schemas import UserRead

router = APIRouter(
    prefix=Routes.AUTH.prefix,
    tags=[Routes.AUTH.tag],
    responses={**CommonResponses.BAD_REQUEST},
)

google_router = APIRouter(
    prefix=Routes.GOOGLE_AUTH.prefix,
    tags=[Routes.GOOGLE_AUTH.tag],
    responses={**CommonResponses.UNAUTHORIZED, **CommonResponses.BAD_GATEWAY},
)


def _set_access_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=Cookies.ACCESS_TOKEN,
        value=token,
        max_age=int(settings.access_token_ttl.total_seconds()),
        path=Cookies.ACCESS_TOKEN_PATH,
        httponly=True,
        secure=settings.is_secure_cookie,
        samesite="lax",
    )


def _set_session_cookies(
    response: Response, result: AuthResult, settings: Settings
) -> None:
    _set_access_cookie(response, result.tokens.access_token, settings)
    response.set_cookie(
        key=Cookies.REFRESH_TOKEN,
        value=result.tokens.refresh_token,
        max_age=int(settings.refresh_token_ttl.total_seconds()),
        path=Cookies.REFRESH_TOKEN_PATH,
        httponly=True,
        secure=settings.is_secure_cookie,
        samesite="lax",
    )


def _auth_response(message: str, result: AuthResult) -> AuthResponse:
    return AuthResponse(
        message=message,
        user=UserRead.model_validate(result.user),
        access_token=result.tokens.access_token,
        refresh_token=result.tokens.refresh_token,
    )


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.CONFLICT},
)
def register(payload: RegisterRequest, auth: AuthServiceDep):
    """Register a new alumni account with email and password.

    Creates the user and the alumni profile together, then sends a
    verification link. Login is refused until the email is verified.
    """
    user = auth.register(
        email=payload.email,
        password=payload.password,
        name=payload.name,
        department=payload.department,
        class_year=payload.class_year,
    )
    return RegisterResponse(
        message="Registration successful. Please check your email to verify your account.",  # noqa: E501
        user=UserRead.model_validate(user),
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={**CommonResponses.UNAUTHORIZED, **CommonResponses.FORBIDDEN},
)
def login(
    payload: LoginRequest,
    response: Response,
    auth: AuthServiceDep,
    settings: SettingsDep,
):
    """Login with email/password and set the session cookies."""
    result = auth.login(payload.email, payload.password)
    _set_session_cookies(response, result, settings)
    return _auth_response("Login successful", result)


@router.post(
    "/refresh",
    response_model=RefreshResponse,
    responses={**CommonResponses.UNAUTHORIZED},
)
async def refresh(
    request: Request,
    response: Response,
    auth: AuthServiceDep,
    settings: SettingsDep,
    payload: RefreshRequest | None = None,
):
    """Issue a new access token from the refresh token.

    The token is taken from the request body when given, otherwise from the
    `refresh_token` cookie.
    """
    refresh_token = payload.refresh_token if payload is not None else None
    if not refresh_token:
        refresh_token = request.cookies.get(Cookies.REFRESH_TOKEN)
    if not refresh_token:
        raise InvalidCredentialsError("Refresh token is missing")

    access_token = auth.refresh(refresh_token)
    _set_access_cookie(response, access_token, settings)
    return RefreshResponse(message="Token refreshed", access_token=access_token)


@router.post("/logout", response_model=AuthMessage)
async def logout(response: Response):
    """Clear the session cookies.

    Session tokens are stateless, so this only removes them from the browser.
    """
    response.delete_cookie(key=Cookies.ACCESS_TOKEN, path=Cookies.ACCESS_TOKEN_PATH)
    response.delete_cookie(
        key=Cookies.REFRESH_TOKEN, path=Cookies.REFRESH_TOKEN_PATH
    )
    return AuthMessage(message="Logout successful")


@router.get(
    "/verify-email/{token}",
    response_model=AuthMessage,
    responses={**CommonResponses.UNAUTHORIZED},
)
def verify_email(token: str, auth: AuthServiceDep):
    """Confirm an email address with the token from the verification link."""
    auth.verify_email(token)
    return AuthMessage(message="Email verified successfully")


@router.post("/resend-verification", response_model=AuthMessage)
def resend_verification(payload: EmailRequest, auth: AuthServiceDep):
    """Send a new verification link to an unverified account."""
    return AuthMessage(message=auth.resend_verification(payload.email))


@router.post("/forgot-password", response_model=AuthMessage)
def forgot_password(payload: EmailRequest, auth: AuthServiceDep):
    """Request a password reset email.

    Always returns the same message to prevent email enumeration.
    """
    return AuthMessage(message=auth.forgot_password(payload.email))


@router.post(
    "/reset-password",
    response_model=AuthMessage,
    responses={**CommonResponses.UNAUTHORIZED},
)
def reset_password(payload: ResetPasswordRequest, auth: AuthServiceDep):
    """Set a new password with the token from the reset link."""
    auth.reset_password(payload.token, payload.new_password)
    return AuthMessage(message="Password has been reset successfully")


@router.post(
    "/change-password",
    response_model=AuthMessage,
    responses={
        **CommonResponses.UNAUTHORIZED,
        **CommonResponses.FORBIDDEN,
        **CommonResponses.NOT_FOUND,
    },
)
def change_password(
    payload: ChangePasswordRequest,
    user: CurrentUserDep,
    auth: AuthServiceDep,
):
    """Change the current user's password.

    Admins may pass `user_id` to reset another user's password without
    knowing the current one.
    """
    auth.change_password(
        actor=user,
        user_id=payload.user_id,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return AuthMessage(message="Password changed successfully")


@router.get(
    "/me",
    response_model=UserRead,
    responses={**CommonResponses.UNAUTHORIZED},
)
async def get_me(user: CurrentUserDep):
    """Get current authenticated user."""
    return user


@google_router.get("", response_model=GoogleAuthUrlResponse)
async def google_auth_url(google: GoogleVerifierDep, settings: SettingsDep):
    """Get the Google consent URL for the redirect sign-in flow."""
    if not settings.google_redirect_uri:
        raise ConfigurationError("Google redirect URI is not configured")
    return GoogleAuthUrlResponse(
        message="Google auth URL generated",
        auth_url=google.build_authorization_url(settings.google_redirect_uri),
    )


@google_router.post(
    "",
    response_model=AuthResponse,
    responses={**CommonResponses.FORBIDDEN, **CommonResponses.NOT_FOUND},
)
async def google_login(
    payload: GoogleAuthRequest,
    response: Response,
    auth: AuthServiceDep,
    settings: SettingsDep,
):
    """Login with a Google ID token and set the session cookies."""
    result = await auth.google_login(payload.token)
    _set_session_cookies(response, result, settings)
    return _auth_response("Google login successful", result)


@google_router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**CommonResponses.CONFLICT, **CommonResponses.FORBIDDEN},
)
async def google_register(
    payload: GoogleRegisterRequest,
    response: Response,
    auth: AuthServiceDep,
    settings: SettingsDep,
):
    """Register with a Google ID token plus department and class year."""
    result = await auth.google_register(
        payload.token, payload.department, payload.class_year
    )
    _set_session_cookies(response, result, settings)
    return _auth_response("Google registration successful", result)
