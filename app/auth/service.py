"""Auth service.

Registration, login, email verification, password reset/change and Google
federation on top of the local credential store.

Single-use tokens (verification, reset) are consumed with one conditional
UPDATE so a token can be redeemed at most once, even by concurrent requests.
User and AlumniProfile rows are always created in the same transaction.
Notification emails are best-effort: failures are logged, never raised.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from functools import cache

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.auth.exceptions import (
    EmailNotVerifiedError,
    ForbiddenOperationError,
    InvalidCredentialsError,
    InvalidTokenError,
)
from app.auth.google import GoogleIdentity, GoogleIdentityVerifier
from app.auth.tokens import SessionTokenIssuer, TokenPair
from app.core.email import EmailSender
from app.core.security import (
    generate_secure_token,
    hash_password,
    token_expiration,
    verify_password,
)
from app.core.settings import AuthConfig
from app.user.exceptions import EmailExistsError, UserNotFoundError
from app.user.models import AlumniProfile, AuthMethod, Department, User

logger = logging.getLogger(__name__)

RESEND_VERIFICATION_MESSAGE = (
    "If an unverified account with that email exists, "
    "a new verification link has been sent"
)
FORGOT_PASSWORD_MESSAGE = (
    "If an account with that email exists, a password reset link has been sent"
)

# Placeholder academic details for accounts auto-created on Google login;
# the owner corrects them through PATCH /users/me.
AUTO_CREATED_DEPARTMENT = Department.TEP


@cache
def _dummy_password_hash(rounds: int) -> str:
    return hash_password(generate_secure_token(8), rounds)


@dataclass(frozen=True)
class AuthResult:
    """An authenticated user together with freshly issued session tokens."""

    user: User
    tokens: TokenPair


class AuthService:
    """Credential lifecycle operations bound to one database session."""

    def __init__(
        self,
        session: Session,
        config: AuthConfig,
        tokens: SessionTokenIssuer,
        google: GoogleIdentityVerifier,
        mailer: EmailSender,
    ):
        self._session = session
        self._config = config
        self._tokens = tokens
        self._google = google
        self._mailer = mailer

    # Lookups

    def _get_by_email(self, email: str) -> User | None:
        return self._session.exec(select(User).where(User.email == email)).first()

    def _get_by_google_id(self, google_id: str) -> User | None:
        return self._session.exec(
            select(User).where(User.google_id == google_id)
        ).first()

    # Internal helpers

    def _notify(self, action: str, send: Callable[..., None], *args: str) -> None:
        """Run a notification send; failures are logged and swallowed."""
        try:
            send(*args)
        except Exception as e:
            logger.warning(
                "Could not send %s email: %s", action, type(e).__name__, exc_info=e
            )

    def _create_account(
        self,
        user: User,
        department: Department,
        class_year: int,
    ) -> User:
        """Insert a User and its AlumniProfile in one transaction.

        Raises:
            EmailExistsError: If the store's unique constraints reject the user
        """
        try:
            self._session.add(user)
            self._session.flush()
            profile = AlumniProfile(
                user_id=user.id,
                full_name=user.name,
                department=department,
                class_year=class_year,
            )
            self._session.add(profile)
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            logger.info("Account creation lost a uniqueness race")
            raise EmailExistsError() from e
        except Exception:
            self._session.rollback()
            raise

        self._session.refresh(user)
        return user

    def _consume_token(
        self, token_column, expires_column, token: str, **values
    ) -> uuid.UUID:
        """Clear a matching, unexpired single-use token and apply `values`.

        Match and expiry are checked in the same statement that clears the
        token, so at most one caller ever observes a given token as valid.

        Raises:
            InvalidTokenError: If no live account holds an unexpired match
        """
        statement = (
            update(User)
            .where(
                token_column == token,
                expires_column > datetime.now(UTC),
                User.deleted_at.is_(None),
            )
            .values(
                **{token_column.key: None, expires_column.key: None},
                **values,
            )
            .returning(User.id)
            .execution_options(synchronize_session=False)
        )
        user_id = self._session.exec(statement).scalar_one_or_none()
        self._session.commit()
        if user_id is None:
            raise InvalidTokenError()
        return user_id

    def _issue(self, user: User) -> AuthResult:
        return AuthResult(user=user, tokens=self._tokens.issue_pair(user))

    # Email/password flows

    def register(
        self,
        email: str,
        password: str,
        name: str,
        department: Department,
        class_year: int,
    ) -> User:
        """Create an unverified EMAIL account with its alumni profile.

        The duplicate-email message names the existing sign-in method.
        That small enumeration leak is accepted so users know how to log in.

        Raises:
            EmailExistsError: If the email already has an account
        """
        existing = self._get_by_email(email)
        if existing is not None:
            if existing.auth_method == AuthMethod.GOOGLE:
                raise EmailExistsError(
                    "Email already registered via Google. "
                    "Please log in with Google."
                )
            raise EmailExistsError()

        user = User(
            email=email,
            name=name,
            password_hash=hash_password(password, self._config.bcrypt_rounds),
            auth_method=AuthMethod.EMAIL,
            email_verified=False,
            verification_token=generate_secure_token(),
            verification_token_expires_at=token_expiration(
                self._config.verification_token_ttl_hours
            ),
        )
        verification_token = user.verification_token
        user = self._create_account(user, department, class_year)
        logger.info("Registered user %s via email", user.id)

        self._notify(
            "verification",
            self._mailer.send_verification_email,
            user.email,
            user.name,
            verification_token,
        )
        return user

    def login(self, email: str, password: str) -> AuthResult:
        """Authenticate with email and password.

        Unknown email, password-less account, deactivated account and wrong
        password are indistinguishable to the caller.

        Raises:
            InvalidCredentialsError: If the credentials do not match
            EmailNotVerifiedError: If the password matches but the email is
                not verified yet
        """
        user = self._get_by_email(email)
        password_hash = user.password_hash if user is not None else None
        # Unknown and password-less accounts still pay for one bcrypt check.
        if password_hash is None:
            verify_password(password, _dummy_password_hash(self._config.bcrypt_rounds))
        if (
            user is None
            or user.is_deleted
            or not verify_password(password, password_hash)
        ):
            logger.info("Password login rejected")
            raise InvalidCredentialsError()

        if self._config.require_verified_email and not user.email_verified:
            raise EmailNotVerifiedError()

        logger.info("User %s logged in with password", user.id)
        return self._issue(user)

    def verify_email(self, token: str) -> User:
        """Redeem a verification token and mark the email as verified.

        Raises:
            InvalidTokenError: If the token is unknown, already used or expired
        """
        try:
            user_id = self._consume_token(
                User.verification_token,
                User.verification_token_expires_at,
                token,
                email_verified=True,
            )
        except InvalidTokenError:
            raise InvalidTokenError(
                "Verification link is invalid or expired"
            ) from None

        user = self._session.get(User, user_id)
        logger.info("User %s verified their email", user_id)
        self._notify("welcome", self._mailer.send_welcome_email, user.email, user.name)
        return user

    def resend_verification(self, email: str) -> str:
        """Issue a fresh verification token, invalidating any previous one.

        Only unverified EMAIL accounts are affected; the response is the same
        for every input.
        """
        user = self._get_by_email(email)
        if (
            user is None
            or user.is_deleted
            or user.auth_method != AuthMethod.EMAIL
            or user.email_verified
        ):
            return RESEND_VERIFICATION_MESSAGE

        token = generate_secure_token()
        user.verification_token = token
        user.verification_token_expires_at = token_expiration(
            self._config.verification_token_ttl_hours
        )
        self._session.add(user)
        self._session.commit()
        self._session.refresh(user)

        self._notify(
            "verification",
            self._mailer.send_verification_email,
            user.email,
            user.name,
            token,
        )
        return RESEND_VERIFICATION_MESSAGE

    def forgot_password(self, email: str) -> str:
        """Start a password reset; the response never reveals account existence."""
        user = self._get_by_email(email)
        if user is None or user.is_deleted or not user.has_password:
            return FORGOT_PASSWORD_MESSAGE

        token = generate_secure_token()
        user.reset_token = token
        user.reset_token_expires_at = token_expiration(
            self._config.reset_token_ttl_hours
        )
        self._session.add(user)
        self._session.commit()
        self._session.refresh(user)

        self._notify(
            "password reset",
            self._mailer.send_password_reset_email,
            user.email,
            user.name,
            token,
        )
        return FORGOT_PASSWORD_MESSAGE

    def reset_password(self, token: str, new_password: str) -> None:
        """Redeem a reset token and store the new password.

        Raises:
            InvalidTokenError: If the token is unknown, already used or expired
        """
        password_hash = hash_password(new_password, self._config.bcrypt_rounds)
        try:
            user_id = self._consume_token(
                User.reset_token,
                User.reset_token_expires_at,
                token,
                password_hash=password_hash,
            )
        except InvalidTokenError:
            raise InvalidTokenError("Reset link is invalid or expired") from None
        logger.info("User %s reset their password", user_id)

    def change_password(
        self,
        actor: User,
        user_id: uuid.UUID | None,
        current_password: str | None,
        new_password: str,
    ) -> None:
        """Change a password as its owner, or force it as an admin.

        Raises:
            ForbiddenOperationError: If a non-admin targets another account,
                or the target is a Google account
            UserNotFoundError: If the target does not exist
            InvalidCredentialsError: If the current password is wrong
        """
        target_id = user_id or actor.id
        acting_on_other = target_id != actor.id
        if acting_on_other and not actor.is_admin:
            raise ForbiddenOperationError("You can only change your own password")

        target = self._session.get(User, target_id)
        if target is None or target.is_deleted:
            raise UserNotFoundError()

        if target.auth_method == AuthMethod.GOOGLE or not target.has_password:
            raise ForbiddenOperationError("Cannot change password for Google account")

        if not acting_on_other and not verify_password(
            current_password or "", target.password_hash
        ):
            raise InvalidCredentialsError("Current password is incorrect")

        target.password_hash = hash_password(new_password, self._config.bcrypt_rounds)
        self._session.add(target)
        self._session.commit()
        logger.info(
            "Password changed for user %s by %s",
            target.id,
            "admin" if acting_on_other else "owner",
        )

    def refresh(self, refresh_token: str) -> str:
        """Exchange a refresh token for a new access token."""
        return self._tokens.renew_access(refresh_token)

    # Google flows

    async def _verified_identity(self, token: str) -> GoogleIdentity:
        identity = await self._google.verify(token)
        if not identity.email_verified:
            raise EmailNotVerifiedError("Google account email is not verified")
        return identity

    async def google_register(
        self, token: str, department: Department, class_year: int
    ) -> AuthResult:
        """Create a GOOGLE account from a verified ID token and log it in.

        Raises:
            InvalidAssertionError: If the ID token fails verification
            EmailNotVerifiedError: If Google has not verified the email
            EmailExistsError: If the Google account or email is registered
        """
        identity = await self._verified_identity(token)

        if self._get_by_google_id(identity.subject_id) is not None:
            raise EmailExistsError("Google account already registered. Please log in.")

        existing = self._get_by_email(identity.email)
        if existing is not None:
            if existing.auth_method == AuthMethod.EMAIL:
                raise EmailExistsError(
                    "Email already registered with a password. "
                    "Please log in with your password."
                )
            raise EmailExistsError("Google account already registered. Please log in.")

        user = self._create_account(
            self._google_user(identity), department, class_year
        )
        logger.info("Registered user %s via Google", user.id)
        return self._issue(user)

    async def google_login(self, token: str) -> AuthResult:
        """Log in with a verified Google ID token.

        Accounts are found by Google subject first, then by email. A GOOGLE
        account without a stored subject gets it linked. Unknown users are
        sent to registration unless auto-creation is enabled.

        Raises:
            InvalidAssertionError: If the ID token fails verification
            EmailNotVerifiedError: If Google has not verified the email
            ForbiddenOperationError: If the email belongs to a password account
                or to another Google subject, or the account is deactivated
            UserNotFoundError: If no account exists and auto-creation is off
        """
        identity = await self._verified_identity(token)

        user = self._get_by_google_id(identity.subject_id)
        if user is None:
            user = self._get_by_email(identity.email)
            if user is not None and user.auth_method == AuthMethod.EMAIL:
                raise ForbiddenOperationError(
                    "Email is registered with a password. "
                    "Please log in with your password."
                )
            if user is not None and user.google_id is not None:
                logger.warning(
                    "Google login for user %s with a different subject", user.id
                )
                raise ForbiddenOperationError(
                    "This email is linked to a different Google account"
                )
            if user is not None:
                user.google_id = identity.subject_id
                user.name = user.name or identity.name
                self._session.add(user)
                self._session.commit()
                self._session.refresh(user)
                logger.info("Linked Google subject to user %s", user.id)

        if user is None:
            if not self._config.auto_create_on_google_login:
                raise UserNotFoundError(
                    "This email is not registered yet. Please register first."
                )
            user = self._create_account(
                self._google_user(identity),
                AUTO_CREATED_DEPARTMENT,
                datetime.now(UTC).year,
            )
            logger.info("Auto-created user %s on Google login", user.id)

        if user.is_deleted:
            raise ForbiddenOperationError("This account has been deactivated")

        logger.info("User %s logged in with Google", user.id)
        return self._issue(user)

    @staticmethod
    def _google_user(identity: GoogleIdentity) -> User:
        return User(
            email=identity.email,
            name=identity.name,
            google_id=identity.subject_id,
            auth_method=AuthMethod.GOOGLE,
            email_verified=True,
        )
