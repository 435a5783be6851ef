"""Session token issuance and verification.

Access tokens are short-lived and refresh tokens long-lived; each class is
signed with its own secret so that one leaked secret cannot forge the other.
Tokens are stateless: validity is signature + embedded expiry only.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any, Literal

import jwt

from app.auth.exceptions import InvalidTokenError
from app.core.encryption import FieldCipher, get_field_cipher
from app.core.exceptions import DecryptionError
from app.core.settings import AuthConfig, get_settings
from app.user.models import AuthMethod, Role, User

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

TokenType = Literal["access", "refresh"]


@dataclass(frozen=True)
class TokenClaims:
    """Decoded session token claims."""

    user_id: uuid.UUID
    email: str
    role: Role
    auth_method: AuthMethod
    token_type: TokenType
    expires_at: datetime


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class SessionTokenIssuer:
    """Issues and verifies signed session tokens.

    When a cipher is given, every issued token is additionally wrapped with
    authenticated encryption and unwrapped before verification.
    """

    def __init__(
        self,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = timedelta(minutes=15),
        refresh_ttl: timedelta = timedelta(days=7),
        cipher: FieldCipher | None = None,
    ):
        if not access_secret or not refresh_secret:
            raise ValueError("Token secrets cannot be empty")
        if access_secret == refresh_secret:
            raise ValueError("Access and refresh token secrets must differ")
        self._secrets: dict[TokenType, str] = {
            "access": access_secret,
            "refresh": refresh_secret,
        }
        self._ttls: dict[TokenType, timedelta] = {
            "access": access_ttl,
            "refresh": refresh_ttl,
        }
        self._cipher = cipher

    @classmethod
    def from_config(
        cls, config: AuthConfig, cipher: FieldCipher | None = None
    ) -> "SessionTokenIssuer":
        return cls(
            access_secret=config.access_token_secret,
            refresh_secret=config.refresh_token_secret,
            access_ttl=config.access_token_ttl,
            refresh_ttl=config.refresh_token_ttl,
            cipher=cipher if config.encrypt_session_tokens else None,
        )

    def issue_access(self, user: User) -> str:
        return self._issue(user, "access")

    def issue_refresh(self, user: User) -> str:
        return self._issue(user, "refresh")

    def issue_pair(self, user: User) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access(user),
            refresh_token=self.issue_refresh(user),
        )

    def decode_access(self, token: str) -> TokenClaims:
        """Verify an access token and return its claims.

        Raises:
            InvalidTokenError: For any failure (expired, malformed, bad
                signature, wrong token class)
        """
        return self._decode(token, "access")

    def decode_refresh(self, token: str) -> TokenClaims:
        return self._decode(token, "refresh")

    def renew_access(self, refresh_token: str) -> str:
        """Exchange a valid refresh token for a fresh access token.

        The new token is bound to the same subject, email, role and method
        as the refresh token.
        """
        claims = self.decode_refresh(refresh_token)
        return self._encode(
            {
                "sub": str(claims.user_id),
                "email": claims.email,
                "role": claims.role.value,
                "auth_method": claims.auth_method.value,
            },
            "access",
        )

    def _issue(self, user: User, token_type: TokenType) -> str:
        return self._encode(
            {
                "sub": str(user.id),
                "email": user.email,
                "role": Role(user.role).value,
                "auth_method": AuthMethod(user.auth_method).value,
            },
            token_type,
        )

    def _encode(self, claims: dict[str, Any], token_type: TokenType) -> str:
        now = datetime.now(UTC)
        payload = {
            **claims,
            "type": token_type,
            "iat": now,
            "exp": now + self._ttls[token_type],
        }
        token = jwt.encode(payload, self._secrets[token_type], algorithm=ALGORITHM)
        if self._cipher is not None:
            return self._cipher.encrypt(token)
        return token

    def _decode(self, token: str, token_type: TokenType) -> TokenClaims:
        try:
            raw = self._cipher.decrypt(token) if self._cipher is not None else token
            payload = jwt.decode(
                raw,
                self._secrets[token_type],
                algorithms=[ALGORITHM],
                options={"require": ["sub", "exp", "iat"]},
            )
            if payload.get("type") != token_type:
                raise InvalidTokenError()
            return TokenClaims(
                user_id=uuid.UUID(payload["sub"]),
                email=payload["email"],
                role=Role(payload["role"]),
                auth_method=AuthMethod(payload["auth_method"]),
                token_type=token_type,
                expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
            )
        except (
            jwt.InvalidTokenError,
            DecryptionError,
            InvalidTokenError,
            KeyError,
            ValueError,
        ) as e:
            # One uniform message for every cause, logged by class only
            logger.info("Rejected %s token: %s", token_type, type(e).__name__)
            raise InvalidTokenError("Invalid or expired token") from e


@lru_cache
def get_token_issuer() -> SessionTokenIssuer:
    """Get cached token issuer built from settings."""
    config = get_settings().auth_config()
    cipher = get_field_cipher() if config.encrypt_session_tokens else None
    return SessionTokenIssuer.from_config(config, cipher)
