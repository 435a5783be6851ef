"""Google identity federation.

Verifies Google ID tokens issued for this application's OAuth client and
builds the consent URL for the redirect flow.
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from urllib.parse import urlencode

import anyio.to_thread
from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token as google_id_token

from app.auth.exceptions import InvalidAssertionError
from app.core.exceptions import ProviderError
from app.core.retry import with_retry

logger = logging.getLogger(__name__)

GOOGLE_AUTHORIZATION_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_OAUTH_SCOPES = (
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
)

# Substrings of google-auth ValueError messages, most specific first.
_FAILURE_REASONS: tuple[tuple[str, str, str], ...] = (
    ("wrong number of segments", "malformed", "Google token is malformed"),
    ("can't parse segment", "malformed", "Google token is malformed"),
    ("incorrect padding", "malformed", "Google token is malformed"),
    ("invalid base64", "malformed", "Google token is malformed"),
    ("expired", "expired", "Google token has expired"),
    ("too early", "expired", "Google token is not yet valid"),
    ("wrong audience", "audience", "Google token was issued for another client"),
    ("wrong issuer", "issuer", "Google token has an untrusted issuer"),
    ("signature", "signature", "Google token signature could not be verified"),
)


@dataclass(frozen=True)
class GoogleIdentity:
    """Verified identity claims from a Google ID token."""

    subject_id: str
    email: str
    name: str
    email_verified: bool
    picture: str | None = None


def classify_verification_error(error: Exception) -> InvalidAssertionError:
    """Map a google-auth verification failure to an InvalidAssertionError.

    Only the failure category is kept; the library message may quote token
    contents and is never forwarded to the client.
    """
    text = str(error).lower()
    for needle, reason, message in _FAILURE_REASONS:
        if needle in text:
            return InvalidAssertionError(message, reason=reason)
    return InvalidAssertionError("Google token verification failed", reason="invalid")


class GoogleIdentityVerifier:
    """Verifies Google ID tokens against Google's current signing keys."""

    def __init__(self, client_id: str | None):
        self._client_id = client_id

    def _ensure_client_id(self) -> str:
        if not self._client_id:
            raise ProviderError("Google client ID is not configured")
        return self._client_id

    def _verify_sync(self, token: str) -> dict:
        return google_id_token.verify_oauth2_token(
            token, google_requests.Request(), self._client_id
        )

    async def verify(self, token: str) -> GoogleIdentity:
        """Verify a Google ID token and extract its identity claims.

        Raises:
            InvalidAssertionError: If the token is malformed, tampered with,
                expired, or issued for a different audience
            ProviderError: If Google's keys cannot be fetched
        """
        self._ensure_client_id()

        async def do_verify() -> dict:
            return await anyio.to_thread.run_sync(self._verify_sync, token)

        try:
            payload = await with_retry(
                do_verify,
                attempts=2,
                exceptions=(google_exceptions.TransportError,),
            )
        except google_exceptions.TransportError as e:
            logger.error("Google certificate fetch failed: %s", type(e).__name__)
            raise ProviderError("Google identity provider unavailable") from e
        except (ValueError, google_exceptions.GoogleAuthError) as e:
            error = classify_verification_error(e)
            logger.info("Rejected Google token: reason=%s", error.reason)
            raise error from e

        subject_id = payload.get("sub")
        email = payload.get("email")
        if not subject_id or not email:
            raise InvalidAssertionError(
                "Google token is missing identity claims", reason="invalid"
            )

        email = email.strip().lower()
        return GoogleIdentity(
            subject_id=subject_id,
            email=email,
            name=payload.get("name") or email.split("@")[0] or "Google User",
            email_verified=bool(payload.get("email_verified", False)),
            picture=payload.get("picture"),
        )

    def build_authorization_url(
        self, redirect_uri: str, state: str | None = None
    ) -> str:
        """Build the Google OAuth consent URL for the redirect flow."""
        params = {
            "client_id": self._ensure_client_id(),
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": " ".join(GOOGLE_OAUTH_SCOPES),
            "access_type": "offline",
            "prompt": "consent",
        }
        if state:
            params["state"] = state
        return f"{GOOGLE_AUTHORIZATION_ENDPOINT}?{urlencode(params)}"


@lru_cache
def get_google_verifier() -> GoogleIdentityVerifier:
    """Get cached Google verifier built from settings."""
    from app.core.settings import get_settings

    return GoogleIdentityVerifier(client_id=get_settings().google_client_id)
