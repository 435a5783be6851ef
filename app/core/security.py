"""Password hashing and single-use token helpers.

Passwords are hashed with bcrypt; verification and reset tokens are
hex-encoded random bytes from `secrets`.
"""

import re
import secrets
from datetime import UTC, datetime, timedelta

import bcrypt

from app.auth.exceptions import WeakPasswordError

DEFAULT_BCRYPT_ROUNDS = 12
TOKEN_LENGTH = 32  # bytes
PASSWORD_MIN_LENGTH = 8
# bcrypt only looks at the first 72 bytes of its input
PASSWORD_MAX_BYTES = 72


def hash_password(password: str, rounds: int = DEFAULT_BCRYPT_ROUNDS) -> str:
    """Hash a plaintext password with a freshly generated salt.

    Args:
        password: Plaintext password
        rounds: bcrypt work factor (log2 of iterations)

    Returns:
        The bcrypt hash as a string
    """
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check a plaintext password against a stored bcrypt hash.

    Returns False (never raises) on mismatch, a missing hash, or a hash that
    bcrypt cannot parse.
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def generate_secure_token(length: int = TOKEN_LENGTH) -> str:
    """Generate a cryptographically secure hex token of `length` random bytes."""
    return secrets.token_hex(length)


def token_expiration(hours: int, *, now: datetime | None = None) -> datetime:
    """Return the absolute UTC instant `hours` from now."""
    base = now or datetime.now(UTC)
    return base + timedelta(hours=hours)


def validate_password_strength(password: str) -> str:
    """Validate a new password and return it unchanged.

    Requirements:
    - at least 8 characters and at most 72 bytes
    - at least one upper-case letter, one lower-case letter and one digit

    Raises:
        WeakPasswordError: If any requirement is not met
    """
    if len(password) < PASSWORD_MIN_LENGTH:
        raise WeakPasswordError(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters"
        )
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise WeakPasswordError(f"Password cannot exceed {PASSWORD_MAX_BYTES} bytes")

    missing = []
    if not re.search(r"[A-Z]", password):
        missing.append("an uppercase letter")
    if not re.search(r"[a-z]", password):
        missing.append("a lowercase letter")
    if not re.search(r"\d", password):
        missing.append("a number")
    if missing:
        raise WeakPasswordError(f"Password must contain {', '.join(missing)}")

    return password
