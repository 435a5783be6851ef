"""Authenticated symmetric encryption for tokens and client-encrypted fields.

Wire format (base64 encoded, shared with the frontend):

    salt (32 bytes) | iv (16 bytes) | GCM tag (16 bytes) | ciphertext

A per-message AES-256 key is derived from the long-term server secret and the
random salt with PBKDF2-HMAC-SHA256. The application name is bound to every
message as associated data.
"""

import base64
import binascii
import os
import re
from functools import lru_cache
from typing import Any

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from app.core.exceptions import ConfigurationError, DecryptionError

KEY_LENGTH = 32  # AES-256
SALT_LENGTH = 32
IV_LENGTH = 16
TAG_LENGTH = 16
PBKDF2_ITERATIONS = 100_000
ASSOCIATED_DATA = b"FTIP-Alumni-Club"

# Heuristic for client-encrypted fields: long, base64-alphabet-only strings.
# A plaintext value can match this too, which is why a failed decrypt passes
# the original value through instead of raising.
_MIN_ENCRYPTED_FIELD_LENGTH = 100
_BASE64_RE = re.compile(r"^[A-Za-z0-9+/=]+$")

SENSITIVE_FIELDS: tuple[str, ...] = (
    "email",
    "name",
    "full_name",
    "city",
    "job_title",
    "company_name",
    "linkedin_url",
    "token",
    "refresh_token",
    "google_id",
    "password",
    "current_password",
    "new_password",
)


def _decode_key(secret: str) -> bytes:
    try:
        return base64.b64decode(secret, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ConfigurationError("ENCRYPTION_KEY is not valid base64") from e


def validate_encryption_key(secret: str | None) -> bool:
    """Return True if `secret` is base64 for exactly 32 bytes."""
    if not secret:
        return False
    try:
        return len(_decode_key(secret)) == KEY_LENGTH
    except ConfigurationError:
        return False


def generate_encryption_key() -> str:
    """Generate a new random base64 key (development setup)."""
    return base64.b64encode(os.urandom(KEY_LENGTH)).decode("ascii")


class FieldCipher:
    """AES-256-GCM cipher keyed by a long-term server secret."""

    def __init__(self, key: bytes):
        if len(key) != KEY_LENGTH:
            raise ConfigurationError(
                f"Encryption key must be {KEY_LENGTH} bytes, got {len(key)}"
            )
        self._key = key

    @classmethod
    def from_base64(cls, secret: str) -> "FieldCipher":
        return cls(_decode_key(secret))

    def _derive_key(self, salt: bytes) -> bytes:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=KEY_LENGTH,
            salt=salt,
            iterations=PBKDF2_ITERATIONS,
        )
        return kdf.derive(self._key)

    def encrypt(self, plaintext: str) -> str:
        """Encrypt `plaintext` and return the base64 wire format."""
        salt = os.urandom(SALT_LENGTH)
        iv = os.urandom(IV_LENGTH)
        aesgcm = AESGCM(self._derive_key(salt))
        # AESGCM appends the tag to the ciphertext; the wire format puts it first
        sealed = aesgcm.encrypt(iv, plaintext.encode("utf-8"), ASSOCIATED_DATA)
        ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
        return base64.b64encode(salt + iv + tag + ciphertext).decode("ascii")

    def decrypt(self, blob: str) -> str:
        """Decrypt a value produced by `encrypt`.

        Raises:
            DecryptionError: If the blob is malformed or fails authentication
        """
        try:
            combined = base64.b64decode(blob, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecryptionError("Encrypted data is not valid base64") from e

        header = SALT_LENGTH + IV_LENGTH + TAG_LENGTH
        if len(combined) < header:
            raise DecryptionError("Encrypted data is too short")

        salt = combined[:SALT_LENGTH]
        iv = combined[SALT_LENGTH : SALT_LENGTH + IV_LENGTH]
        tag = combined[SALT_LENGTH + IV_LENGTH : header]
        ciphertext = combined[header:]

        aesgcm = AESGCM(self._derive_key(salt))
        try:
            plaintext = aesgcm.decrypt(iv, ciphertext + tag, ASSOCIATED_DATA)
        except InvalidTag as e:
            raise DecryptionError("Encrypted data failed authentication") from e

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecryptionError("Decrypted data is not valid UTF-8") from e

    def decrypt_field(self, value: Any) -> Any:
        """Decrypt `value` if it looks like this cipher's output.

        Non-strings and short or non-base64 strings are returned unchanged, as
        are strings that fail to decrypt.
        """
        if not isinstance(value, str):
            return value
        if len(value) <= _MIN_ENCRYPTED_FIELD_LENGTH or not _BASE64_RE.match(value):
            return value
        try:
            return self.decrypt(value)
        except DecryptionError:
            return value

    def decrypt_fields(
        self, payload: dict[str, Any], fields: tuple[str, ...] = SENSITIVE_FIELDS
    ) -> dict[str, Any]:
        """Return a copy of `payload` with the named fields decrypted."""
        decrypted = dict(payload)
        for field in fields:
            if decrypted.get(field):
                decrypted[field] = self.decrypt_field(decrypted[field])
        return decrypted


@lru_cache
def get_field_cipher() -> FieldCipher:
    """Get the cipher built from the configured ENCRYPTION_KEY."""
    from app.core.settings import get_settings

    return FieldCipher.from_base64(get_settings().encryption_key)
