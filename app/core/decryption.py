"""Request field decryption middleware.

Clients may pre-encrypt sensitive JSON body fields and query parameters with
the shared transport key. This middleware decrypts them before routing, so
request schemas only ever see plaintext. Fields that do not look encrypted
(or fail to decrypt) are left untouched.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from urllib.parse import parse_qsl, urlencode

from fastapi import FastAPI
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.encryption import SENSITIVE_FIELDS, FieldCipher, get_field_cipher
from app.core.settings import get_settings

logger = logging.getLogger("app.decryption")

_BODY_METHODS = {"POST", "PUT", "PATCH"}


class FieldDecryptionMiddleware:
    def __init__(
        self,
        app: ASGIApp,
        cipher_factory: Callable[[], FieldCipher] = get_field_cipher,
        fields: tuple[str, ...] = SENSITIVE_FIELDS,
    ) -> None:
        self.app = app
        self.cipher_factory = cipher_factory
        self.fields = fields

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        cipher = self.cipher_factory()
        scope = self._decrypt_query(scope, cipher)

        if scope["method"] not in _BODY_METHODS or not self._is_json(scope):
            await self.app(scope, receive, send)
            return

        body = await self._read_body(receive)
        body = self._decrypt_body(body, cipher)
        scope = self._with_content_length(scope, len(body))

        delivered = False

        async def replay() -> Message:
            nonlocal delivered
            if not delivered:
                delivered = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)

    @staticmethod
    def _is_json(scope: Scope) -> bool:
        for key, value in scope.get("headers", []):
            if key == b"content-type":
                return value.split(b";")[0].strip().lower() == b"application/json"
        return False

    @staticmethod
    async def _read_body(receive: Receive) -> bytes:
        chunks = []
        more_body = True
        while more_body:
            message = await receive()
            chunks.append(message.get("body", b""))
            more_body = message.get("more_body", False)
        return b"".join(chunks)

    def _decrypt_body(self, body: bytes, cipher: FieldCipher) -> bytes:
        try:
            payload = json.loads(body)
        except ValueError:
            # Malformed JSON is reported by request validation downstream
            return body
        if not isinstance(payload, dict):
            return body
        decrypted = cipher.decrypt_fields(payload, self.fields)
        if decrypted == payload:
            return body
        logger.debug("Decrypted request body fields")
        return json.dumps(decrypted).encode("utf-8")

    def _decrypt_query(self, scope: Scope, cipher: FieldCipher) -> Scope:
        raw = scope.get("query_string", b"")
        if not raw:
            return scope
        params = parse_qsl(raw.decode("latin-1"), keep_blank_values=True)
        changed = False
        decrypted = []
        for key, value in params:
            if key in self.fields:
                new_value = cipher.decrypt_field(value)
                changed = changed or new_value != value
                value = new_value
            decrypted.append((key, value))
        if not changed:
            return scope
        return {**scope, "query_string": urlencode(decrypted).encode("latin-1")}

    @staticmethod
    def _with_content_length(scope: Scope, length: int) -> Scope:
        headers = [(k, v) for k, v in scope["headers"] if k != b"content-length"]
        headers.append((b"content-length", str(length).encode("latin-1")))
        return {**scope, "headers": headers}


def add_field_decryption_middleware(app: FastAPI) -> None:
    """Attach field decryption middleware (disabled by default)."""

    if not get_settings().decrypt_request_fields:
        return
    app.add_middleware(FieldDecryptionMiddleware)
