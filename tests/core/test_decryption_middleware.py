"""Tests for app/core/decryption.py - Request field decryption middleware."""

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from app.core.decryption import FieldDecryptionMiddleware
from app.core.encryption import FieldCipher

cipher = FieldCipher(b"0" * 32)


@pytest.fixture(name="echo_client", scope="module")
def echo_client_fixture():
    echo = FastAPI()

    @echo.post("/echo")
    async def echo_body(request: Request):
        return await request.json()

    @echo.get("/echo")
    async def echo_query(request: Request):
        return dict(request.query_params)

    echo.add_middleware(
        FieldDecryptionMiddleware,
        cipher_factory=lambda: cipher,
        fields=("email", "token"),
    )
    return TestClient(echo)


def test_encrypted_body_fields_are_decrypted(echo_client):
    response = echo_client.post(
        "/echo",
        json={"email": cipher.encrypt("someone@example.com"), "page": 2},
    )

    assert response.status_code == 200
    assert response.json() == {"email": "someone@example.com", "page": 2}


def test_unlisted_body_fields_stay_encrypted(echo_client):
    blob = cipher.encrypt("someone@example.com")

    response = echo_client.post("/echo", json={"email": blob, "other": blob})

    assert response.json()["other"] == blob


def test_plaintext_body_is_untouched(echo_client):
    payload = {"email": "plain@example.com", "token": "abc"}

    assert echo_client.post("/echo", json=payload).json() == payload


def test_non_json_body_is_untouched(echo_client):
    response = echo_client.post(
        "/echo",
        content=b'{"email": "x"}',
        headers={"content-type": "text/plain"},
    )

    assert response.json() == {"email": "x"}


def test_encrypted_query_parameter_is_decrypted(echo_client):
    token = "a" * 64
    response = echo_client.get(
        "/echo", params={"token": cipher.encrypt(token), "page": "1"}
    )

    assert response.json() == {"token": token, "page": "1"}


def test_query_without_encrypted_values_is_untouched(echo_client):
    response = echo_client.get("/echo", params={"token": "abc", "page": "1"})

    assert response.json() == {"token": "abc", "page": "1"}
