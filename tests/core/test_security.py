"""Tests for app/core/security.py - Password hashing and token helpers."""

from datetime import UTC, datetime, timedelta

import pytest
from hypothesis import given
from hypothesis import settings as hypothesis_settings
from hypothesis import strategies as st

from app.auth.exceptions import WeakPasswordError
from app.core.security import (
    generate_secure_token,
    hash_password,
    token_expiration,
    validate_password_strength,
    verify_password,
)

# bcrypt rejects NUL bytes and inputs over 72 bytes (4 bytes per char max)
passwords = st.text(
    alphabet=st.characters(blacklist_characters="\x00", blacklist_categories=("Cs",)),
    min_size=1,
    max_size=18,
)


@hypothesis_settings(max_examples=15, deadline=None)
@given(password=passwords)
def test_hash_then_verify_roundtrip(password):
    """Property: verify(p, hash(p)) is True."""
    assert verify_password(password, hash_password(password, rounds=4))


@hypothesis_settings(max_examples=10, deadline=None)
@given(password=passwords)
def test_hashing_is_salted(password):
    """Property: hashing the same password twice gives different strings."""
    assert hash_password(password, rounds=4) != hash_password(password, rounds=4)


def test_verify_rejects_wrong_password():
    password_hash = hash_password("Passw0rd!", rounds=4)

    assert verify_password("Passw0rd?", password_hash) is False


@pytest.mark.parametrize("stored", [None, "", "not-a-bcrypt-hash"])
def test_verify_returns_false_for_missing_or_garbage_hash(stored):
    assert verify_password("Passw0rd!", stored) is False


def test_hash_uses_requested_work_factor():
    assert hash_password("Passw0rd!", rounds=5).startswith("$2b$05$")


def test_generate_secure_token_is_hex_of_requested_length():
    token = generate_secure_token(16)

    assert len(token) == 32
    int(token, 16)
    assert generate_secure_token() != generate_secure_token()


def test_token_expiration_is_absolute_utc_instant():
    now = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)

    assert token_expiration(24, now=now) == now + timedelta(hours=24)
    assert token_expiration(1).tzinfo is not None


@pytest.mark.parametrize(
    ("password", "fragment"),
    [
        ("Sh0rt", "at least 8 characters"),
        ("alllowercase1", "an uppercase letter"),
        ("ALLUPPERCASE1", "a lowercase letter"),
        ("NoDigitsHere", "a number"),
        ("Aa1" + "x" * 70, "cannot exceed 72 bytes"),
    ],
)
def test_weak_passwords_are_rejected(password, fragment):
    with pytest.raises(WeakPasswordError, match=fragment):
        validate_password_strength(password)


def test_strong_password_is_returned_unchanged():
    assert validate_password_strength("Passw0rd!") == "Passw0rd!"
