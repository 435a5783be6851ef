"""Tests for app/core/email.py - email functionality."""

from unittest.mock import patch

import pytest

from app.core.email import EmailSender, get_email_sender, init_resend
from app.core.settings import get_settings


@pytest.fixture
def sender():
    return EmailSender(
        from_email="Alumni <noreply@example.com>",
        app_name="Alumni Club",
        frontend_url="https://alumni.example.com/",
    )


def test_init_resend():
    """Test init_resend() initializes Resend with API key from settings."""
    settings = get_settings().model_copy(update={"resend_api_key": "re_test"})

    with (
        patch("app.core.email.get_settings", return_value=settings),
        patch("app.core.email.resend") as mock_resend,
    ):
        init_resend()

    assert mock_resend.api_key == "re_test"


def test_init_resend_without_key_warns(caplog):
    settings = get_settings().model_copy(update={"resend_api_key": None})

    with patch("app.core.email.get_settings", return_value=settings):
        init_resend()

    assert "RESEND_API_KEY is not set" in caplog.text


def test_send_verification_email(sender):
    """Test the verification link points at the frontend with the token."""
    with patch("app.core.email.resend.Emails.send") as mock_send:
        sender.send_verification_email("user@example.com", "Ana", "abc123")

    mock_send.assert_called_once()
    params = mock_send.call_args[0][0]
    assert params["from"] == "Alumni <noreply@example.com>"
    assert params["to"] == "user@example.com"
    assert params["subject"] == "Verify Your Email - Alumni Club"
    assert (
        "https://alumni.example.com/register/verify-email?token=abc123"
        in params["html"]
    )
    assert "Ana" in params["html"]


def test_send_password_reset_email(sender):
    with patch("app.core.email.resend.Emails.send") as mock_send:
        sender.send_password_reset_email("user@example.com", "Ana", "r3set")

    params = mock_send.call_args[0][0]
    assert params["subject"] == "Reset Your Password - Alumni Club"
    reset_url = "https://alumni.example.com/auth/reset-password?token=r3set"
    assert reset_url in params["html"]


def test_send_welcome_email(sender):
    with patch("app.core.email.resend.Emails.send") as mock_send:
        sender.send_welcome_email("user@example.com", "Ana")

    params = mock_send.call_args[0][0]
    assert params["subject"] == "Welcome to Alumni Club!"
    assert "https://alumni.example.com/login" in params["html"]


def test_template_variables_are_escaped(sender):
    with patch("app.core.email.resend.Emails.send") as mock_send:
        sender.send_welcome_email("user@example.com", "<script>x</script>")

    html = mock_send.call_args[0][0]["html"]
    assert "<script>x</script>" not in html
    assert "&lt;script&gt;" in html


def test_send_propagates_provider_errors(sender):
    with patch("app.core.email.resend.Emails.send", side_effect=RuntimeError("down")):
        with pytest.raises(RuntimeError):
            sender.send_welcome_email("user@example.com", "Ana")


def test_get_email_sender_uses_settings():
    settings = get_settings()

    with patch("app.core.email.resend.Emails.send") as mock_send:
        get_email_sender().send("user@example.com", "Subject", "<p>Hi</p>")

    params = mock_send.call_args[0][0]
    assert params["from"] == f"{settings.app_name} <noreply@{settings.app_domain}>"
