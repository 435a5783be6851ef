"""Outbound transactional email via Resend.

Templates live in `app/templates/emails/` and are rendered with Jinja2.
Senders raise on failure; callers decide whether a failure is fatal.
"""

import logging
from functools import lru_cache
from urllib.parse import urlencode

import resend

from app.core.constants import JinjaEmailTemplatesEnv
from app.core.settings import get_settings

logger = logging.getLogger(__name__)


def _render_template(template_name: str, **context: str) -> str:
    """Render an email template with autoescaped context variables."""
    template = JinjaEmailTemplatesEnv.get_template(template_name)
    return template.render(**context)


def init_resend() -> None:
    """Initialize Resend with API key if available."""
    settings = get_settings()
    if not settings.resend_api_key:
        logger.warning("RESEND_API_KEY is not set; outgoing email will fail")
        return
    resend.api_key = settings.resend_api_key


class EmailSender:
    """Builds and sends the auth emails (verification, reset, welcome)."""

    def __init__(self, from_email: str, app_name: str, frontend_url: str):
        self._from_email = from_email
        self._app_name = app_name
        self._frontend_url = frontend_url.rstrip("/")

    def send(self, to: str, subject: str, html: str) -> None:
        """Send one email. Raises whatever the Resend client raises."""
        resend.Emails.send(
            {
                "from": self._from_email,
                "to": to,
                "subject": subject,
                "html": html,
            }
        )
        logger.info("Sent email '%s'", subject)

    def _link(self, path: str, token: str) -> str:
        return f"{self._frontend_url}{path}?{urlencode({'token': token})}"

    def send_verification_email(self, to: str, name: str, token: str) -> None:
        verification_url = self._link("/register/verify-email", token)
        html = _render_template(
            "email-verification.html",
            app_name=self._app_name,
            name=name,
            verification_url=verification_url,
        )
        self.send(to, f"Verify Your Email - {self._app_name}", html)

    def send_password_reset_email(self, to: str, name: str, token: str) -> None:
        reset_url = self._link("/auth/reset-password", token)
        html = _render_template(
            "password-reset.html",
            app_name=self._app_name,
            name=name,
            reset_url=reset_url,
        )
        self.send(to, f"Reset Your Password - {self._app_name}", html)

    def send_welcome_email(self, to: str, name: str) -> None:
        html = _render_template(
            "welcome.html",
            app_name=self._app_name,
            name=name,
            login_url=f"{self._frontend_url}/login",
        )
        self.send(to, f"Welcome to {self._app_name}!", html)


@lru_cache
def get_email_sender() -> EmailSender:
    """Get cached email sender built from settings."""
    settings = get_settings()
    return EmailSender(
        from_email=f"{settings.app_name} <noreply@{settings.app_domain}>",
        app_name=settings.app_name,
        frontend_url=settings.client_url,
    )
