import logging
import uuid

import anyio
from sqladmin.authentication import AuthenticationBackend
from sqlmodel import Session, select
from starlette.requests import Request

from app.core.security import verify_password
from app.core.settings import get_settings
from app.db.engine import engine
from app.user.models import User

logger = logging.getLogger(__name__)

SESSION_KEY = "admin_user_id"


def authenticate_admin(session: Session, email: str, password: str) -> User | None:
    """Return the active ADMIN user for these credentials, or None."""
    user = session.exec(select(User).where(User.email == email)).first()
    if user is None or user.is_deleted or not user.is_admin:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


def _authenticate_form(email: str, password: str) -> User | None:
    with Session(engine) as session:
        return authenticate_admin(session, email, password)


class AdminAuth(AuthenticationBackend):
    """SQLAdmin auth for ADMIN-role users, kept in Starlette sessions."""

    def __init__(self) -> None:
        # SQLAdmin uses this secret internally (e.g. login form protection).
        # It must be stable and should match the session middleware secret.
        settings = get_settings()
        super().__init__(secret_key=settings.session_secret_key)

    async def login(self, request: Request) -> bool:
        form = await request.form()
        email = str(form.get("username", form.get("email", ""))).strip().lower()
        password = str(form.get("password", ""))

        user = await anyio.to_thread.run_sync(_authenticate_form, email, password)
        if user is None:
            logger.info("Admin panel login rejected")
            return False

        request.session[SESSION_KEY] = str(user.id)
        logger.info("Admin %s signed in to the admin panel", user.id)
        return True

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        user_id = request.session.get(SESSION_KEY)
        if not user_id:
            return False
        with Session(engine) as session:
            user = session.get(User, uuid.UUID(user_id))
            return user is not None and user.is_admin and not user.is_deleted
