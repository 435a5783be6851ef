import logging
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from sqladmin import Admin

from app.admin.auth import AdminAuth
from app.admin.views import AlumniProfileAdmin, UserAdmin
from app.auth.router import google_router
from app.auth.router import router as auth_router
from app.core.cors import add_cors_middleware
from app.core.decryption import add_field_decryption_middleware
from app.core.email import init_resend
from app.core.encryption import validate_encryption_key
from app.core.exception_handlers import register_exception_handlers
from app.core.logging import configure_logging
from app.core.request_logging import add_request_logging_middleware
from app.core.settings import get_settings
from app.db.engine import engine
from app.health.router import router as health_router
from app.user.router import router as user_router

configure_logging()

logger = logging.getLogger(__name__)


def check_encryption_key() -> None:
    """Refuse to start without a usable ENCRYPTION_KEY."""
    if not validate_encryption_key(get_settings().encryption_key):
        raise RuntimeError(
            "ENCRYPTION_KEY must be base64 for exactly 32 bytes; "
            "generate one with app.core.encryption.generate_encryption_key()"
        )


@asynccontextmanager
async def lifespan(_: FastAPI):
    check_encryption_key()
    init_resend()
    logger.info("Application started (env=%s)", get_settings().env_name)
    yield


settings = get_settings()

app = FastAPI(title=settings.app_name, version="1.0.0", lifespan=lifespan)

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(google_router)
api_router.include_router(user_router)

app.include_router(api_router)

# Last added runs first: CORS, then request logging, then field decryption
add_field_decryption_middleware(app)
add_request_logging_middleware(app)
add_cors_middleware(app)
register_exception_handlers(app)

# Mount SQLAdmin UI at /admin (SQLAdmin enables sessions via auth backend secret)
admin = Admin(
    app=app,
    engine=engine,
    title=f"{settings.app_name} Admin",
    authentication_backend=AdminAuth(),
)
admin.add_view(UserAdmin)
admin.add_view(AlumniProfileAdmin)
