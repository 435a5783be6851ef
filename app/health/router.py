"""Health domain router.

Health check endpoint for monitoring and load balancers.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.core.constants import Routes
from app.core.deps import SessionDep, SettingsDep
from app.core.encryption import validate_encryption_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix=Routes.HEALTH.prefix, tags=[Routes.HEALTH.tag])


@router.get("")
async def health(session: SessionDep, settings: SettingsDep):
    """Report database connectivity and whether the encryption key is usable."""
    try:
        session.exec(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error("Health check database query failed: %s", type(e).__name__)
        database = "error"

    encryption = "ok" if validate_encryption_key(settings.encryption_key) else "invalid"

    content = {
        "status": "ok",
        "database": database,
        "encryption": encryption,
        "environment": settings.env_name,
    }
    if database != "ok" or encryption != "ok":
        content["status"] = "unhealthy"
        return JSONResponse(status_code=503, content=content)
    return content
