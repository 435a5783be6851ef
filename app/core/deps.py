"""Centralized dependency type aliases for FastAPI routes.

Import shared dependencies from this single module:
    from app.core.deps import SessionDep, SettingsDep
Auth-specific aliases live in `app.auth.dependencies`.
"""

from typing import Annotated

from fastapi import Depends
from sqlmodel import Session

from app.core.email import EmailSender, get_email_sender
from app.core.settings import Settings, get_settings
from app.db.engine import get_session

# Database session
SessionDep = Annotated[Session, Depends(get_session)]

# Application settings
SettingsDep = Annotated[Settings, Depends(get_settings)]

# Outbound email
EmailSenderDep = Annotated[EmailSender, Depends(get_email_sender)]
