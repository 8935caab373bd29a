"""
FastAPI dependency injection helpers for the timesheet store and authentication.
"""
from typing import Generator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from pydantic import ValidationError
import logging

from timesheet_tracker.core.config import settings
from timesheet_tracker.core.security import decode_token
from timesheet_tracker.db.database import get_db
from timesheet_tracker.models.user import User
from timesheet_tracker.schemas.token import TokenPayload
from timesheet_tracker.repositories.timesheet_repository import (
    SqliteTimesheetRepository,
    TimesheetRepository,
)

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")


# ---------------------------------------------------------------------------
# Store dependency
# ---------------------------------------------------------------------------

def get_timesheet_repository(request: Request) -> Generator[TimesheetRepository, None, None]:
    """
    Yield the timesheet store for the duration of a request.

    The in-memory store is the process-wide instance created at startup;
    the SQLite store wraps a per-request connection.
    """
    if settings.STORE_BACKEND == "sqlite":
        logger.trace("Creating SQLite timesheet repository")
        with get_db() as conn:
            yield SqliteTimesheetRepository(conn)
    else:
        logger.trace("Using in-memory timesheet repository")
        yield request.app.state.timesheet_store


# ---------------------------------------------------------------------------
# Auth dependencies
# ---------------------------------------------------------------------------

def get_current_user(token: str = Depends(oauth2_scheme)) -> User:
    """
    Decode the Bearer access token and return the principal it names.
    Raises HTTP 401 if the token is invalid, expired, or has no subject.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_token(token)
        token_data = TokenPayload(**payload)
    except (JWTError, ValidationError):
        logger.error("Failed to decode access token", exc_info=True)
        raise credentials_exception

    if token_data.type not in (None, "access"):
        logger.warning("Access token type mismatch")
        raise credentials_exception
    email = token_data.sub
    if not email:
        logger.warning("Access token missing subject")
        raise credentials_exception

    logger.info("Authenticated user %s", email)
    return User(email=email, full_name=token_data.name, is_active=payload.get("active", True))


def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """Raise HTTP 400 if the account is inactive."""
    if not current_user.is_active:
        logger.warning("Inactive user account %s", current_user.email)
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Inactive user account",
        )
    return current_user
