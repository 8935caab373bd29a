"""
Authentication service: checks sign-in credentials and issues access tokens.
"""
from functools import lru_cache
import logging

from fastapi import HTTPException, status

from timesheet_tracker.core.config import settings
from timesheet_tracker.core.security import (
    create_access_token,
    hash_password,
    verify_password,
)
from timesheet_tracker.models.user import User
from timesheet_tracker.schemas.token import AccessToken

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _account_password_hash(password: str) -> str:
    return hash_password(password)


class AuthService:
    """
    Credential check against the configured account.

    The account is the single sign-in the app ships with; tokens minted by
    an external identity provider with the same signing key are accepted by
    the API without going through this service.
    """

    def __init__(self) -> None:
        logger.trace("Initializing AuthService")
        self._account = User(email=settings.AUTH_EMAIL, full_name=settings.AUTH_FULL_NAME)
        self._hashed_password = _account_password_hash(settings.AUTH_PASSWORD)

    def login(self, email: str, password: str) -> AccessToken:
        """Validate credentials and issue a new access token."""
        logger.info("Authenticating user '%s'", email)
        if (
            email.strip().lower() != self._account.email.lower()
            or not verify_password(password, self._hashed_password)
        ):
            logger.warning("Invalid login attempt for '%s'", email)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )

        token = create_access_token(
            self._account.email,
            extra_claims={"name": self._account.full_name},
        )
        logger.info("Login successful for '%s'", self._account.email)
        return AccessToken(access_token=token)
