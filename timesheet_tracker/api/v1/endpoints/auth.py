"""
Authentication endpoints:
  POST /auth/login  – OAuth2 password flow (username = email), returns an access token
  GET  /auth/me     – Return the currently authenticated user
"""
from fastapi import APIRouter, Depends
from fastapi.security import OAuth2PasswordRequestForm
import logging

from timesheet_tracker.core.dependencies import get_current_active_user
from timesheet_tracker.models.user import User
from timesheet_tracker.schemas.token import AccessToken
from timesheet_tracker.schemas.user import UserResponse
from timesheet_tracker.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/login",
    response_model=AccessToken,
    summary="Login with email and password (OAuth2 Password Flow)",
)
def login(form_data: OAuth2PasswordRequestForm = Depends()):
    """
    Standard OAuth2 Password Flow endpoint.
    - **username**: your email address
    - **password**: your password
    """
    logger.info("Login requested for username=%s", form_data.username)
    service = AuthService()
    return service.login(form_data.username, form_data.password)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get the current authenticated user",
)
def get_me(current_user: User = Depends(get_current_active_user)):
    """Return the principal the bearer token was issued to."""
    logger.info("Returning profile for user %s", current_user.email)
    return current_user
