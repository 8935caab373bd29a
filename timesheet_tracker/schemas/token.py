"""
Pydantic schemas for token request/response validation.
"""
from pydantic import BaseModel
from typing import Optional


class AccessToken(BaseModel):
    """Response schema returned after a successful login."""
    access_token: str
    token_type: str = "bearer"


class TokenPayload(BaseModel):
    """JWT payload (claims) decoded from a token."""

    sub: Optional[str] = None   # user email
    name: Optional[str] = None
    type: Optional[str] = None  # "access"
