"""
Domain model for the authenticated principal.

Accounts live with the identity provider; the API only knows who a bearer
token was issued to.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class User:
    email: str
    full_name: Optional[str] = None
    is_active: bool = True
