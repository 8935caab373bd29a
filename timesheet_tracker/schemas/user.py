"""
Pydantic schemas for User response validation.
"""
from typing import Optional

from pydantic import BaseModel


class UserResponse(BaseModel):
    email: str
    full_name: Optional[str]
    is_active: bool

    model_config = {"from_attributes": True}
