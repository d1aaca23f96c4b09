"""
User schemas.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class UserUpdateRequest(BaseModel):
    """Request body for PATCH /users/{user_id}."""

    display_name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None


class UserResponse(BaseModel):
    id: UUID
    email: str
    display_name: str
    is_active: bool
    staff: bool
    created_at: datetime

    model_config = {"from_attributes": True}
