"""
Resource link schemas.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ResourceLinkCreateRequest(BaseModel):
    """Request body for POST /organizations/{slug}/resource_links."""

    subject_resource_id: UUID
    verb: str = Field(min_length=1, max_length=50)
    object_resource_id: UUID


class ResourceLinkUpdateRequest(BaseModel):
    """Request body for PATCH /organizations/{slug}/resource_links/{link_id}."""

    verb: str | None = Field(default=None, min_length=1, max_length=50)
    object_resource_id: UUID | None = None


class ResourceLinkResponse(BaseModel):
    id: UUID
    org_id: UUID
    subject_resource_id: UUID
    verb: str
    reverse_verb: str
    object_resource_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
