"""
Resource group schemas.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class ResourceGroupCreateRequest(BaseModel):
    """Request body for POST /organizations/{slug}/resource_groups."""

    title: str = Field(min_length=1, max_length=255)
    is_default: bool = Field(default=False, alias="default")
    webhook_uri: str | None = Field(default=None, max_length=2048)

    model_config = {"populate_by_name": True}


class ResourceGroupUpdateRequest(BaseModel):
    """Request body for PATCH /organizations/{slug}/resource_groups/{group_id}."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    is_default: bool | None = Field(default=None, alias="default")
    webhook_uri: str | None = Field(default=None, max_length=2048)

    model_config = {"populate_by_name": True}


class ResourceGroupResponse(BaseModel):
    id: UUID
    org_id: UUID
    title: str
    is_default: bool
    webhook_uri: str | None
    has_webhook: bool
    title_with_default_annotation: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ResourceGroupListResponse(BaseModel):
    resource_groups: list[ResourceGroupResponse]
    total: int
