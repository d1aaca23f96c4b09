"""
Resource schemas.

Request/response models for resource CRUD and the filtered listing.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from describer.models.representation import RepresentationStatus
from describer.models.resource import Resource, ResourceStatus, ResourceType


# ---------------------------------------------------------------------------
# Nested representation create
# ---------------------------------------------------------------------------

class RepresentationCreateRequest(BaseModel):
    """
    A representation created together with its resource.

    Endpoint, license and metum may be given by id or by name; anything
    left out is filled from the organization's defaults.
    """

    text: str | None = None
    status: RepresentationStatus = RepresentationStatus.ready_to_review
    content_type: str = Field(default="text/plain", max_length=100)
    content_uri: str | None = Field(default=None, max_length=2048)
    language: str = Field(default="en", max_length=10)
    notes: str | None = None
    ordinality: int | None = None
    author_id: UUID | None = None
    endpoint_id: UUID | None = None
    endpoint: str | None = None
    license_id: UUID | None = None
    license: str | None = None
    metum_id: UUID | None = None
    metum: str | None = None


# ---------------------------------------------------------------------------
# Resource Create
# ---------------------------------------------------------------------------

class ResourceCreateRequest(BaseModel):
    """Request body for POST /organizations/{slug}/resources."""

    title: str | None = Field(default=None, max_length=500)
    identifier: str | None = Field(default=None, max_length=255)
    canonical_id: str | None = Field(default=None, max_length=255)
    resource_type: ResourceType
    source_uri: str | None = Field(default=None, max_length=2048)
    host_uris: list[str] | str | None = None
    priority_flag: bool = False
    ordinality: int | None = None
    resource_group_ids: list[UUID] = Field(default_factory=list)
    representations: list[RepresentationCreateRequest] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Resource Update
# ---------------------------------------------------------------------------

class ResourceUpdateRequest(BaseModel):
    """Request body for PATCH /organizations/{slug}/resources/{resource_id}."""

    title: str | None = Field(default=None, max_length=500)
    identifier: str | None = Field(default=None, max_length=255)
    canonical_id: str | None = Field(default=None, max_length=255)
    resource_type: ResourceType | None = None
    source_uri: str | None = Field(default=None, max_length=2048)
    host_uris: list[str] | str | None = None
    priority_flag: bool | None = None
    ordinality: int | None = None
    resource_group_ids: list[UUID] | None = None


# ---------------------------------------------------------------------------
# Nested response objects
# ---------------------------------------------------------------------------

class RepresentationResponse(BaseModel):
    id: UUID
    status: RepresentationStatus
    text: str | None
    content_type: str
    content_uri: str | None
    language: str
    notes: str | None
    ordinality: int | None
    author_id: UUID
    endpoint_id: UUID
    license_id: UUID
    metum_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ResourceGroupSummaryResponse(BaseModel):
    """Compact group info embedded in resource responses."""

    id: UUID
    title: str
    is_default: bool

    model_config = {"from_attributes": True}


class RelatedResourceResponse(BaseModel):
    """A linked resource, with the verb read from the viewing resource's side."""

    verb: str
    link_id: UUID
    resource_id: UUID
    identifier: str
    title: str


# ---------------------------------------------------------------------------
# Resource responses
# ---------------------------------------------------------------------------

class ResourceResponse(BaseModel):
    id: UUID
    org_id: UUID
    identifier: str
    canonical_id: str
    title: str
    label: str
    resource_type: ResourceType
    source_uri: str | None
    host_uris: list[str]
    priority_flag: bool
    ordinality: int | None
    viewable: bool
    statuses: list[ResourceStatus]
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ResourceDetailResponse(ResourceResponse):
    """Full resource detail including groups and representations."""

    resource_groups: list[ResourceGroupSummaryResponse]
    representations: list[RepresentationResponse]
    best_representation: RepresentationResponse | None
    related: list[RelatedResourceResponse] = Field(default_factory=list)

    @classmethod
    def from_resource(cls, resource: Resource) -> ResourceDetailResponse:
        detail = cls.model_validate(resource)
        detail.related = [
            RelatedResourceResponse(
                verb=verb,
                link_id=link.id,
                resource_id=other.id,
                identifier=other.identifier,
                title=other.title,
            )
            for verb, link, other in resource.related_resources()
        ]
        return detail


class ResourceListResponse(BaseModel):
    """Response for GET /organizations/{slug}/resources."""

    data: list[ResourceResponse]
    links: dict[str, str]
    total: int
