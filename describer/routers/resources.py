"""
Resource endpoints.

Filtered listing with bracketed ``q[...]`` / ``page[...]`` parameters and
resource CRUD.
"""

from __future__ import annotations

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from describer.core.database import get_db
from describer.core.dependencies import get_org_user
from describer.core.params import encode_nested_params, parse_nested_params
from describer.policies import Action, OrganizationUser, ResourceKind, authorize
from describer.schemas.resource import (
    ResourceCreateRequest,
    ResourceDetailResponse,
    ResourceListResponse,
    ResourceResponse,
    ResourceUpdateRequest,
)
from describer.services.resource_service import ResourceService

router = APIRouter()


def get_resource_service(db: AsyncSession = Depends(get_db)) -> ResourceService:
    return ResourceService(db=db)


def _nested(params: dict[str, Any], key: str) -> dict[str, Any]:
    value = params.get(key)
    return value if isinstance(value, dict) else {}


# ---------------------------------------------------------------------------
# List Resources
# ---------------------------------------------------------------------------

@router.get(
    "/organizations/{slug}/resources",
    response_model=ResourceListResponse,
    summary="List resources with filters and pagination",
)
async def list_resources(
    request: Request,
    actor: OrganizationUser = Depends(get_org_user),
    service: ResourceService = Depends(get_resource_service),
) -> ResourceListResponse:
    """
    Query parameters use bracket notation, e.g.
    ``?q[title_cont]=mona&q[scope][]=represented&page[number]=2&page[size]=20``.
    """
    authorize(actor, ResourceKind.resource, Action.index)

    params = parse_nested_params(request.query_params.multi_items())
    page, links = await service.list_resources(
        actor,
        filter_params=_nested(params, "q"),
        pagination_params=_nested(params, "page"),
    )

    return ResourceListResponse(
        data=[ResourceResponse.model_validate(r) for r in page.records],
        links={
            rel: f"{request.url.path}?{encode_nested_params(link_params)}"
            for rel, link_params in links.items()
        },
        total=page.total,
    )


# ---------------------------------------------------------------------------
# Create Resource
# ---------------------------------------------------------------------------

@router.post(
    "/organizations/{slug}/resources",
    response_model=ResourceDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a resource",
)
async def create_resource(
    data: ResourceCreateRequest,
    actor: OrganizationUser = Depends(get_org_user),
    service: ResourceService = Depends(get_resource_service),
) -> ResourceDetailResponse:
    authorize(actor, ResourceKind.resource, Action.create)
    resource = await service.create_resource(actor.organization, data)
    return ResourceDetailResponse.from_resource(resource)


# ---------------------------------------------------------------------------
# Get Resource
# ---------------------------------------------------------------------------

@router.get(
    "/organizations/{slug}/resources/{resource_id}",
    response_model=ResourceDetailResponse,
    summary="Get resource detail",
)
async def get_resource(
    resource_id: UUID,
    actor: OrganizationUser = Depends(get_org_user),
    service: ResourceService = Depends(get_resource_service),
) -> ResourceDetailResponse:
    authorize(actor, ResourceKind.resource, Action.show)
    resource = await service.get_resource(resource_id, actor.organization.id)
    return ResourceDetailResponse.from_resource(resource)


# ---------------------------------------------------------------------------
# Update Resource
# ---------------------------------------------------------------------------

@router.patch(
    "/organizations/{slug}/resources/{resource_id}",
    response_model=ResourceDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Update a resource",
)
async def update_resource(
    resource_id: UUID,
    data: ResourceUpdateRequest,
    actor: OrganizationUser = Depends(get_org_user),
    service: ResourceService = Depends(get_resource_service),
) -> ResourceDetailResponse:
    authorize(actor, ResourceKind.resource, Action.update)
    resource = await service.update_resource(resource_id, actor.organization.id, data)
    return ResourceDetailResponse.from_resource(resource)


# ---------------------------------------------------------------------------
# Delete Resource
# ---------------------------------------------------------------------------

@router.delete(
    "/organizations/{slug}/resources/{resource_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a resource",
)
async def delete_resource(
    resource_id: UUID,
    actor: OrganizationUser = Depends(get_org_user),
    service: ResourceService = Depends(get_resource_service),
) -> dict:
    authorize(actor, ResourceKind.resource, Action.destroy)
    await service.delete_resource(resource_id, actor.organization.id)
    return {}
