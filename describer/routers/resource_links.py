"""
Resource link endpoints.

There is no listing endpoint; links are read through their resources.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from describer.core.database import get_db
from describer.core.dependencies import get_org_user
from describer.policies import Action, OrganizationUser, ResourceKind, authorize
from describer.schemas.resource_link import (
    ResourceLinkCreateRequest,
    ResourceLinkResponse,
    ResourceLinkUpdateRequest,
)
from describer.services.resource_link_service import ResourceLinkService

router = APIRouter()


def get_resource_link_service(db: AsyncSession = Depends(get_db)) -> ResourceLinkService:
    return ResourceLinkService(db=db)


@router.post(
    "/organizations/{slug}/resource_links",
    response_model=ResourceLinkResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Link two resources",
)
async def create_resource_link(
    data: ResourceLinkCreateRequest,
    actor: OrganizationUser = Depends(get_org_user),
    service: ResourceLinkService = Depends(get_resource_link_service),
) -> ResourceLinkResponse:
    authorize(actor, ResourceKind.resource_link, Action.create)
    link = await service.create_link(actor.organization.id, data)
    return ResourceLinkResponse.model_validate(link)


@router.get(
    "/organizations/{slug}/resource_links/{link_id}",
    response_model=ResourceLinkResponse,
    summary="Get a resource link",
)
async def get_resource_link(
    link_id: UUID,
    actor: OrganizationUser = Depends(get_org_user),
    service: ResourceLinkService = Depends(get_resource_link_service),
) -> ResourceLinkResponse:
    authorize(actor, ResourceKind.resource_link, Action.show)
    link = await service.get_link(link_id, actor.organization.id)
    return ResourceLinkResponse.model_validate(link)


@router.patch(
    "/organizations/{slug}/resource_links/{link_id}",
    response_model=ResourceLinkResponse,
    status_code=status.HTTP_200_OK,
    summary="Change a link's verb or object",
)
async def update_resource_link(
    link_id: UUID,
    data: ResourceLinkUpdateRequest,
    actor: OrganizationUser = Depends(get_org_user),
    service: ResourceLinkService = Depends(get_resource_link_service),
) -> ResourceLinkResponse:
    authorize(actor, ResourceKind.resource_link, Action.update)
    link = await service.update_link(link_id, actor.organization.id, data)
    return ResourceLinkResponse.model_validate(link)


@router.delete(
    "/organizations/{slug}/resource_links/{link_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a resource link",
)
async def delete_resource_link(
    link_id: UUID,
    actor: OrganizationUser = Depends(get_org_user),
    service: ResourceLinkService = Depends(get_resource_link_service),
) -> dict:
    authorize(actor, ResourceKind.resource_link, Action.destroy)
    await service.delete_link(link_id, actor.organization.id)
    return {}
