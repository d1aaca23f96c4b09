"""
Resource group endpoints.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from describer.core.database import get_db
from describer.core.dependencies import get_org_user
from describer.policies import Action, OrganizationUser, ResourceKind, authorize
from describer.schemas.resource_group import (
    ResourceGroupCreateRequest,
    ResourceGroupListResponse,
    ResourceGroupResponse,
    ResourceGroupUpdateRequest,
)
from describer.services.resource_group_service import ResourceGroupService

router = APIRouter()


def get_resource_group_service(db: AsyncSession = Depends(get_db)) -> ResourceGroupService:
    return ResourceGroupService(db=db)


@router.get(
    "/organizations/{slug}/resource_groups",
    response_model=ResourceGroupListResponse,
    summary="List resource groups",
)
async def list_resource_groups(
    actor: OrganizationUser = Depends(get_org_user),
    service: ResourceGroupService = Depends(get_resource_group_service),
) -> ResourceGroupListResponse:
    authorize(actor, ResourceKind.resource_group, Action.index)
    return await service.list_groups(actor.organization.id)


@router.post(
    "/organizations/{slug}/resource_groups",
    response_model=ResourceGroupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a resource group",
)
async def create_resource_group(
    data: ResourceGroupCreateRequest,
    actor: OrganizationUser = Depends(get_org_user),
    service: ResourceGroupService = Depends(get_resource_group_service),
) -> ResourceGroupResponse:
    """Requires Admin role or above."""
    authorize(actor, ResourceKind.resource_group, Action.create)
    group = await service.create_group(actor.organization.id, data)
    return ResourceGroupResponse.model_validate(group)


@router.get(
    "/organizations/{slug}/resource_groups/{group_id}",
    response_model=ResourceGroupResponse,
    summary="Get a resource group",
)
async def get_resource_group(
    group_id: UUID,
    actor: OrganizationUser = Depends(get_org_user),
    service: ResourceGroupService = Depends(get_resource_group_service),
) -> ResourceGroupResponse:
    authorize(actor, ResourceKind.resource_group, Action.show)
    group = await service.get_group(group_id, actor.organization.id)
    return ResourceGroupResponse.model_validate(group)


@router.patch(
    "/organizations/{slug}/resource_groups/{group_id}",
    response_model=ResourceGroupResponse,
    status_code=status.HTTP_200_OK,
    summary="Update a resource group",
)
async def update_resource_group(
    group_id: UUID,
    data: ResourceGroupUpdateRequest,
    actor: OrganizationUser = Depends(get_org_user),
    service: ResourceGroupService = Depends(get_resource_group_service),
) -> ResourceGroupResponse:
    """Requires Admin role or above."""
    authorize(actor, ResourceKind.resource_group, Action.update)
    group = await service.update_group(group_id, actor.organization.id, data)
    return ResourceGroupResponse.model_validate(group)


@router.delete(
    "/organizations/{slug}/resource_groups/{group_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete an empty, non-default resource group",
)
async def delete_resource_group(
    group_id: UUID,
    actor: OrganizationUser = Depends(get_org_user),
    service: ResourceGroupService = Depends(get_resource_group_service),
) -> dict:
    authorize(actor, ResourceKind.resource_group, Action.destroy)
    await service.delete_group(group_id, actor.organization.id)
    return {}
