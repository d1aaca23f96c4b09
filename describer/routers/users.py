"""
User profile endpoints.

Users are not organization-scoped; the actor has no organization role here.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from describer.core.database import get_db
from describer.core.dependencies import get_user_actor
from describer.policies import Action, OrganizationUser, ResourceKind, authorize
from describer.schemas.user import UserResponse, UserUpdateRequest
from describer.services.user_service import UserService

router = APIRouter()


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db=db)


@router.get(
    "/users/{user_id}",
    response_model=UserResponse,
    summary="View a user profile",
)
async def get_user(
    user_id: UUID,
    actor: OrganizationUser = Depends(get_user_actor),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    authorize(actor, ResourceKind.user, Action.show)
    user = await service.get_user(user_id)
    return UserResponse.model_validate(user)


@router.patch(
    "/users/{user_id}",
    response_model=UserResponse,
    status_code=status.HTTP_200_OK,
    summary="Update a user profile (self or staff)",
)
async def update_user(
    user_id: UUID,
    data: UserUpdateRequest,
    actor: OrganizationUser = Depends(get_user_actor),
    service: UserService = Depends(get_user_service),
) -> UserResponse:
    user = await service.get_user(user_id)
    authorize(actor, ResourceKind.user, Action.update, user)
    user = await service.update_user(user, data)
    return UserResponse.model_validate(user)


@router.delete(
    "/users/{user_id}",
    status_code=status.HTTP_200_OK,
    summary="Delete a user (staff only)",
)
async def delete_user(
    user_id: UUID,
    actor: OrganizationUser = Depends(get_user_actor),
    service: UserService = Depends(get_user_service),
) -> dict:
    user = await service.get_user(user_id)
    authorize(actor, ResourceKind.user, Action.destroy, user)
    await service.delete_user(user)
    return {}
