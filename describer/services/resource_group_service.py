"""
Resource group business logic.

All queries scoped by org_id.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from describer.core.exceptions import NotFound, ValidationFailure
from describer.models.resource_group import ResourceGroup, resource_group_resources
from describer.schemas.resource_group import (
    ResourceGroupCreateRequest,
    ResourceGroupListResponse,
    ResourceGroupResponse,
    ResourceGroupUpdateRequest,
)

logger = logging.getLogger(__name__)

DEFAULT_GROUP_UNDELETABLE = "The default resource group cannot be deleted"
GROUP_NOT_EMPTY = "It has resources in it"


class ResourceGroupService:
    """Handles all resource group operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # -----------------------------------------------------------------------
    # List / Get
    # -----------------------------------------------------------------------

    async def list_groups(self, org_id: UUID) -> ResourceGroupListResponse:
        """Default group first, then by title."""
        result = await self.db.execute(
            select(ResourceGroup)
            .where(ResourceGroup.org_id == org_id)
            .order_by(ResourceGroup.is_default.desc(), ResourceGroup.title.asc())
        )
        groups = list(result.scalars().all())
        return ResourceGroupListResponse(
            resource_groups=[ResourceGroupResponse.model_validate(g) for g in groups],
            total=len(groups),
        )

    async def get_group(self, group_id: UUID, org_id: UUID) -> ResourceGroup:
        result = await self.db.execute(
            select(ResourceGroup).where(
                ResourceGroup.id == group_id,
                ResourceGroup.org_id == org_id,
            )
        )
        group = result.scalar_one_or_none()
        if group is None:
            raise NotFound("resource_group")
        return group

    # -----------------------------------------------------------------------
    # Create / Update
    # -----------------------------------------------------------------------

    async def create_group(
        self, org_id: UUID, data: ResourceGroupCreateRequest
    ) -> ResourceGroup:
        errors = await self._validate(org_id, data.title, data.is_default)
        if errors:
            raise ValidationFailure(errors)

        group = ResourceGroup(
            org_id=org_id,
            title=data.title,
            is_default=data.is_default,
            webhook_uri=data.webhook_uri or None,
        )
        self.db.add(group)
        await self.db.flush()
        await self.db.refresh(group)

        logger.info("Created resource group %s (%r) in org %s", group.id, group.title, org_id)
        return group

    async def update_group(
        self, group_id: UUID, org_id: UUID, data: ResourceGroupUpdateRequest
    ) -> ResourceGroup:
        group = await self.get_group(group_id, org_id)
        fields = data.model_dump(exclude_unset=True)

        errors: dict[str, list[str]] = {}
        if "title" in fields and fields["title"] is None:
            errors["title"] = ["can't be blank"]
        if "is_default" in fields and fields["is_default"] is None:
            errors["default"] = ["can't be blank"]
        if errors:
            raise ValidationFailure(errors)

        errors = await self._validate(
            org_id,
            fields.get("title") if fields.get("title") != group.title else None,
            bool(fields.get("is_default")) and not group.is_default,
            exclude_id=group.id,
        )
        if errors:
            raise ValidationFailure(errors)

        if "title" in fields:
            group.title = fields["title"]
        if "is_default" in fields:
            group.is_default = fields["is_default"]
        if "webhook_uri" in fields:
            group.webhook_uri = fields["webhook_uri"] or None

        await self.db.flush()
        await self.db.refresh(group)
        return group

    # -----------------------------------------------------------------------
    # Delete
    # -----------------------------------------------------------------------

    async def delete_group(self, group_id: UUID, org_id: UUID) -> None:
        """Only non-default groups with no resources can be deleted."""
        group = await self.get_group(group_id, org_id)

        if group.is_default:
            raise ValidationFailure({"base": [DEFAULT_GROUP_UNDELETABLE]})

        in_use = await self.db.execute(
            select(
                select(resource_group_resources.c.resource_id)
                .where(resource_group_resources.c.resource_group_id == group.id)
                .exists()
            )
        )
        if in_use.scalar():
            raise ValidationFailure({"base": [GROUP_NOT_EMPTY]})

        await self.db.delete(group)
        await self.db.flush()
        logger.info("Deleted resource group %s in org %s", group_id, org_id)

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    async def _validate(
        self,
        org_id: UUID,
        title: str | None,
        becomes_default: bool,
        exclude_id: UUID | None = None,
    ) -> dict[str, list[str]]:
        """Title unique per organization; at most one default per organization."""
        errors: dict[str, list[str]] = {}
        scope = select(ResourceGroup.id).where(ResourceGroup.org_id == org_id)
        if exclude_id is not None:
            scope = scope.where(ResourceGroup.id != exclude_id)

        if title is not None:
            if not title.strip():
                errors["title"] = ["can't be blank"]
            else:
                taken = await self.db.execute(
                    select(scope.where(ResourceGroup.title == title).exists())
                )
                if taken.scalar():
                    errors["title"] = ["has already been taken"]

        if becomes_default:
            taken = await self.db.execute(
                select(scope.where(ResourceGroup.is_default.is_(True)).exists())
            )
            if taken.scalar():
                errors["default"] = ["has already been taken"]

        return errors
