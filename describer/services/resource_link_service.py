"""
Resource link business logic.

Both ends of a link belong to the caller's organization; a resource cannot
link to itself, and each (subject, verb, object) triple exists once.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from describer.core.exceptions import NotFound, ValidationFailure
from describer.models.resource import Resource
from describer.models.resource_link import VERBS, ResourceLink
from describer.schemas.resource_link import ResourceLinkCreateRequest, ResourceLinkUpdateRequest

logger = logging.getLogger(__name__)


class ResourceLinkService:
    """Handles all resource link operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_link(self, link_id: UUID, org_id: UUID) -> ResourceLink:
        result = await self.db.execute(
            select(ResourceLink).where(
                ResourceLink.id == link_id,
                ResourceLink.org_id == org_id,
            )
        )
        link = result.scalar_one_or_none()
        if link is None:
            raise NotFound("resource_link")
        return link

    async def create_link(self, org_id: UUID, data: ResourceLinkCreateRequest) -> ResourceLink:
        await self._get_resource(data.subject_resource_id, org_id)
        await self._get_resource(data.object_resource_id, org_id)
        await self._validate(data.subject_resource_id, data.verb, data.object_resource_id)

        link = ResourceLink(
            org_id=org_id,
            subject_resource_id=data.subject_resource_id,
            verb=data.verb,
            object_resource_id=data.object_resource_id,
        )
        self.db.add(link)
        await self.db.flush()
        await self.db.refresh(link)

        logger.info(
            "Linked resource %s %s %s", link.subject_resource_id, link.verb, link.object_resource_id
        )
        return link

    async def update_link(
        self, link_id: UUID, org_id: UUID, data: ResourceLinkUpdateRequest
    ) -> ResourceLink:
        link = await self.get_link(link_id, org_id)

        verb = data.verb if data.verb is not None else link.verb
        object_resource_id = (
            data.object_resource_id if data.object_resource_id is not None else link.object_resource_id
        )
        if object_resource_id != link.object_resource_id:
            await self._get_resource(object_resource_id, org_id)
        if (verb, object_resource_id) != (link.verb, link.object_resource_id):
            await self._validate(link.subject_resource_id, verb, object_resource_id, exclude_id=link.id)

        link.verb = verb
        link.object_resource_id = object_resource_id
        await self.db.flush()
        await self.db.refresh(link)
        return link

    async def delete_link(self, link_id: UUID, org_id: UUID) -> None:
        link = await self.get_link(link_id, org_id)
        await self.db.delete(link)
        await self.db.flush()
        logger.info("Deleted resource link %s in org %s", link_id, org_id)

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    async def _get_resource(self, resource_id: UUID, org_id: UUID) -> Resource:
        result = await self.db.execute(
            select(Resource).where(Resource.id == resource_id, Resource.org_id == org_id)
        )
        resource = result.scalar_one_or_none()
        if resource is None:
            raise NotFound("resource")
        return resource

    async def _validate(
        self,
        subject_resource_id: UUID,
        verb: str,
        object_resource_id: UUID,
        exclude_id: UUID | None = None,
    ) -> None:
        errors: dict[str, list[str]] = {}
        if verb not in VERBS:
            errors["verb"] = ["is not included in the list"]
        if subject_resource_id == object_resource_id:
            errors["object_resource_id"] = ["can't link a resource to itself"]

        stmt = select(ResourceLink.id).where(
            ResourceLink.subject_resource_id == subject_resource_id,
            ResourceLink.verb == verb,
            ResourceLink.object_resource_id == object_resource_id,
        )
        if exclude_id is not None:
            stmt = stmt.where(ResourceLink.id != exclude_id)
        duplicate = await self.db.execute(select(stmt.exists()))
        if duplicate.scalar():
            errors["verb"] = [*errors.get("verb", []), "has already been taken"]

        if errors:
            raise ValidationFailure(errors)
