"""
Resource business logic.

Handles the filtered listing, resource CRUD and the resource lifecycle:
default group attachment, canonical ID and identifier generation, nested
representation defaults and the post-commit webhook trigger.
All queries scoped by org_id.
"""

from __future__ import annotations

import logging
import re
import secrets
import unicodedata
import uuid
from collections.abc import Mapping
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from describer.core.config import settings
from describer.core.exceptions import NotFound, UniquenessViolation, ValidationFailure
from describer.models.organization import Organization
from describer.models.representation import Representation
from describer.models.resource import DEFAULT_TITLE, WEBHOOK_FIELDS, Resource
from describer.models.resource_group import ResourceGroup
from describer.models.resource_link import ResourceLink
from describer.policies import OrganizationUser, ResourceKind, policy_scope
from describer.schemas.resource import ResourceCreateRequest, ResourceUpdateRequest
from describer.services.record_filter import RecordFilter
from describer.services.record_paginator import Page
from describer.services.representation_defaults import RepresentationDefaults
from describer.services.resource_search import DEFAULT_RESOURCE_ORDER, RESOURCE_SEARCH
from describer.services.webhooks import queue_webhook

logger = logging.getLogger(__name__)

_SLUG_SEPARATORS = re.compile(r"[^a-z0-9\-_]+")
_REPEATED_DASHES = re.compile(r"-{2,}")

REQUIRED_REPRESENTATION_IDS = ("author_id", "endpoint_id", "license_id", "metum_id")
NON_NULLABLE_FIELDS = ("title", "resource_type", "priority_flag")

# Storage constraint name / column fragments → the field they protect
_CONSTRAINT_FIELDS = (
    ("canonical_id", "canonical_id"),
    ("source_uri", "source_uri"),
    ("identifier", "identifier"),
)

RESOURCE_LOAD_OPTIONS = (
    selectinload(Resource.representations),
    selectinload(Resource.assignments),
    selectinload(Resource.resource_groups),
    selectinload(Resource.organization).selectinload(Organization.meta),
)


def parameterize(text: str) -> str:
    """
    URL-safe slug of ``text``: ASCII-folded, lowercased, runs of anything
    other than letters, digits, ``-`` and ``_`` collapsed to one dash.
    """
    folded = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    slug = _SLUG_SEPARATORS.sub("-", folded.lower())
    slug = _REPEATED_DASHES.sub("-", slug).strip("-")
    return slug or "resource"


def generate_canonical_id() -> str:
    return str(uuid.uuid4())


def _violated_field(exc: IntegrityError) -> str | None:
    message = str(exc.orig)
    for marker, field in _CONSTRAINT_FIELDS:
        if marker in message:
            return field
    return None


class ResourceService:
    """Handles all resource operations."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # -----------------------------------------------------------------------
    # List Resources
    # -----------------------------------------------------------------------

    def record_filter(
        self,
        actor: OrganizationUser,
        filter_params: Mapping[str, Any] | None,
        pagination_params: Mapping[str, Any] | None,
    ) -> RecordFilter:
        """A ``RecordFilter`` over the resources ``actor`` can see."""
        base_query = policy_scope(actor, ResourceKind.resource, select(Resource))
        return RecordFilter(
            filter_params,
            pagination_params,
            base_query,
            definition=RESOURCE_SEARCH,
            default_order=DEFAULT_RESOURCE_ORDER,
            default_per_page=settings.RESOURCE_PAGE_SIZE,
            max_per_page=settings.RESOURCE_MAX_PAGE_SIZE,
            load_options=RESOURCE_LOAD_OPTIONS,
        )

    async def list_resources(
        self,
        actor: OrganizationUser,
        filter_params: Mapping[str, Any] | None = None,
        pagination_params: Mapping[str, Any] | None = None,
    ) -> tuple[Page, dict[str, dict[str, Any]]]:
        """One page of filtered resources plus the API-view link parameters."""
        record_filter = self.record_filter(actor, filter_params, pagination_params)
        page = await record_filter.page(self.db)
        links = await record_filter.pagination_link_params(self.db)
        return page, links

    # -----------------------------------------------------------------------
    # Get Resource
    # -----------------------------------------------------------------------

    async def get_resource(self, resource_id: UUID, org_id: UUID) -> Resource:
        """Get a resource with everything its statuses depend on. Scoped by org_id."""
        result = await self.db.execute(
            select(Resource)
            .where(Resource.id == resource_id, Resource.org_id == org_id)
            .options(*RESOURCE_LOAD_OPTIONS)
            .execution_options(populate_existing=True)
        )
        resource = result.scalar_one_or_none()
        if resource is None:
            raise NotFound("resource")

        # links load without populate_existing so linked resources already
        # in the session keep their own loaded links
        await self.db.execute(
            select(Resource)
            .where(Resource.id == resource.id)
            .options(
                selectinload(Resource.subject_resource_links).selectinload(
                    ResourceLink.object_resource
                ),
                selectinload(Resource.object_resource_links).selectinload(
                    ResourceLink.subject_resource
                ),
            )
        )
        return resource

    # -----------------------------------------------------------------------
    # Create Resource
    # -----------------------------------------------------------------------

    async def create_resource(
        self,
        organization: Organization,
        data: ResourceCreateRequest,
    ) -> Resource:
        """
        Create a resource and any nested representations.

        Lifecycle, in order: default group attached when none given,
        canonical ID generated when blank, identifier generated from the
        title when blank, then saved. Values the caller supplied that are
        already taken are rejected up front; generated values that lose a
        race at the database are regenerated and the save retried.
        """
        errors: dict[str, list[str]] = {}

        title = DEFAULT_TITLE if data.title is None else data.title
        if not title.strip():
            errors.setdefault("title", []).append("can't be blank")

        identifier = data.identifier if (data.identifier or "").strip() else None
        canonical_id = data.canonical_id if (data.canonical_id or "").strip() else None
        source_uri = data.source_uri or None

        if identifier and await self._identifier_taken(identifier):
            errors.setdefault("identifier", []).append("has already been taken")
        if canonical_id and await self._canonical_id_taken(organization.id, canonical_id):
            errors.setdefault("canonical_id", []).append("has already been taken")
        if source_uri and await self._source_uri_taken(organization.id, source_uri):
            errors.setdefault("source_uri", []).append("has already been taken")

        groups = await self._resolve_groups(organization.id, data.resource_group_ids, errors)
        representations = await self._build_representations(organization.id, data, errors)

        if errors:
            raise ValidationFailure(errors)

        resource = Resource(
            org_id=organization.id,
            title=title,
            resource_type=data.resource_type,
            source_uri=source_uri,
            host_uris=data.host_uris,
            priority_flag=data.priority_flag,
            ordinality=data.ordinality,
        )
        resource.resource_groups = groups
        resource.representations = representations

        generated: set[str] = set()
        if canonical_id is None:
            canonical_id = await self._unique_canonical_id(organization.id)
            generated.add("canonical_id")
        resource.canonical_id = canonical_id

        if identifier is None:
            identifier = await self._unique_identifier(title)
            generated.add("identifier")
        resource.identifier = identifier

        await self._save_new(resource, generated)

        resource = await self.get_resource(resource.id, organization.id)
        if resource.has_webhook:
            queue_webhook(self.db, resource.id)

        logger.info(
            "Created resource %s (%s) in org %s", resource.id, resource.identifier, organization.id
        )
        return resource

    # -----------------------------------------------------------------------
    # Update Resource
    # -----------------------------------------------------------------------

    async def update_resource(
        self,
        resource_id: UUID,
        org_id: UUID,
        data: ResourceUpdateRequest,
    ) -> Resource:
        """
        Partially update a resource.

        A blanked identifier or canonical ID is regenerated. When any
        webhook-watched field changes and one of the resource's groups has
        a webhook, a notification is queued for after the commit.
        """
        resource = await self.get_resource(resource_id, org_id)
        changes: dict[str, dict[str, Any]] = {}
        errors: dict[str, list[str]] = {}
        fields = data.model_dump(exclude_unset=True)

        for field in NON_NULLABLE_FIELDS:
            if field in fields and fields[field] is None:
                errors.setdefault(field, []).append("can't be blank")
        if fields.get("title") is not None and not fields["title"].strip():
            errors.setdefault("title", []).append("can't be blank")

        if fields.get("identifier") and fields["identifier"] != resource.identifier:
            if await self._identifier_taken(fields["identifier"], exclude_id=resource.id):
                errors.setdefault("identifier", []).append("has already been taken")
        if fields.get("canonical_id") and fields["canonical_id"] != resource.canonical_id:
            if await self._canonical_id_taken(org_id, fields["canonical_id"], exclude_id=resource.id):
                errors.setdefault("canonical_id", []).append("has already been taken")
        if fields.get("source_uri") and fields["source_uri"] != resource.source_uri:
            if await self._source_uri_taken(org_id, fields["source_uri"], exclude_id=resource.id):
                errors.setdefault("source_uri", []).append("has already been taken")

        groups = None
        if "resource_group_ids" in fields:
            group_ids = fields.pop("resource_group_ids") or []
            if not group_ids:
                errors.setdefault("resource_groups", []).append("can't be blank")
            else:
                groups = await self._resolve_groups(org_id, group_ids, errors)

        if errors:
            raise ValidationFailure(errors)

        for field, value in fields.items():
            old = getattr(resource, field)
            setattr(resource, field, value)
            new = getattr(resource, field)
            if new != old:
                changes[field] = {"old": old, "new": new}

        if groups is not None:
            resource.resource_groups = groups

        if not (resource.canonical_id or "").strip():
            resource.canonical_id = await self._unique_canonical_id(org_id, exclude_id=resource.id)
            changes["canonical_id"] = {"old": None, "new": resource.canonical_id}
        if not (resource.identifier or "").strip():
            resource.identifier = await self._unique_identifier(
                resource.title, exclude_id=resource.id
            )
            changes["identifier"] = {"old": None, "new": resource.identifier}

        await self._flush_update()

        resource = await self.get_resource(resource.id, org_id)
        watched = [field for field in changes if field in WEBHOOK_FIELDS]
        if watched and resource.has_webhook:
            queue_webhook(self.db, resource.id)

        logger.info("Updated resource %s fields=%s", resource.id, sorted(changes))
        return resource

    # -----------------------------------------------------------------------
    # Delete Resource
    # -----------------------------------------------------------------------

    async def delete_resource(self, resource_id: UUID, org_id: UUID) -> None:
        resource = await self.get_resource(resource_id, org_id)
        await self.db.delete(resource)
        await self.db.flush()
        logger.info("Deleted resource %s in org %s", resource_id, org_id)

    # -----------------------------------------------------------------------
    # Uniqueness helpers
    # -----------------------------------------------------------------------

    async def _taken(self, *criteria: Any, exclude_id: UUID | None = None) -> bool:
        stmt = select(Resource.id).where(*criteria)
        if exclude_id is not None:
            stmt = stmt.where(Resource.id != exclude_id)
        result = await self.db.execute(select(stmt.exists()))
        return bool(result.scalar())

    async def _identifier_taken(self, identifier: str, exclude_id: UUID | None = None) -> bool:
        return await self._taken(Resource.identifier == identifier, exclude_id=exclude_id)

    async def _canonical_id_taken(
        self, org_id: UUID, canonical_id: str, exclude_id: UUID | None = None
    ) -> bool:
        return await self._taken(
            Resource.org_id == org_id,
            Resource.canonical_id == canonical_id,
            exclude_id=exclude_id,
        )

    async def _source_uri_taken(
        self, org_id: UUID, source_uri: str, exclude_id: UUID | None = None
    ) -> bool:
        return await self._taken(
            Resource.org_id == org_id,
            Resource.source_uri == source_uri,
            exclude_id=exclude_id,
        )

    async def _unique_canonical_id(self, org_id: UUID, exclude_id: UUID | None = None) -> str:
        for _ in range(settings.UNIQUE_VALUE_MAX_ATTEMPTS):
            candidate = generate_canonical_id()
            if not await self._canonical_id_taken(org_id, candidate, exclude_id):
                return candidate
            logger.warning("Generated canonical ID %s already taken in org %s", candidate, org_id)
        raise UniquenessViolation("canonical_id")

    async def _unique_identifier(self, title: str, exclude_id: UUID | None = None) -> str:
        """
        The slug of ``title``, or ``{slug}-{6 hex chars}`` when the bare slug
        is taken. Gives up after ``UNIQUE_VALUE_MAX_ATTEMPTS`` candidates.
        """
        root = parameterize(title)
        candidate = root
        for _ in range(settings.UNIQUE_VALUE_MAX_ATTEMPTS):
            if not await self._identifier_taken(candidate, exclude_id):
                return candidate
            logger.warning("Identifier %s already taken, adding a suffix", candidate)
            candidate = f"{root}-{secrets.token_hex(3)}"
        raise UniquenessViolation("identifier")

    async def _save_new(self, resource: Resource, generated: set[str]) -> None:
        """
        Insert ``resource`` inside a savepoint.

        When the database rejects a value this service generated, a fresh
        one is generated and the insert retried, up to
        ``UNIQUE_WRITE_MAX_ATTEMPTS`` times. Any other uniqueness failure is
        raised as ``UniquenessViolation`` straight away.
        """
        for attempt in range(1, settings.UNIQUE_WRITE_MAX_ATTEMPTS + 1):
            try:
                async with self.db.begin_nested():
                    self.db.add(resource)
                    await self.db.flush()
                return
            except IntegrityError as exc:
                field = _violated_field(exc)
                if field is None:
                    raise
                if field not in generated or attempt == settings.UNIQUE_WRITE_MAX_ATTEMPTS:
                    raise UniquenessViolation(field) from exc

                logger.warning(
                    "Generated %s for resource collided on insert (attempt %d), regenerating",
                    field,
                    attempt,
                )
                if field == "canonical_id":
                    resource.canonical_id = await self._unique_canonical_id(resource.org_id)
                else:
                    resource.identifier = await self._unique_identifier(resource.title)

    async def _flush_update(self) -> None:
        try:
            async with self.db.begin_nested():
                await self.db.flush()
        except IntegrityError as exc:
            field = _violated_field(exc)
            if field is None:
                raise
            raise UniquenessViolation(field) from exc

    # -----------------------------------------------------------------------
    # Association helpers
    # -----------------------------------------------------------------------

    async def _resolve_groups(
        self,
        org_id: UUID,
        group_ids: list[UUID],
        errors: dict[str, list[str]],
    ) -> list[ResourceGroup]:
        """Groups named by id, or the organization's default group when none are."""
        if group_ids:
            result = await self.db.execute(
                select(ResourceGroup).where(
                    ResourceGroup.org_id == org_id, ResourceGroup.id.in_(group_ids)
                )
            )
            groups = list(result.scalars().all())
            if len(groups) != len(set(group_ids)):
                errors.setdefault("resource_group_ids", []).append("is invalid")
            return groups

        result = await self.db.execute(
            select(ResourceGroup).where(
                ResourceGroup.org_id == org_id, ResourceGroup.is_default.is_(True)
            )
        )
        default_group = result.scalars().first()
        if default_group is None:
            errors.setdefault("resource_groups", []).append("can't be blank")
            return []
        return [default_group]

    async def _build_representations(
        self,
        org_id: UUID,
        data: ResourceCreateRequest,
        errors: dict[str, list[str]],
    ) -> list[Representation]:
        defaults = RepresentationDefaults(self.db, org_id)
        representations = []
        for index, representation_data in enumerate(data.representations):
            attributes = await defaults.apply(representation_data.model_dump())
            missing = [key for key in REQUIRED_REPRESENTATION_IDS if attributes.get(key) is None]
            for key in missing:
                errors.setdefault(f"representations[{index}].{key}", []).append("can't be blank")
            if not missing:
                representations.append(Representation(**attributes))
        return representations
