"""
Defaults for representations created together with their resource.

Each representation may name its endpoint, license and metum either by
id (``endpoint_id``) or by name (``endpoint: "Any"``). When neither is
given the registered default name is used; when no record carries that
name the earliest-created record of the type is used instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from describer.models.endpoint import DEFAULT_ENDPOINT_NAME, Endpoint
from describer.models.license import DEFAULT_LICENSE_NAME, License
from describer.models.membership import Membership
from describer.models.metum import DEFAULT_METUM_TITLE, Metum


@dataclass(frozen=True)
class DefaultLookup:
    model: type
    finder: InstrumentedAttribute
    default_name: str
    org_scoped: bool = False


DEFAULT_LOOKUPS: dict[str, DefaultLookup] = {
    "endpoint": DefaultLookup(Endpoint, Endpoint.name, DEFAULT_ENDPOINT_NAME),
    "license": DefaultLookup(License, License.name, DEFAULT_LICENSE_NAME),
    "metum": DefaultLookup(Metum, Metum.title, DEFAULT_METUM_TITLE, org_scoped=True),
}


class RepresentationDefaults:
    """Fills in author, endpoint, license and metum ids for one organization."""

    def __init__(self, db: AsyncSession, org_id: UUID) -> None:
        self.db = db
        self.org_id = org_id
        self._cache: dict[tuple[str, str], UUID | None] = {}
        self._default_author_id: UUID | None = None
        self._author_loaded = False

    async def default_author_id(self) -> UUID | None:
        """The earliest active member of the organization."""
        if not self._author_loaded:
            result = await self.db.execute(
                select(Membership.user_id)
                .where(Membership.org_id == self.org_id, Membership.active.is_(True))
                .order_by(Membership.created_at, Membership.id)
                .limit(1)
            )
            self._default_author_id = result.scalar_one_or_none()
            self._author_loaded = True
        return self._default_author_id

    async def resolve(self, key: str, name: str | None = None) -> UUID | None:
        """Id of the ``key`` record called ``name`` (or the default name)."""
        lookup = DEFAULT_LOOKUPS[key]
        name = name or lookup.default_name
        cache_key = (key, name)
        if cache_key not in self._cache:
            self._cache[cache_key] = await self._find(lookup, name)
        return self._cache[cache_key]

    async def _find(self, lookup: DefaultLookup, name: str) -> UUID | None:
        model = lookup.model
        stmt = select(model.id)
        if lookup.org_scoped:
            stmt = stmt.where(model.org_id == self.org_id)

        named = await self.db.execute(stmt.where(lookup.finder == name).limit(1))
        found = named.scalar_one_or_none()
        if found is not None:
            return found

        earliest = await self.db.execute(stmt.order_by(model.created_at, model.id).limit(1))
        return earliest.scalar_one_or_none()

    async def apply(self, attributes: dict[str, Any]) -> dict[str, Any]:
        """Return a copy of ``attributes`` with the missing ids filled in."""
        filled = dict(attributes)
        if filled.get("author_id") is None:
            filled["author_id"] = await self.default_author_id()

        for key in DEFAULT_LOOKUPS:
            name = filled.pop(key, None)
            if filled.get(f"{key}_id") is not None:
                continue
            filled[f"{key}_id"] = await self.resolve(key, name)
        return filled
