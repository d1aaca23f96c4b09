"""
Resource ORM model.

A resource is anything that has identity and needs describing: an image,
a document, a physical object, a collection of other resources.

Status predicates (``is_represented``, ``is_complete``, ``statuses`` ...) are
computed from the loaded relationships on every access; callers load
``representations``, ``assignments`` and ``organization.meta`` first.
"""

from __future__ import annotations

import enum
import re
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import (
    JSON,
    Boolean,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from describer.models.base import Base, TimestampMixin, UUIDMixin
from describer.models.representation import STATUS_RANK
from describer.models.resource_group import resource_group_resources
from describer.models.resource_link import reverse_verb

if TYPE_CHECKING:
    from describer.models.assignment import Assignment
    from describer.models.organization import Organization
    from describer.models.representation import Representation
    from describer.models.resource_group import ResourceGroup
    from describer.models.resource_link import ResourceLink

DEFAULT_TITLE = "(no title provided)"

# Changes to any of these are pushed to webhook subscribers
WEBHOOK_FIELDS = (
    "identifier",
    "title",
    "resource_type",
    "canonical_id",
    "source_uri",
    "priority_flag",
    "host_uris",
    "ordinality",
)

_LINE_BREAKS = re.compile(r"[\r\n]+")


class ResourceType(str, enum.Enum):
    """Dublin Core type vocabulary."""

    collection = "collection"
    dataset = "dataset"
    event = "event"
    image = "image"
    interactive_resource = "interactive_resource"
    moving_image = "moving_image"
    physical_object = "physical_object"
    service = "service"
    software = "software"
    sound = "sound"
    still_image = "still_image"
    text = "text"


IMAGE_LIKE_TYPES = frozenset(
    {ResourceType.image, ResourceType.still_image, ResourceType.moving_image}
)


class ResourceStatus(str, enum.Enum):
    urgent = "urgent"
    unrepresented = "unrepresented"
    represented = "represented"
    unassigned = "unassigned"
    assigned = "assigned"
    partially_complete = "partially_complete"


def split_host_uris(value: Any) -> list[str]:
    """Normalize newline-delimited text (or a list) into a list of URIs."""
    if value is None:
        return []
    if isinstance(value, str):
        return [uri for uri in _LINE_BREAKS.split(value) if uri]
    return [str(uri) for uri in value if uri]


class Resource(Base, UUIDMixin, TimestampMixin):
    """A cataloged item that needs accessible description."""

    __tablename__ = "resources"

    __table_args__ = (
        UniqueConstraint("org_id", "canonical_id", name="uq_resources_org_canonical_id"),
        Index(
            "uq_resources_org_source_uri",
            "org_id",
            "source_uri",
            unique=True,
            postgresql_where=text("source_uri IS NOT NULL"),
            sqlite_where=text("source_uri IS NOT NULL"),
        ),
    )

    org_id: Mapped[UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    identifier: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    canonical_id: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(
        String(500), nullable=False, default=DEFAULT_TITLE, server_default=DEFAULT_TITLE
    )
    resource_type: Mapped[ResourceType] = mapped_column(
        Enum(ResourceType, name="resource_type"),
        nullable=False,
    )
    source_uri: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    host_uris: Mapped[list[str]] = mapped_column(
        JSON().with_variant(ARRAY(String), "postgresql"),
        nullable=False,
        default=list,
    )
    priority_flag: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, index=True
    )
    ordinality: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Relationships
    organization: Mapped[Organization] = relationship(
        "Organization", back_populates="resources"
    )
    representations: Mapped[list[Representation]] = relationship(
        "Representation",
        back_populates="resource",
        cascade="all, delete-orphan",
        order_by="Representation.created_at",
    )
    assignments: Mapped[list[Assignment]] = relationship(
        "Assignment", back_populates="resource", cascade="all, delete-orphan"
    )
    resource_groups: Mapped[list[ResourceGroup]] = relationship(
        "ResourceGroup",
        secondary=resource_group_resources,
        back_populates="resources",
    )
    subject_resource_links: Mapped[list[ResourceLink]] = relationship(
        "ResourceLink",
        foreign_keys="ResourceLink.subject_resource_id",
        back_populates="subject_resource",
        cascade="all, delete-orphan",
    )
    object_resource_links: Mapped[list[ResourceLink]] = relationship(
        "ResourceLink",
        foreign_keys="ResourceLink.object_resource_id",
        back_populates="object_resource",
        cascade="all, delete-orphan",
    )

    @validates("host_uris")
    def _normalize_host_uris(self, key: str, value: Any) -> list[str]:
        return split_host_uris(value)

    @validates("source_uri")
    def _blank_source_uri_is_none(self, key: str, value: str | None) -> str | None:
        return value or None

    # -----------------------------------------------------------------------
    # Presentation helpers
    # -----------------------------------------------------------------------

    @property
    def label(self) -> str:
        """Human-friendly name for titles and select boxes."""
        return f"{self.title} ({self.identifier})"

    @property
    def viewable(self) -> bool:
        return bool(self.source_uri) and self.resource_type in IMAGE_LIKE_TYPES

    @property
    def resource_group(self) -> ResourceGroup | None:
        return self.resource_groups[0] if self.resource_groups else None

    @property
    def has_webhook(self) -> bool:
        return any(group.has_webhook for group in self.resource_groups)

    @property
    def best_representation(self) -> Representation | None:
        if not self.representations:
            return None
        return min(
            self.representations,
            key=lambda r: (STATUS_RANK[r.status], len(r.text or "")),
        )

    # -----------------------------------------------------------------------
    # Status predicates
    # -----------------------------------------------------------------------

    @property
    def is_unrepresented(self) -> bool:
        return not self.representations

    @property
    def is_represented(self) -> bool:
        return not self.is_unrepresented

    @property
    def is_unassigned(self) -> bool:
        return not self.assignments

    @property
    def is_assigned(self) -> bool:
        return not self.is_unassigned

    @property
    def is_complete(self) -> bool:
        return len(self.representations) >= len(self.organization.meta)

    @property
    def is_partially_complete(self) -> bool:
        return self.is_represented and not self.is_complete

    @property
    def is_approved(self) -> bool:
        return self.is_complete and all(r.is_approved for r in self.representations)

    @property
    def statuses(self) -> list[ResourceStatus]:
        statuses: list[ResourceStatus] = []
        if self.priority_flag:
            statuses.append(ResourceStatus.urgent)
        if self.is_unrepresented:
            statuses.append(ResourceStatus.unrepresented)
        if self.is_represented:
            statuses.append(ResourceStatus.represented)
        if self.is_unassigned:
            statuses.append(ResourceStatus.unassigned)
        if self.is_assigned:
            statuses.append(ResourceStatus.assigned)
        if self.is_partially_complete:
            statuses.append(ResourceStatus.partially_complete)
        return statuses

    def related_resources(self) -> list[tuple[str, ResourceLink, Resource]]:
        """
        Resources linked to this one, with verbs read from this resource's side.

        Outbound links keep their verb; inbound links use the reverse verb.
        """
        related: list[tuple[str, ResourceLink, Resource]] = []
        for link in self.subject_resource_links:
            related.append((link.verb, link, link.object_resource))
        for link in self.object_resource_links:
            related.append((reverse_verb(link.verb), link, link.subject_resource))
        return related

    def __repr__(self) -> str:
        return f"<Resource id={self.id} identifier={self.identifier!r} org_id={self.org_id}>"
