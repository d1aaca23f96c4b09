"""
ResourceGroup ORM model and the resource ↔ group association table.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    String,
    Table,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from describer.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from describer.models.organization import Organization
    from describer.models.resource import Resource

DEFAULT_GROUP_TITLE = "Uncategorized"

resource_group_resources = Table(
    "resource_group_resources",
    Base.metadata,
    Column(
        "resource_id",
        Uuid,
        ForeignKey("resources.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "resource_group_id",
        Uuid,
        ForeignKey("resource_groups.id", ondelete="CASCADE"),
        primary_key=True,
    ),
)


class ResourceGroup(Base, UUIDMixin, TimestampMixin):
    """
    A named context a resource is described for (Web, Exhibitions, Audio Tour).

    Exactly one group per organization is the default; new resources land
    in it when no group is given.
    """

    __tablename__ = "resource_groups"

    __table_args__ = (
        UniqueConstraint("org_id", "title", name="uq_resource_groups_org_title"),
        Index(
            "uq_resource_groups_org_default",
            "org_id",
            unique=True,
            postgresql_where=text('"default" IS TRUE'),
            sqlite_where=text('"default" = 1'),
        ),
    )

    org_id: Mapped[UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    is_default: Mapped[bool] = mapped_column("default", Boolean, nullable=False, default=False)
    webhook_uri: Mapped[str | None] = mapped_column(String(2048), nullable=True)

    # Relationships
    organization: Mapped[Organization] = relationship(
        "Organization", back_populates="resource_groups"
    )
    resources: Mapped[list[Resource]] = relationship(
        "Resource",
        secondary=resource_group_resources,
        back_populates="resource_groups",
    )

    @property
    def has_webhook(self) -> bool:
        return bool(self.webhook_uri)

    @property
    def title_with_default_annotation(self) -> str:
        return f"{self.title} (default)" if self.is_default else self.title

    def __str__(self) -> str:
        return self.title

    def __repr__(self) -> str:
        return f"<ResourceGroup id={self.id} title={self.title!r} org_id={self.org_id}>"
