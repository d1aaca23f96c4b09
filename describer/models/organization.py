"""
Organization ORM model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from describer.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from describer.models.membership import Membership
    from describer.models.metum import Metum
    from describer.models.resource import Resource
    from describer.models.resource_group import ResourceGroup


class Organization(Base, UUIDMixin, TimestampMixin):
    """Represents a tenant organization."""

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)

    # Relationships
    memberships: Mapped[list[Membership]] = relationship(
        "Membership", back_populates="organization", cascade="all, delete-orphan"
    )
    resource_groups: Mapped[list[ResourceGroup]] = relationship(
        "ResourceGroup", back_populates="organization", cascade="all, delete-orphan"
    )
    meta: Mapped[list[Metum]] = relationship(
        "Metum", back_populates="organization", cascade="all, delete-orphan"
    )
    resources: Mapped[list[Resource]] = relationship(
        "Resource", back_populates="organization", passive_deletes="all"
    )

    def __repr__(self) -> str:
        return f"<Organization id={self.id} slug={self.slug!r}>"
