"""
Membership ORM model.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from describer.models.base import Base, UUIDMixin

if TYPE_CHECKING:
    from describer.models.organization import Organization
    from describer.models.user import User


class MembershipRole(str, enum.Enum):
    """Organization member role, lowest privilege first."""

    viewer = "viewer"
    author = "author"
    editor = "editor"
    admin = "admin"
    owner = "owner"

    @property
    def rank(self) -> int:
        return _ROLE_ORDER.index(self)

    def at_least(self, other: MembershipRole) -> bool:
        return self.rank >= other.rank


_ROLE_ORDER = list(MembershipRole)


class Membership(Base, UUIDMixin):
    """Join table linking users to organizations with a role."""

    __tablename__ = "memberships"

    __table_args__ = (
        UniqueConstraint("org_id", "user_id", name="uq_memberships_org_user"),
    )

    org_id: Mapped[UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role: Mapped[MembershipRole] = mapped_column(
        Enum(MembershipRole, name="membership_role"), nullable=False
    )
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    organization: Mapped[Organization] = relationship(
        "Organization", back_populates="memberships"
    )
    user: Mapped[User] = relationship(
        "User", back_populates="memberships"
    )

    def __repr__(self) -> str:
        return f"<Membership org_id={self.org_id} user_id={self.user_id} role={self.role}>"
