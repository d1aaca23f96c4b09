"""
Assignment ORM model.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from describer.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from describer.models.resource import Resource
    from describer.models.user import User


class Assignment(Base, UUIDMixin, TimestampMixin):
    """Asks a user to describe a resource."""

    __tablename__ = "assignments"

    __table_args__ = (
        UniqueConstraint("resource_id", "user_id", name="uq_assignments_resource_user"),
    )

    resource_id: Mapped[UUID] = mapped_column(
        ForeignKey("resources.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Relationships
    resource: Mapped[Resource] = relationship("Resource", back_populates="assignments")
    user: Mapped[User] = relationship("User", back_populates="assignments")

    def __repr__(self) -> str:
        return f"<Assignment resource_id={self.resource_id} user_id={self.user_id}>"
