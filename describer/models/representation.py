"""
Representation ORM model.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from describer.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from describer.models.endpoint import Endpoint
    from describer.models.license import License
    from describer.models.metum import Metum
    from describer.models.resource import Resource
    from describer.models.user import User


class RepresentationStatus(str, enum.Enum):
    ready_to_review = "ready_to_review"
    approved = "approved"
    not_approved = "not_approved"


# Display / "best representation" precedence
STATUS_RANK = {
    RepresentationStatus.approved: 0,
    RepresentationStatus.ready_to_review: 1,
    RepresentationStatus.not_approved: 2,
}


class Representation(Base, UUIDMixin, TimestampMixin):
    """One accessible description (alt text, caption, transcription) of a resource."""

    __tablename__ = "representations"

    resource_id: Mapped[UUID] = mapped_column(
        ForeignKey("resources.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    endpoint_id: Mapped[UUID] = mapped_column(
        ForeignKey("endpoints.id", ondelete="RESTRICT"),
        nullable=False,
    )
    license_id: Mapped[UUID] = mapped_column(
        ForeignKey("licenses.id", ondelete="RESTRICT"),
        nullable=False,
    )
    metum_id: Mapped[UUID] = mapped_column(
        ForeignKey("meta.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    status: Mapped[RepresentationStatus] = mapped_column(
        Enum(RepresentationStatus, name="representation_status"),
        nullable=False,
        default=RepresentationStatus.ready_to_review,
        index=True,
    )
    text: Mapped[str | None] = mapped_column(Text, nullable=True)
    content_type: Mapped[str] = mapped_column(String(100), nullable=False, default="text/plain")
    content_uri: Mapped[str | None] = mapped_column(String(2048), nullable=True)
    language: Mapped[str] = mapped_column(String(10), nullable=False, default="en")
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    ordinality: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Relationships
    resource: Mapped[Resource] = relationship("Resource", back_populates="representations")
    author: Mapped[User] = relationship("User", back_populates="authored_representations")
    endpoint: Mapped[Endpoint] = relationship("Endpoint")
    license: Mapped[License] = relationship("License")
    metum: Mapped[Metum] = relationship("Metum")

    @property
    def is_approved(self) -> bool:
        return self.status == RepresentationStatus.approved

    def __repr__(self) -> str:
        return f"<Representation id={self.id} resource_id={self.resource_id} status={self.status}>"
