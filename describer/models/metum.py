"""
Metum ORM model.

A metum is one dimension of description an organization asks for
("Short", "Long", "Transcription"). The number of meta an organization
defines is how many representations a resource needs to be complete.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from describer.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from describer.models.organization import Organization

DEFAULT_METUM_TITLE = "Short"


class Metum(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "meta"

    __table_args__ = (
        UniqueConstraint("org_id", "title", name="uq_meta_org_title"),
    )

    org_id: Mapped[UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    instructions: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    organization: Mapped[Organization] = relationship("Organization", back_populates="meta")

    def __repr__(self) -> str:
        return f"<Metum id={self.id} title={self.title!r} org_id={self.org_id}>"
