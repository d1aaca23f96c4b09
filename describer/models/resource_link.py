"""
ResourceLink ORM model.

Links are directional: ``subject --verb--> object``. Seen from the object's
side the link reads with the reverse verb, so a "hasPart" link is an
"isPartOf" link for its object.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from describer.models.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from describer.models.resource import Resource

# Dublin Core relation terms
_FORWARD_VERBS = {
    "hasPart": "isPartOf",
    "hasVersion": "isVersionOf",
    "hasFormat": "isFormatOf",
    "references": "isReferencedBy",
    "replaces": "isReplacedBy",
    "requires": "isRequiredBy",
}


def _build_verb_dictionary(forward: Mapping[str, str]) -> Mapping[str, str]:
    verbs: dict[str, str] = {}
    for verb, reverse in forward.items():
        verbs[verb] = reverse
        verbs[reverse] = verb
    check_involution(verbs)
    return MappingProxyType(verbs)


def check_involution(verbs: Mapping[str, str]) -> None:
    """Raise ValueError unless reversing any verb twice yields the verb."""
    for verb, reverse in verbs.items():
        if verbs.get(reverse) != verb:
            raise ValueError(f"Verb {verb!r} reverses to {reverse!r}, which does not reverse back")


VERBS: Mapping[str, str] = _build_verb_dictionary(_FORWARD_VERBS)


def reverse_verb(verb: str) -> str:
    """Return the verb describing a link from its object's point of view."""
    try:
        return VERBS[verb]
    except KeyError:
        raise ValueError(f"Unknown verb: {verb!r}") from None


class ResourceLink(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "resource_links"

    __table_args__ = (
        UniqueConstraint(
            "subject_resource_id",
            "verb",
            "object_resource_id",
            name="uq_resource_links_subject_verb_object",
        ),
    )

    org_id: Mapped[UUID] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    subject_resource_id: Mapped[UUID] = mapped_column(
        ForeignKey("resources.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    verb: Mapped[str] = mapped_column(String(50), nullable=False)
    object_resource_id: Mapped[UUID] = mapped_column(
        ForeignKey("resources.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Relationships
    subject_resource: Mapped[Resource] = relationship(
        "Resource",
        foreign_keys=[subject_resource_id],
        back_populates="subject_resource_links",
    )
    object_resource: Mapped[Resource] = relationship(
        "Resource",
        foreign_keys=[object_resource_id],
        back_populates="object_resource_links",
    )

    @property
    def reverse_verb(self) -> str:
        return reverse_verb(self.verb)

    def __repr__(self) -> str:
        return (
            f"<ResourceLink id={self.id} subject={self.subject_resource_id} "
            f"verb={self.verb!r} object={self.object_resource_id}>"
        )
