"""
Endpoint ORM model.

An endpoint is a place a representation is published to ("Any", "Website",
"Mobile app"). Endpoints are shared across organizations.
"""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from describer.models.base import Base, TimestampMixin, UUIDMixin

DEFAULT_ENDPOINT_NAME = "Any"


class Endpoint(Base, UUIDMixin, TimestampMixin):
    __tablename__ = "endpoints"

    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Endpoint id={self.id} name={self.name!r}>"
