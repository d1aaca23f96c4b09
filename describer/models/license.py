"""
License ORM model.
"""

from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from describer.models.base import Base, TimestampMixin, UUIDMixin

# Creative Commons public domain dedication
DEFAULT_LICENSE_NAME = "cc0-1.0"


class License(Base, UUIDMixin, TimestampMixin):
    """A license under which representations are published."""

    __tablename__ = "licenses"

    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<License id={self.id} name={self.name!r}>"
