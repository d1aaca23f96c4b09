"""
Declarative base and shared column mixins.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    """
    ``created_at`` / ``updated_at`` columns filled by the database.

    ``created_at`` is load-bearing: the default listing order and the
    earliest-record fallbacks for representation defaults both sort on it.
    """

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class UUIDMixin:
    """UUID primary key generated client-side, so ids exist before flush."""

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
