"""
Page-number pagination over a query.

``Page`` holds the arithmetic and link generation and never touches the
database; ``RecordPaginator`` runs the count and the page query.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from describer.core.config import settings

PER_PAGE_KEYS = ("size", "per_page")


def _to_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def resolve_per_page(
    pagination_params: Mapping[str, Any],
    default: int,
    maximum: int,
) -> int:
    """Requested page size clamped to ``[1, maximum]``; non-numeric → ``default``."""
    requested = None
    for key in PER_PAGE_KEYS:
        requested = _to_int(pagination_params.get(key))
        if requested is not None:
            break
    if requested is None:
        requested = default
    return max(1, min(requested, maximum))


def resolve_page_number(requested: Any, total_pages: int) -> int:
    """Requested page number clamped to ``[1, total_pages]``; non-numeric → 1."""
    number = _to_int(requested)
    if number is None or number < 1:
        return 1
    return min(number, total_pages)


@dataclass
class Page:
    number: int
    per_page: int
    total: int
    records: list[Any] = field(default_factory=list)

    @property
    def total_pages(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))

    @property
    def is_first_page(self) -> bool:
        return self.number == 1

    @property
    def is_last_page(self) -> bool:
        return self.number >= self.total_pages

    @property
    def offset(self) -> int:
        return (self.number - 1) * self.per_page

    def _link(self, base_params: Mapping[str, Any], number: int) -> dict[str, Any]:
        return {**base_params, "page": {"number": number, "size": self.per_page}}

    def pagination_links_for(self, base_params: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
        """
        Link parameters for the neighbouring pages.

        ``first`` and ``last`` are always present; ``prev`` is omitted on the
        first page and ``next`` on the last.
        """
        links = {"first": self._link(base_params, 1)}
        if not self.is_first_page:
            links["prev"] = self._link(base_params, self.number - 1)
        if not self.is_last_page:
            links["next"] = self._link(base_params, self.number + 1)
        links["last"] = self._link(base_params, self.total_pages)
        return links


class RecordPaginator:
    """Paginates a select statement using ``page[number]`` and ``page[size]``."""

    def __init__(
        self,
        pagination_params: Mapping[str, Any] | None,
        query: Select,
        *,
        default_per_page: int | None = None,
        max_per_page: int | None = None,
        load_options: Iterable[Any] = (),
    ) -> None:
        self.pagination_params = dict(pagination_params or {})
        self.query = query
        self.load_options = tuple(load_options)
        self.max_per_page = max_per_page or settings.RESOURCE_MAX_PAGE_SIZE
        self.per_page = resolve_per_page(
            self.pagination_params,
            default_per_page or settings.RESOURCE_PAGE_SIZE,
            self.max_per_page,
        )

    async def paginate(self, db: AsyncSession) -> Page:
        count_stmt = select(func.count()).select_from(self.query.order_by(None).subquery())
        total = (await db.execute(count_stmt)).scalar_one()

        page = Page(number=1, per_page=self.per_page, total=total)
        page.number = resolve_page_number(self.pagination_params.get("number"), page.total_pages)

        page_stmt = self.query.options(*self.load_options).offset(page.offset).limit(self.per_page)
        result = await db.execute(page_stmt)
        page.records = list(result.scalars().unique().all())
        return page
