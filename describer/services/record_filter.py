"""
Record filtering orchestration.

Composes the filter normalizer, the query builder and the paginator:

    normalize ``q`` → apply default order (only when nothing was asked for)
    → build search on the tenant-scoped base query → paginate

Everything derived from the request is computed once per instance.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from describer.services.filter_params import (
    FilterSpec,
    filter_spec_to_params,
    normalize_filter_params,
)
from describer.services.query_builder import (
    Search,
    SearchDefinition,
    apply_scope,
    build_search,
    is_blank,
)
from describer.services.record_paginator import Page, RecordPaginator


class RecordFilter:
    """Turns a listing request's ``q`` and ``page`` parameters into a page of records."""

    def __init__(
        self,
        filter_params: Mapping[str, Any] | None,
        pagination_params: Mapping[str, Any] | None,
        base_query: Select,
        *,
        definition: SearchDefinition,
        default_order: Iterable[str] | str = (),
        default_per_page: int | None = None,
        max_per_page: int | None = None,
        load_options: Iterable[Any] = (),
    ) -> None:
        self.filter_params: FilterSpec = normalize_filter_params(filter_params)
        self.pagination_params = dict(pagination_params or {})
        self.definition = definition
        self.default_per_page = default_per_page
        self.max_per_page = max_per_page
        self.load_options = tuple(load_options)

        default_order = (default_order,) if isinstance(default_order, str) else tuple(default_order)
        if default_order and not self.has_filters:
            for scope_name in default_order:
                base_query = apply_scope(definition, base_query, scope_name)
        self.base_query = base_query

        self._search: Search | None = None
        self._record_paginator: RecordPaginator | None = None
        self._page: Page | None = None

    @property
    def has_filters(self) -> bool:
        """True when any ``q`` key carries a value; blank keys do not count."""
        return any(not is_blank(value) for value in self.filter_params.values())

    @property
    def search(self) -> Search:
        if self._search is None:
            self._search = build_search(self.definition, self.filter_params, self.base_query)
        return self._search

    @property
    def record_paginator(self) -> RecordPaginator:
        if self._record_paginator is None:
            self._record_paginator = RecordPaginator(
                self.pagination_params,
                self.search.result(),
                default_per_page=self.default_per_page,
                max_per_page=self.max_per_page,
                load_options=self.load_options,
            )
        return self._record_paginator

    @record_paginator.setter
    def record_paginator(self, paginator: RecordPaginator) -> None:
        self._record_paginator = paginator
        self._page = None

    async def page(self, db: AsyncSession) -> Page:
        if self._page is None:
            self._page = await self.record_paginator.paginate(db)
        return self._page

    async def records(self, db: AsyncSession) -> list[Any]:
        return (await self.page(db)).records

    def base_link_params(self) -> dict[str, Any]:
        params: dict[str, Any] = {}
        if self.filter_params:
            params["q"] = filter_spec_to_params(self.filter_params)
        return params

    async def pagination_link_params(self, db: AsyncSession) -> dict[str, dict[str, Any]]:
        """Links to the other pages of this filtered listing."""
        page = await self.page(db)
        return page.pagination_links_for(self.base_link_params())

    async def browser_pagination_link_params(self, db: AsyncSession) -> dict[str, dict[str, Any]]:
        """As ``pagination_link_params``, without ``first`` while on the first page."""
        links = await self.pagination_link_params(db)
        if (await self.page(db)).is_first_page:
            links.pop("first", None)
        return links
