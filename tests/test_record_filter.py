"""
RecordFilter orchestration: default order, memoization and links.
"""

from datetime import datetime
from uuid import uuid4

import pytest
from sqlalchemy import select

from describer.models import Resource, ResourceType
from describer.services.record_filter import RecordFilter
from describer.services.record_paginator import RecordPaginator
from describer.services.resource_search import DEFAULT_RESOURCE_ORDER, RESOURCE_SEARCH


@pytest.fixture
async def resources(db, tenant):
    rows = [
        ("Alpha", 1, False),
        ("Bravo", 2, True),
        ("Charlie", 3, False),
        ("Delta", 4, False),
        ("Echo", 5, False),
    ]
    for title, day, urgent in rows:
        created_at = datetime(2026, 5, day, 10, 0, 0)
        db.add(
            Resource(
                org_id=tenant.organization.id,
                identifier=f"{title.lower()}-{uuid4().hex[:4]}",
                canonical_id=str(uuid4()),
                title=title,
                resource_type=ResourceType.image,
                priority_flag=urgent,
                created_at=created_at,
                updated_at=created_at,
            )
        )
    await db.commit()
    return tenant


def make_filter(filter_params=None, pagination_params=None, **kwargs):
    kwargs.setdefault("default_order", DEFAULT_RESOURCE_ORDER)
    return RecordFilter(
        filter_params,
        pagination_params,
        select(Resource),
        definition=RESOURCE_SEARCH,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Default order
# ---------------------------------------------------------------------------

async def test_default_order_applies_without_filters(db, resources):
    records = await make_filter().records(db)
    assert [r.title for r in records] == ["Bravo", "Echo", "Delta", "Charlie", "Alpha"]


async def test_any_filter_suppresses_default_order(db, resources):
    record_filter = make_filter({"s": "title asc"})
    records = await record_filter.records(db)
    assert [r.title for r in records] == ["Alpha", "Bravo", "Charlie", "Delta", "Echo"]


async def test_filter_without_sort_is_not_reordered(db, resources):
    record_filter = make_filter({"title_cont": "a"})
    assert "ORDER BY" not in str(record_filter.search.result())


@pytest.mark.parametrize(
    "filter_params",
    [{"title_cont": ""}, {"title_cont_any": " , "}, {"scope": []}, {"title_in": ["", " "]}],
)
async def test_blank_filters_keep_default_order(db, resources, filter_params):
    record_filter = make_filter(filter_params)
    assert not record_filter.has_filters
    records = await record_filter.records(db)
    assert [r.title for r in records] == ["Bravo", "Echo", "Delta", "Charlie", "Alpha"]


async def test_no_default_order_configured(db, resources):
    record_filter = make_filter(default_order=())
    assert "ORDER BY" not in str(record_filter.search.result())


# ---------------------------------------------------------------------------
# Memoization
# ---------------------------------------------------------------------------

async def test_page_is_computed_once(db, resources):
    record_filter = make_filter(pagination_params={"size": "2"})
    first = await record_filter.page(db)
    second = await record_filter.page(db)
    assert first is second
    assert record_filter.search is record_filter.search
    assert record_filter.record_paginator is record_filter.record_paginator


async def test_replacing_the_paginator_resets_the_page(db, resources):
    record_filter = make_filter(pagination_params={"size": "2"})
    assert len(await record_filter.records(db)) == 2

    record_filter.record_paginator = RecordPaginator(
        {"size": "4"}, record_filter.search.result()
    )
    assert len(await record_filter.records(db)) == 4


# ---------------------------------------------------------------------------
# Links
# ---------------------------------------------------------------------------

async def test_api_links_keep_first_on_page_one(db, resources):
    record_filter = make_filter(pagination_params={"size": "2"})
    links = await record_filter.pagination_link_params(db)

    assert set(links) == {"first", "next", "last"}
    assert links["last"] == {"page": {"number": 3, "size": 2}}


async def test_browser_links_drop_first_on_page_one(db, resources):
    record_filter = make_filter(pagination_params={"size": "2"})
    links = await record_filter.browser_pagination_link_params(db)
    assert set(links) == {"next", "last"}


async def test_browser_links_keep_first_after_page_one(db, resources):
    record_filter = make_filter(pagination_params={"number": "2", "size": "2"})
    links = await record_filter.browser_pagination_link_params(db)
    assert set(links) == {"first", "prev", "next", "last"}


async def test_links_carry_the_filter(db, resources):
    record_filter = make_filter(
        {"title_cont": "a", "scope": ["unrepresented"]}, {"size": "1"}
    )
    links = await record_filter.pagination_link_params(db)

    assert links["next"]["q"] == {"title_cont": "a", "unrepresented": True}
    assert links["next"]["page"] == {"number": 2, "size": 1}


async def test_no_filter_means_no_q_in_links(db, resources):
    assert make_filter().base_link_params() == {}
