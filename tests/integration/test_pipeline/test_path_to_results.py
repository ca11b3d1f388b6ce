"""End-to-end tests: listing URL to paged results."""

import pytest
from src.models.filters import Purpose, PropertyType
from src.services.property_store import InMemoryPropertyStore
from src.services.search_session import ListingsSearchSession, SearchStatus
from src.services.slug_codec import build_listing_path, parse_listing_path
from tests.utils.assertions import assert_valid_paged_result
from tests.utils.factories import create_property


@pytest.fixture
def barreiras_rentals() -> InMemoryPropertyStore:
    """30 published rentals in Barreiras plus drafts that must never show."""
    listings = [
        create_property(
            purpose=Purpose.RENTAL, type=PropertyType.APARTMENT, city="Barreiras",
            rent=1000 + i * 50, bedrooms=1 + i % 4, status="ativo",
            created_at=f"2024-11-{i + 1:02d}T09:00:00+00:00",
        )
        for i in range(30)
    ]
    drafts = [
        create_property(purpose=Purpose.RENTAL, city="Barreiras", status="rascunho")
        for _ in range(3)
    ]
    return InMemoryPropertyStore(listings + drafts, published_only=True)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_browse_paginate_and_narrow(barreiras_rentals):
    urls = []
    session = ListingsSearchSession(
        parse_listing_path("/aluguel/barreiras"),
        {},
        store=barreiras_rentals,
        navigate=urls.append,
    )

    first = await session.refresh()
    assert first.total == 30
    assert session.total_pages == 3
    assert_valid_paged_result(first)
    assert first.items[0].created_at.startswith("2024-11-30")

    session.go_page(3)
    third = await session.refresh()
    assert len(third.items) == 6
    assert session.has_next is False
    assert session.has_previous is True

    session.set_param("bedrooms", "4")
    narrowed = await session.refresh()
    assert session.page == 1
    assert narrowed.total == 7
    assert all(p.bedrooms >= 4 for p in narrowed.items)
    assert urls[-1] == "/aluguel/barreiras?page=1&bedrooms=4"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_price_sort_and_bounds(barreiras_rentals):
    session = ListingsSearchSession(parse_listing_path("/aluguel/barreiras"), {}, store=barreiras_rentals)

    session.set_param("minPrice", "1500")
    session.set_param("maxPrice", "2000")
    session.set_sort("price_desc")
    result = await session.refresh()

    rents = [p.rent for p in result.items]
    assert rents == sorted(rents, reverse=True)
    assert rents[0] == 2000
    assert rents[-1] == 1500
    assert result.total == 11


@pytest.mark.integration
@pytest.mark.asyncio
async def test_canonical_path_round_trip(memory_store):
    """Test the canonical path of a result reproduces the same search."""
    session = ListingsSearchSession(
        parse_listing_path("/venda/todos/casas"), {"bedrooms": "2"}, store=memory_store
    )
    result = await session.refresh()
    assert [p.id for p in result.items] == ["p-casa-venda"]

    filters = session.filters
    path = build_listing_path(filters.purpose, filters.city, filters.type)
    replay = ListingsSearchSession(parse_listing_path(path), {"bedrooms": "2"}, store=memory_store)

    assert replay.filters == filters


@pytest.mark.integration
@pytest.mark.asyncio
async def test_clear_all_returns_full_catalogue(memory_store):
    session = ListingsSearchSession(
        None, {"purpose": "venda", "city": "Barreiras", "bedrooms": "3"}, store=memory_store
    )
    narrowed = await session.refresh()
    assert narrowed.total == 1

    session.clear_all()
    everything = await session.refresh()

    assert everything.total == 5
    assert session.status is SearchStatus.IDLE
