"""Query executor - run canonical filters as a paginated, sorted store query."""

from typing import Optional

from src.models.filters import ListingsFilters, SortOrder
from src.models.search import PagedResult, PriceRange, SortSpec, StoreQuery
from src.services.property_store import PropertyStore, SupabasePropertyStore
from src.utils.errors import StoreUnavailable
from src.utils.logging import get_structured_logger, log_timing

logger = get_structured_logger(__name__)

SORT_SPECS: dict[SortOrder, SortSpec] = {
    SortOrder.RECENT: SortSpec(column="created_at", descending=True),
    SortOrder.PRICE_ASC: SortSpec(column="price", descending=False, nulls_last=True),
    SortOrder.PRICE_DESC: SortSpec(column="price", descending=True, nulls_last=True),
}

# ListingsFilters field -> properties column for ">=" bounds
AT_LEAST_COLUMNS = {
    "bedrooms": "bedrooms",
    "bathrooms": "bathrooms",
    "suites": "suites",
    "parking_spots": "parking_spots",
}

_default_store: Optional[PropertyStore] = None


def get_default_store() -> PropertyStore:
    """Get or create the Supabase-backed store."""
    global _default_store
    if _default_store is None:
        _default_store = SupabasePropertyStore()
    return _default_store


def build_store_query(filters: ListingsFilters) -> StoreQuery:
    """
    Translate canonical filters into a store query.

    Price bounds apply to whichever of price/rent the listing uses, so they
    become a single OR across both columns.
    """
    equals: dict[str, str] = {}
    if filters.purpose is not None:
        equals["purpose"] = filters.purpose.value
    if filters.type is not None:
        equals["type"] = filters.type.value
    if filters.city is not None:
        equals["city"] = filters.city

    contains: dict[str, str] = {}
    if filters.neighborhood is not None:
        contains["neighborhood"] = filters.neighborhood

    price = None
    if filters.min_price is not None or filters.max_price is not None:
        price = PriceRange(min=filters.min_price, max=filters.max_price)

    at_least = {
        column: getattr(filters, field)
        for field, column in AT_LEAST_COLUMNS.items()
        if getattr(filters, field) is not None
    }

    return StoreQuery(
        equals=equals,
        contains=contains,
        at_least=at_least,
        price=price,
        sort=SORT_SPECS[filters.sort],
        offset=filters.offset,
        limit=filters.page_size,
    )


async def execute(filters: ListingsFilters, store: Optional[PropertyStore] = None) -> PagedResult:
    """
    Fetch one page of listings.

    Raises StoreUnavailable when the store cannot be queried; there is no
    automatic retry.
    """
    store = store or get_default_store()
    query = build_store_query(filters)

    try:
        with log_timing(
            "execute_listings_query",
            logger=logger,
            page=filters.page,
            page_size=filters.page_size,
            sort=filters.sort.value
        ):
            result = await store.query(query)
    except StoreUnavailable:
        raise
    except Exception as e:
        logger.error("Listings query failed", error=str(e), exc_info=True)
        raise StoreUnavailable(f"Failed to load listings: {e}") from e

    paged = PagedResult(
        items=result.items,
        total=result.total,
        page=filters.page,
        page_size=filters.page_size,
    )
    logger.debug(
        "Listings query completed",
        total=paged.total,
        total_pages=paged.total_pages,
        items_returned=len(paged.items)
    )
    return paged
