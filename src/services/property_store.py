"""Property store backends: Supabase (PostgREST) and in-memory."""

import os
from abc import ABC, abstractmethod
from typing import Iterable, Optional

from src.models.filters import Purpose
from src.models.property import Property, PropertyStatus
from src.models.search import PriceRange, SortSpec, StoreQuery, StoreResult
from src.services.filter_canonicalizer import format_number
from src.services.supabase_client import PROPERTIES_TABLE, SupabaseClient
from src.utils.errors import StoreUnavailable
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

LISTING_COLUMNS = (
    "id,slug,title,purpose,type,status,state,city,neighborhood,bedrooms,suites,bathrooms,"
    "parking_spots,area_m2,price,rent,created_at,published_at,property_photos(url,sort_order)"
)

# Generated column holding rent for rentals and price otherwise:
#   alter table properties add column applicable_price numeric
#     generated always as (case when purpose = 'aluguel' then rent else price end) stored;
# Used to order by price when no purpose filter narrows the listings.
PRICE_SORT_COLUMN = os.environ.get("PRICE_SORT_COLUMN") or "applicable_price"


class PropertyStore(ABC):
    """Queryable property collection."""

    @abstractmethod
    async def query(self, query: StoreQuery) -> StoreResult:
        """Return the [offset, offset + limit) window plus the exact total count."""


def _price_or_filter(price: PriceRange) -> str:
    """PostgREST or= expression: price within bounds OR rent within bounds."""
    def bounded(column: str) -> str:
        conditions = []
        if price.min is not None:
            conditions.append(f"{column}.gte.{format_number(price.min)}")
        if price.max is not None:
            conditions.append(f"{column}.lte.{format_number(price.max)}")
        if len(conditions) == 1:
            return conditions[0]
        return f"and({','.join(conditions)})"

    return f"{bounded('price')},{bounded('rent')}"


class SupabasePropertyStore(PropertyStore):
    """Store backed by the Supabase properties table."""

    def __init__(self, published_only: bool = True, price_sort_column: Optional[str] = None):
        self.published_only = published_only
        self.price_sort_column = price_sort_column or PRICE_SORT_COLUMN

    def price_column(self, query: StoreQuery) -> str:
        """
        Column holding the applicable price for the listings a query can match.

        A purpose filter pins it to rent (aluguel) or price (venda, lancamento);
        otherwise the generated applicable-price column is used.
        """
        purpose = query.equals.get("purpose")
        if purpose is None:
            return self.price_sort_column
        return "rent" if purpose == Purpose.RENTAL.value else "price"

    def _apply_sort(self, builder, query: StoreQuery):
        sort = query.sort
        column = self.price_column(query) if sort.column == "price" else sort.column
        return builder.order(column, desc=sort.descending, nullsfirst=not sort.nulls_last)

    def build(self, client, query: StoreQuery):
        """Translate a StoreQuery into a PostgREST request builder."""
        builder = client.table(PROPERTIES_TABLE).select(LISTING_COLUMNS, count="exact")

        if self.published_only:
            builder = builder.eq("status", PropertyStatus.ACTIVE.value)
        for column, value in query.equals.items():
            builder = builder.eq(column, value)
        for column, value in query.contains.items():
            builder = builder.ilike(column, f"%{value}%")
        if query.price is not None:
            builder = builder.or_(_price_or_filter(query.price))
        for column, value in query.at_least.items():
            builder = builder.gte(column, value)

        builder = self._apply_sort(builder, query)
        return builder.range(query.offset, query.offset + query.limit - 1)

    async def query(self, query: StoreQuery) -> StoreResult:
        async with SupabaseClient() as client:
            try:
                result = self.build(client, query).execute()
            except Exception as e:
                logger.error(
                    "Property query failed",
                    offset=query.offset,
                    limit=query.limit,
                    error=str(e)
                )
                raise StoreUnavailable(f"Failed to query properties: {e}") from e

        rows = result.data or []
        return StoreResult(
            items=[Property.model_validate(row) for row in rows],
            total=result.count if result.count is not None else len(rows),
        )


def _field_value(prop: Property, column: str):
    value = getattr(prop, column)
    return getattr(value, "value", value)


def _matches(prop: Property, query: StoreQuery, published_only: bool) -> bool:
    if published_only and prop.status != PropertyStatus.ACTIVE:
        return False

    for column, expected in query.equals.items():
        if _field_value(prop, column) != expected:
            return False

    for column, needle in query.contains.items():
        haystack = _field_value(prop, column)
        if haystack is None or needle.lower() not in haystack.lower():
            return False

    for column, minimum in query.at_least.items():
        value = _field_value(prop, column)
        if value is None or value < minimum:
            return False

    if query.price is not None:
        low, high = query.price.min, query.price.max
        if not any(
            value is not None
            and (low is None or value >= low)
            and (high is None or value <= high)
            for value in (prop.price, prop.rent)
        ):
            return False

    return True


def _sorted(items: list[Property], sort: SortSpec) -> list[Property]:
    if sort.column == "price":
        def key_of(prop: Property):
            return prop.applicable_price
    else:
        def key_of(prop: Property):
            return _field_value(prop, sort.column)

    present = [p for p in items if key_of(p) is not None]
    missing = [p for p in items if key_of(p) is None]
    present.sort(key=key_of, reverse=sort.descending)
    return present + missing if sort.nulls_last else missing + present


class InMemoryPropertyStore(PropertyStore):
    """List-backed store for local development and tests."""

    def __init__(self, properties: Iterable[Property] = (), published_only: bool = False):
        self.properties: list[Property] = list(properties)
        self.published_only = published_only
        self.queries: list[StoreQuery] = []

    def add(self, prop: Property) -> None:
        self.properties.append(prop)

    async def query(self, query: StoreQuery) -> StoreResult:
        self.queries.append(query)
        matched = [p for p in self.properties if _matches(p, query, self.published_only)]
        ordered = _sorted(matched, query.sort)
        return StoreResult(
            items=ordered[query.offset:query.offset + query.limit],
            total=len(matched),
        )
