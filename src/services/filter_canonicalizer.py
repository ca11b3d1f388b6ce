"""Filter canonicalizer - merge route segments and query string into one ListingsFilters."""

import math
from functools import lru_cache, partial
from typing import Any, Callable, Mapping, Optional, Union

from src.models.filters import (
    DEFAULT_PAGE_SIZE,
    MAX_COUNT,
    MAX_PAGE,
    ListingsFilters,
    PropertyType,
    Purpose,
    RouteParams,
    SortOrder,
)
from src.services.slug_codec import ANY_CITY_SLUG, SlugKind, decode, decode_city
from src.utils.errors import ValidationIgnored
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

# Query-string key -> ListingsFilters field
QUERY_KEYS: dict[str, str] = {
    "purpose": "purpose",
    "type": "type",
    "city": "city",
    "neighborhood": "neighborhood",
    "minPrice": "min_price",
    "maxPrice": "max_price",
    "bedrooms": "bedrooms",
    "suites": "suites",
    "bathrooms": "bathrooms",
    "parkingSpots": "parking_spots",
    "sort": "sort",
    "page": "page",
}
FIELD_TO_QUERY_KEY: dict[str, str] = {field: key for key, field in QUERY_KEYS.items()}

# Sidebar selects where "0" stands for "any"
COUNTER_KEYS = ("bedrooms", "suites", "bathrooms", "parkingSpots")

QueryParams = Mapping[str, Any]


def parse_positive_number(field: str, raw: Any) -> float:
    """
    Parse a numeric filter value.

    Only finite numbers strictly greater than zero are accepted. "0" is the
    sidebar's "any" sentinel, so it is rejected along with empty and
    non-numeric input.
    """
    text = "" if raw is None else str(raw).strip()
    if not text:
        raise ValidationIgnored(field, raw, "empty")
    if "_" in text:
        raise ValidationIgnored(field, raw, "not a number")
    try:
        value = float(text)
    except ValueError:
        raise ValidationIgnored(field, raw, "not a number") from None
    if not math.isfinite(value) or value <= 0:
        raise ValidationIgnored(field, raw, "not a positive number")
    return value


def parse_positive_int(field: str, raw: Any, maximum: Optional[int] = None) -> int:
    """Like parse_positive_number, but integral and at most maximum."""
    value = parse_positive_number(field, raw)
    if not value.is_integer():
        raise ValidationIgnored(field, raw, "not an integer")
    if maximum is not None and value > maximum:
        raise ValidationIgnored(field, raw, f"greater than {maximum}")
    return int(value)


def parse_text(field: str, raw: Any) -> str:
    text = "" if raw is None else str(raw).strip()
    if not text:
        raise ValidationIgnored(field, raw, "empty")
    return text


def _enum_parser(enum_cls) -> Callable[[str, Any], Any]:
    def parse(field: str, raw: Any):
        try:
            return enum_cls(parse_text(field, raw))
        except ValueError:
            raise ValidationIgnored(field, raw, f"not a valid {enum_cls.__name__}") from None
    return parse


def parse_city(field: str, raw: Any) -> str:
    """Known cities get their canonical spelling; other names pass through."""
    text = parse_text(field, raw)
    return decode_city(text) or text


_PARSERS: dict[str, Callable[[str, Any], Any]] = {
    "purpose": _enum_parser(Purpose),
    "type": _enum_parser(PropertyType),
    "city": parse_city,
    "neighborhood": parse_text,
    "min_price": parse_positive_number,
    "max_price": parse_positive_number,
    "bedrooms": partial(parse_positive_int, maximum=MAX_COUNT),
    "suites": partial(parse_positive_int, maximum=MAX_COUNT),
    "bathrooms": partial(parse_positive_int, maximum=MAX_COUNT),
    "parking_spots": partial(parse_positive_int, maximum=MAX_COUNT),
    "sort": _enum_parser(SortOrder),
    "page": partial(parse_positive_int, maximum=MAX_PAGE),
}


def _first(value: Any) -> Any:
    """Multi-valued params keep the first value, like URLSearchParams.get."""
    if isinstance(value, (list, tuple)):
        return value[0] if value else None
    return value


def _freeze_query(query_params: Optional[QueryParams]) -> tuple[tuple[str, str], ...]:
    if not query_params:
        return ()
    frozen = []
    for key in QUERY_KEYS:
        if key in query_params:
            value = _first(query_params[key])
            if value is not None:
                frozen.append((key, str(value)))
    return tuple(frozen)


def _coerce_route(route_params: Union[RouteParams, Mapping[str, Any], None]) -> RouteParams:
    if route_params is None:
        return RouteParams()
    if isinstance(route_params, RouteParams):
        return route_params
    known = {k: route_params.get(k) for k in ("purpose", "city", "type", "bedrooms")}
    return RouteParams(**known)


def _from_query(query: dict[str, str], field: str) -> Any:
    key = FIELD_TO_QUERY_KEY[field]
    if key not in query:
        return None
    try:
        return _PARSERS[field](key, query[key])
    except ValidationIgnored as e:
        logger.debug(
            "Filter value ignored",
            field=e.field,
            raw_value=str(e.raw)[:100],
            reason=e.reason
        )
        return None


def _decode_route(route: RouteParams) -> dict[str, Any]:
    city_slug = route.city if route.city != ANY_CITY_SLUG else None
    decoded = {
        "purpose": decode(SlugKind.PURPOSE, route.purpose),
        "city": decode(SlugKind.CITY, city_slug),
        "type": decode(SlugKind.TYPE, route.type),
        "bedrooms": decode(SlugKind.BEDROOMS, route.bedrooms),
    }
    if decoded["bedrooms"] is not None and decoded["bedrooms"] > MAX_COUNT:
        decoded["bedrooms"] = None
    for key, segment in (("purpose", route.purpose), ("city", city_slug), ("type", route.type), ("bedrooms", route.bedrooms)):
        if segment and decoded[key] is None:
            logger.debug("Route segment ignored", field=key, raw_value=segment[:100])
    return decoded


@lru_cache(maxsize=256)
def _canonicalize(
    route: RouteParams,
    query_items: tuple[tuple[str, str], ...],
    explicit_purpose: Optional[Purpose],
    page_size: int,
) -> ListingsFilters:
    query = dict(query_items)
    from_route = _decode_route(route)

    values: dict[str, Any] = {}
    for field in QUERY_KEYS.values():
        route_value = from_route.get(field)
        values[field] = route_value if route_value is not None else _from_query(query, field)

    if explicit_purpose is not None:
        values["purpose"] = explicit_purpose

    # A zero lower bound is no constraint
    if values["bedrooms"] == 0:
        values["bedrooms"] = None

    values["sort"] = values["sort"] or SortOrder.RECENT
    values["page"] = values["page"] or 1

    return ListingsFilters(page_size=page_size, **values)


def canonicalize(
    route_params: Union[RouteParams, Mapping[str, Any], None],
    query_params: Optional[QueryParams],
    explicit_purpose: Union[Purpose, str, None] = None,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> ListingsFilters:
    """
    Resolve route segments and query parameters into canonical filters.

    Precedence per field: explicit purpose > decoded route segment > query
    string > default. Malformed values degrade to "no constraint"; this
    function never raises for bad input. Identical inputs return the same
    ListingsFilters instance.
    """
    purpose: Optional[Purpose] = None
    if explicit_purpose is not None:
        try:
            purpose = Purpose(explicit_purpose)
        except ValueError:
            logger.warning("Explicit purpose ignored", raw_value=str(explicit_purpose)[:100])

    if page_size < 1:
        logger.warning("Invalid page size, using default", page_size=page_size)
        page_size = DEFAULT_PAGE_SIZE

    return _canonicalize(
        _coerce_route(route_params),
        _freeze_query(query_params),
        purpose,
        page_size,
    )


def reset_page_on_change(
    previous: Optional[ListingsFilters],
    current: ListingsFilters,
) -> ListingsFilters:
    """
    Send the user back to page 1 when anything but the page changed.

    Sort changes count as a change. A page-only change keeps the requested
    page.
    """
    if previous is None or current.page == 1:
        return current
    if previous.model_dump(exclude={"page"}) == current.model_dump(exclude={"page"}):
        return current
    return current.model_copy(update={"page": 1})


def format_number(value: float) -> str:
    """Integral floats print without a decimal part: 1500.0 -> "1500"."""
    return str(int(value)) if float(value).is_integer() else repr(float(value))


def to_query_params(filters: ListingsFilters) -> dict[str, str]:
    """Serialize canonical filters back to the URL query contract."""
    params: dict[str, str] = {}
    for field, key in FIELD_TO_QUERY_KEY.items():
        value = getattr(filters, field)
        if value is None:
            continue
        if field == "sort":
            if value != SortOrder.RECENT:
                params[key] = value.value
        elif field == "page":
            if value > 1:
                params[key] = str(value)
        elif isinstance(value, (Purpose, PropertyType)):
            params[key] = value.value
        elif isinstance(value, (int, float)):
            params[key] = format_number(value)
        else:
            params[key] = value
    return params


def active_filter_count(query_params: Optional[QueryParams]) -> int:
    """Number of active sidebar filters (badge count); "0" selects are inactive."""
    count = 0
    for key, value in _freeze_query(query_params):
        if key in ("sort", "page") or not value.strip():
            continue
        if key in COUNTER_KEYS and value.strip() == "0":
            continue
        count += 1
    return count


def clear_cache() -> None:
    """Drop memoized results."""
    _canonicalize.cache_clear()
