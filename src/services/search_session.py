"""Search session - keep query string, canonical filters and results consistent."""

from enum import Enum
from typing import Any, Callable, Mapping, Optional, Union
from urllib.parse import urlencode

from src.models.filters import DEFAULT_PAGE_SIZE, ListingsFilters, Purpose, RouteParams, SortOrder
from src.models.search import PagedResult
from src.services.filter_canonicalizer import (
    QUERY_KEYS,
    active_filter_count,
    canonicalize,
    reset_page_on_change,
)
from src.services.property_store import PropertyStore
from src.services.query_executor import execute
from src.services.slug_codec import LISTINGS_ROOT
from src.utils.errors import StoreUnavailable
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

MANAGED_KEYS: tuple[str, ...] = tuple(QUERY_KEYS)
ERROR_BANNER = "Erro ao carregar listagens."


class SearchStatus(str, Enum):
    """Result lifecycle."""
    IDLE = "idle"
    PENDING = "pending"
    ERROR = "error"


def _as_route(route_params: Union[RouteParams, Mapping[str, Any], None]) -> RouteParams:
    if route_params is None:
        return RouteParams()
    if isinstance(route_params, RouteParams):
        return route_params
    return RouteParams(**{k: route_params.get(k) for k in ("purpose", "city", "type", "bedrooms")})


def _as_query(query_params: Optional[Mapping[str, Any]]) -> dict[str, str]:
    query: dict[str, str] = {}
    for key, value in (query_params or {}).items():
        if isinstance(value, (list, tuple)):
            value = value[0] if value else None
        if value is not None:
            query[key] = str(value)
    return query


class ListingsSearchSession:
    """
    One listings page: the URL is the source of truth, controls are views over it.

    Setters rewrite the query string and navigate; refresh() canonicalizes
    and fetches. Responses from superseded requests are discarded, so a slow
    earlier request never overwrites a newer result.
    """

    def __init__(
        self,
        route_params: Union[RouteParams, Mapping[str, Any], None] = None,
        query_params: Optional[Mapping[str, Any]] = None,
        store: Optional[PropertyStore] = None,
        navigate: Optional[Callable[[str], None]] = None,
        explicit_purpose: Optional[Purpose] = None,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self.route_params = _as_route(route_params)
        self.query = _as_query(query_params)
        self.store = store
        self.explicit_purpose = explicit_purpose
        self.page_size = page_size
        self._navigate = navigate

        self.status = SearchStatus.IDLE
        self.error_message: Optional[str] = None
        self.result: Optional[PagedResult] = None
        self.applied_filters: Optional[ListingsFilters] = None

        self._request_seq = 0
        self._filters: Optional[ListingsFilters] = None
        self._recompute()

    # URL

    @property
    def path(self) -> str:
        route = self.route_params
        segments = [s for s in (route.purpose, route.city, route.type, route.bedrooms) if s]
        return "/" + "/".join(segments) if segments else LISTINGS_ROOT

    @property
    def url(self) -> str:
        if not self.query:
            return self.path
        return f"{self.path}?{urlencode(self.query)}"

    def _recompute(self) -> None:
        current = canonicalize(self.route_params, self.query, self.explicit_purpose, self.page_size)
        adjusted = reset_page_on_change(self._filters, current)
        if adjusted is not current:
            self.query["page"] = "1"
            adjusted = canonicalize(self.route_params, self.query, self.explicit_purpose, self.page_size)
        self._filters = adjusted

    def _commit(self) -> None:
        self._recompute()
        logger.debug("Search URL updated", url=self.url)
        if self._navigate is not None:
            self._navigate(self.url)

    # Display values

    @property
    def filters(self) -> ListingsFilters:
        return self._filters

    @property
    def values(self) -> dict[str, str]:
        """Raw control values; "" when unset, sort defaults to recent."""
        values = {key: self.query.get(key, "") for key in MANAGED_KEYS if key not in ("sort", "page")}
        values["sort"] = self.query.get("sort") or SortOrder.RECENT.value
        return values

    @property
    def active_filters(self) -> int:
        return active_filter_count(self.query)

    @property
    def page(self) -> int:
        return self._filters.page

    @property
    def total_pages(self) -> int:
        return self.result.total_pages if self.result else 1

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    # Setters

    def set_param(self, key: str, value: Any) -> None:
        """
        Write or delete one query parameter.

        Any change other than the page itself sends the user back to page 1.
        """
        if key not in MANAGED_KEYS:
            raise ValueError(f"Unknown filter parameter: {key}")

        text = "" if value is None else str(value)
        if text:
            self.query[key] = text
        else:
            self.query.pop(key, None)

        if key != "page":
            self.query["page"] = "1"

        self._commit()

    def set_sort(self, sort: Union[SortOrder, str]) -> None:
        self.set_param("sort", SortOrder(sort).value)

    def go_page(self, page: int) -> None:
        self.set_param("page", max(1, int(page)))

    def clear_all(self) -> None:
        """Remove every managed parameter in a single update."""
        for key in MANAGED_KEYS:
            self.query.pop(key, None)
        self._commit()

    def navigate_route(
        self,
        route_params: Union[RouteParams, Mapping[str, Any], None],
        query_params: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """Route change: new path segments, optionally a new query string."""
        self.route_params = _as_route(route_params)
        if query_params is not None:
            self.query = _as_query(query_params)
        self._commit()

    # Fetching

    async def refresh(self) -> Optional[PagedResult]:
        """
        Fetch results for the current filters.

        Returns the applied result, or None when the request failed or was
        superseded by a newer one. Failures keep the previous result and set
        status to ERROR until the next user-triggered change.
        """
        filters = self._filters
        if self.status is SearchStatus.IDLE and filters == self.applied_filters:
            return self.result

        self._request_seq += 1
        request_seq = self._request_seq
        self.status = SearchStatus.PENDING

        try:
            result = await execute(filters, store=self.store)
        except StoreUnavailable as e:
            if request_seq != self._request_seq:
                logger.debug(
                    "Discarding superseded failure",
                    request_seq=request_seq,
                    latest_seq=self._request_seq
                )
                return None
            self.status = SearchStatus.ERROR
            self.error_message = ERROR_BANNER
            logger.warning("Listings refresh failed", request_seq=request_seq, error=str(e))
            return None

        if request_seq != self._request_seq:
            logger.debug(
                "Discarding superseded response",
                request_seq=request_seq,
                latest_seq=self._request_seq
            )
            return None

        self.result = result
        self.applied_filters = filters
        self.status = SearchStatus.IDLE
        self.error_message = None
        return result

    async def change(self, key: str, value: Any) -> Optional[PagedResult]:
        """set_param followed by refresh."""
        self.set_param(key, value)
        return await self.refresh()
