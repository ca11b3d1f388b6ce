"""Listing search filter models."""

import os
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


DEFAULT_PAGE_SIZE = int(os.environ.get("LISTINGS_PAGE_SIZE", "12"))

# Upper bounds that keep offsets and counts within database integer range
MAX_PAGE = 10_000
MAX_COUNT = 50


class Purpose(str, Enum):
    """Transaction type of a listing."""
    SALE = "venda"
    RENTAL = "aluguel"
    NEW_DEVELOPMENT = "lancamento"


class PropertyType(str, Enum):
    """Property categories."""
    HOUSE = "casa"
    APARTMENT = "apartamento"
    BUILDING = "predio"
    STORE = "loja"
    OFFICE = "escritorio"
    LAND = "terreno"
    RURAL = "rural"


class SortOrder(str, Enum):
    """Result ordering."""
    RECENT = "recent"
    PRICE_ASC = "price_asc"
    PRICE_DESC = "price_desc"


class ListingsFilters(BaseModel):
    """Canonical listing search request.

    Every optional field is either None ("no constraint") or satisfies its
    range; a zero bound is never stored.
    """
    model_config = ConfigDict(frozen=True, use_enum_values=False)

    purpose: Optional[Purpose] = Field(None, description="venda, aluguel or lancamento")
    type: Optional[PropertyType] = Field(None, description="Property category")
    city: Optional[str] = Field(None, min_length=1, description="City name (exact match)")
    neighborhood: Optional[str] = Field(None, min_length=1, description="Neighborhood (substring match)")
    min_price: Optional[float] = Field(None, gt=0, description="Lower bound on the applicable price")
    max_price: Optional[float] = Field(None, gt=0, description="Upper bound on the applicable price")
    bedrooms: Optional[int] = Field(None, ge=0, le=MAX_COUNT, description="Minimum bedrooms")
    bathrooms: Optional[int] = Field(None, ge=0, le=MAX_COUNT, description="Minimum bathrooms")
    suites: Optional[int] = Field(None, ge=0, le=MAX_COUNT, description="Minimum suites")
    parking_spots: Optional[int] = Field(None, ge=0, le=MAX_COUNT, description="Minimum parking spots")
    sort: SortOrder = Field(default=SortOrder.RECENT, description="Result ordering")
    page: int = Field(default=1, ge=1, le=MAX_PAGE, description="1-based page number")
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, description="Items per page")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class RouteParams(BaseModel):
    """Raw path segments of /:purpose?/:city?/:type?/:bedrooms?."""
    model_config = ConfigDict(frozen=True)

    purpose: Optional[str] = None
    city: Optional[str] = None
    type: Optional[str] = None
    bedrooms: Optional[str] = None
