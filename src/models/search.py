"""Query contract between the search engine and the property store."""

import math
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, computed_field

from src.models.property import Property


class PriceRange(BaseModel):
    """Bounds on the applicable price: satisfied by price OR rent."""
    model_config = ConfigDict(frozen=True)

    min: Optional[float] = None
    max: Optional[float] = None


class SortSpec(BaseModel):
    """Ordering request. Column "price" means the applicable price field."""
    model_config = ConfigDict(frozen=True)

    column: str = Field(..., description="created_at or price")
    descending: bool = False
    nulls_last: bool = True


class StoreQuery(BaseModel):
    """A single windowed store query."""
    model_config = ConfigDict(frozen=True)

    equals: dict[str, str] = Field(default_factory=dict)
    contains: dict[str, str] = Field(default_factory=dict)
    at_least: dict[str, int] = Field(default_factory=dict)
    price: Optional[PriceRange] = None
    sort: SortSpec
    offset: int = Field(default=0, ge=0)
    limit: int = Field(..., ge=1)


class StoreResult(BaseModel):
    """Window of items plus exact total count."""
    items: list[Property] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)


def compute_total_pages(total: int, page_size: int) -> int:
    """max(1, ceil(total / page_size))."""
    return max(1, math.ceil(total / page_size))


class PagedResult(BaseModel):
    """Page of listings with pagination metadata."""
    items: list[Property] = Field(default_factory=list)
    total: int = Field(default=0, ge=0)
    page: int = Field(default=1, ge=1)
    page_size: int = Field(..., ge=1)

    @computed_field
    @property
    def total_pages(self) -> int:
        return compute_total_pages(self.total, self.page_size)
