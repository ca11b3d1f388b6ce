"""Property read models."""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from src.models.filters import Purpose, PropertyType


class PropertyStatus(str, Enum):
    """Publication status of a listing."""
    DRAFT = "rascunho"
    ACTIVE = "ativo"
    INACTIVE = "inativo"
    SOLD = "vendido"
    RENTED = "alugado"


class PropertyPhoto(BaseModel):
    """Photo reference stored in property_photos."""
    id: Optional[str] = None
    url: str = Field(..., description="Public URL")
    storage_path: Optional[str] = Field(None, description="Path inside the photos bucket")
    sort_order: int = Field(default=0, description="Display position")


class Property(BaseModel):
    """Real estate listing as returned by the property store."""
    id: str = Field(..., description="Property ID (uuid)")
    slug: Optional[str] = None
    title: str = Field(default="", description="Listing title")
    purpose: Purpose
    type: PropertyType
    status: PropertyStatus = Field(default=PropertyStatus.DRAFT)
    state: str = Field(default="BA", description="State (UF)")
    city: str
    neighborhood: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    suites: Optional[int] = None
    parking_spots: Optional[int] = None
    area_m2: Optional[float] = None
    price: Optional[float] = Field(None, description="Sale price (venda / lancamento)")
    rent: Optional[float] = Field(None, description="Monthly rent (aluguel)")
    created_at: str
    published_at: Optional[str] = None
    property_photos: list[PropertyPhoto] = Field(default_factory=list)

    @property
    def applicable_price(self) -> Optional[float]:
        """rent for rentals, price otherwise."""
        if self.purpose == Purpose.RENTAL:
            return self.rent
        return self.price
