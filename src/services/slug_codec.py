"""Slug codec - map URL tokens to purpose, property type, city and bedroom count."""

import re
import unicodedata
from enum import Enum
from typing import Optional, Union

from src.models.filters import Purpose, PropertyType, RouteParams
from src.utils.cities import DDD77_CITIES


class SlugKind(str, Enum):
    """Kinds of path tokens."""
    PURPOSE = "purpose"
    TYPE = "type"
    CITY = "city"
    BEDROOMS = "bedrooms"


# Placeholder city segment when a purpose is given without a city
ANY_CITY_SLUG = "todos"
LISTINGS_ROOT = "/imoveis"

PURPOSE_TO_SLUG: dict[Purpose, str] = {
    Purpose.RENTAL: "aluguel",
    Purpose.SALE: "venda",
    Purpose.NEW_DEVELOPMENT: "lancamentos",
}
SLUG_TO_PURPOSE: dict[str, Purpose] = {slug: purpose for purpose, slug in PURPOSE_TO_SLUG.items()}

TYPE_TO_SLUG: dict[PropertyType, str] = {
    PropertyType.HOUSE: "casas",
    PropertyType.APARTMENT: "apartamentos",
    PropertyType.BUILDING: "predios",
    PropertyType.STORE: "lojas",
    PropertyType.OFFICE: "escritorios",
    PropertyType.LAND: "terrenos",
    PropertyType.RURAL: "rurais",
}
SLUG_TO_TYPE: dict[str, PropertyType] = {slug: ptype for ptype, slug in TYPE_TO_SLUG.items()}

BEDROOMS_PATTERN = re.compile(r"^(\d+)quartos?$")


def strip_accents(text: str) -> str:
    """Remove combining diacritics ("Vitória" -> "Vitoria")."""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def slugify(text: str) -> str:
    """
    Convert text to a URL slug.

    "Vitória da Conquista" -> "vitoria-da-conquista"
    """
    text = strip_accents(text.lower())
    text = re.sub(r"[^a-z0-9]+", "-", text)
    return text.strip("-")


def unslugify(slug: str) -> str:
    """Hyphens back to spaces; accents need a city lookup."""
    return slug.replace("-", " ")


def _normalize_city(text: str) -> str:
    return " ".join(strip_accents(unslugify(text)).lower().split())


_CITY_INDEX: dict[str, str] = {_normalize_city(city): city for city in DDD77_CITIES}


def decode_city(slug: str) -> Optional[str]:
    """Resolve a city slug to its canonical name, or None if unknown."""
    if not slug:
        return None
    return _CITY_INDEX.get(_normalize_city(slug))


def decode_bedrooms(slug: str) -> Optional[int]:
    """'3quartos' / '1quarto' -> 3 / 1."""
    match = BEDROOMS_PATTERN.match(slug or "")
    return int(match.group(1)) if match else None


def decode(kind: Union[SlugKind, str], slug: Optional[str]) -> Optional[Union[Purpose, PropertyType, str, int]]:
    """
    Decode a path token into its domain value.

    Unknown tokens yield None so callers fall back to "no constraint".
    """
    if not slug:
        return None
    kind = SlugKind(kind)
    if kind is SlugKind.PURPOSE:
        return SLUG_TO_PURPOSE.get(slug)
    if kind is SlugKind.TYPE:
        return SLUG_TO_TYPE.get(slug)
    if kind is SlugKind.CITY:
        return decode_city(slug)
    return decode_bedrooms(slug)


def encode(kind: Union[SlugKind, str], value: Union[Purpose, PropertyType, str, int]) -> str:
    """Encode a domain value as its path token."""
    kind = SlugKind(kind)
    if kind is SlugKind.PURPOSE:
        return PURPOSE_TO_SLUG[Purpose(value)]
    if kind is SlugKind.TYPE:
        return TYPE_TO_SLUG[PropertyType(value)]
    if kind is SlugKind.CITY:
        return slugify(str(value))
    return f"{int(value)}quartos"


def build_listing_path(
    purpose: Optional[Purpose] = None,
    city: Optional[str] = None,
    type: Optional[PropertyType] = None,
    bedrooms: Optional[int] = None,
) -> str:
    """
    Build the SEO listing path.

    Examples:
        build_listing_path(Purpose.RENTAL, "Barreiras", PropertyType.HOUSE, 3)
            -> "/aluguel/barreiras/casas/3quartos"
        build_listing_path(Purpose.SALE) -> "/venda/todos"
        build_listing_path() -> "/imoveis"
    """
    parts: list[str] = []

    if purpose:
        parts.append(encode(SlugKind.PURPOSE, purpose))

    if city:
        parts.append(encode(SlugKind.CITY, city))
    elif purpose:
        parts.append(ANY_CITY_SLUG)

    if type:
        parts.append(encode(SlugKind.TYPE, type))

    if bedrooms and bedrooms > 0:
        parts.append(encode(SlugKind.BEDROOMS, bedrooms))

    return "/" + "/".join(parts) if parts else LISTINGS_ROOT


def parse_listing_path(path: str) -> RouteParams:
    """
    Split a request path into raw route segments.

    The bedrooms segment is only recognised in the fourth position and only
    when it looks like "<N>quartos"; anything else leaves it unset.
    """
    segments = [seg for seg in (path or "").split("?", 1)[0].split("/") if seg]
    if segments and segments[0] == LISTINGS_ROOT.strip("/"):
        segments = segments[1:]

    values: dict[str, Optional[str]] = {"purpose": None, "city": None, "type": None, "bedrooms": None}
    for key, segment in zip(("purpose", "city", "type", "bedrooms"), segments):
        values[key] = segment.lower()

    if values["bedrooms"] and not BEDROOMS_PATTERN.match(values["bedrooms"]):
        values["bedrooms"] = None

    return RouteParams(**values)
