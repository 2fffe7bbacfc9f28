"""Xposure MLS Puerto Rico: listings imported into the application's own store.

Rows are read through the ``ListingRepository`` protocol so any database
can back it. The client joins only searches aimed at Puerto Rico.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
import html
import logging
import re
from typing import Any, Protocol, runtime_checkable
import unicodedata

from reai.properties.base import SEARCH_ERRORS, failed_response
from reai.properties.models import (
    Address,
    Agent,
    ConnectionCheck,
    Coordinates,
    ListingStatus,
    NormalizedProperty,
    PropertyDetails,
    PropertySearchParams,
    PropertySearchResponse,
)

logger = logging.getLogger(__name__)

XPOSURE_SOURCE = "xposure"

PUERTO_RICO_CITIES = frozenset({
    "san juan", "aguadilla", "rincon", "rincón", "dorado", "guaynabo", "mayaguez",
    "mayagüez", "ponce", "carolina", "bayamon", "bayamón", "caguas", "arecibo",
    "fajardo", "humacao", "isabela", "cabo rojo", "vega baja", "vega alta", "manati",
    "manatí", "toa baja", "toa alta", "trujillo alto", "guayama", "yauco", "coamo",
    "hatillo", "aguada", "moca", "añasco", "anasco", "isla verde", "condado",
    "viejo san juan", "santurce", "luquillo", "rio grande", "río grande", "culebra",
    "vieques", "loiza", "loíza", "canóvanas", "canovanas", "gurabo", "juncos",
    "las piedras",
})  # fmt: skip

_STATUS_MAP: dict[str, ListingStatus] = {
    "active": "active",
    "activo": "active",
    "pending": "pending",
    "pendiente": "pending",
    "sold": "sold",
    "vendido": "sold",
    "off_market": "off_market",
}

_SPANISH_TYPES = {
    "residential": "Residencial",
    "apartment": "Apartamento",
    "house": "Casa",
    "condo": "Condominio",
    "land": "Terreno",
    "commercial": "Comercial",
    "townhouse": "Townhouse",
}

_ICON_TYPES = ("apartment", "house", "condo", "land", "commercial")

_NUMBER_RE = re.compile(r"[^\d.]")


def strip_accents(text: str) -> str:
    """Lowercase *text* and drop diacritics."""
    decomposed = unicodedata.normalize("NFD", text.lower())
    return "".join(c for c in decomposed if not unicodedata.combining(c)).strip()


_NORMALIZED_PR_CITIES = frozenset(strip_accents(c) for c in PUERTO_RICO_CITIES)


def property_type_to_spanish(value: str | None) -> str:
    """Spanish display name for a property type."""
    return _SPANISH_TYPES.get((value or "").lower(), "Propiedad")


def is_puerto_rico_search(params: PropertySearchParams) -> bool:
    """Whether a search targets Puerto Rico (or has no location at all)."""
    state = (params.state or "").strip().lower()
    city = (params.city or "").strip().lower()
    if state in ("pr", "puerto rico"):
        return True
    if city:
        if city in PUERTO_RICO_CITIES:
            return True
        normalized = strip_accents(city)
        if any(pr_city in normalized for pr_city in _NORMALIZED_PR_CITIES):
            return True
    return not state and not city and not params.zip_code


def city_variations(city: str) -> list[str]:
    """Spellings of *city* with and without accents, original first."""
    normalized = strip_accents(city)
    variations = [city]
    for known in sorted(PUERTO_RICO_CITIES):
        if strip_accents(known) == normalized and known not in variations:
            variations.append(known)
    return variations


@dataclass(frozen=True)
class ListingQuery:
    """Filters for reading imported listings."""

    source: str = XPOSURE_SOURCE
    cities: tuple[str, ...] = ()
    state: str | None = None
    zip_code: str | None = None
    min_price: float | None = None
    max_price: float | None = None
    min_bedrooms: int | None = None
    min_bathrooms: float | None = None
    min_square_feet: int | None = None
    max_square_feet: int | None = None
    property_type: str | None = None
    status: str | None = None
    sort_by_price: bool = False
    ascending: bool = False
    limit: int = 20
    offset: int = 0

    @classmethod
    def from_params(cls, params: PropertySearchParams) -> ListingQuery:
        """Translate search params; city matches any accent variation."""
        return cls(
            cities=tuple(city_variations(params.city)) if params.city else (),
            state=params.state,
            zip_code=params.zip_code,
            min_price=params.min_price,
            max_price=params.max_price,
            min_bedrooms=params.bedrooms,
            min_bathrooms=params.bathrooms,
            min_square_feet=params.min_square_feet,
            max_square_feet=params.max_square_feet,
            property_type=params.property_type,
            status=params.status,
            sort_by_price=params.sort_by == "price",
            ascending=params.sort_order == "asc",
            limit=params.limit,
            offset=params.offset,
        )


@runtime_checkable
class ListingRepository(Protocol):
    """Read access to imported listing rows."""

    async def query_listings(self, query: ListingQuery) -> tuple[list[dict[str, Any]], int]:
        """Return one page of matching rows and the total match count.

        Rows are ordered featured-first, then by price (when requested) or
        newest ``created_at``. City and state match case-insensitive substrings.
        """
        ...

    async def count_listings(self, source: str) -> int:
        """Count rows imported from *source*."""
        ...


@dataclass
class InMemoryListingRepository:
    """Listing repository over a list of rows, for tests and demos."""

    rows: list[dict[str, Any]] = field(default_factory=list)

    def _matches(self, row: dict[str, Any], q: ListingQuery) -> bool:
        def at_least(key: str, bound: float | None) -> bool:
            return not bound or (row.get(key) or 0) >= bound

        def at_most(key: str, bound: float | None) -> bool:
            return not bound or (row.get(key) or 0) <= bound

        city = str(row.get("city") or "").lower()
        return (
            row.get("idx_source") == q.source
            and (not q.cities or any(c.lower() in city for c in q.cities))
            and (not q.state or q.state.lower() in str(row.get("state") or "").lower())
            and (not q.zip_code or row.get("zip_code") == q.zip_code)
            and at_least("price", q.min_price)
            and at_most("price", q.max_price)
            and at_least("bedrooms", q.min_bedrooms)
            and at_least("bathrooms", q.min_bathrooms)
            and at_least("square_feet", q.min_square_feet)
            and at_most("square_feet", q.max_square_feet)
            and (not q.property_type or row.get("property_type") == q.property_type)
            and (not q.status or row.get("status") == q.status)
        )

    async def query_listings(self, query: ListingQuery) -> tuple[list[dict[str, Any]], int]:
        """Filter, order and page the rows."""
        matched = [r for r in self.rows if self._matches(r, query)]
        if query.sort_by_price:
            matched.sort(key=lambda r: r.get("price") or 0, reverse=not query.ascending)
        else:
            matched.sort(key=lambda r: r.get("created_at") or "", reverse=True)
        matched.sort(key=lambda r: not r.get("featured", False))
        return matched[query.offset : query.offset + query.limit], len(matched)

    async def count_listings(self, source: str) -> int:
        """Count rows from *source*."""
        return sum(1 for r in self.rows if r.get("idx_source") == source)


class XposureClient:
    """Puerto Rico MLS listings from the local listing store."""

    provider = "xposure"

    def __init__(self, repository: ListingRepository) -> None:
        """Read listings through *repository*."""
        self.repository = repository

    async def search_normalized(self, params: PropertySearchParams) -> PropertySearchResponse:
        """Search imported listings; non-Puerto Rico searches get an empty success."""
        if not is_puerto_rico_search(params):
            logger.debug("Xposure: skipping search outside Puerto Rico")
            return PropertySearchResponse(
                success=True, limit=params.limit, offset=params.offset, provider="xposure"
            )

        query = ListingQuery.from_params(params)
        try:
            rows, count = await self.repository.query_listings(query)
            properties = [self.transform_row(r) for r in rows]
        except asyncio.CancelledError:
            raise
        except SEARCH_ERRORS as exc:
            logger.warning("Xposure search failed: %s", exc)
            return failed_response("xposure", params, str(exc))

        logger.debug(
            "Xposure: %d properties (total %d) for city %s",
            len(properties),
            count,
            params.city or "any",
        )
        return PropertySearchResponse(
            success=True,
            properties=properties,
            total=count or len(properties),
            limit=params.limit,
            offset=params.offset,
            provider="xposure",
        )

    async def test_connection(self) -> ConnectionCheck:
        """Count imported Xposure rows."""
        try:
            count = await self.repository.count_listings(XPOSURE_SOURCE)
        except asyncio.CancelledError:
            raise
        except SEARCH_ERRORS as exc:
            return ConnectionCheck(success=False, message=f"Error de conexión: {exc}")
        return ConnectionCheck(
            success=True,
            message=f"Conexión exitosa. {count} propiedades de Xposure en la base de datos.",
        )

    @staticmethod
    def transform_row(row: dict[str, Any]) -> NormalizedProperty:
        """Map a stored listing row onto ``NormalizedProperty``."""
        listing_text = "Alquiler" if row.get("listing_type") == "rent" else "Venta"
        city = row.get("city") or ""
        title = row.get("title") or (
            f"{property_type_to_spanish(row.get('property_type'))} en {listing_text} - {city}"
        )
        lat, lng = row.get("latitude"), row.get("longitude")
        return NormalizedProperty(
            id=f"xposure-{row['mls_id']}",
            source_provider="xposure",
            external_id=str(row["mls_id"]),
            mls_number=str(row["mls_id"]),
            title=title,
            description=(
                f"Propiedad en {row.get('neighborhood') or city}, {row.get('state', '')}. "
                f"{row.get('bedrooms', 0)} habitaciones, {row.get('bathrooms', 0)} baños."
            ),
            price=row.get("price") or 0,
            address=Address(
                street=row.get("address") or "",
                city=city,
                state=row.get("state") or "",
                zip_code=row.get("zip_code") or "",
                country=row.get("country") or "PR",
            ),
            coordinates=Coordinates(latitude=lat, longitude=lng) if lat and lng else None,
            details=PropertyDetails(
                property_type=row.get("property_type") or "residential",
                bedrooms=row.get("bedrooms") or 0,
                bathrooms=row.get("bathrooms") or 0,
                square_feet=row.get("square_feet") or 0,
                lot_size=row.get("lot_size") or None,
                year_built=row.get("year_built") or None,
            ),
            features=list(row.get("features") or []),
            amenities=list(row.get("amenities") or []),
            images=list(row.get("images") or []),
            agent=(
                Agent(
                    name=row["agent_name"],
                    email=row.get("agent_email") or None,
                    phone=row.get("agent_phone") or None,
                    company=row.get("agent_company") or None,
                )
                if row.get("agent_name")
                else None
            ),
            list_date=row.get("created_at") or "",
            modified_date=row.get("updated_at") or "",
            status=_STATUS_MAP.get(str(row.get("status") or "").lower(), "active"),
        )


def _parse_number(value: Any) -> float:
    if isinstance(value, (int, float)):
        return float(value)
    cleaned = _NUMBER_RE.sub("", str(value or ""))
    try:
        return float(cleaned)
    except ValueError:
        return 0.0


def _property_type_from_icon(icon: str) -> str:
    return next((t for t in _ICON_TYPES if t in icon), "residential")


def transform_xposure_export(item: dict[str, Any]) -> NormalizedProperty:
    """Map a raw Xposure export record (as scraped) onto ``NormalizedProperty``.

    Prices arrive as strings like ``"USD $150,000.00"`` and names carry HTML
    entities.
    """
    is_rent = "alquiler" in (item.get("title") or "").lower() or bool(
        item.get("price_current_rent")
    )
    if is_rent:
        price = _parse_number(item.get("price_current_rent"))
    else:
        price = _parse_number(item.get("price_current")) or _parse_number(item.get("price_sold"))

    city = html.unescape(item.get("district") or "Puerto Rico")
    neighborhood = html.unescape(item.get("map_area") or "")
    subdivision = html.unescape(item.get("subdivision") or "")
    property_type = _property_type_from_icon(item.get("property_icon") or "")
    street = (item.get("address") or "").strip() or (
        f"{item.get('stName', '')} {item.get('stNum', '')}".strip()
    )
    now = datetime.now(timezone.utc).isoformat()
    lat, lng = item.get("lat"), item.get("lng")
    parking = item.get("parking_spaces")
    description = f"Propiedad en {neighborhood or city}, Puerto Rico."
    if subdivision:
        description += f" Urbanización: {subdivision}"

    return NormalizedProperty(
        id=f"xposure-{item['id']}",
        source_provider="xposure",
        external_id=str(item["id"]),
        mls_number=item.get("publicKey") or item.get("uid"),
        title=f"{property_type_to_spanish(property_type)} en {city}",
        description=description,
        price=price,
        address=Address(street=street, city=city, state="PR", zip_code="", country="PR"),
        coordinates=Coordinates(latitude=lat, longitude=lng) if lat and lng else None,
        details=PropertyDetails(
            property_type=property_type,
            bedrooms=int(_parse_number(item.get("bedrooms"))),
            bathrooms=_parse_number(item.get("bathrooms")),
            square_feet=int(_parse_number(item.get("sqft_total"))),
            lot_size=_parse_number(item.get("lot_sqft")) or None,
            year_built=int(_parse_number(item.get("year_built"))) or None,
        ),
        features=[f"{parking} estacionamientos"] if parking else [],
        images=[item["thumbnailPhotoURL"]] if item.get("thumbnailPhotoURL") else [],
        list_date=now,
        modified_date=now,
        status=_STATUS_MAP.get(str(item.get("status") or "").lower(), "active"),
    )
