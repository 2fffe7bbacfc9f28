"""Realtor.com client via the RapidAPI ``property_list`` endpoint."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import logging
import re
from typing import TYPE_CHECKING, Any, Literal

from reai.errors import ReaiError
from reai.properties.base import SEARCH_ERRORS, failed_response, send_json
from reai.properties.models import (
    Address,
    Agent,
    ConnectionCheck,
    Coordinates,
    NormalizedProperty,
    PropertyDetails,
    PropertySearchResponse,
)

if TYPE_CHECKING:
    import httpx

    from reai.properties.models import ListingStatus, PropertySearchParams

logger = logging.getLogger(__name__)

DEFAULT_API_HOST = "realtor-data1.p.rapidapi.com"

STATE_CODE_MAP: dict[str, str] = {
    "alabama": "AL", "alaska": "AK", "arizona": "AZ", "arkansas": "AR",
    "california": "CA", "colorado": "CO", "connecticut": "CT", "delaware": "DE",
    "florida": "FL", "georgia": "GA", "hawaii": "HI", "idaho": "ID",
    "illinois": "IL", "indiana": "IN", "iowa": "IA", "kansas": "KS",
    "kentucky": "KY", "louisiana": "LA", "maine": "ME", "maryland": "MD",
    "massachusetts": "MA", "michigan": "MI", "minnesota": "MN", "mississippi": "MS",
    "missouri": "MO", "montana": "MT", "nebraska": "NE", "nevada": "NV",
    "new hampshire": "NH", "new jersey": "NJ", "new mexico": "NM", "new york": "NY",
    "north carolina": "NC", "north dakota": "ND", "ohio": "OH", "oklahoma": "OK",
    "oregon": "OR", "pennsylvania": "PA", "rhode island": "RI", "south carolina": "SC",
    "south dakota": "SD", "tennessee": "TN", "texas": "TX", "utah": "UT",
    "vermont": "VT", "virginia": "VA", "washington": "WA", "west virginia": "WV",
    "wisconsin": "WI", "wyoming": "WY", "district of columbia": "DC",
}  # fmt: skip
_STATE_CODES = frozenset(STATE_CODE_MAP.values())

_ZIP_RE = re.compile(r"^\d{5}(-\d{4})?$")

_TYPE_TO_API = {
    "house": "single_family",
    "single_family": "single_family",
    "condo": "condo",
    "condos": "condo",
    "townhouse": "townhomes",
    "townhomes": "townhomes",
    "apartment": "apartment",
    "multi_family": "multi_family",
    "land": "land",
    "commercial": "commercial",
    "mobile": "mobile",
    "coop": "coop",
}

_TYPE_LABELS = {
    "single_family": "Single Family Home",
    "condo": "Condo",
    "condos": "Condo",
    "coop": "Co-op",
    "co_op": "Co-op",
    "townhomes": "Townhouse",
    "townhouse": "Townhouse",
    "apartment": "Apartment",
    "multi_family": "Multi-Family",
    "land": "Land",
    "mobile": "Mobile Home",
    "commercial": "Commercial",
}

_STATUS_MAP: dict[str, ListingStatus] = {
    "for_sale": "active",
    "ready_to_build": "active",
    "pending": "pending",
    "sold": "sold",
    "off_market": "off_market",
}

_SORT_FIELDS = {"price": "list_price", "squareFeet": "sqft"}

_FLAG_FEATURES = (
    ("is_new_listing", "New Listing"),
    ("is_new_construction", "New Construction"),
    ("is_foreclosure", "Foreclosure"),
    ("is_price_reduced", "Price Reduced"),
)


def is_state(value: str) -> bool:
    """Whether *value* is a US state name or two-letter code."""
    normalized = value.strip().lower()
    return normalized in STATE_CODE_MAP or normalized.upper() in _STATE_CODES


def normalize_state_code(value: str) -> str:
    """Return the two-letter code for a state name or code."""
    normalized = value.strip().lower()
    if len(normalized) == 2 and normalized.upper() in _STATE_CODES:
        return normalized.upper()
    return STATE_CODE_MAP.get(normalized, value.strip().upper())


def is_zip_code(value: str) -> bool:
    """Whether *value* looks like a US ZIP or ZIP+4."""
    return bool(_ZIP_RE.match(value.strip()))


def parse_location(
    city: str | None = None, state: str | None = None, location: str | None = None
) -> dict[str, str]:
    """Sort free-form location inputs into ``state_code``/``city``/``postal_code``.

    Callers often put a state in the city field or a ZIP anywhere, so each
    value is classified rather than trusted.
    """
    result: dict[str, str] = {}
    if state:
        if is_state(state):
            result["state_code"] = normalize_state_code(state)
        else:
            result["city"] = state
    if city:
        if is_state(city):
            result["state_code"] = normalize_state_code(city)
        elif is_zip_code(city):
            result["postal_code"] = city.strip()
        else:
            result["city"] = city
    if location:
        loc = location.strip()
        if is_zip_code(loc):
            result["postal_code"] = loc
        elif is_state(loc):
            result["state_code"] = normalize_state_code(loc)
        else:
            result.setdefault("city", loc)
    return result


def map_property_type(value: str) -> str:
    """Translate a shared property type into the API's vocabulary."""
    return _TYPE_TO_API.get(value.lower(), value)


def format_property_type(value: str) -> str:
    """Human label for an API property type."""
    return _TYPE_LABELS.get(value.lower(), value.replace("_", " "))


def _range(low: float | None, high: float | None) -> dict[str, float] | None:
    bounds = {k: v for k, v in (("min", low), ("max", high)) if v}
    return bounds or None


class RealtorRapidAPIClient:
    """Client for Realtor Data on RapidAPI."""

    provider = "realtor_rapidapi"

    def __init__(
        self,
        rapidapi_key: str,
        *,
        api_host: str = DEFAULT_API_HOST,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Bind to a RapidAPI key."""
        self.rapidapi_key = rapidapi_key
        self.api_host = api_host
        self._http = http_client

    async def _post(self, endpoint: str, body: dict[str, Any]) -> Any:
        logger.debug("Realtor request %s: %s", endpoint, body)
        return await send_json(
            self._http,
            "POST",
            f"https://{self.api_host}{endpoint}",
            provider="Realtor",
            headers={
                "x-rapidapi-host": self.api_host,
                "x-rapidapi-key": self.rapidapi_key,
                "Content-Type": "application/json",
            },
            json=body,
        )

    def build_request(
        self,
        params: PropertySearchParams,
        *,
        status: Literal["for_sale", "for_rent"] = "for_sale",
    ) -> dict[str, Any]:
        """Build the ``property_list`` body for *params*."""
        query: dict[str, Any] = {"status": [status]}
        query.update(parse_location(params.city, params.state))
        if params.zip_code:
            query["postal_code"] = params.zip_code
        if price := _range(params.min_price, params.max_price):
            query["list_price"] = price
        if params.bedrooms:
            query["beds"] = {"min": params.bedrooms}
        if params.bathrooms:
            query["baths"] = {"min": params.bathrooms}
        if status == "for_sale":
            if sqft := _range(params.min_square_feet, params.max_square_feet):
                query["sqft"] = sqft
            if params.property_type:
                query["type"] = [map_property_type(params.property_type)]
            sort = {
                "direction": "asc" if params.sort_order == "asc" else "desc",
                "field": _SORT_FIELDS.get(params.sort_by or "", "list_date"),
            }
        else:
            sort = {"direction": "desc", "field": "list_date"}
        return {"query": query, "limit": params.limit, "offset": params.offset, "sort": sort}

    async def _search(
        self, params: PropertySearchParams, status: Literal["for_sale", "for_rent"]
    ) -> PropertySearchResponse:
        body = self.build_request(params, status=status)
        try:
            payload = await self._post("/property_list/", body)
            home_search = ((payload or {}).get("data") or {}).get("home_search") or {}
            raw = home_search.get("properties") or []
            properties = [self.transform_to_normalized(p) for p in raw]
        except asyncio.CancelledError:
            raise
        except SEARCH_ERRORS as exc:
            logger.warning("Realtor %s search failed: %s", status, exc)
            return failed_response("realtor_rapidapi", params, str(exc))

        total = home_search.get("total") or len(properties)
        logger.debug("Realtor returned %d of %d properties", len(properties), total)
        return PropertySearchResponse(
            success=True,
            properties=properties,
            total=total,
            limit=body["limit"],
            offset=body["offset"],
            provider="realtor_rapidapi",
        )

    async def search_for_sale(self, params: PropertySearchParams) -> PropertySearchResponse:
        """Search listings for sale."""
        return await self._search(params, "for_sale")

    async def search_for_rent(self, params: PropertySearchParams) -> PropertySearchResponse:
        """Search rentals, newest first."""
        return await self._search(params, "for_rent")

    async def search_normalized(self, params: PropertySearchParams) -> PropertySearchResponse:
        """Provider-neutral search; defaults to listings for sale."""
        return await self.search_for_sale(params)

    async def test_connection(self) -> ConnectionCheck:
        """Fetch one listing in ZIP 10022."""
        body = {"query": {"status": ["for_sale"], "postal_code": "10022"}, "limit": 1, "offset": 0}
        try:
            payload = await self._post("/property_list/", body)
        except asyncio.CancelledError:
            raise
        except ReaiError as exc:
            return ConnectionCheck(success=False, message=str(exc))

        home_search = ((payload or {}).get("data") or {}).get("home_search") or {}
        if home_search.get("properties"):
            return ConnectionCheck(
                success=True,
                message=(
                    "Conectado exitosamente a Realtor.com API. Total propiedades "
                    f"encontradas: {home_search.get('total') or 0}"
                ),
            )
        return ConnectionCheck(success=True, message="Conexión establecida (sin resultados de prueba)")

    @staticmethod
    def transform_to_normalized(prop: dict[str, Any]) -> NormalizedProperty:
        """Map a Realtor ``property_list`` item onto ``NormalizedProperty``."""
        address = (prop.get("location") or {}).get("address") or {}
        desc = prop.get("description") or {}
        flags = prop.get("flags") or {}

        images: list[str] = []
        for photo in [prop.get("primary_photo") or {}, *(prop.get("photos") or [])]:
            href = photo.get("href")
            if href and href not in images:
                images.append(href)

        features = [label for flag, label in _FLAG_FEATURES if flags.get(flag)]
        if prop.get("matterport"):
            features.append("Matterport Tour")

        tours = prop.get("virtual_tours") or []
        virtual_tour_url = tours[0].get("href") if tours else None

        agent: Agent | None = None
        branding = prop.get("branding") or []
        advertisers = prop.get("advertisers") or []
        if advertisers:
            advertiser = next((a for a in advertisers if a.get("type") == "seller"), advertisers[0])
            if advertiser.get("name"):
                company = branding[0].get("name") if branding else None
                agent = Agent(name=advertiser["name"], company=company)
        elif branding and branding[0].get("name"):
            agent = Agent(name=branding[0]["name"], company=branding[0]["name"])

        bathrooms = 0.0
        if desc.get("baths_consolidated"):
            try:
                bathrooms = float(desc["baths_consolidated"])
            except ValueError:
                bathrooms = 0.0
        elif desc.get("baths_full") is not None or desc.get("baths_half") is not None:
            bathrooms = (desc.get("baths_full") or 0) + (desc.get("baths_half") or 0) * 0.5

        property_type = desc.get("type") or desc.get("sub_type") or "unknown"
        label = format_property_type(property_type)
        city = address.get("city") or "Unknown City"
        coordinate = address.get("coordinate") or {}
        list_date = prop.get("list_date") or datetime.now(timezone.utc).isoformat()
        community_name = ((prop.get("community") or {}).get("description") or {}).get("name")
        status = _STATUS_MAP.get(prop.get("status") or "")
        if status is None:
            status = "pending" if flags.get("is_pending") else "active"

        return NormalizedProperty(
            id=f"realtor-{prop['property_id']}",
            source_provider="realtor_rapidapi",
            external_id=str(prop["property_id"]),
            mls_number=prop.get("listing_id") or (prop.get("source") or {}).get("listing_id"),
            title=f"{label} in {city}",
            description=community_name
            or f"{label} property available in {city}, {address.get('state_code') or ''}",
            price=prop.get("list_price") or 0,
            address=Address(
                street=address.get("line") or "Address not available",
                city=city,
                state=address.get("state_code") or address.get("state") or "",
                zip_code=address.get("postal_code") or "",
                country="US",
            ),
            coordinates=(
                Coordinates(latitude=coordinate["lat"], longitude=coordinate["lon"])
                if coordinate.get("lat") and coordinate.get("lon")
                else None
            ),
            details=PropertyDetails(
                property_type=property_type.lower().replace("_", " "),
                bedrooms=desc.get("beds") or desc.get("beds_min") or 0,
                bathrooms=bathrooms,
                square_feet=desc.get("sqft") or desc.get("sqft_min") or 0,
                lot_size=desc.get("lot_sqft"),
                year_built=desc.get("year_built"),
            ),
            features=features,
            images=images,
            virtual_tour_url=virtual_tour_url,
            agent=agent,
            list_date=list_date,
            modified_date=list_date,
            status=status,
        )
