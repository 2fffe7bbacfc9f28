"""Zillow Bridge client: MLS listings from Bridge Data Output's OData API."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from reai.errors import ReaiError
from reai.properties.base import SEARCH_ERRORS, failed_response, send_json
from reai.properties.models import (
    Address,
    Agent,
    ConnectionCheck,
    Coordinates,
    NormalizedProperty,
    PropertyDetails,
    PropertySearchParams,
    PropertySearchResponse,
)

if TYPE_CHECKING:
    import httpx

    from reai.properties.models import ListingStatus

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.bridgedataoutput.com/api/v2"

_MLS_STATUS = {"active": "Active", "pending": "Pending", "sold": "Closed"}

_STATUS_MAP: dict[str, ListingStatus] = {
    "Active": "active",
    "Pending": "pending",
    "Closed": "sold",
    "Withdrawn": "off_market",
    "Expired": "off_market",
    "Canceled": "off_market",
}

_TYPE_FILTERS = {
    "house": "PropertySubType eq 'Single Family Residence'",
    "single_family": "PropertySubType eq 'Single Family Residence'",
    "condo": "PropertySubType eq 'Condominium'",
    "apartment": "PropertySubType eq 'Condominium'",
    "townhouse": "PropertySubType eq 'Townhouse'",
    "multi_family": "PropertySubType eq 'Multi Family'",
    "land": "PropertyType eq 'Land'",
    "commercial": "contains(tolower(PropertyType), 'commercial')",
}

_SORT_FIELDS = {
    "price": "ListPrice",
    "listDate": "OriginalEntryTimestamp",
    "squareFeet": "LivingArea",
}


def _literal(value: str) -> str:
    """Quote *value* as an OData string literal."""
    return "'" + value.replace("'", "''") + "'"


def _number(value: float) -> str:
    """Render a filter number without exponent notation."""
    return str(int(value)) if float(value).is_integer() else str(value)


def build_filter(
    params: PropertySearchParams,
    *,
    default_state: str | None = None,
    default_mls_status: str | None = None,
) -> str:
    """OData ``$filter`` expression for *params*; clauses are joined with ``and``."""
    clauses: list[str] = []
    if params.city:
        clauses.append(f"contains(tolower(City), {_literal(params.city.lower())})")
    state = params.state or default_state
    if state:
        clauses.append(f"StateOrProvince eq {_literal(state)}")
    if params.zip_code:
        clauses.append(f"PostalCode eq {_literal(params.zip_code)}")
    if params.min_price:
        clauses.append(f"ListPrice ge {_number(params.min_price)}")
    if params.max_price:
        clauses.append(f"ListPrice le {_number(params.max_price)}")
    if params.bedrooms:
        clauses.append(f"BedroomsTotal ge {params.bedrooms}")
    if params.bathrooms:
        clauses.append(f"BathroomsTotalInteger ge {_number(params.bathrooms)}")
    if params.min_square_feet:
        clauses.append(f"LivingArea ge {params.min_square_feet}")
    if params.max_square_feet:
        clauses.append(f"LivingArea le {params.max_square_feet}")

    if params.status:
        status = _MLS_STATUS.get(params.status, "Active")
    else:
        status = default_mls_status or "Active"
    clauses.append(f"MlsStatus eq {_literal(status)}")

    if params.property_type:
        kind = params.property_type.lower()
        clauses.append(
            _TYPE_FILTERS.get(kind, f"contains(tolower(PropertyType), {_literal(kind)})")
        )
    return " and ".join(clauses)


def build_query(
    params: PropertySearchParams,
    *,
    default_state: str | None = None,
    default_mls_status: str | None = None,
) -> str:
    """OData query string with literal ``$`` parameter names.

    The API does not recognize ``%24filter``, so the string is assembled by
    hand instead of going through ``httpx`` params encoding.
    """
    parts = [
        "$filter="
        + quote(
            build_filter(
                params, default_state=default_state, default_mls_status=default_mls_status
            ),
            safe="",
        )
    ]
    if params.sort_by:
        field = _SORT_FIELDS.get(params.sort_by, "ListPrice")
        direction = "asc" if params.sort_order == "asc" else "desc"
        parts.append("$orderby=" + quote(f"{field} {direction}", safe=""))
    else:
        parts.append("$orderby=" + quote("ModificationTimestamp desc", safe=""))
    parts.append(f"$top={params.limit}")
    parts.append(f"$skip={params.offset}")
    parts.append("$count=true")
    return "&".join(parts)


class ZillowBridgeClient:
    """Client for one Bridge Data Output MLS dataset."""

    provider = "zillow_bridge"

    def __init__(
        self,
        access_token: str,
        server_token: str,
        dataset: str = "test",
        *,
        api_url: str = DEFAULT_API_URL,
        default_state: str | None = None,
        default_mls_status: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.access_token = access_token
        self.server_token = server_token
        self.dataset = dataset
        self.api_url = api_url.rstrip("/")
        self.default_state = default_state
        self.default_mls_status = default_mls_status
        self._http = http_client

    def _url(self, path: str, query: str | None = None) -> str:
        # access_token must be the first query parameter.
        url = f"{self.api_url}{path}?access_token={quote(self.access_token, safe='')}"
        return f"{url}&{query}" if query else url

    async def _get(self, path: str, query: str | None = None) -> Any:
        return await send_json(
            self._http,
            "GET",
            self._url(path, query),
            provider="Bridge",
            headers={"Content-Type": "application/json"},
        )

    @property
    def _collection(self) -> str:
        return f"/OData/{self.dataset}/Property"

    async def search_listings(self, params: PropertySearchParams) -> dict[str, Any]:
        """Raw OData search of the dataset's ``Property`` collection."""
        query = build_query(
            params,
            default_state=self.default_state,
            default_mls_status=self.default_mls_status,
        )
        logger.debug("Bridge search: %s?%s", self._collection, query)
        return await self._get(self._collection, query)

    async def get_listing(self, listing_key: str) -> NormalizedProperty:
        """Fetch one listing by its ``ListingKey``."""
        payload = await self._get(f"{self._collection}({_literal(listing_key)})")
        return self.transform_to_normalized(payload)

    async def search_normalized(self, params: PropertySearchParams) -> PropertySearchResponse:
        """Search and normalize; failures come back as ``success=False``."""
        try:
            payload = await self.search_listings(params)
            properties = [self.transform_to_normalized(p) for p in payload["value"]]
        except asyncio.CancelledError:
            raise
        except SEARCH_ERRORS as exc:
            logger.warning("Bridge search failed: %s", exc)
            return failed_response("zillow_bridge", params, str(exc))

        return PropertySearchResponse(
            success=True,
            properties=properties,
            total=int(payload.get("@odata.count") or len(properties)),
            limit=params.limit,
            offset=params.offset,
            provider="zillow_bridge",
        )

    async def test_connection(self) -> ConnectionCheck:
        """Request a single listing from the dataset."""
        try:
            payload = await self._get(self._collection, "$top=1")
        except asyncio.CancelledError:
            raise
        except ReaiError as exc:
            return ConnectionCheck(success=False, message=str(exc))
        if isinstance(payload, dict) and payload.get("value") is not None:
            return ConnectionCheck(
                success=True, message=f"Conectado exitosamente. Dataset: {self.dataset}"
            )
        return ConnectionCheck(success=False, message="Respuesta inesperada del servidor")

    @staticmethod
    def transform_to_normalized(listing: dict[str, Any]) -> NormalizedProperty:
        """Map a Bridge ``Property`` record onto ``NormalizedProperty``."""
        street_parts = [
            listing.get(k) for k in ("StreetNumber", "StreetName", "StreetSuffix")
        ]
        street = (
            listing.get("UnparsedAddress")
            or " ".join(p for p in street_parts if p)
            or "Address not available"
        )
        features = [
            *(listing.get("InteriorFeatures") or []),
            *(listing.get("ExteriorFeatures") or []),
            *(listing.get("Appliances") or []),
        ]
        amenities = [
            *(listing.get("CommunityFeatures") or []),
            *(listing.get("PoolFeatures") or []),
            *(listing.get("ParkingFeatures") or []),
            *(listing.get("WaterfrontFeatures") or []),
        ]
        photos = sorted(
            (
                m
                for m in listing.get("Media") or []
                if m.get("MediaURL") and m.get("MediaCategory") in (None, "", "Photo")
            ),
            key=lambda m: m.get("Order") or 0,
        )
        bathrooms = (
            (listing.get("BathroomsFull") or 0) + (listing.get("BathroomsHalf") or 0) * 0.5
            or listing.get("BathroomsTotalInteger")
            or 0
        )
        lat, lng = listing.get("Latitude"), listing.get("Longitude")
        agent_name = listing.get("ListAgentFullName")
        now = datetime.now(timezone.utc).isoformat()
        status_key = listing.get("MlsStatus") or listing.get("StandardStatus") or ""

        return NormalizedProperty(
            id=f"bridge-{listing['ListingKey']}",
            source_provider="zillow_bridge",
            external_id=str(listing["ListingKey"]),
            mls_number=listing.get("ListingId"),
            title=f"{listing.get('PropertyType') or 'Property'} in {listing.get('City', '')}",
            description=listing.get("PublicRemarks") or "No description available",
            price=listing.get("ListPrice") or 0,
            address=Address(
                street=street,
                city=listing.get("City") or "",
                state=listing.get("StateOrProvince") or "",
                zip_code=listing.get("PostalCode") or "",
                country=listing.get("Country") or "US",
            ),
            coordinates=Coordinates(latitude=lat, longitude=lng) if lat and lng else None,
            details=PropertyDetails(
                property_type=(listing.get("PropertyType") or "unknown").lower(),
                bedrooms=listing.get("BedroomsTotal") or 0,
                bathrooms=bathrooms,
                square_feet=listing.get("LivingArea") or 0,
                lot_size=listing.get("LotSizeSquareFeet") or None,
                year_built=listing.get("YearBuilt") or None,
            ),
            features=features,
            amenities=amenities,
            images=[m["MediaURL"] for m in photos],
            virtual_tour_url=listing.get("VirtualTourURLUnbranded") or None,
            agent=(
                Agent(
                    name=agent_name,
                    email=listing.get("ListAgentEmail"),
                    phone=listing.get("ListAgentDirectPhone"),
                    company=listing.get("ListOfficeName"),
                )
                if agent_name
                else None
            ),
            list_date=listing.get("OriginalEntryTimestamp") or now,
            modified_date=listing.get("ModificationTimestamp") or now,
            status=_STATUS_MAP.get(status_key, "active"),
        )
