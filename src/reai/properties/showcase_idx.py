"""Showcase IDX client: MLS listings over a bearer-token REST API."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import TYPE_CHECKING, Any

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

DEFAULT_API_URL = "https://api.showcaseidx.com/v2"

_STATUS_MAP: dict[str, ListingStatus] = {
    "active": "active",
    "pending": "pending",
    "sold": "sold",
    "off_market": "off_market",
}

# Search filter -> query-string name.
_QUERY_FIELDS = (
    ("city", "city"),
    ("state", "state"),
    ("min_price", "minPrice"),
    ("max_price", "maxPrice"),
    ("property_type", "propertyType"),
    ("bedrooms", "bedrooms"),
    ("bathrooms", "bathrooms"),
    ("status", "status"),
    ("limit", "limit"),
    ("offset", "offset"),
    ("sort_order", "sortOrder"),
)


class ShowcaseIDXClient:
    """Client for the Showcase IDX listings API."""

    provider = "showcase_idx"

    def __init__(
        self,
        api_key: str | None = None,
        *,
        api_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Credentials default to ``SHOWCASE_IDX_API_KEY`` / ``SHOWCASE_IDX_API_URL``."""
        self.api_key = api_key or os.environ.get("SHOWCASE_IDX_API_KEY", "")
        self.api_url = (
            api_url or os.environ.get("SHOWCASE_IDX_API_URL") or DEFAULT_API_URL
        ).rstrip("/")
        self._http = http_client

    async def _get(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        return await send_json(
            self._http,
            "GET",
            f"{self.api_url}{endpoint}",
            provider="Showcase IDX",
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
            params=params,
        )

    async def search_listings(self, params: PropertySearchParams) -> dict[str, Any]:
        """Raw ``GET /listings`` with camelCase filters."""
        query: dict[str, Any] = {}
        for attr, name in _QUERY_FIELDS:
            value = getattr(params, attr)
            if value:
                query[name] = value
        if params.sort_by:
            # squareFeet sorting is not offered by the API.
            query["sortBy"] = "listDate" if params.sort_by == "squareFeet" else params.sort_by
        return await self._get("/listings", query)

    async def get_listing(self, listing_id: str) -> NormalizedProperty:
        """Fetch one listing by id."""
        return self.transform_to_normalized(await self._get(f"/listings/{listing_id}"))

    async def search_normalized(self, params: PropertySearchParams) -> PropertySearchResponse:
        """Search and normalize; failures come back as ``success=False``."""
        try:
            payload = await self.search_listings(params)
            properties = [self.transform_to_normalized(p) for p in payload.get("listings") or []]
        except asyncio.CancelledError:
            raise
        except SEARCH_ERRORS as exc:
            logger.warning("Showcase IDX search failed: %s", exc)
            return failed_response("showcase_idx", params, str(exc))

        return PropertySearchResponse(
            success=True,
            properties=properties,
            total=int(payload.get("total") or len(properties)),
            limit=int(payload.get("limit") or params.limit),
            offset=int(payload.get("offset") or params.offset),
            provider="showcase_idx",
        )

    async def test_connection(self) -> ConnectionCheck:
        """Request a single active listing."""
        try:
            payload = await self.search_listings(PropertySearchParams(limit=1, status="active"))
        except asyncio.CancelledError:
            raise
        except ReaiError as exc:
            return ConnectionCheck(success=False, message=str(exc))
        if isinstance(payload, dict) and "listings" in payload:
            return ConnectionCheck(
                success=True,
                message=f"Conectado exitosamente. {payload.get('total', 0)} propiedades disponibles.",
            )
        return ConnectionCheck(success=False, message="Respuesta inesperada del servidor")

    @staticmethod
    def transform_to_normalized(listing: dict[str, Any]) -> NormalizedProperty:
        """Map a Showcase IDX listing onto ``NormalizedProperty``."""
        address = listing.get("address") or {}
        details = listing.get("details") or {}
        agent = listing.get("agent") or {}
        coords = listing.get("coordinates")
        property_type = details.get("propertyType") or "House"

        return NormalizedProperty(
            id=f"idx-{listing['listingId']}",
            source_provider="showcase_idx",
            external_id=str(listing["listingId"]),
            mls_number=listing.get("mlsNumber"),
            title=f"{property_type} en {address.get('city', '')}",
            description=listing.get("description") or "",
            price=listing.get("price") or 0,
            address=Address(
                street=address.get("streetAddress") or "",
                city=address.get("city") or "",
                state=address.get("state") or "",
                zip_code=address.get("zipCode") or "",
                country=address.get("country") or "US",
            ),
            coordinates=(
                Coordinates(latitude=coords["latitude"], longitude=coords["longitude"])
                if coords
                else None
            ),
            details=PropertyDetails(
                property_type=property_type.lower(),
                bedrooms=details.get("bedrooms") or 0,
                bathrooms=details.get("bathrooms") or 0,
                square_feet=details.get("squareFeet") or 0,
                lot_size=details.get("lotSize"),
                year_built=details.get("yearBuilt"),
            ),
            features=list(listing.get("features") or []),
            amenities=list(listing.get("amenities") or []),
            images=[p["url"] for p in listing.get("photos") or [] if p.get("url")],
            virtual_tour_url=listing.get("virtualTour"),
            video_url=listing.get("video"),
            agent=Agent(**agent) if agent.get("name") else None,
            list_date=listing.get("listDate") or "",
            modified_date=listing.get("modifiedDate") or "",
            status=_STATUS_MAP.get(str(listing.get("status", "")).lower(), "active"),
        )


def _mock(
    n: int,
    price: int,
    street: str,
    city: str,
    zip_code: str,
    details: dict[str, Any],
    description: str,
    features: list[str],
    amenities: list[str],
    photos: list[str],
    coords: tuple[float, float],
    agent: tuple[str, str, str, str],
    list_date: str,
    modified_date: str,
    virtual_tour: bool = False,
) -> dict[str, Any]:
    listing: dict[str, Any] = {
        "listingId": f"mock-{n}",
        "mlsNumber": f"MLS-2025-00{n}",
        "status": "active",
        "price": price,
        "address": {
            "streetAddress": street,
            "city": city,
            "state": "PR",
            "zipCode": zip_code,
            "country": "PR",
        },
        "details": details,
        "description": description,
        "features": features,
        "amenities": amenities,
        "photos": [{"url": f"https://images.unsplash.com/{p}?w=800"} for p in photos],
        "coordinates": {"latitude": coords[0], "longitude": coords[1]},
        "agent": dict(zip(("name", "email", "phone", "company"), agent, strict=True)),
        "listDate": list_date,
        "modifiedDate": modified_date,
    }
    if virtual_tour:
        listing["virtualTour"] = f"https://tour.showcaseidx.com/mock-{n}"
    return listing


# Demo listings for development when no provider is configured.
MOCK_IDX_PROPERTIES: list[dict[str, Any]] = [
    _mock(
        1, 485000, "123 Calle del Sol", "Dorado", "00646",
        {"propertyType": "House", "bedrooms": 3, "bathrooms": 2.5, "squareFeet": 2400,
         "lotSize": 5000, "yearBuilt": 2018},
        "Hermosa villa moderna con vista al mar en la exclusiva zona de Dorado. Cocina "
        "gourmet, pisos de mármol, y amplia terraza con piscina infinity.",
        ["Piscina Infinity", "Cocina Gourmet", "Pisos de Mármol", "Generador"],
        ["Vista al Mar", "Piscina", "Terraza", "Seguridad 24/7"],
        ["photo-1613490493576-7fde63acd811", "photo-1600596542815-ffad4c1539a9"],
        (18.4589, -66.2679),
        ("María González", "maria@realestate-pr.com", "787-555-0101", "Elite Properties PR"),
        "2025-01-10", "2025-01-15", virtual_tour=True,
    ),
    _mock(
        2, 625000, "456 Avenida Ashford", "San Juan", "00907",
        {"propertyType": "Condo", "bedrooms": 2, "bathrooms": 2, "squareFeet": 1800,
         "yearBuilt": 2020},
        "Espectacular penthouse en el corazón de Condado con vistas panorámicas al océano "
        "Atlántico. Ideal para profesionales o inversión en Airbnb.",
        ["Acabados de Lujo", "Balcón Amplio", "Cocina Moderna", "AC Central"],
        ["Vista al Mar", "Gimnasio", "Piscina", "Lobby con Conserje"],
        ["photo-1502672260266-1c1ef2d93688", "photo-1560448204-e02f11c3d0e2"],
        (18.4519, -66.0749),
        ("Carlos Rivera", "carlos@luxurypr.com", "787-555-0202", "Luxury Condado Realty"),
        "2025-01-08", "2025-01-14",
    ),
    _mock(
        3, 375000, "789 Calle Principal", "Guaynabo", "00969",
        {"propertyType": "House", "bedrooms": 4, "bathrooms": 3, "squareFeet": 2800,
         "lotSize": 8000, "yearBuilt": 2015},
        "Residencia familiar en urbanización privada con excelentes escuelas cercanas. "
        "Amplio jardín, terraza techada, y vecindario tranquilo.",
        ["Jardín Amplio", "Terraza Techada", "Closets Walk-in", "Marquesina 2 autos"],
        ["Jardín", "Cerca de Escuelas", "Zona Segura", "Control de Acceso"],
        ["photo-1600585154340-be6161a56a0c", "photo-1600566753190-17f0baa2a6c3"],
        (18.3589, -66.1107),
        ("Ana Martínez", "ana@familyhomes-pr.com", "787-555-0303", "Family Homes PR"),
        "2025-01-05", "2025-01-12",
    ),
    _mock(
        4, 195000, "321 Calle Universidad", "San Juan", "00925",
        {"propertyType": "Apartment", "bedrooms": 2, "bathrooms": 1, "squareFeet": 950,
         "yearBuilt": 2010},
        "Apartamento moderno cerca de la UPR, ideal para inversión con alto potencial de "
        "renta. Zona en gentrificación con proyectos de renovación urbana próximos.",
        ["Remodelado", "Cocina Moderna", "Balcón", "Internet incluido"],
        ["Cerca de UPR", "Transporte Público", "Área Comercial"],
        ["photo-1522708323590-d24dbb6b0267"],
        (18.4030, -66.0509),
        ("José López", "jose@investpr.com", "787-555-0404", "Investment Properties PR"),
        "2025-01-12", "2025-01-16",
    ),
    _mock(
        5, 850000, "555 Ocean Drive", "Rincón", "00677",
        {"propertyType": "House", "bedrooms": 4, "bathrooms": 4, "squareFeet": 3500,
         "lotSize": 12000, "yearBuilt": 2022},
        "Casa de playa de ensueño en Rincón, la capital del surf de Puerto Rico. Paneles "
        "solares y acceso privado a la playa. Perfecta para retiro o Airbnb de lujo.",
        ["Paneles Solares", "Diseño Sostenible", "Acceso Playa", "Jacuzzi"],
        ["Frente a la Playa", "Piscina", "Terraza Sunset", "Generador Tesla"],
        ["photo-1499793983690-e29da59ef1c2", "photo-1507525428034-b723cf961d3e"],
        (18.3405, -67.2500),
        ("Sofía Rodríguez", "sofia@beachproperties-pr.com", "787-555-0505", "Beach Properties PR"),
        "2025-01-01", "2025-01-15", virtual_tour=True,
    ),
]
