"""Fan-out listing search across every enabled listing provider."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import logging
from typing import TYPE_CHECKING, Any

from pydantic import Field

from reai.properties.catalog import PROPERTY_PROVIDERS
from reai.properties.models import (
    AggregatedSearchResult,
    ConnectionCheck,
    NormalizedProperty,
    PropertyProviderId,
    _Model,
)
from reai.properties.realtor import RealtorRapidAPIClient
from reai.properties.showcase_idx import MOCK_IDX_PROPERTIES, ShowcaseIDXClient
from reai.properties.xposure import XposureClient
from reai.properties.zillow_bridge import ZillowBridgeClient

if TYPE_CHECKING:
    import httpx

    from reai.properties.base import PropertyProviderClient
    from reai.properties.models import PropertySearchParams
    from reai.properties.xposure import ListingRepository

logger = logging.getLogger(__name__)

NO_PROVIDERS_MESSAGE = "No hay proveedores de propiedades configurados o activos"


class PropertyProviderSettings(_Model):
    """A stored listing-provider settings record."""

    provider_key: str
    name: str = ""
    enabled: bool = False
    api_key: str | None = None
    api_secret: str | None = None
    additional_config: dict[str, Any] = Field(default_factory=dict)
    priority: int = 100


class ProviderStatus(_Model):
    key: PropertyProviderId
    name: str
    enabled: bool
    configured: bool


class ProviderStatusSummary(_Model):
    total_providers: int
    active_providers: int
    providers: list[ProviderStatus]


def create_provider_client(
    settings: PropertyProviderSettings,
    *,
    listing_repository: ListingRepository | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> PropertyProviderClient | None:
    """Build the client for *settings*, or None (with a warning) if it can't run."""
    match settings.provider_key:
        case "showcase_idx":
            if not settings.api_key:
                logger.warning("Provider showcase_idx has no API key configured")
                return None
            return ShowcaseIDXClient(settings.api_key, http_client=http_client)
        case "zillow_bridge":
            extra = settings.additional_config
            server_token = settings.api_secret or extra.get("server_token")
            if not settings.api_key or not server_token or not extra.get("dataset"):
                logger.warning(
                    "Zillow Bridge requires an access token, server_token and dataset"
                )
                return None
            return ZillowBridgeClient(
                settings.api_key,
                server_token,
                extra["dataset"],
                default_state=extra.get("default_state"),
                default_mls_status=extra.get("default_mls_status"),
                http_client=http_client,
            )
        case "realtor_rapidapi":
            key = settings.api_key or settings.additional_config.get("rapidapi_key")
            if not key:
                logger.warning("Realtor RapidAPI requires rapidapi_key configuration")
                return None
            return RealtorRapidAPIClient(key, http_client=http_client)
        case "xposure":
            if listing_repository is None:
                logger.warning("Xposure requires a listing repository")
                return None
            return XposureClient(listing_repository)
        case _:
            logger.warning("Unknown property provider: %s", settings.provider_key)
            return None


def active_clients(
    settings: list[PropertyProviderSettings],
    *,
    listing_repository: ListingRepository | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> list[PropertyProviderClient]:
    """Clients for enabled settings, in ascending priority order."""
    clients = []
    for s in sorted((s for s in settings if s.enabled), key=lambda s: s.priority):
        client = create_provider_client(
            s, listing_repository=listing_repository, http_client=http_client
        )
        if client is not None:
            clients.append(client)
    return clients


_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def listing_timestamp(value: str) -> datetime:
    """Parse a listing date; naive values are UTC, unparseable ones sort last."""
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return _OLDEST
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_properties(
    properties: list[NormalizedProperty], params: PropertySearchParams
) -> list[NormalizedProperty]:
    """Order by price when requested, otherwise newest listing first."""
    if params.sort_by == "price":
        return sorted(properties, key=lambda p: p.price, reverse=params.sort_order != "asc")
    return sorted(properties, key=lambda p: listing_timestamp(p.list_date), reverse=True)


async def search_properties_from_providers(
    settings: list[PropertyProviderSettings],
    params: PropertySearchParams,
    *,
    listing_repository: ListingRepository | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> AggregatedSearchResult:
    """Query every enabled provider concurrently and merge their listings.

    One provider failing never hides another's results. ``success`` is true
    when any listing came back or no provider reported an error.
    """
    clients = active_clients(
        settings, listing_repository=listing_repository, http_client=http_client
    )
    if not clients:
        return AggregatedSearchResult(success=False, errors={"general": NO_PROVIDERS_MESSAGE})

    outcomes = await asyncio.gather(
        *(c.search_normalized(params) for c in clients), return_exceptions=True
    )

    merged: list[NormalizedProperty] = []
    total_by_provider: dict[str, int] = {}
    errors: dict[str, str] = {}
    queried: list[PropertyProviderId] = []
    for client, outcome in zip(clients, outcomes, strict=True):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.error("Provider %s search failed: %s", client.provider, outcome)
            errors[client.provider] = str(outcome) or type(outcome).__name__
            continue
        queried.append(client.provider)
        if outcome.success:
            merged.extend(outcome.properties)
            total_by_provider[client.provider] = outcome.total
        else:
            errors[client.provider] = outcome.error or "Unknown error"

    return AggregatedSearchResult(
        success=bool(merged) or not errors,
        properties=sort_properties(merged, params),
        total_by_provider=total_by_provider,
        errors=errors,
        providers_queried=queried,
    )


async def test_provider_connection(
    provider_key: str,
    api_key: str | None,
    *,
    api_secret: str | None = None,
    additional_config: dict[str, Any] | None = None,
    listing_repository: ListingRepository | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> ConnectionCheck:
    """Check credentials for one listing provider before saving them."""
    settings = PropertyProviderSettings(
        provider_key=provider_key,
        enabled=True,
        api_key=api_key,
        api_secret=api_secret,
        additional_config=additional_config or {},
    )
    if provider_key not in PROPERTY_PROVIDERS:
        return ConnectionCheck(success=False, message=f"Proveedor desconocido: {provider_key}")
    client = create_provider_client(
        settings, listing_repository=listing_repository, http_client=http_client
    )
    if client is None:
        return ConnectionCheck(success=False, message="No se pudo crear el cliente")
    return await client.test_connection()


def get_mock_properties() -> list[NormalizedProperty]:
    """Demo listings for when no provider is configured."""
    return [ShowcaseIDXClient.transform_to_normalized(p) for p in MOCK_IDX_PROPERTIES]


def has_active_providers(settings: list[PropertyProviderSettings]) -> bool:
    """Whether any enabled provider has credentials."""
    return any(s.enabled and (s.api_key or s.provider_key == "xposure") for s in settings)


def get_provider_status_summary(
    settings: list[PropertyProviderSettings],
) -> ProviderStatusSummary:
    """Per-provider enabled/configured flags for the admin dashboard."""
    by_key = {s.provider_key: s for s in settings}
    providers = []
    for key, info in PROPERTY_PROVIDERS.items():
        setting = by_key.get(key)
        configured = setting is not None and (bool(setting.api_key) or not info.requires_api_key)
        providers.append(
            ProviderStatus(
                key=key,
                name=info.name,
                enabled=bool(setting and setting.enabled),
                configured=configured,
            )
        )
    return ProviderStatusSummary(
        total_providers=len(providers),
        active_providers=sum(1 for p in providers if p.enabled and p.configured),
        providers=providers,
    )
