"""Listing provider protocol and shared HTTP plumbing."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

from reai._http import DEFAULT_HTTP_TIMEOUT_S
from reai.errors import PropertyProviderError, ReaiError
from reai.properties.models import PropertySearchResponse

if TYPE_CHECKING:
    from reai.properties.models import (
        ConnectionCheck,
        PropertyProviderId,
        PropertySearchParams,
    )

logger = logging.getLogger(__name__)

# Failures a search can hit: HTTP errors plus malformed payloads.
SEARCH_ERRORS: tuple[type[Exception], ...] = (
    ReaiError,
    KeyError,
    ValueError,
    TypeError,
    AttributeError,
)


@runtime_checkable
class PropertyProviderClient(Protocol):
    """What the aggregator needs from a listing provider."""

    provider: PropertyProviderId

    async def search_normalized(self, params: PropertySearchParams) -> PropertySearchResponse:
        """Search and return normalized listings; never raises for provider errors."""
        ...

    async def test_connection(self) -> ConnectionCheck:
        """Check credentials and reachability."""
        ...


def failed_response(
    provider: PropertyProviderId, params: PropertySearchParams, message: str
) -> PropertySearchResponse:
    """Build the response returned when a search fails."""
    return PropertySearchResponse(
        success=False,
        properties=[],
        total=0,
        limit=params.limit,
        offset=params.offset,
        provider=provider,
        error=message,
    )


async def send_json(
    http_client: httpx.AsyncClient | None,
    method: str,
    url: str,
    *,
    provider: str,
    headers: dict[str, str],
    params: dict[str, Any] | None = None,
    json: dict[str, Any] | None = None,
) -> Any:
    """Send one request and decode its JSON body.

    Uses *http_client* when given, else a short-lived client. Non-2xx
    statuses and transport failures raise ``PropertyProviderError``.
    """
    try:
        if http_client is not None:
            response = await http_client.request(
                method, url, headers=headers, params=params, json=json
            )
        else:
            async with httpx.AsyncClient(timeout=DEFAULT_HTTP_TIMEOUT_S) as client:
                response = await client.request(
                    method, url, headers=headers, params=params, json=json
                )
    except asyncio.CancelledError:
        raise
    except httpx.HTTPError as exc:
        raise PropertyProviderError(
            f"{provider} request failed: {exc}", provider=provider
        ) from exc

    if not response.is_success:
        raise PropertyProviderError(
            f"{provider} API error: {response.status_code} - {response.text[:500]}",
            provider=provider,
            status_code=response.status_code,
        )
    try:
        return response.json()
    except ValueError as exc:
        raise PropertyProviderError(
            f"{provider} returned a non-JSON body", provider=provider
        ) from exc
