"""Listing providers and cross-provider property search."""

from .aggregator import (
    PropertyProviderSettings,
    get_mock_properties,
    get_provider_status_summary,
    search_properties_from_providers,
    test_provider_connection,
)
from .base import PropertyProviderClient
from .models import (
    AggregatedSearchResult,
    NormalizedProperty,
    PropertySearchParams,
    PropertySearchResponse,
)
from .realtor import RealtorRapidAPIClient
from .showcase_idx import ShowcaseIDXClient
from .xposure import InMemoryListingRepository, ListingRepository, XposureClient
from .zillow_bridge import ZillowBridgeClient

__all__ = [
    "AggregatedSearchResult",
    "InMemoryListingRepository",
    "ListingRepository",
    "NormalizedProperty",
    "PropertyProviderClient",
    "PropertyProviderSettings",
    "PropertySearchParams",
    "PropertySearchResponse",
    "RealtorRapidAPIClient",
    "ShowcaseIDXClient",
    "XposureClient",
    "ZillowBridgeClient",
    "get_mock_properties",
    "get_provider_status_summary",
    "search_properties_from_providers",
    "test_provider_connection",
]
