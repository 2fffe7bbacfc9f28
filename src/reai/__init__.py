"""REAI: multi-provider AI and listing aggregation for real-estate apps.

Public API:
    - AIClient: chat, fan-out completion with synthesis, embeddings
    - ConfigLoader / SettingsStore: where provider credentials come from
    - ChatMessage / CompletionOptions: request types
    - reai.services: lifestyle, matching, demand, content and equity services
    - reai.properties: listing provider search
"""

from __future__ import annotations

import logging

from reai.client import AIClient, ConnectionResult
from reai.config import ProviderConfig
from reai.embeddings import cosine_similarity
from reai.errors import (
    AllProvidersFailedError,
    APIError,
    ConfigurationError,
    DimensionMismatchError,
    NoEmbeddingProviderAvailableError,
    NoProviderConfiguredError,
    PropertyProviderError,
    RateLimitError,
    ReaiError,
    ServiceError,
)
from reai.events import CollectingReporter, ConfigFallbackEvent, SynthesisFallbackEvent
from reai.loader import ConfigCache, ConfigLoader
from reai.providers.models import ChatMessage, CompletionOptions
from reai.providers.pool import ClientPool
from reai.store import InMemorySettingsStore, SettingsStore

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("reai")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Silent by default; applications attach their own handlers to "reai".
logging.getLogger("reai").addHandler(logging.NullHandler())

__all__ = [
    "AIClient",
    "APIError",
    "AllProvidersFailedError",
    "ChatMessage",
    "ClientPool",
    "CollectingReporter",
    "CompletionOptions",
    "ConfigCache",
    "ConfigFallbackEvent",
    "ConfigLoader",
    "ConfigurationError",
    "ConnectionResult",
    "DimensionMismatchError",
    "InMemorySettingsStore",
    "NoEmbeddingProviderAvailableError",
    "NoProviderConfiguredError",
    "PropertyProviderError",
    "ProviderConfig",
    "RateLimitError",
    "ReaiError",
    "ServiceError",
    "SettingsStore",
    "SynthesisFallbackEvent",
    "cosine_similarity",
    "__version__",
]
