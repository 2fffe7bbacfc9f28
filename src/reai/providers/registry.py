"""Provider selection by config tag."""

from __future__ import annotations

from typing import TYPE_CHECKING

from reai.errors import ConfigurationError
from reai.providers.anthropic import AnthropicProvider
from reai.providers.gemini import GeminiProvider
from reai.providers.mock import MockProvider
from reai.providers.openai import OpenAIProvider

if TYPE_CHECKING:
    from reai.config import ProviderConfig
    from reai.providers.base import Provider
    from reai.providers.pool import ClientPool


def get_provider(config: ProviderConfig, pool: ClientPool | None = None) -> Provider:
    """Return the adapter for *config*."""
    if config.use_mock:
        return MockProvider(config)

    match config.provider:
        case "openai" | "groq":
            return OpenAIProvider(config, pool=pool)
        case "anthropic":
            return AnthropicProvider(config, pool=pool)
        case "google":
            return GeminiProvider(config, pool=pool)
        case _:
            raise ConfigurationError(
                f"Unsupported AI provider: {config.provider!r}",
                hint="Supported providers: openai, anthropic, google, groq",
            )
