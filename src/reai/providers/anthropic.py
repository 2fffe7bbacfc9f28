"""Anthropic provider implementation."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from reai.errors import APIError
from reai.providers._errors import wrap_provider_error
from reai.providers.base import ProviderCapabilities
from reai.providers.models import first_system_prompt, resolve_model

if TYPE_CHECKING:
    from reai.config import ProviderConfig
    from reai.providers.models import ChatMessage, CompletionOptions
    from reai.providers.pool import ClientPool

logger = logging.getLogger(__name__)


class AnthropicProvider:
    """Anthropic Messages API provider."""

    def __init__(self, config: ProviderConfig, *, pool: ClientPool | None = None) -> None:
        """Bind to *config*; SDK clients come from *pool* when given."""
        self.config = config
        self.pool = pool
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazily initialize and return the Anthropic client."""
        if self._client is None:
            try:
                from anthropic import AsyncAnthropic
            except ImportError as e:
                raise APIError(
                    "anthropic package not installed",
                    hint="uv pip install anthropic",
                ) from e

            def build() -> Any:
                return AsyncAnthropic(api_key=self.config.api_key)

            if self.pool is None:
                self._client = build()
            else:
                key = ("anthropic", self.config.api_key, None)
                self._client = self.pool.get_or_create(key, build)
        return self._client

    @property
    def capabilities(self) -> ProviderCapabilities:
        """Return supported feature flags."""
        return ProviderCapabilities(embeddings=False, json_mode=False)

    async def complete(
        self, messages: list[ChatMessage], options: CompletionOptions
    ) -> str:
        """Split out the system prompt and return the first text block."""
        client = self._get_client()
        model = resolve_model(self.config, options)

        create_kwargs: dict[str, Any] = {
            "model": model,
            "max_tokens": options.max_tokens,
            "temperature": options.temperature,
            "messages": [
                {"role": m.role, "content": m.content}
                for m in messages
                if m.role in ("user", "assistant")
            ],
        }
        system = first_system_prompt(messages)
        if system:
            create_kwargs["system"] = system

        logger.debug("anthropic completion: model=%s messages=%d", model, len(messages))
        try:
            response = await client.messages.create(**create_kwargs)
        except asyncio.CancelledError:
            raise
        except APIError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider="anthropic",
                phase="complete",
                allow_network_errors=True,
                message="Anthropic completion failed",
            ) from e
        return _first_text_block(response)

    async def embed(self, text: str, *, model: str | None = None) -> list[float]:
        """Raise because Anthropic has no embeddings endpoint."""
        _ = text, model
        raise APIError(
            "anthropic does not support embeddings",
            provider="anthropic",
            phase="embed",
            retryable=False,
        )


def _first_text_block(response: Any) -> str:
    for block in getattr(response, "content", None) or []:
        if getattr(block, "type", None) == "text":
            text = getattr(block, "text", "")
            return text if isinstance(text, str) else ""
    return ""
