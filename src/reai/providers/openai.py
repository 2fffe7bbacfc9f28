"""OpenAI provider implementation (also serves Groq's OpenAI-compatible API)."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from reai.errors import APIError
from reai.providers._errors import wrap_provider_error
from reai.providers.base import ProviderCapabilities
from reai.providers.models import resolve_model

if TYPE_CHECKING:
    from reai.config import ProviderConfig
    from reai.providers.models import ChatMessage, CompletionOptions
    from reai.providers.pool import ClientPool

logger = logging.getLogger(__name__)

DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"


class OpenAIProvider:
    """Chat Completions provider for OpenAI and OpenAI-compatible gateways."""

    def __init__(self, config: ProviderConfig, *, pool: ClientPool | None = None) -> None:
        """Bind to *config*; SDK clients come from *pool* when given."""
        self.config = config
        self.pool = pool
        self._client: Any = None

    @property
    def name(self) -> str:
        """Provider id used in logs and errors (``openai`` or ``groq``)."""
        return self.config.provider

    def _get_client(self) -> Any:
        """Lazily initialize and return the OpenAI client."""
        if self._client is None:
            try:
                from openai import AsyncOpenAI
            except ImportError as e:
                raise APIError(
                    "openai package not installed",
                    hint="uv pip install openai",
                ) from e

            base_url = self.config.base_url

            def build() -> Any:
                kwargs: dict[str, Any] = {"api_key": self.config.api_key}
                if base_url:
                    kwargs["base_url"] = base_url
                return AsyncOpenAI(**kwargs)

            if self.pool is None:
                self._client = build()
            else:
                key = (self.name, self.config.api_key, base_url)
                self._client = self.pool.get_or_create(key, build)
        return self._client

    @property
    def capabilities(self) -> ProviderCapabilities:
        """Return supported feature flags."""
        return ProviderCapabilities(
            embeddings=self.config.supports_embeddings,
            json_mode=True,
        )

    async def complete(
        self, messages: list[ChatMessage], options: CompletionOptions
    ) -> str:
        """Send the conversation as-is and return the first choice's content."""
        client = self._get_client()
        model = resolve_model(self.config, options)
        create_kwargs: dict[str, Any] = {
            "model": model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": options.temperature,
            "max_tokens": options.max_tokens,
        }
        if options.json_mode:
            create_kwargs["response_format"] = {"type": "json_object"}

        logger.debug("%s completion: model=%s messages=%d", self.name, model, len(messages))
        try:
            response = await client.chat.completions.create(**create_kwargs)
        except asyncio.CancelledError:
            raise
        except APIError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider=self.name,
                phase="complete",
                allow_network_errors=True,
                message=f"{self.name} completion failed",
            ) from e
        return _first_choice_text(response)

    async def embed(self, text: str, *, model: str | None = None) -> list[float]:
        """Return an embedding for *text* from the Embeddings API."""
        if not self.capabilities.embeddings:
            raise APIError(
                f"{self.name} does not support embeddings",
                provider=self.name,
                phase="embed",
                retryable=False,
            )
        client = self._get_client()
        model = model or self.config.models.get("embedding") or DEFAULT_EMBEDDING_MODEL
        try:
            response = await client.embeddings.create(model=model, input=text)
        except asyncio.CancelledError:
            raise
        except APIError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider=self.name,
                phase="embed",
                allow_network_errors=True,
                message=f"{self.name} embedding failed",
            ) from e

        data = getattr(response, "data", None) or []
        if not data:
            raise APIError(
                f"{self.name} returned no embedding data",
                provider=self.name,
                phase="embed",
            )
        return [float(v) for v in data[0].embedding]


def _first_choice_text(response: Any) -> str:
    choices = getattr(response, "choices", None) or []
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    return content if isinstance(content, str) else ""
