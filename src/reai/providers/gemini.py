"""Gemini provider implementation."""

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

DEFAULT_EMBEDDING_MODEL = "text-embedding-004"


def flatten_conversation(messages: list[ChatMessage]) -> str:
    """Render a conversation as one prompt.

    The first system message leads, followed by ``User:``/``Assistant:``
    turns separated by blank lines.
    """
    conversation = "\n\n".join(
        f"{'User' if m.role == 'user' else 'Assistant'}: {m.content}"
        for m in messages
        if m.role != "system"
    )
    system = first_system_prompt(messages)
    return f"{system}\n\n{conversation}" if system else conversation


class GeminiProvider:
    """Google Gemini API provider."""

    def __init__(self, config: ProviderConfig, *, pool: ClientPool | None = None) -> None:
        """Bind to *config*; SDK clients come from *pool* when given."""
        self.config = config
        self.pool = pool
        self._client: Any = None

    def _get_client(self) -> Any:
        """Lazy-initialize the Gemini client."""
        if self._client is None:
            try:
                from google import genai
            except ImportError as e:
                raise APIError(
                    "google-genai package not installed",
                    hint="uv pip install google-genai",
                ) from e

            def build() -> Any:
                return genai.Client(api_key=self.config.api_key)

            if self.pool is None:
                self._client = build()
            else:
                key = ("google", self.config.api_key, None)
                self._client = self.pool.get_or_create(key, build)
        return self._client

    @property
    def capabilities(self) -> ProviderCapabilities:
        """Return supported feature flags."""
        return ProviderCapabilities(embeddings=True, json_mode=True)

    async def complete(
        self, messages: list[ChatMessage], options: CompletionOptions
    ) -> str:
        """Issue one generate_content call with the flattened conversation."""
        client = self._get_client()
        from google.genai import types

        model = resolve_model(self.config, options)
        config_kwargs: dict[str, Any] = {
            "temperature": options.temperature,
            "max_output_tokens": options.max_tokens,
        }
        if options.json_mode:
            config_kwargs["response_mime_type"] = "application/json"

        logger.debug("gemini completion: model=%s messages=%d", model, len(messages))
        try:
            response = await client.aio.models.generate_content(
                model=model,
                contents=flatten_conversation(messages),
                config=types.GenerateContentConfig(**config_kwargs),
            )
        except asyncio.CancelledError:
            raise
        except APIError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider="google",
                phase="complete",
                allow_network_errors=True,
                message="Gemini completion failed",
            ) from e
        text = getattr(response, "text", None)
        return text if isinstance(text, str) else ""

    async def embed(self, text: str, *, model: str | None = None) -> list[float]:
        """Return an embedding for *text* via embed_content."""
        client = self._get_client()
        model = model or self.config.models.get("embedding") or DEFAULT_EMBEDDING_MODEL
        try:
            response = await client.aio.models.embed_content(model=model, contents=text)
        except asyncio.CancelledError:
            raise
        except APIError:
            raise
        except Exception as e:
            raise wrap_provider_error(
                e,
                provider="google",
                phase="embed",
                allow_network_errors=True,
                message="Gemini embedding failed",
            ) from e

        embeddings = getattr(response, "embeddings", None) or []
        values = getattr(embeddings[0], "values", None) if embeddings else None
        if not values:
            raise APIError(
                "google returned no embedding values",
                provider="google",
                phase="embed",
            )
        return [float(v) for v in values]
