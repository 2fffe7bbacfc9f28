"""AIClient: the facade applications hold on to.

It owns one ``ConfigLoader`` (config snapshot) and one ``ClientPool`` (SDK
clients), so invalidating settings is a single ``clear_cache()`` call.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import time
from typing import TYPE_CHECKING

from reai import embeddings, orchestrator
from reai.errors import NoProviderConfiguredError
from reai.events import LoggingReporter
from reai.loader import ConfigLoader
from reai.prompts import CONNECTION_TEST_PROMPT
from reai.providers.models import ChatMessage, CompletionOptions
from reai.providers.pool import ClientPool

if TYPE_CHECKING:
    from collections.abc import Sequence

    from reai.config import ProviderConfig
    from reai.events import EventReporter
    from reai.store import SettingsStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectionResult:
    """Outcome of a provider connectivity check."""

    success: bool
    message: str
    latency_ms: int | None = None


class AIClient:
    """Multi-provider AI client.

    Example:
        client = AIClient(store)
        answer = await client.complete_multi([ChatMessage.user("Hola")])
    """

    def __init__(
        self,
        store: SettingsStore | None = None,
        *,
        loader: ConfigLoader | None = None,
        pool: ClientPool | None = None,
        reporter: EventReporter | None = None,
    ) -> None:
        """Build a client over *store*, or around an existing *loader*."""
        self.reporter: EventReporter = reporter or LoggingReporter()
        self.loader = loader or ConfigLoader(store=store, reporter=self.reporter)
        self.pool = pool or ClientPool()

    async def chat_completion(
        self, messages: list[ChatMessage], options: CompletionOptions | None = None
    ) -> str:
        """Single-provider completion on the primary config."""
        config = await self.loader.primary_config()
        if config is None:
            raise NoProviderConfiguredError(
                "No AI provider configured",
                hint="Activate a provider in the AI settings or set OPENAI_API_KEY.",
            )
        return await orchestrator.complete(config, messages, options, pool=self.pool)

    async def complete_multi(
        self, messages: list[ChatMessage], options: CompletionOptions | None = None
    ) -> str:
        """Fan out to every active provider and merge the answers."""
        return await orchestrator.complete_multi(
            self.loader, messages, options, pool=self.pool, reporter=self.reporter
        )

    async def create_embedding(self, text: str) -> list[float]:
        """Embed *text* with the first embedding-capable provider."""
        return await embeddings.create_embedding(self.loader, text, pool=self.pool)

    @staticmethod
    def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
        """See :func:`reai.embeddings.cosine_similarity`."""
        return embeddings.cosine_similarity(a, b)

    def clear_cache(self) -> None:
        """Drop cached configs and SDK clients; the next call reloads settings."""
        self.loader.clear()
        self.pool.clear()
        logger.debug("AI client caches cleared")

    def set_active_config(self, config: ProviderConfig) -> None:
        """Pin *config* as the only active provider until the next clear."""
        self.loader.set_active_config(config)

    async def test_connection(self, config: ProviderConfig | None = None) -> ConnectionResult:
        """Ask the provider for a one-word reply and time it.

        Never raises for provider failures. With *config* given, that config is
        tested directly and the loader snapshot is left untouched.
        """
        if config is None:
            config = await self.loader.primary_config()
            if config is None:
                return ConnectionResult(success=False, message="No AI provider configured")

        name = config.info.name
        started = time.perf_counter()
        try:
            reply = await orchestrator.complete(
                config,
                [ChatMessage.user(CONNECTION_TEST_PROMPT)],
                CompletionOptions(max_tokens=10, temperature=0),
                pool=self.pool,
            )
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("Connection test for %s failed: %s", config.provider, exc)
            return ConnectionResult(success=False, message=f"Connection failed: {exc}")

        latency_ms = int((time.perf_counter() - started) * 1000)
        if "hola" in reply.lower():
            return ConnectionResult(True, f"Connected to {name}", latency_ms)
        return ConnectionResult(True, f"Response received from {name}", latency_ms)
