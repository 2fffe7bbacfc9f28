"""Mock provider for testing."""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING

from reai.providers.base import ProviderCapabilities

if TYPE_CHECKING:
    from reai.config import ProviderConfig
    from reai.providers.models import ChatMessage, CompletionOptions

MOCK_EMBEDDING_DIM = 8


class MockProvider:
    """Mock provider for testing without API calls.

    Echoes the last user message; embeddings are derived from a hash of the
    input so equal texts map to equal vectors.
    """

    def __init__(self, config: ProviderConfig) -> None:
        """Bind to *config* (only its provider id is used)."""
        self.config = config

    @property
    def capabilities(self) -> ProviderCapabilities:
        """Return supported feature flags."""
        return ProviderCapabilities(embeddings=True, json_mode=True)

    async def complete(
        self, messages: list[ChatMessage], options: CompletionOptions
    ) -> str:
        """Return a deterministic mock response."""
        text = next((m.content for m in reversed(messages) if m.role == "user"), "")
        if options.json_mode:
            return json.dumps({"echo": text[:100], "provider": self.config.provider})
        return f"echo: {text[:100]}"

    async def embed(self, text: str, *, model: str | None = None) -> list[float]:  # noqa: ARG002
        """Return a unit-scale vector derived from *text*."""
        digest = hashlib.sha256(text.encode()).digest()
        return [b / 255.0 for b in digest[:MOCK_EMBEDDING_DIM]]
