"""Provider protocol: minimal interface for chat and embedding adapters."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from reai.config import ProviderConfig
    from reai.providers.models import ChatMessage, CompletionOptions


@dataclass(frozen=True)
class ProviderCapabilities:
    """Feature flags exposed by providers."""

    embeddings: bool
    json_mode: bool = True


@runtime_checkable
class Provider(Protocol):
    """Minimal provider protocol: complete and embed."""

    config: ProviderConfig

    async def complete(
        self, messages: list[ChatMessage], options: CompletionOptions
    ) -> str:
        """Return the model's reply text ("" when the reply has no text)."""
        ...

    async def embed(self, text: str, *, model: str | None = None) -> list[float]:
        """Return an embedding vector for *text*."""
        ...

    @property
    def capabilities(self) -> ProviderCapabilities:
        """Feature capabilities for routing decisions."""
        ...
