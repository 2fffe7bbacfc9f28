"""Embedding facade and vector similarity."""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from reai.errors import (
    DimensionMismatchError,
    NoEmbeddingProviderAvailableError,
    NoProviderConfiguredError,
)
from reai.providers.registry import get_provider

if TYPE_CHECKING:
    from collections.abc import Sequence

    from reai.config import ProviderConfig
    from reai.loader import ConfigLoader
    from reai.providers.pool import ClientPool

logger = logging.getLogger(__name__)


def pick_embedding_config(configs: list[ProviderConfig]) -> ProviderConfig:
    """Return the primary config if it can embed, else the first one that can."""
    if not configs:
        raise NoProviderConfiguredError(
            "No AI provider configured",
            hint="Activate a provider in the AI settings or set OPENAI_API_KEY.",
        )
    primary = next((c for c in configs if c.is_primary), configs[0])
    if primary.use_mock or primary.supports_embeddings:
        return primary
    for config in configs:
        if config.use_mock or config.supports_embeddings:
            logger.debug(
                "Primary %s cannot embed; using %s", primary.provider, config.provider
            )
            return config
    raise NoEmbeddingProviderAvailableError(
        "No active AI provider supports embeddings",
        hint="Activate OpenAI or Google in the AI settings to enable embeddings.",
    )


async def create_embedding(
    loader: ConfigLoader, text: str, *, pool: ClientPool | None = None
) -> list[float]:
    """Embed *text* with the primary provider or the first capable fallback."""
    configs = await loader.load_all_active_configs()
    config = pick_embedding_config(configs)
    model = config.models.get("embedding") or None
    return await get_provider(config, pool).embed(text, model=model)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between *a* and *b*; 0.0 if either has zero norm."""
    if len(a) != len(b):
        raise DimensionMismatchError(
            f"Vectors must have the same length ({len(a)} != {len(b)})"
        )
    dot = sum(x * y for x, y in zip(a, b, strict=True))
    norm_sq_a = sum(x * x for x in a)
    norm_sq_b = sum(y * y for y in b)
    if norm_sq_a == 0 or norm_sq_b == 0:
        return 0.0
    return dot / math.sqrt(norm_sq_a * norm_sq_b)
