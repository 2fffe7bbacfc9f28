"""Fan-out orchestration across every active provider."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from reai.errors import AllProvidersFailedError, NoProviderConfiguredError
from reai.providers.models import CompletionOptions, ProviderResponse
from reai.providers.registry import get_provider
from reai.synthesis import synthesize

if TYPE_CHECKING:
    from reai.config import ProviderConfig
    from reai.events import EventReporter
    from reai.loader import ConfigLoader
    from reai.providers.models import ChatMessage
    from reai.providers.pool import ClientPool

logger = logging.getLogger(__name__)


def _no_provider_error() -> NoProviderConfiguredError:
    return NoProviderConfiguredError(
        "No AI provider configured",
        hint="Activate a provider in the AI settings or set OPENAI_API_KEY / ANTHROPIC_API_KEY.",
    )


async def complete(
    config: ProviderConfig,
    messages: list[ChatMessage],
    options: CompletionOptions | None = None,
    *,
    pool: ClientPool | None = None,
) -> str:
    """Run one completion against *config*'s provider."""
    return await get_provider(config, pool).complete(messages, options or CompletionOptions())


async def complete_multi(
    loader: ConfigLoader,
    messages: list[ChatMessage],
    options: CompletionOptions | None = None,
    *,
    pool: ClientPool | None = None,
    reporter: EventReporter | None = None,
) -> str:
    """Query every active provider concurrently and merge the answers.

    One config is called directly. With several, all calls are joined (not
    raced); a single survivor is returned unchanged and two or more are
    synthesized by the primary config.

    Raises:
        NoProviderConfiguredError: No active config exists.
        AllProvidersFailedError: Every provider call failed.
    """
    options = options or CompletionOptions()
    configs = await loader.load_all_active_configs()
    if not configs:
        raise _no_provider_error()
    if len(configs) == 1:
        return await complete(configs[0], messages, options, pool=pool)

    outcomes = await asyncio.gather(
        *(complete(c, messages, options, pool=pool) for c in configs),
        return_exceptions=True,
    )

    responses: list[ProviderResponse] = []
    errors: dict[str, BaseException] = {}
    for config, outcome in zip(configs, outcomes, strict=True):
        if isinstance(outcome, BaseException):
            if not isinstance(outcome, Exception):
                raise outcome
            logger.warning("Provider %s failed: %s", config.provider, outcome)
            errors[config.provider] = outcome
            continue
        responses.append(
            ProviderResponse(
                provider=config.provider,
                provider_name=config.info.name,
                response=outcome,
            )
        )

    if not responses:
        summary = "; ".join(f"{p}: {e}" for p, e in errors.items())
        raise AllProvidersFailedError(
            f"All {len(configs)} AI providers failed: {summary}", errors=errors
        )
    if len(responses) == 1:
        return responses[0].response

    primary = next((c for c in configs if c.is_primary), configs[0])
    logger.debug(
        "%d of %d providers answered; synthesizing with %s",
        len(responses),
        len(configs),
        primary.provider,
    )
    return await synthesize(
        primary, responses, messages, options, pool=pool, reporter=reporter
    )
