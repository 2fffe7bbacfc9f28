"""Synthesis: merge several providers' answers into one through the primary."""

from __future__ import annotations

import asyncio
from dataclasses import replace
import logging
from typing import TYPE_CHECKING

from reai.events import LoggingReporter, SynthesisFallbackEvent
from reai.prompts import (
    SYNTHESIS_JSON_INSTRUCTIONS,
    SYNTHESIS_SYSTEM_PROMPT,
    SYNTHESIS_TEXT_INSTRUCTIONS,
)
from reai.providers.models import ChatMessage, CompletionOptions
from reai.providers.registry import get_provider

if TYPE_CHECKING:
    from reai.config import ProviderConfig
    from reai.events import EventReporter
    from reai.providers.models import ProviderResponse
    from reai.providers.pool import ClientPool

logger = logging.getLogger(__name__)

# Extra room for the merged answer on top of the caller's budget.
SYNTHESIS_EXTRA_TOKENS = 1000


def response_label(provider_name: str) -> str:
    """Header that introduces one provider's answer in the synthesis prompt."""
    return f"=== RESPUESTA DE {provider_name} ==="


def build_synthesis_prompt(
    responses: list[ProviderResponse],
    original_messages: list[ChatMessage],
    *,
    json_mode: bool,
) -> str:
    """Build the merge prompt: user query, labelled answers, merge rules."""
    query = "\n\n".join(m.content for m in original_messages if m.role == "user")
    blocks = "\n\n".join(
        f"{response_label(r.provider_name)}\n{r.response}" for r in responses
    )
    instructions = SYNTHESIS_JSON_INSTRUCTIONS if json_mode else SYNTHESIS_TEXT_INSTRUCTIONS
    return (
        f"Consulta original del usuario:\n{query}\n\n"
        f"Se obtuvieron {len(responses)} respuestas de distintos modelos:\n\n"
        f"{blocks}\n\n"
        f"{instructions}"
    )


async def synthesize(
    primary: ProviderConfig,
    responses: list[ProviderResponse],
    original_messages: list[ChatMessage],
    options: CompletionOptions | None = None,
    *,
    pool: ClientPool | None = None,
    reporter: EventReporter | None = None,
) -> str:
    """Ask *primary* to merge *responses* into a single answer.

    If the synthesis call fails, the primary's own raw answer is returned when
    it is among *responses*, otherwise the first one; the degradation is
    reported as a ``SynthesisFallbackEvent``.
    """
    if not responses:
        raise ValueError("synthesize() needs at least one response")
    options = options or CompletionOptions()
    prompt = build_synthesis_prompt(
        responses, original_messages, json_mode=options.json_mode
    )
    synth_options = replace(options, max_tokens=options.max_tokens + SYNTHESIS_EXTRA_TOKENS)
    messages = [ChatMessage.system(SYNTHESIS_SYSTEM_PROMPT), ChatMessage.user(prompt)]

    logger.debug(
        "Synthesizing %d responses with %s", len(responses), primary.provider
    )
    try:
        return await get_provider(primary, pool).complete(messages, synth_options)
    except asyncio.CancelledError:
        raise
    except Exception as exc:
        fallback = next(
            (r for r in responses if r.provider == primary.provider), responses[0]
        )
        logger.warning(
            "Synthesis with %s failed (%s); returning raw %s response",
            primary.provider,
            exc,
            fallback.provider,
        )
        (reporter or LoggingReporter()).record_event(
            SynthesisFallbackEvent(
                synthesis_provider=primary.provider,
                returned_provider=fallback.provider,
                detail=f"{type(exc).__name__}: {exc}",
            )
        )
        return fallback.response
