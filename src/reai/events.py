"""Structured operational events.

Silent degradations (running on environment credentials after a storage
failure, returning a raw response after a failed synthesis) are reported as
events so operators can detect them, not only as log lines.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import time
from typing import Literal, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

FallbackReason = Literal["store_error", "store_empty", "no_usable_records"]


@dataclass(frozen=True)
class ConfigFallbackEvent:
    """The config loader fell back to environment credentials."""

    reason: FallbackReason
    detail: str = ""
    fallback_provider: str | None = None
    timestamp_s: float = field(default_factory=time.time)


@dataclass(frozen=True)
class SynthesisFallbackEvent:
    """Synthesis failed and a raw provider response was returned instead."""

    synthesis_provider: str
    returned_provider: str
    detail: str = ""
    timestamp_s: float = field(default_factory=time.time)


Event = ConfigFallbackEvent | SynthesisFallbackEvent


@runtime_checkable
class EventReporter(Protocol):
    """Duck-typed protocol for event sinks."""

    def record_event(self, event: Event) -> None: ...  # noqa: D102


class LoggingReporter:
    """Default reporter: one warning log line per event."""

    def record_event(self, event: Event) -> None:
        """Log *event* at warning level."""
        logger.warning("reai event %s: %s", type(event).__name__, event)


@dataclass
class CollectingReporter:
    """Reporter that keeps events in memory (tests, health endpoints)."""

    events: list[Event] = field(default_factory=list)

    def record_event(self, event: Event) -> None:
        """Append *event*."""
        self.events.append(event)
