"""Test helpers (small, reusable doubles).

Keep this file tiny and purpose-built: it exists to prevent test suites from
growing lots of one-off provider and store classes as coverage expands.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import pytest

from reai.loader import ConfigLoader
from tests.conftest import FakeProvider

if TYPE_CHECKING:
    from reai.config import ProviderConfig


@dataclass
class ScriptedProvider(FakeProvider):
    """FakeProvider that returns a scripted sequence of replies/exceptions.

    Once the script runs out it falls back to the ``ok:<prompt>`` reply.
    """

    script: list[str | BaseException] = field(default_factory=list)

    async def complete(self, messages: list[Any], options: Any) -> str:
        if not self.script:
            return await super().complete(messages, options)
        self.complete_calls.append((messages, options))
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


@dataclass
class GateProvider(FakeProvider):
    """FakeProvider that blocks in complete() until released.

    Lets a test observe that concurrent calls are all in flight at once.
    """

    started: asyncio.Event = field(default_factory=asyncio.Event)
    release: asyncio.Event = field(default_factory=asyncio.Event)
    reply: str = "gated"

    async def complete(self, messages: list[Any], options: Any) -> str:
        self.complete_calls.append((messages, options))
        self.started.set()
        await self.release.wait()
        return self.reply


@dataclass
class FailingStore:
    """SettingsStore whose reads always fail."""

    error: Exception = field(default_factory=lambda: RuntimeError("db down"))
    fetch_calls: int = 0

    async def fetch_active_settings(self) -> list[dict[str, Any]]:
        self.fetch_calls += 1
        raise self.error


def loader_for(*configs: ProviderConfig) -> ConfigLoader:
    """ConfigLoader whose cache already holds *configs* (no store reads)."""
    loader = ConfigLoader()
    loader.cache.store(list(configs))
    return loader


def route_providers(
    monkeypatch: pytest.MonkeyPatch,
    providers: dict[str, Any],
    *modules: str,
) -> None:
    """Point ``get_provider`` in each module at *providers*, keyed by provider id."""

    def fake_get_provider(config: ProviderConfig, pool: Any = None) -> Any:
        _ = pool
        provider = providers[config.provider]
        provider.config = config
        return provider

    for module in modules or ("reai.orchestrator", "reai.synthesis"):
        monkeypatch.setattr(f"{module}.get_provider", fake_get_provider)
