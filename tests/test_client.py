"""AIClient facade: routing, cache control and connection tests."""

from __future__ import annotations

import pytest

from reai.client import AIClient
from reai.config import ProviderConfig
from reai.errors import APIError, NoProviderConfiguredError
from reai.providers.models import ChatMessage
from reai.store import InMemorySettingsStore
from tests.conftest import FakeProvider
from tests.helpers import ScriptedProvider, loader_for, route_providers

pytestmark = pytest.mark.unit


def _store(*providers: str) -> InMemorySettingsStore:
    return InMemorySettingsStore(
        [
            {"provider": p, "api_key": f"key-{p}", "is_active": True, "is_primary": i == 0}
            for i, p in enumerate(providers)
        ]
    )


@pytest.mark.asyncio
async def test_chat_completion_uses_primary_only(monkeypatch: pytest.MonkeyPatch) -> None:
    openai, google = FakeProvider(), FakeProvider()
    route_providers(monkeypatch, {"openai": openai, "google": google}, "reai.orchestrator")
    client = AIClient(_store("openai", "google"))

    text = await client.chat_completion([ChatMessage.user("hola")])

    assert text == "ok:hola"
    assert len(openai.complete_calls) == 1
    assert google.complete_calls == []


@pytest.mark.asyncio
async def test_chat_completion_without_config_raises() -> None:
    with pytest.raises(NoProviderConfiguredError):
        await AIClient(InMemorySettingsStore()).chat_completion([ChatMessage.user("hola")])


@pytest.mark.asyncio
async def test_complete_multi_through_mock_configs() -> None:
    """End to end with mock adapters: fan-out, then synthesis by the primary."""
    configs = [
        ProviderConfig(provider="openai", api_key="", use_mock=True, is_primary=True),
        ProviderConfig(provider="anthropic", api_key="", use_mock=True),
    ]
    client = AIClient(loader=loader_for(*configs))

    text = await client.complete_multi([ChatMessage.user("hola")])

    assert text.startswith("echo: Consulta original del usuario:")


@pytest.mark.asyncio
async def test_clear_cache_reloads_settings_and_drops_clients() -> None:
    store = _store("openai")
    client = AIClient(store)
    await client.loader.load_all_active_configs()
    client.pool.get_or_create(("openai", "key-openai", None), object)

    client.clear_cache()
    await client.loader.load_all_active_configs()

    assert store.fetch_calls == 2
    assert len(client.pool) == 0


@pytest.mark.asyncio
async def test_create_embedding_and_similarity() -> None:
    mock = ProviderConfig(provider="openai", api_key="", use_mock=True, is_primary=True)
    client = AIClient(loader=loader_for(mock))

    a = await client.create_embedding("casa")
    b = await client.create_embedding("casa")

    assert AIClient.cosine_similarity(a, b) == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_connection_recognizes_spanish_reply(
    monkeypatch: pytest.MonkeyPatch, openai_config: ProviderConfig
) -> None:
    openai = ScriptedProvider(script=["¡Hola!"])
    route_providers(monkeypatch, {"openai": openai}, "reai.orchestrator")

    result = await AIClient().test_connection(openai_config)

    assert result.success is True
    assert result.message == "Connected to OpenAI"
    assert result.latency_ms is not None and result.latency_ms >= 0
    _, options = openai.complete_calls[0]
    assert options.max_tokens == 10
    assert options.temperature == 0


@pytest.mark.asyncio
async def test_connection_other_reply_still_succeeds(
    monkeypatch: pytest.MonkeyPatch, anthropic_config: ProviderConfig
) -> None:
    route_providers(
        monkeypatch, {"anthropic": ScriptedProvider(script=["Bonjour"])}, "reai.orchestrator"
    )

    result = await AIClient().test_connection(anthropic_config)

    assert result.success is True
    assert result.message == "Response received from Anthropic (Claude)"


@pytest.mark.asyncio
async def test_connection_failure_is_reported_not_raised(
    monkeypatch: pytest.MonkeyPatch, openai_config: ProviderConfig
) -> None:
    route_providers(
        monkeypatch,
        {"openai": ScriptedProvider(script=[APIError("invalid key")])},
        "reai.orchestrator",
    )

    result = await AIClient().test_connection(openai_config)

    assert result.success is False
    assert result.message == "Connection failed: invalid key"


@pytest.mark.asyncio
async def test_connection_without_any_config() -> None:
    result = await AIClient(InMemorySettingsStore()).test_connection()

    assert result.success is False
    assert result.message == "No AI provider configured"


@pytest.mark.asyncio
async def test_set_active_config_overrides_store(monkeypatch: pytest.MonkeyPatch) -> None:
    groq = FakeProvider()
    route_providers(monkeypatch, {"groq": groq}, "reai.orchestrator")
    store = _store("openai")
    client = AIClient(store)

    client.set_active_config(ProviderConfig(provider="groq", api_key="gsk_x"))
    await client.chat_completion([ChatMessage.user("hola")])

    assert store.fetch_calls == 0
    assert len(groq.complete_calls) == 1
