"""Provider adapter contracts against fake SDK clients."""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from reai.config import ProviderConfig
from reai.errors import APIError, ConfigurationError, RateLimitError
from reai.providers import (
    AnthropicProvider,
    ChatMessage,
    ClientPool,
    CompletionOptions,
    GeminiProvider,
    MockProvider,
    OpenAIProvider,
    get_provider,
)
from reai.providers._errors import (
    extract_retry_after_s,
    extract_status_code,
    wrap_provider_error,
)
from reai.providers.gemini import flatten_conversation

pytestmark = pytest.mark.contract

CONVERSATION = [
    ChatMessage.system("Eres un asistente."),
    ChatMessage.user("Hola"),
    ChatMessage.assistant("¿En qué te ayudo?"),
    ChatMessage.user("Busco casa en Dorado"),
]


class _FakeCompletions:
    """Captures kwargs passed to chat.completions.create()."""

    def __init__(self, content: str | None = "ok", error: Exception | None = None) -> None:
        self.last_kwargs: dict[str, Any] | None = None
        self.content = content
        self.error = error

    async def create(self, **kwargs: Any) -> Any:
        self.last_kwargs = kwargs
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class _FakeEmbeddings:
    def __init__(self, data: list[Any]) -> None:
        self.data = data
        self.last_kwargs: dict[str, Any] | None = None

    async def create(self, **kwargs: Any) -> Any:
        self.last_kwargs = kwargs
        return SimpleNamespace(data=self.data)


class _Resp:
    def __init__(self, status_code: int, headers: dict[str, str] | None = None) -> None:
        self.status_code = status_code
        self.headers = headers or {}


class _SdkError(Exception):
    def __init__(self, message: str, *, response: _Resp) -> None:
        super().__init__(message)
        self.response = response


def _openai_client(completions: Any = None, embeddings: Any = None) -> Any:
    return SimpleNamespace(
        chat=SimpleNamespace(completions=completions or _FakeCompletions()),
        embeddings=embeddings,
    )


# =============================================================================
# OpenAI / Groq
# =============================================================================


@pytest.mark.asyncio
async def test_openai_complete_sends_conversation_and_options(
    openai_config: ProviderConfig,
) -> None:
    completions = _FakeCompletions("respuesta")
    provider = OpenAIProvider(openai_config)
    provider._client = _openai_client(completions)

    text = await provider.complete(
        CONVERSATION, CompletionOptions(temperature=0.2, max_tokens=50, json_mode=True)
    )

    assert text == "respuesta"
    kwargs = completions.last_kwargs
    assert kwargs is not None
    assert kwargs["model"] == "gpt-4o-mini"
    assert kwargs["temperature"] == 0.2
    assert kwargs["max_tokens"] == 50
    assert kwargs["response_format"] == {"type": "json_object"}
    assert [m["role"] for m in kwargs["messages"]] == ["system", "user", "assistant", "user"]


@pytest.mark.asyncio
async def test_openai_complete_omits_response_format_without_json_mode(
    openai_config: ProviderConfig,
) -> None:
    completions = _FakeCompletions()
    provider = OpenAIProvider(openai_config)
    provider._client = _openai_client(completions)

    await provider.complete(CONVERSATION, CompletionOptions(model="gpt-4o", task="analysis"))

    assert completions.last_kwargs is not None
    assert "response_format" not in completions.last_kwargs
    assert completions.last_kwargs["model"] == "gpt-4o"


@pytest.mark.asyncio
async def test_openai_missing_content_yields_empty_string(
    openai_config: ProviderConfig,
) -> None:
    provider = OpenAIProvider(openai_config)
    provider._client = _openai_client(_FakeCompletions(content=None))

    assert await provider.complete(CONVERSATION, CompletionOptions()) == ""


@pytest.mark.asyncio
async def test_openai_sdk_error_is_wrapped_with_metadata(
    openai_config: ProviderConfig,
) -> None:
    error = _SdkError("slow down", response=_Resp(429, {"Retry-After": "3"}))
    provider = OpenAIProvider(openai_config)
    provider._client = _openai_client(_FakeCompletions(error=error))

    with pytest.raises(RateLimitError) as exc:
        await provider.complete(CONVERSATION, CompletionOptions())

    assert exc.value.provider == "openai"
    assert exc.value.phase == "complete"
    assert exc.value.retryable is True
    assert exc.value.retry_after_s == 3.0
    assert exc.value.__cause__ is error


@pytest.mark.asyncio
async def test_openai_embed_uses_configured_model(openai_config: ProviderConfig) -> None:
    embeddings = _FakeEmbeddings([SimpleNamespace(embedding=[0.1, 0.2, 0.3])])
    provider = OpenAIProvider(openai_config)
    provider._client = _openai_client(embeddings=embeddings)

    vector = await provider.embed("casa con piscina")

    assert vector == [0.1, 0.2, 0.3]
    assert embeddings.last_kwargs == {"model": "text-embedding-3-small", "input": "casa con piscina"}


@pytest.mark.asyncio
async def test_openai_embed_empty_data_raises(openai_config: ProviderConfig) -> None:
    provider = OpenAIProvider(openai_config)
    provider._client = _openai_client(embeddings=_FakeEmbeddings([]))

    with pytest.raises(APIError, match="no embedding data"):
        await provider.embed("x")


@pytest.mark.asyncio
async def test_groq_rejects_embeddings_without_calling_sdk() -> None:
    provider = OpenAIProvider(ProviderConfig(provider="groq", api_key="gsk_x"))
    provider._client = MagicMock()

    with pytest.raises(APIError, match="does not support embeddings"):
        await provider.embed("x")
    provider._client.embeddings.create.assert_not_called()
    assert provider.capabilities.embeddings is False


def test_groq_client_targets_groq_endpoint() -> None:
    provider = OpenAIProvider(ProviderConfig(provider="groq", api_key="gsk_x"))

    client = provider._get_client()

    assert "api.groq.com" in str(client.base_url)


# =============================================================================
# Anthropic
# =============================================================================


class _FakeMessages:
    def __init__(self, blocks: list[Any]) -> None:
        self.blocks = blocks
        self.last_kwargs: dict[str, Any] | None = None

    async def create(self, **kwargs: Any) -> Any:
        self.last_kwargs = kwargs
        return SimpleNamespace(content=self.blocks)


@pytest.mark.asyncio
async def test_anthropic_splits_system_prompt(anthropic_config: ProviderConfig) -> None:
    messages = _FakeMessages(
        [SimpleNamespace(type="tool_use"), SimpleNamespace(type="text", text="claro")]
    )
    provider = AnthropicProvider(anthropic_config)
    provider._client = SimpleNamespace(messages=messages)

    text = await provider.complete(CONVERSATION, CompletionOptions(max_tokens=64))

    assert text == "claro"
    kwargs = messages.last_kwargs
    assert kwargs is not None
    assert kwargs["system"] == "Eres un asistente."
    assert kwargs["max_tokens"] == 64
    assert [m["role"] for m in kwargs["messages"]] == ["user", "assistant", "user"]


@pytest.mark.asyncio
async def test_anthropic_omits_system_when_absent(anthropic_config: ProviderConfig) -> None:
    messages = _FakeMessages([])
    provider = AnthropicProvider(anthropic_config)
    provider._client = SimpleNamespace(messages=messages)

    text = await provider.complete([ChatMessage.user("hola")], CompletionOptions())

    assert text == ""
    assert messages.last_kwargs is not None
    assert "system" not in messages.last_kwargs


@pytest.mark.asyncio
async def test_anthropic_embed_is_unsupported(anthropic_config: ProviderConfig) -> None:
    with pytest.raises(APIError) as exc:
        await AnthropicProvider(anthropic_config).embed("x")
    assert exc.value.retryable is False
    assert exc.value.phase == "embed"


# =============================================================================
# Gemini
# =============================================================================


def _gemini_client(**methods: Any) -> Any:
    client = MagicMock()
    client.aio = SimpleNamespace(models=SimpleNamespace(**methods))
    return client


def test_flatten_conversation_puts_system_first() -> None:
    assert flatten_conversation(CONVERSATION) == (
        "Eres un asistente.\n\n"
        "User: Hola\n\n"
        "Assistant: ¿En qué te ayudo?\n\n"
        "User: Busco casa en Dorado"
    )
    assert flatten_conversation([ChatMessage.user("hola")]) == "User: hola"


@pytest.mark.asyncio
async def test_gemini_generate_config_shape(google_config: ProviderConfig) -> None:
    captured: dict[str, Any] = {}

    async def fake_generate_content(*, model: str, contents: Any, config: Any) -> Any:
        captured.update(model=model, contents=contents, config=config)
        return SimpleNamespace(text='{"ok": true}')

    provider = GeminiProvider(google_config)
    provider._client = _gemini_client(generate_content=fake_generate_content)

    text = await provider.complete(
        CONVERSATION, CompletionOptions(temperature=0.3, max_tokens=128, json_mode=True)
    )

    assert text == '{"ok": true}'
    assert captured["model"] == "gemini-1.5-flash"
    assert captured["contents"].startswith("Eres un asistente.")
    config = captured["config"]
    assert config.temperature == 0.3
    assert config.max_output_tokens == 128
    assert config.response_mime_type == "application/json"


@pytest.mark.asyncio
async def test_gemini_embed_reads_values(google_config: ProviderConfig) -> None:
    captured: dict[str, Any] = {}

    async def fake_embed_content(*, model: str, contents: Any) -> Any:
        captured.update(model=model, contents=contents)
        return SimpleNamespace(embeddings=[SimpleNamespace(values=[1, 2])])

    provider = GeminiProvider(google_config)
    provider._client = _gemini_client(embed_content=fake_embed_content)

    assert await provider.embed("hola", model="text-embedding-004") == [1.0, 2.0]
    assert captured == {"model": "text-embedding-004", "contents": "hola"}


@pytest.mark.asyncio
async def test_gemini_error_wrapped(google_config: ProviderConfig) -> None:
    async def boom(**_kwargs: Any) -> Any:
        raise _SdkError("bad key", response=_Resp(403))

    provider = GeminiProvider(google_config)
    provider._client = _gemini_client(generate_content=boom)

    with pytest.raises(APIError) as exc:
        await provider.complete(CONVERSATION, CompletionOptions())

    assert exc.value.status_code == 403
    assert exc.value.provider == "google"
    assert "GEMINI_API_KEY" in (exc.value.hint or "")


# =============================================================================
# Mock
# =============================================================================


@pytest.mark.asyncio
async def test_mock_provider_is_deterministic() -> None:
    provider = MockProvider(ProviderConfig(provider="openai", api_key="", use_mock=True))

    assert await provider.complete(CONVERSATION, CompletionOptions()) == (
        "echo: Busco casa en Dorado"
    )
    payload = json.loads(await provider.complete(CONVERSATION, CompletionOptions(json_mode=True)))
    assert payload == {"echo": "Busco casa en Dorado", "provider": "openai"}
    assert await provider.embed("a") == await provider.embed("a")
    assert await provider.embed("a") != await provider.embed("b")


# =============================================================================
# Registry and pool
# =============================================================================


@pytest.mark.parametrize(
    ("provider", "cls"),
    [
        ("openai", OpenAIProvider),
        ("groq", OpenAIProvider),
        ("anthropic", AnthropicProvider),
        ("google", GeminiProvider),
    ],
)
def test_get_provider_dispatches_on_tag(provider: str, cls: type) -> None:
    config = ProviderConfig(provider=provider, api_key="key")  # type: ignore[arg-type]
    assert isinstance(get_provider(config), cls)


def test_get_provider_honors_mock_flag() -> None:
    config = ProviderConfig(provider="anthropic", api_key="", use_mock=True)
    assert isinstance(get_provider(config), MockProvider)


def test_adapters_share_pooled_clients(openai_config: ProviderConfig) -> None:
    pool = ClientPool()
    sentinel = object()
    pool.get_or_create(("openai", openai_config.api_key, None), lambda: sentinel)

    assert get_provider(openai_config, pool)._get_client() is sentinel  # type: ignore[attr-defined]


def test_pool_evicts_least_recently_used() -> None:
    pool = ClientPool(max_size=2)
    pool.get_or_create(("openai", "a", None), object)
    pool.get_or_create(("openai", "b", None), object)
    pool.get_or_create(("openai", "a", None), object)
    pool.get_or_create(("openai", "c", None), object)

    assert ("openai", "a", None) in pool
    assert ("openai", "b", None) not in pool
    assert len(pool) == 2


def test_pool_keys_on_endpoint() -> None:
    pool = ClientPool()
    first = pool.get_or_create(("openai", "k", None), object)
    second = pool.get_or_create(("openai", "k", "https://gw.example/v1"), object)
    assert first is not second


def test_pool_rejects_zero_size() -> None:
    with pytest.raises(ConfigurationError):
        ClientPool(max_size=0)


# =============================================================================
# Request models
# =============================================================================


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_tokens": 0},
        {"max_tokens": True},
        {"temperature": 2.5},
        {"task": "summarize"},
        {"model": " "},
    ],
)
def test_completion_options_validation(kwargs: dict[str, Any]) -> None:
    with pytest.raises(ConfigurationError):
        CompletionOptions(**kwargs)


def test_chat_message_rejects_unknown_role() -> None:
    with pytest.raises(ConfigurationError, match="role"):
        ChatMessage("tool", "x")  # type: ignore[arg-type]


# =============================================================================
# Error wrapping
# =============================================================================


def test_wrap_provider_error_classifies_retryable_status() -> None:
    err = wrap_provider_error(
        _SdkError("upstream", response=_Resp(503)),
        provider="openai",
        phase="complete",
        allow_network_errors=False,
    )
    assert type(err) is APIError
    assert err.retryable is True
    assert err.status_code == 503
    assert str(err) == "openai complete failed (status=503): upstream"


def test_wrap_provider_error_network_errors_are_retryable() -> None:
    request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
    err = wrap_provider_error(
        httpx.ConnectError("refused", request=request),
        provider="openai",
        phase="complete",
        allow_network_errors=True,
    )
    assert err.retryable is True
    assert err.status_code is None


def test_wrap_provider_error_auth_hint_names_env_var() -> None:
    err = wrap_provider_error(
        _SdkError("invalid x-api-key", response=_Resp(401)),
        provider="anthropic",
        phase="complete",
        allow_network_errors=True,
    )
    assert err.retryable is False
    assert "ANTHROPIC_API_KEY" in (err.hint or "")


def test_wrap_provider_error_fills_existing_api_error() -> None:
    original = APIError("already wrapped")
    err = wrap_provider_error(
        original, provider="groq", phase="complete", allow_network_errors=True
    )
    assert err is original
    assert err.provider == "groq"
    assert err.phase == "complete"


def test_extractors_walk_the_cause_chain() -> None:
    inner = _SdkError("inner", response=_Resp(429, {"Retry-After": "1.5"}))
    outer = RuntimeError("outer")
    outer.__cause__ = inner

    assert extract_status_code(outer) == 429
    assert extract_retry_after_s(outer) == 1.5
