"""Static catalog of supported AI providers, their models and capabilities."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, get_args

from reai.errors import ConfigurationError

ProviderId = Literal["openai", "anthropic", "google", "groq"]
TaskName = Literal["chat", "embedding", "analysis", "content"]

PROVIDER_IDS: tuple[ProviderId, ...] = get_args(ProviderId)
TASK_NAMES: tuple[TaskName, ...] = get_args(TaskName)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


@dataclass(frozen=True)
class ModelInfo:
    """A model offered by a provider for a given task."""

    id: str
    name: str
    context_window: int
    supports_json: bool = False
    cost_per_1k_tokens: float | None = None


@dataclass(frozen=True)
class ProviderInfo:
    """Metadata describing one AI provider."""

    id: ProviderId
    name: str
    base_url: str
    api_key_prefix: str
    supports_embeddings: bool
    supports_streaming: bool
    default_models: dict[TaskName, str]
    models: dict[TaskName, tuple[ModelInfo, ...]] = field(default_factory=dict)


_GPT_4O = ModelInfo("gpt-4o", "GPT-4o", 128_000, True, 0.005)
_GPT_4O_MINI = ModelInfo("gpt-4o-mini", "GPT-4o Mini", 128_000, True, 0.00015)
_SONNET = ModelInfo(
    "claude-3-5-sonnet-20241022", "Claude 3.5 Sonnet", 200_000, True, 0.003
)
_HAIKU = ModelInfo("claude-3-5-haiku-20241022", "Claude 3.5 Haiku", 200_000, True, 0.0008)
_GEMINI_PRO = ModelInfo("gemini-1.5-pro", "Gemini 1.5 Pro", 2_000_000, True, 0.00125)
_GEMINI_FLASH = ModelInfo("gemini-1.5-flash", "Gemini 1.5 Flash", 1_000_000, True, 0.000075)
_LLAMA_70B = ModelInfo("llama-3.3-70b-versatile", "Llama 3.3 70B", 128_000, True, 0.00059)
_LLAMA_8B = ModelInfo("llama-3.1-8b-instant", "Llama 3.1 8B", 128_000, True, 0.00005)

AI_PROVIDERS: dict[ProviderId, ProviderInfo] = {
    "openai": ProviderInfo(
        id="openai",
        name="OpenAI",
        base_url="https://api.openai.com/v1",
        api_key_prefix="sk-",
        supports_embeddings=True,
        supports_streaming=True,
        default_models={
            "chat": "gpt-4o",
            "embedding": "text-embedding-3-small",
            "analysis": "gpt-4o",
            "content": "gpt-4o",
        },
        models={
            "chat": (
                _GPT_4O,
                _GPT_4O_MINI,
                ModelInfo("gpt-4-turbo", "GPT-4 Turbo", 128_000, True, 0.01),
                ModelInfo("gpt-3.5-turbo", "GPT-3.5 Turbo", 16_385, True, 0.0005),
            ),
            "embedding": (
                ModelInfo("text-embedding-3-large", "Embedding 3 Large", 8191, False, 0.00013),
                ModelInfo("text-embedding-3-small", "Embedding 3 Small", 8191, False, 0.00002),
            ),
            "analysis": (_GPT_4O, _GPT_4O_MINI),
            "content": (_GPT_4O, _GPT_4O_MINI),
        },
    ),
    "anthropic": ProviderInfo(
        id="anthropic",
        name="Anthropic (Claude)",
        base_url="https://api.anthropic.com",
        api_key_prefix="sk-ant-",
        supports_embeddings=False,
        supports_streaming=True,
        default_models={
            "chat": "claude-3-5-sonnet-20241022",
            "embedding": "",
            "analysis": "claude-3-5-sonnet-20241022",
            "content": "claude-3-5-sonnet-20241022",
        },
        models={
            "chat": (
                _SONNET,
                _HAIKU,
                ModelInfo("claude-3-opus-20240229", "Claude 3 Opus", 200_000, True, 0.015),
            ),
            "embedding": (),
            "analysis": (_SONNET,),
            "content": (_SONNET, _HAIKU),
        },
    ),
    "google": ProviderInfo(
        id="google",
        name="Google AI (Gemini)",
        base_url="https://generativelanguage.googleapis.com/v1beta",
        api_key_prefix="AI",
        supports_embeddings=True,
        supports_streaming=True,
        default_models={
            "chat": "gemini-1.5-pro",
            "embedding": "text-embedding-004",
            "analysis": "gemini-1.5-pro",
            "content": "gemini-1.5-flash",
        },
        models={
            "chat": (
                _GEMINI_PRO,
                _GEMINI_FLASH,
                ModelInfo("gemini-2.0-flash-exp", "Gemini 2.0 Flash", 1_000_000, True, 0.0001),
            ),
            "embedding": (
                ModelInfo("text-embedding-004", "Text Embedding 004", 2048, False, 0.00001),
            ),
            "analysis": (_GEMINI_PRO,),
            "content": (_GEMINI_FLASH,),
        },
    ),
    "groq": ProviderInfo(
        id="groq",
        name="Groq (Fast Inference)",
        base_url=GROQ_BASE_URL,
        api_key_prefix="gsk_",
        supports_embeddings=False,
        supports_streaming=True,
        default_models={
            "chat": "llama-3.3-70b-versatile",
            "embedding": "",
            "analysis": "llama-3.3-70b-versatile",
            "content": "llama-3.3-70b-versatile",
        },
        models={
            "chat": (
                _LLAMA_70B,
                _LLAMA_8B,
                ModelInfo("mixtral-8x7b-32768", "Mixtral 8x7B", 32_768, True, 0.00024),
            ),
            "embedding": (),
            "analysis": (_LLAMA_70B,),
            "content": (_LLAMA_70B, _LLAMA_8B),
        },
    ),
}


def is_provider_id(value: object) -> bool:
    """Return True if *value* names a supported provider."""
    return isinstance(value, str) and value in AI_PROVIDERS


def get_provider_info(provider: str) -> ProviderInfo:
    """Return catalog metadata for *provider*."""
    info = AI_PROVIDERS.get(provider)  # type: ignore[call-overload]
    if info is None:
        raise ConfigurationError(
            f"Unknown AI provider: {provider!r}",
            hint=f"Supported providers: {', '.join(PROVIDER_IDS)}",
        )
    return info


def get_models_for_task(provider: str, task: TaskName) -> tuple[ModelInfo, ...]:
    """Return the models a provider offers for *task* (empty if none)."""
    info = AI_PROVIDERS.get(provider)  # type: ignore[call-overload]
    if info is None:
        return ()
    return info.models.get(task, ())


def validate_api_key_format(provider: str, api_key: str) -> bool:
    """Cheap format check: expected prefix and a plausible length."""
    info = AI_PROVIDERS.get(provider)  # type: ignore[call-overload]
    if info is None:
        return False
    return api_key.startswith(info.api_key_prefix) and len(api_key) > 20


def mask_api_key(api_key: str | None) -> str:
    """Mask an API key for display, keeping only its first 7 and last 4 chars."""
    if not api_key or len(api_key) < 12:
        return "••••••••"
    return f"{api_key[:7]}••••{api_key[-4:]}"
