"""Configuration: frozen per-provider config records and the environment fallback."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import os
from typing import TYPE_CHECKING, Any

from dotenv import load_dotenv

from reai.catalog import GROQ_BASE_URL, TASK_NAMES, get_provider_info, is_provider_id
from reai.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from reai.catalog import ProviderId, ProviderInfo

load_dotenv()

# Environment fallback, checked in this order when storage yields nothing.
FALLBACK_ENV_VARS: tuple[tuple[ProviderId, str], ...] = (
    ("openai", "OPENAI_API_KEY"),
    ("anthropic", "ANTHROPIC_API_KEY"),
)


@dataclass(frozen=True)
class ProviderConfig:
    """Immutable configuration for one active AI provider.

    ``models`` maps a task name (``chat``, ``embedding``, ``analysis``,
    ``content``) to a model id. ``extra_config`` carries provider-specific
    settings such as ``base_url`` for OpenAI-compatible gateways.

    Example:
        config = ProviderConfig(provider="openai", api_key="sk-...", models={"chat": "gpt-4o"})
    """

    provider: ProviderId
    api_key: str
    models: dict[str, str] = field(default_factory=dict)
    extra_config: dict[str, Any] = field(default_factory=dict)
    is_primary: bool = False
    #: Route calls to the offline mock provider; no API key needed.
    use_mock: bool = False

    def __post_init__(self) -> None:
        """Validate provider and credential."""
        if not is_provider_id(self.provider):
            raise ConfigurationError(
                f"Unknown provider: {self.provider!r}",
                hint="Supported providers: openai, anthropic, google, groq",
            )
        if self.use_mock:
            object.__setattr__(self, "api_key", self.api_key or "")
        elif not isinstance(self.api_key, str) or not self.api_key.strip():
            raise ConfigurationError(
                f"API key required for {self.provider}",
                hint="Store an api_key for this provider or set its environment variable.",
            )
        object.__setattr__(self, "models", dict(self.models or {}))
        object.__setattr__(self, "extra_config", dict(self.extra_config or {}))

    @property
    def info(self) -> ProviderInfo:
        """Catalog metadata for this config's provider."""
        return get_provider_info(self.provider)

    @property
    def supports_embeddings(self) -> bool:
        """Whether the provider can produce embeddings."""
        return self.info.supports_embeddings

    @property
    def base_url(self) -> str | None:
        """Endpoint override: fixed for Groq, optional for OpenAI-compatible gateways."""
        if self.provider == "groq":
            return GROQ_BASE_URL
        raw = self.extra_config.get("base_url", self.extra_config.get("baseUrl"))
        return raw if isinstance(raw, str) and raw else None

    def model_for(self, task: str | None = None) -> str:
        """Resolve the model for *task*, falling back to ``chat`` then the catalog default."""
        key = task or "chat"
        model = self.models.get(key) or self.models.get("chat")
        if not model:
            defaults = self.info.default_models
            model = defaults.get(key) or defaults.get("chat")  # type: ignore[call-overload]
        if not model:
            raise ConfigurationError(
                f"No model configured for task {key!r} on {self.provider}",
                hint="Set a model for this task in the provider settings.",
            )
        return model

    def with_primary(self, is_primary: bool = True) -> ProviderConfig:
        """Return a copy with the primary flag set."""
        return replace(self, is_primary=is_primary)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> ProviderConfig:
        """Build a config from a stored provider-settings record.

        Records look like ``{provider, api_key, is_active, is_primary, models, config}``.
        """
        models = record.get("models") or {}
        extra = record.get("config") or {}
        if not isinstance(models, dict):
            raise ConfigurationError(
                f"models for {record.get('provider')!r} must be an object",
                hint="Store models as a JSON object keyed by task name.",
            )
        if not isinstance(extra, dict):
            extra = {}
        return cls(
            provider=record.get("provider"),  # type: ignore[arg-type]
            api_key=record.get("api_key") or "",
            models={k: v for k, v in models.items() if isinstance(v, str) and v},
            extra_config=extra,
            is_primary=bool(record.get("is_primary", False)),
        )

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"ProviderConfig(provider={self.provider!r}, "
            f"api_key={'[REDACTED]' if self.api_key else None}, "
            f"models={self.models!r}, is_primary={self.is_primary}, "
            f"use_mock={self.use_mock})"
        )

    __repr__ = __str__


def default_models(provider: ProviderId) -> dict[str, str]:
    """Catalog default model map for *provider*, omitting unsupported tasks."""
    defaults = get_provider_info(provider).default_models
    return {task: defaults[task] for task in TASK_NAMES if defaults.get(task)}


def config_from_env() -> ProviderConfig | None:
    """Derive a single primary config from environment credentials.

    Returns None when no fallback credential is set.
    """
    for provider, env_var in FALLBACK_ENV_VARS:
        api_key = os.environ.get(env_var)
        if api_key:
            return ProviderConfig(
                provider=provider,
                api_key=api_key,
                models=default_models(provider),
                is_primary=True,
            )
    return None
