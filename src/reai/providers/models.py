"""Domain models for the provider transport layer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal, get_args

from reai.catalog import TASK_NAMES
from reai.errors import ConfigurationError

if TYPE_CHECKING:
    from reai.catalog import TaskName
    from reai.config import ProviderConfig

Role = Literal["system", "user", "assistant"]
_ROLES: tuple[str, ...] = get_args(Role)


@dataclass(frozen=True)
class ChatMessage:
    """A single conversational turn."""

    role: Role
    content: str

    def __post_init__(self) -> None:
        """Reject roles no adapter can map."""
        if self.role not in _ROLES:
            raise ConfigurationError(
                f"Unknown message role: {self.role!r}",
                hint="Use one of: system, user, assistant.",
            )
        if not isinstance(self.content, str):
            raise ConfigurationError(
                f"Message content must be a string, got {type(self.content).__name__}"
            )

    @classmethod
    def system(cls, content: str) -> ChatMessage:
        """Build a system message."""
        return cls("system", content)

    @classmethod
    def user(cls, content: str) -> ChatMessage:
        """Build a user message."""
        return cls("user", content)

    @classmethod
    def assistant(cls, content: str) -> ChatMessage:
        """Build an assistant message."""
        return cls("assistant", content)


@dataclass(frozen=True)
class CompletionOptions:
    """Per-call completion options.

    ``model`` wins when set; otherwise the model comes from the config's
    mapping for ``task`` (default ``chat``).
    """

    model: str | None = None
    temperature: float = 0.7
    max_tokens: int = 2000
    json_mode: bool = False
    task: TaskName | None = None

    def __post_init__(self) -> None:
        """Validate ranges and task name."""
        if isinstance(self.max_tokens, bool) or not isinstance(self.max_tokens, int):
            raise ConfigurationError("max_tokens must be an integer")
        if self.max_tokens <= 0:
            raise ConfigurationError(
                f"max_tokens must be positive, got {self.max_tokens}",
                hint="Use at least 1 token.",
            )
        if not isinstance(self.temperature, (int, float)) or isinstance(
            self.temperature, bool
        ):
            raise ConfigurationError("temperature must be a number")
        if not 0 <= self.temperature <= 2:
            raise ConfigurationError(
                f"temperature must be within [0, 2], got {self.temperature}"
            )
        if self.task is not None and self.task not in TASK_NAMES:
            raise ConfigurationError(
                f"Unknown task: {self.task!r}",
                hint=f"Use one of: {', '.join(TASK_NAMES)}.",
            )
        if self.model is not None and (
            not isinstance(self.model, str) or not self.model.strip()
        ):
            raise ConfigurationError("model must be a non-empty string when set")


@dataclass(frozen=True)
class ProviderResponse:
    """One provider's raw answer during a fan-out, labelled for synthesis."""

    provider: str
    provider_name: str
    response: str


def resolve_model(config: ProviderConfig, options: CompletionOptions) -> str:
    """Return the effective model for a call."""
    return options.model or config.model_for(options.task)


def first_system_prompt(messages: list[ChatMessage]) -> str | None:
    """Return the first system message's content, if any."""
    return next((m.content for m in messages if m.role == "system"), None)
