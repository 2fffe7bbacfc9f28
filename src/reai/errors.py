"""Exception hierarchy for REAI."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class ReaiError(Exception):
    """Base exception for all REAI errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigurationError(ReaiError):
    """Configuration validation or resolution failed."""


class NoProviderConfiguredError(ConfigurationError):
    """No usable AI provider config was found in storage or the environment."""


class APIError(ReaiError):
    """A provider call failed.

    Providers attach status and retry metadata so callers can classify
    failures without brittle substring matching.
    """

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        retryable: bool | None = None,
        status_code: int | None = None,
        retry_after_s: float | None = None,
        provider: str | None = None,
        phase: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.retryable = retryable
        self.status_code = status_code
        self.retry_after_s = retry_after_s
        self.provider = provider
        self.phase = phase


class RateLimitError(APIError):
    """Rate limit exceeded (HTTP 429)."""


class AllProvidersFailedError(APIError):
    """Every concurrent provider call failed.

    ``errors`` maps provider id to the exception it raised. No partial output
    is carried.
    """

    def __init__(
        self,
        message: str,
        *,
        errors: dict[str, BaseException] | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint, retryable=False, phase="fan_out")
        self.errors: dict[str, BaseException] = dict(errors or {})


class NoEmbeddingProviderAvailableError(ReaiError):
    """No active provider declares embedding support."""


class DimensionMismatchError(ReaiError, ValueError):
    """Vectors passed to a similarity function have different lengths."""


class ServiceError(ReaiError):
    """An AI service could not interpret the model output."""


class PropertyProviderError(ReaiError):
    """A listing provider request failed."""

    def __init__(
        self,
        message: str,
        *,
        hint: str | None = None,
        provider: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.provider = provider
        self.status_code = status_code


def _walk_exception_chain(exc: BaseException) -> Iterator[BaseException]:
    """Yield *exc* and its ``__cause__``/``__context__`` chain, with cycle protection."""
    seen: set[int] = set()
    stack: list[BaseException] = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur

        cause = cur.__cause__
        if isinstance(cause, BaseException):
            stack.append(cause)
        context = cur.__context__
        if isinstance(context, BaseException):
            stack.append(context)
