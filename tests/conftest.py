"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration, shared config
fixtures, and automatic API test skipping. Isolation fixtures are autouse.
"""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass, field
import logging
import os
from typing import Any

import pytest

from reai.config import ProviderConfig
from reai.providers.base import ProviderCapabilities

# =============================================================================
# Test Doubles
# =============================================================================


@dataclass
class FakeProvider:
    """Provider test double for orchestration behavior verification.

    Records every call and answers ``ok:<last user message>``. Use to test
    fan-out, synthesis and services without making real API calls.
    """

    config: Any = None
    complete_calls: list[tuple[list[Any], Any]] = field(default_factory=list)
    embed_calls: list[tuple[str, str | None]] = field(default_factory=list)
    _capabilities: ProviderCapabilities = field(
        default_factory=lambda: ProviderCapabilities(embeddings=True, json_mode=True)
    )

    @property
    def capabilities(self) -> ProviderCapabilities:
        return self._capabilities

    async def complete(self, messages: list[Any], options: Any) -> str:
        self.complete_calls.append((messages, options))
        prompt = next((m.content for m in reversed(messages) if m.role == "user"), "")
        return f"ok:{prompt}"

    async def embed(self, text: str, *, model: str | None = None) -> list[float]:
        self.embed_calls.append((text, model))
        return [1.0, 0.0, 0.0]


# =============================================================================
# Config Fixtures
# =============================================================================


@pytest.fixture
def openai_config() -> ProviderConfig:
    """Primary OpenAI config with an explicit chat model."""
    return ProviderConfig(
        provider="openai",
        api_key="sk-test-openai",
        models={"chat": "gpt-4o-mini", "embedding": "text-embedding-3-small"},
        is_primary=True,
    )


@pytest.fixture
def anthropic_config() -> ProviderConfig:
    """Secondary Anthropic config."""
    return ProviderConfig(
        provider="anthropic",
        api_key="sk-ant-test",
        models={"chat": "claude-3-5-haiku-20241022"},
    )


@pytest.fixture
def google_config() -> ProviderConfig:
    """Secondary Gemini config."""
    return ProviderConfig(
        provider="google",
        api_key="AIza-test",
        models={"chat": "gemini-1.5-flash"},
    )


# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


_PROVIDER_ENV_PREFIXES = (
    "OPENAI_",
    "ANTHROPIC_",
    "GEMINI_",
    "GOOGLE_",
    "GROQ_",
    "SHOWCASE_IDX_",
)


@pytest.fixture(autouse=True)
def isolate_provider_env(request, monkeypatch):
    """Ensure a clean provider environment for each test.

    Clears AI and listing provider env vars so the environment fallback only
    sees what a test sets itself.
    Opt-out: @pytest.mark.allow_env_pollution or @pytest.mark.api
    """
    if request.node.get_closest_marker("allow_env_pollution") or (
        "api" in request.node.keywords
    ):
        return

    for key in list(os.environ.keys()):
        if key.startswith(_PROVIDER_ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# =============================================================================
# Pytest Hooks
# =============================================================================

API_TESTS_REASON = "API tests require ENABLE_API_TESTS=1"


def _api_tests_enabled() -> bool:
    return bool(os.getenv("ENABLE_API_TESTS"))


def pytest_collection_modifyitems(items):
    """Automatically skip API tests when not explicitly enabled."""
    if _api_tests_enabled():
        return
    skip_api = pytest.mark.skip(reason=API_TESTS_REASON)
    for item in items:
        if "api" in item.keywords:
            item.add_marker(skip_api)


# =============================================================================
# API Test Configuration
# =============================================================================


@pytest.fixture
def openai_api_key():
    """Return OPENAI_API_KEY or skip the test if unavailable."""
    key = os.getenv("OPENAI_API_KEY")
    if not key:
        pytest.skip("OPENAI_API_KEY not set")
    return key
