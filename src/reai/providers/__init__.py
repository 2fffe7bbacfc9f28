"""Provider implementations."""

from .anthropic import AnthropicProvider
from .base import Provider, ProviderCapabilities
from .gemini import GeminiProvider
from .mock import MockProvider
from .models import ChatMessage, CompletionOptions, ProviderResponse
from .openai import OpenAIProvider
from .pool import ClientPool
from .registry import get_provider

__all__ = [
    "AnthropicProvider",
    "ChatMessage",
    "ClientPool",
    "CompletionOptions",
    "GeminiProvider",
    "MockProvider",
    "OpenAIProvider",
    "Provider",
    "ProviderCapabilities",
    "ProviderResponse",
    "get_provider",
]
