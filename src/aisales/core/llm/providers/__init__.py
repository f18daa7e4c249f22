"""Live-model provider implementations."""

from aisales.core.llm.providers.anthropic import AnthropicProvider
from aisales.core.llm.providers.mock import MockProvider
from aisales.core.llm.providers.openai import OpenAIProvider

__all__ = ["AnthropicProvider", "MockProvider", "OpenAIProvider"]
