"""Live-model provider protocol and factory."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from aisales.core.uploads.attachments import Attachment


@dataclass
class ProviderResponse:
    """Raw response envelope from a live model, plus usage accounting."""

    envelope: dict[str, Any]
    model: str
    input_tokens: int = 0
    output_tokens: int = 0
    latency_ms: float = 0.0
    extra: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class LLMProvider(Protocol):
    """Abstract interface for structured live-model calls."""

    async def generate(
        self,
        system_messages: list[str],
        user_message: str,
        *,
        output_schema: dict[str, Any],
        schema_name: str,
        attachments: list[Attachment] | None = None,
        max_tokens: int = 2048,
    ) -> ProviderResponse: ...


def create_provider(
    provider_name: str,
    api_key: str = "",
    model: str = "",
) -> LLMProvider:
    """Factory function to create a live-model provider by name.

    Args:
        provider_name: "openai", "anthropic", or "mock"
        api_key: API key for the provider.
        model: Model identifier override.
    """
    if provider_name == "openai":
        from aisales.core.llm.providers.openai import OpenAIProvider

        return OpenAIProvider(api_key=api_key, model=model or "gpt-4o-2024-08-06")
    elif provider_name == "anthropic":
        from aisales.core.llm.providers.anthropic import AnthropicProvider

        return AnthropicProvider(api_key=api_key, model=model or "claude-sonnet-4-5-20250929")
    elif provider_name == "mock":
        from aisales.core.llm.providers.mock import MockProvider

        return MockProvider()
    else:
        raise ValueError(f"Unknown LLM provider: {provider_name}")
