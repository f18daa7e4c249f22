"""Anthropic Claude provider."""

from __future__ import annotations

import json
import time
from typing import Any

from aisales.core.llm.provider import ProviderResponse
from aisales.core.uploads.attachments import Attachment

_SCHEMA_INSTRUCTION = (
    "Reply with a single JSON object and nothing else. It must validate against "
    "this JSON schema named {name}:\n{schema}"
)


class AnthropicProvider:
    """Claude provider using the Anthropic SDK.

    The Messages API has no strict schema mode here, so the schema travels in
    the system prompt and the JSON comes back as a text block.
    """

    def __init__(self, api_key: str, model: str = "claude-sonnet-4-5-20250929") -> None:
        import anthropic

        self.client = anthropic.AsyncAnthropic(api_key=api_key)
        self.model = model

    async def generate(
        self,
        system_messages: list[str],
        user_message: str,
        *,
        output_schema: dict[str, Any],
        schema_name: str,
        attachments: list[Attachment] | None = None,
        max_tokens: int = 2048,
    ) -> ProviderResponse:
        system = "\n\n".join(
            [m for m in system_messages if m]
            + [_SCHEMA_INSTRUCTION.format(name=schema_name, schema=json.dumps(output_schema))]
        )
        content: list[dict[str, Any]] = [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": attachment.mime_type,
                    "data": attachment.base64_payload,
                },
            }
            for attachment in attachments or []
        ]
        content.append({"type": "text", "text": user_message})

        start = time.monotonic()
        response = await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            system=system,
            messages=[{"role": "user", "content": content}],
        )
        elapsed_ms = (time.monotonic() - start) * 1000

        # Present the content blocks as one output item so envelope
        # extraction treats both providers alike.
        envelope = {
            "id": response.id,
            "output": [{"content": [block.model_dump() for block in response.content]}],
        }
        return ProviderResponse(
            envelope=envelope,
            model=self.model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
            latency_ms=elapsed_ms,
        )
