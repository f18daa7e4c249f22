"""OpenAI provider using the Responses API with structured output."""

from __future__ import annotations

import time
from typing import Any

from aisales.core.llm.provider import ProviderResponse
from aisales.core.uploads.attachments import Attachment


class OpenAIProvider:
    """OpenAI provider using the OpenAI SDK."""

    def __init__(self, api_key: str, model: str = "gpt-4o-2024-08-06") -> None:
        import openai

        self.client = openai.AsyncOpenAI(api_key=api_key)
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
        user_content: list[dict[str, Any]] = [{"type": "input_text", "text": user_message}]
        for attachment in attachments or []:
            user_content.append({"type": "input_image", "image_url": attachment.data_url})

        start = time.monotonic()
        response = await self.client.responses.create(
            model=self.model,
            max_output_tokens=max_tokens,
            input=[
                {
                    "role": "system",
                    "content": [{"type": "input_text", "text": m} for m in system_messages if m],
                },
                {"role": "user", "content": user_content},
            ],
            text={
                "format": {
                    "type": "json_schema",
                    "name": schema_name,
                    "schema": output_schema,
                    "strict": True,
                }
            },
        )
        elapsed_ms = (time.monotonic() - start) * 1000

        envelope = response.model_dump()
        envelope["output_text"] = response.output_text
        usage = response.usage
        return ProviderResponse(
            envelope=envelope,
            model=self.model,
            input_tokens=usage.input_tokens if usage else 0,
            output_tokens=usage.output_tokens if usage else 0,
            latency_ms=elapsed_ms,
        )
