"""Mock live-model provider for testing."""

from __future__ import annotations

import json
from typing import Any

from aisales.core.llm.provider import ProviderResponse
from aisales.core.uploads.attachments import Attachment


class MockProvider:
    """Mock provider for testing. Returns a canned envelope.

    ``payload`` is wrapped as the text of a single output item; pass
    ``envelope`` to control the raw shape directly, or ``error`` to make every
    call raise.
    """

    def __init__(
        self,
        payload: dict[str, Any] | str | None = None,
        *,
        envelope: dict[str, Any] | None = None,
        error: Exception | None = None,
    ) -> None:
        if envelope is None:
            text = payload if isinstance(payload, str) else json.dumps(payload or {})
            envelope = {"output": [{"content": [{"type": "output_text", "text": text}]}]}
        self.envelope = envelope
        self.error = error
        self.last_system_messages: list[str] = []
        self.last_user_message: str = ""
        self.last_attachments: list[Attachment] = []
        self.last_schema_name: str = ""
        self.call_count: int = 0

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
        self.last_system_messages = list(system_messages)
        self.last_user_message = user_message
        self.last_attachments = list(attachments or [])
        self.last_schema_name = schema_name
        self.call_count += 1
        if self.error is not None:
            raise self.error
        return ProviderResponse(
            envelope=self.envelope,
            model="mock",
            input_tokens=sum(len(m.split()) for m in system_messages) + len(user_message.split()),
            output_tokens=0,
            latency_ms=0.0,
        )
