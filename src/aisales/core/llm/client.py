"""Live-model client: bounded provider call plus payload extraction."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from aisales.core.llm.envelope import extract_structured_payload
from aisales.core.llm.provider import LLMProvider, ProviderResponse
from aisales.core.uploads.attachments import Attachment

logger = logging.getLogger(__name__)


class LiveModelError(RuntimeError):
    """The live model could not produce a structured payload."""


class LiveModelClient:
    """Calls a provider once, within a timeout, and returns its JSON object.

    Every failure (network, HTTP, timeout, missing payload) surfaces as
    ``LiveModelError`` so callers have a single thing to degrade on.
    """

    def __init__(self, provider: LLMProvider, timeout_seconds: float = 30.0) -> None:
        self.provider = provider
        self.timeout_seconds = timeout_seconds

    async def request(
        self,
        system_messages: list[str],
        user_message: str,
        *,
        output_schema: dict[str, Any],
        schema_name: str,
        attachments: list[Attachment] | None = None,
    ) -> dict[str, Any]:
        try:
            response: ProviderResponse = await asyncio.wait_for(
                self.provider.generate(
                    system_messages,
                    user_message,
                    output_schema=output_schema,
                    schema_name=schema_name,
                    attachments=attachments,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise LiveModelError(
                f"Live model timed out after {self.timeout_seconds:.0f}s"
            ) from exc
        except Exception as exc:
            raise LiveModelError(f"Live model call failed: {exc}") from exc

        logger.info(
            "Live model call: schema=%s, model=%s, tokens=%d+%d, latency=%.0fms",
            schema_name,
            response.model,
            response.input_tokens,
            response.output_tokens,
            response.latency_ms,
        )

        try:
            payload = extract_structured_payload(response.envelope)
        except (ValueError, RecursionError) as exc:
            raise LiveModelError(f"Could not read the model response: {exc}") from exc
        if payload is None:
            logger.warning(
                "Response missing structured payload: %s",
                json.dumps(response.envelope, default=str)[:2000],
            )
            raise LiveModelError("Model did not return a structured payload")
        return payload
