"""Tests for LiveModelClient and the provider factory."""

from __future__ import annotations

import asyncio
import json

import pytest

from aisales.core.llm.client import LiveModelClient, LiveModelError
from aisales.core.llm.provider import LLMProvider, ProviderResponse, create_provider
from aisales.core.llm.providers.mock import MockProvider
from aisales.core.llm.schemas import SCORECARD_SCHEMA, SCORECARD_SCHEMA_NAME
from aisales.core.uploads.attachments import Attachment


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio required)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _request(client: LiveModelClient, **kwargs):
    return _run(
        client.request(
            ["You are AI Sales.", "Use plain words."],
            "Review my hero",
            output_schema=SCORECARD_SCHEMA,
            schema_name=SCORECARD_SCHEMA_NAME,
            **kwargs,
        )
    )


class _SlowProvider:
    async def generate(self, system_messages, user_message, **kwargs) -> ProviderResponse:
        await asyncio.sleep(5)
        return ProviderResponse(envelope={}, model="slow")


class TestLiveModelClient:
    def test_returns_payload(self):
        provider = MockProvider({"headline": "Looks good"})
        payload = _request(LiveModelClient(provider))
        assert payload == {"headline": "Looks good"}
        assert provider.call_count == 1
        assert provider.last_schema_name == SCORECARD_SCHEMA_NAME
        assert provider.last_system_messages[0] == "You are AI Sales."
        assert provider.last_user_message == "Review my hero"

    def test_passes_attachments(self):
        provider = MockProvider({"headline": "ok"})
        image = Attachment(display_name="a.png", mime_type="image/png", base64_payload="AAAA")
        _request(LiveModelClient(provider), attachments=[image])
        assert provider.last_attachments == [image]

    def test_provider_error_becomes_live_model_error(self):
        provider = MockProvider(error=ConnectionError("network down"))
        with pytest.raises(LiveModelError, match="network down"):
            _request(LiveModelClient(provider))

    def test_timeout_becomes_live_model_error(self):
        client = LiveModelClient(_SlowProvider(), timeout_seconds=0.05)
        with pytest.raises(LiveModelError, match="timed out"):
            _request(client)

    def test_missing_payload_becomes_live_model_error(self):
        provider = MockProvider(envelope={"output": [{"content": [{"type": "output_text", "text": "Sorry"}]}]})
        with pytest.raises(LiveModelError, match="structured payload"):
            _request(LiveModelClient(provider))

    def test_deeply_nested_reply_becomes_live_model_error(self):
        provider = MockProvider("[" * 100000)
        with pytest.raises(LiveModelError):
            _request(LiveModelClient(provider))

    def test_no_retry_on_failure(self):
        provider = MockProvider(error=RuntimeError("boom"))
        with pytest.raises(LiveModelError):
            _request(LiveModelClient(provider))
        assert provider.call_count == 1


class TestMockProvider:
    def test_default_envelope_wraps_payload_as_text(self):
        provider = MockProvider({"a": 1})
        text = provider.envelope["output"][0]["content"][0]["text"]
        assert json.loads(text) == {"a": 1}

    def test_string_payload_kept_verbatim(self):
        provider = MockProvider("not json")
        assert provider.envelope["output"][0]["content"][0]["text"] == "not json"

    def test_satisfies_protocol(self):
        assert isinstance(MockProvider(), LLMProvider)


class TestCreateProvider:
    def test_mock(self):
        assert isinstance(create_provider("mock"), MockProvider)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            create_provider("carrier-pigeon")


class TestSchemas:
    def test_strict_mode_requires_every_property(self):
        def walk(node):
            if node.get("type") == "object":
                assert node["additionalProperties"] is False
                assert set(node["required"]) == set(node["properties"])
                for child in node["properties"].values():
                    walk(child)
            elif node.get("type") == "array":
                walk(node["items"])

        walk(SCORECARD_SCHEMA)
