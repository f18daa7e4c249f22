"""Tests for structured payload extraction from response envelopes."""

from __future__ import annotations

import json

import pytest

from aisales.core.llm.envelope import (
    EnvelopeKind,
    classify_block,
    extract_structured_payload,
    safe_json_parse,
)

PAYLOAD = {"headline": "ok", "scores": {"confidence": 70}}


def _envelope(*blocks):
    return {"output": [{"content": list(blocks)}]}


class TestClassifyBlock:
    @pytest.mark.parametrize("block_type", ["output_json_schema", "json_schema"])
    @pytest.mark.parametrize("field", ["json", "schema"])
    def test_json_schema_blocks(self, block_type, field):
        kind, payload = classify_block({"type": block_type, field: PAYLOAD})
        assert kind is EnvelopeKind.JSON_SCHEMA
        assert payload == PAYLOAD

    def test_nested_json_schema(self):
        kind, payload = classify_block({"type": "x", "output_json_schema": {"json": PAYLOAD}})
        assert kind is EnvelopeKind.NESTED_JSON_SCHEMA
        assert payload == PAYLOAD

    def test_bare_json(self):
        kind, payload = classify_block({"type": "whatever", "json": PAYLOAD})
        assert kind is EnvelopeKind.BARE_JSON

    @pytest.mark.parametrize("block_type", ["output_text", "text", None])
    def test_json_text(self, block_type):
        kind, payload = classify_block({"type": block_type, "text": json.dumps(PAYLOAD)})
        assert kind is EnvelopeKind.JSON_TEXT
        assert payload == PAYLOAD

    @pytest.mark.parametrize(
        "block",
        [
            {"type": "output_text", "text": "Sure! Here is my review."},
            {"type": "output_text", "text": "[1, 2, 3]"},
            {"type": "json_schema", "json": "not a dict"},
            "a string block",
            None,
        ],
    )
    def test_unmatched(self, block):
        assert classify_block(block) is None


class TestSafeJsonParseDepth:
    def test_deeply_nested_text_is_rejected(self):
        assert safe_json_parse("[" * 100000) is None


class TestExtractStructuredPayload:
    def test_first_match_wins(self):
        first = {"headline": "first"}
        env = _envelope(
            {"type": "output_text", "text": "no json here"},
            {"type": "output_text", "text": json.dumps(first)},
            {"type": "json_schema", "json": {"headline": "second"}},
        )
        assert extract_structured_payload(env) == first

    def test_searches_later_output_items(self):
        env = {
            "output": [
                {"type": "reasoning", "content": []},
                {"type": "message", "content": [{"type": "output_text", "text": json.dumps(PAYLOAD)}]},
            ]
        }
        assert extract_structured_payload(env) == PAYLOAD

    def test_top_level_output_text(self):
        env = {"output": [], "output_text": json.dumps(PAYLOAD)}
        assert extract_structured_payload(env) == PAYLOAD

    def test_chat_completion_content(self):
        env = {"choices": [{"message": {"role": "assistant", "content": json.dumps(PAYLOAD)}}]}
        assert extract_structured_payload(env) == PAYLOAD

    def test_chat_completion_parsed(self):
        env = {"choices": [{"message": {"content": None, "parsed": PAYLOAD}}]}
        assert extract_structured_payload(env) == PAYLOAD

    def test_content_blocks_win_over_top_level(self):
        env = _envelope({"type": "output_text", "text": json.dumps({"a": 1})})
        env["output_text"] = json.dumps({"b": 2})
        assert extract_structured_payload(env) == {"a": 1}

    @pytest.mark.parametrize(
        "result",
        [
            None,
            "text",
            {},
            {"output": "nope"},
            {"output": [{"content": "nope"}]},
            {"output": [None, 3]},
            {"output_text": "plain prose"},
            {"choices": [{"message": {"content": "plain prose"}}]},
        ],
    )
    def test_nothing_matches(self, result):
        assert extract_structured_payload(result) is None


class TestSafeJsonParse:
    def test_object(self):
        assert safe_json_parse('{"a": 1}') == {"a": 1}

    @pytest.mark.parametrize("value", ["", "  ", "{bad", "[]", "3", None, 5])
    def test_rejects(self, value):
        assert safe_json_parse(value) is None


def test_deeply_nested_text_block_is_skipped():
    env = _envelope(
        {"type": "output_text", "text": "[" * 100000},
        {"type": "output_text", "text": json.dumps(PAYLOAD)},
    )
    assert extract_structured_payload(env) == PAYLOAD
