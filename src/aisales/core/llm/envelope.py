"""Locate the structured JSON payload inside a live-model response envelope.

Providers wrap structured output in several shapes. Each content block of each
output item is classified into an ``EnvelopeKind``; the first block that yields
a JSON object wins. Top-level ``output_text`` and chat-completion ``choices``
are consulted only when no content block matches.
"""

from __future__ import annotations

import enum
import json
import logging
from typing import Any

logger = logging.getLogger(__name__)

_SCHEMA_BLOCK_TYPES = ("output_json_schema", "json_schema")


class EnvelopeKind(enum.Enum):
    """Where in a content block the structured payload was found."""

    JSON_SCHEMA = "json_schema"
    NESTED_JSON_SCHEMA = "nested_json_schema"
    BARE_JSON = "bare_json"
    JSON_TEXT = "json_text"


def safe_json_parse(value: Any) -> dict[str, Any] | None:
    """Parse a JSON object from text; None for anything else."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = json.loads(value)
    except (ValueError, RecursionError):
        return None
    return parsed if isinstance(parsed, dict) else None


def _object_field(block: dict[str, Any]) -> dict[str, Any] | None:
    for key in ("json", "schema"):
        value = block.get(key)
        if isinstance(value, dict):
            return value
    return None


def classify_block(block: Any) -> tuple[EnvelopeKind, dict[str, Any]] | None:
    """Return the kind and payload of one content block, or None."""
    if not isinstance(block, dict):
        return None

    if block.get("type") in _SCHEMA_BLOCK_TYPES:
        payload = _object_field(block)
        if payload is not None:
            return EnvelopeKind.JSON_SCHEMA, payload

    nested = block.get("output_json_schema")
    if isinstance(nested, dict):
        payload = _object_field(nested)
        if payload is not None:
            return EnvelopeKind.NESTED_JSON_SCHEMA, payload

    payload = _object_field(block)
    if payload is not None:
        return EnvelopeKind.BARE_JSON, payload

    payload = safe_json_parse(block.get("text"))
    if payload is not None:
        return EnvelopeKind.JSON_TEXT, payload

    return None


def _from_choices(result: dict[str, Any]) -> dict[str, Any] | None:
    choices = result.get("choices")
    if not isinstance(choices, list):
        return None
    for choice in choices:
        message = choice.get("message") if isinstance(choice, dict) else None
        if not isinstance(message, dict):
            continue
        if isinstance(message.get("parsed"), dict):
            return message["parsed"]
        payload = safe_json_parse(message.get("content"))
        if payload is not None:
            return payload
    return None


def extract_structured_payload(result: Any) -> dict[str, Any] | None:
    """Find the structured payload in ``result``; None when nothing matches."""
    if not isinstance(result, dict):
        return None

    outputs = result.get("output")
    for item in outputs if isinstance(outputs, list) else []:
        blocks = item.get("content") if isinstance(item, dict) else None
        for block in blocks if isinstance(blocks, list) else []:
            match = classify_block(block)
            if match is not None:
                kind, payload = match
                logger.debug("Structured payload found as %s", kind.value)
                return payload

    payload = safe_json_parse(result.get("output_text"))
    if payload is not None:
        return payload

    return _from_choices(result)
