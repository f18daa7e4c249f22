"""JSON schemas sent to the live model for structured output.

Strict structured output requires every property to be listed in
``required`` and ``additionalProperties`` to be false at every level.
"""

from __future__ import annotations

from typing import Any

SCORECARD_SCHEMA_NAME = "ai_sales_review"
BUILD_PLAN_SCHEMA_NAME = "ai_sales_build_plan"


def _obj(properties: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "object",
        "additionalProperties": False,
        "required": list(properties),
        "properties": properties,
    }


def _array(items: dict[str, Any]) -> dict[str, Any]:
    return {"type": "array", "items": items}


_STRING = {"type": "string"}
_SCORE = {"type": "integer", "minimum": 0, "maximum": 100}
_STEP = _obj({"title": _STRING, "detail": _STRING})

SCORECARD_SCHEMA: dict[str, Any] = _obj(
    {
        "headline": {"type": "string", "description": "Short sentence naming the main issue."},
        "summary": {"type": "string", "description": "Concise overview of what matters most."},
        "scores": _obj({"confidence": _SCORE, "pushiness": _SCORE, "clarity": _SCORE}),
        "flags": _array(_obj({"title": _STRING, "detail": _STRING, "evidence": _STRING})),
        "free_rewrite": _obj({"before": _STRING, "after": _STRING, "rationale": _STRING}),
        "locked_insights": _array(_obj({"title": _STRING, "summary": _STRING})),
        "builder_actions": _array(_STEP),
        "experiments": _array(_STRING),
        "checklist": _array(_STRING),
        "reassurance": _STRING,
        "suggested_prompts": _array(_STRING),
    }
)

BUILD_PLAN_SCHEMA: dict[str, Any] = _obj(
    {
        "headline": _STRING,
        "summary": _STRING,
        "screens": _array(
            _obj({"name": _STRING, "goal": _STRING, "key_elements": _array(_STRING)})
        ),
        "flows": _array(_obj({"title": _STRING, "steps": _array(_STRING)})),
        "data_model": _array(_obj({"entity": _STRING, "fields": _array(_STRING)})),
        "builder_steps": _array(_STEP),
        "export_plan": _obj(
            {
                "description": _STRING,
                "files": _array(_obj({"filename": _STRING, "description": _STRING})),
            }
        ),
        "next_steps": _array(_STRING),
        "suggested_prompts": _array(_STRING),
    }
)
