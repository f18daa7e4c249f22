"""Response normalizer: arbitrary model output -> fixed Scorecard / BuildPlan.

Never raises on missing or wrong-typed fields. Every list is re-mapped element
by element so each item has its expected sub-shape. Unparseable strings fall
back to the deterministic generators.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from typing import Any

from aisales.domains.advisor.domain_logic.build_plans import new_build_id, simulate_build_plan
from aisales.domains.advisor.domain_logic.guidance import GuidanceProfile
from aisales.domains.advisor.domain_logic.models import (
    MAX_BUILDER_ACTIONS,
    MAX_FLAGS,
    MAX_LOCKED_INSIGHTS,
    SCORE_NAMES,
    SOURCE_LIVE,
    BuildPlan,
    Entity,
    ExportFile,
    ExportPlan,
    Flag,
    Flow,
    LockedInsight,
    Rewrite,
    Scorecard,
    Scores,
    Screen,
    Step,
)
from aisales.domains.advisor.domain_logic.templates import TemplateLibrary, instantiate
from aisales.domains.advisor.domain_logic.variants import (
    VariantSelector,
    apply_tone,
    clamp_score,
    score_summary,
)

logger = logging.getLogger(__name__)

DEFAULT_FLAG_TITLE = "Issue"
DEFAULT_FLAG_DETAIL = "Needs clarification."
DEFAULT_FLAG_EVIDENCE = "No evidence provided."
DEFAULT_REWRITE_RATIONALE = "No rewrite suggested."
DEFAULT_INSIGHT_SUMMARY = "Unlock the full report to see this insight."
DEFAULT_BUILD_SUMMARY = "Build plan summary unavailable."

_NOT_JSON = object()


# ---------------------------------------------------------------------------
# Coercion helpers
# ---------------------------------------------------------------------------

def parse_json_payload(payload: Any) -> Any:
    """Parse str/bytes payloads; return ``_NOT_JSON`` when parsing fails."""
    if isinstance(payload, bytes):
        payload = payload.decode("utf-8", errors="replace")
    if isinstance(payload, str):
        try:
            return json.loads(payload)
        except (ValueError, RecursionError):
            return _NOT_JSON
    return payload


def _pick(data: dict[str, Any], *keys: str) -> Any:
    """First present value among snake_case / camelCase spellings."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _text(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return default


def _text_list(value: Any) -> tuple[str, ...]:
    """Strings kept, numbers stringified, {title/detail/text} dicts flattened."""
    out: list[str] = []
    for item in _as_list(value):
        if isinstance(item, dict):
            text = _text(item.get("text") or item.get("title") or item.get("detail"), "")
        else:
            text = _text(item, "")
        if text:
            out.append(text)
    return tuple(out)


def _to_flag(item: Any) -> Flag | None:
    if item is None:
        return None
    if isinstance(item, str):
        return Flag(
            title=DEFAULT_FLAG_TITLE,
            detail=_text(item, DEFAULT_FLAG_DETAIL),
            evidence=DEFAULT_FLAG_EVIDENCE,
        )
    d = _as_dict(item)
    return Flag(
        title=_text(d.get("title"), DEFAULT_FLAG_TITLE),
        detail=_text(_pick(d, "detail", "description"), DEFAULT_FLAG_DETAIL),
        evidence=_text(d.get("evidence"), DEFAULT_FLAG_EVIDENCE),
    )


def _to_rewrite(value: Any) -> Rewrite:
    if isinstance(value, str):
        return Rewrite(before="", after=_text(value, ""), rationale=DEFAULT_REWRITE_RATIONALE)
    d = _as_dict(value)
    return Rewrite(
        before=_text(d.get("before"), ""),
        after=_text(d.get("after"), ""),
        rationale=_text(d.get("rationale"), DEFAULT_REWRITE_RATIONALE),
    )


def _to_insight(item: Any, idx: int) -> LockedInsight | None:
    if item is None:
        return None
    if isinstance(item, str):
        return LockedInsight(title=f"Insight {idx + 1}", summary=_text(item, DEFAULT_INSIGHT_SUMMARY))
    d = _as_dict(item)
    return LockedInsight(
        title=_text(d.get("title"), f"Insight {idx + 1}"),
        summary=_text(_pick(d, "summary", "detail"), DEFAULT_INSIGHT_SUMMARY),
    )


def _to_step(item: Any, idx: int) -> Step | None:
    if item is None:
        return None
    title = f"Builder step {idx + 1}"
    if isinstance(item, dict):
        detail = _pick(item, "detail", "description")
        return Step(
            title=_text(item.get("title"), title),
            detail=_text(detail, json.dumps(item, default=str)),
        )
    return Step(title=title, detail=_text(item, json.dumps(item, default=str)))


def _mapped(items: list[Any], convert, limit: int | None = None) -> list[Any]:
    out = []
    for idx, item in enumerate(items):
        converted = convert(item, idx)
        if converted is None or converted in out:
            continue
        out.append(converted)
        if limit is not None and len(out) >= limit:
            break
    return out


def normalize_scores(value: Any) -> Scores:
    d = _as_dict(value)
    clamped = {name: clamp_score(d.get(name)) for name in SCORE_NAMES}
    return Scores(**clamped)


# ---------------------------------------------------------------------------
# Scorecard
# ---------------------------------------------------------------------------

def normalize_scorecard(
    payload: Any,
    selector: VariantSelector,
    *,
    next_seed: Callable[[], int],
    tone: str | None,
    builder: str | None,
    attachment_count: int = 0,
) -> Scorecard:
    """Coerce model output into a complete Scorecard.

    ``next_seed`` is only called when the payload is an unparseable string and
    the whole scorecard comes from the variant selector instead.
    """
    parsed = parse_json_payload(payload)
    if parsed is _NOT_JSON:
        seed = next_seed()
        logger.warning("Scorecard payload is not JSON; using variant %d", seed)
        return selector.generate(seed, tone, builder, attachment_count=attachment_count)

    data = _as_dict(parsed)
    profile = selector.guidance.resolve(tone, builder)
    library = selector.library
    label = profile.builder.label

    scores = normalize_scores(_pick(data, "scores", "trust_scores", "trustScores"))
    flags = _mapped(_as_list(data.get("flags")), lambda item, _i: _to_flag(item), MAX_FLAGS)
    insights = _mapped(
        _as_list(_pick(data, "locked_insights", "lockedInsights")), _to_insight, MAX_LOCKED_INSIGHTS
    )
    actions = _mapped(_as_list(_pick(data, "builder_actions", "builderActions")), _to_step)
    if not actions:
        actions = list(profile.builder.tips[:MAX_BUILDER_ACTIONS])

    suggested = _text_list(_pick(data, "suggested_prompts", "suggestedPrompts"))
    if not suggested:
        suggested = tuple(instantiate(p, label) for p in library.suggested_prompts)

    card = Scorecard(
        scores=scores,
        flags=tuple(flags),
        free_rewrite=_to_rewrite(_pick(data, "free_rewrite", "freeRewrite")),
        locked_insights=tuple(insights),
        builder_actions=tuple(actions),
        experiments=_text_list(data.get("experiments")),
        checklist=_text_list(data.get("checklist")),
        headline=_text(data.get("headline"), profile.tone.headline),
        summary=_text(data.get("summary"), score_summary(scores)),
        reassurance=_text(data.get("reassurance"), library.reassurance),
        suggested_prompts=suggested,
        builder=builder if builder is not None else profile.builder.key,
        source=SOURCE_LIVE,
        seed=None,
    )
    return apply_tone(card, profile.tone)


# ---------------------------------------------------------------------------
# Build plan
# ---------------------------------------------------------------------------

def _to_screen(item: Any, idx: int) -> Screen | None:
    if item is None:
        return None
    if isinstance(item, str):
        return Screen(name=_text(item, f"Screen {idx + 1}"), goal="")
    d = _as_dict(item)
    return Screen(
        name=_text(d.get("name"), "Screen"),
        goal=_text(d.get("goal"), ""),
        key_elements=_text_list(_pick(d, "key_elements", "keyElements")),
    )


def _to_flow(item: Any, idx: int) -> Flow | None:
    if item is None:
        return None
    d = _as_dict(item)
    return Flow(title=_text(d.get("title"), "Flow"), steps=_text_list(d.get("steps")))


def _to_entity(item: Any, idx: int) -> Entity | None:
    if item is None:
        return None
    d = _as_dict(item)
    return Entity(entity=_text(d.get("entity"), "Entity"), fields=_text_list(d.get("fields")))


def _to_export_plan(value: Any) -> ExportPlan | None:
    if not isinstance(value, dict):
        return None
    files: list[ExportFile] = []
    for idx, item in enumerate(_as_list(value.get("files"))):
        if isinstance(item, dict):
            files.append(
                ExportFile(
                    filename=_text(item.get("filename"), f"file-{idx + 1}"),
                    description=_text(item.get("description"), ""),
                )
            )
        elif isinstance(item, str) and item.strip():
            files.append(ExportFile(filename=item.strip(), description=""))
    return ExportPlan(description=_text(value.get("description"), ""), files=tuple(files))


def normalize_build_plan(
    payload: Any,
    library: TemplateLibrary,
    profile: GuidanceProfile,
    *,
    builder: str | None,
) -> BuildPlan:
    """Coerce model output into a complete BuildPlan with a fresh build id."""
    parsed = parse_json_payload(payload)
    if parsed is _NOT_JSON:
        logger.warning("Build plan payload is not JSON; using starter plan")
        return simulate_build_plan(library, profile, builder)

    data = _as_dict(parsed)
    return BuildPlan(
        build_id=new_build_id(),
        headline=_text(data.get("headline"), f"Blueprint for {profile.builder.label}"),
        summary=_text(data.get("summary"), DEFAULT_BUILD_SUMMARY),
        screens=tuple(_mapped(_as_list(data.get("screens")), _to_screen)),
        flows=tuple(_mapped(_as_list(data.get("flows")), _to_flow)),
        data_model=tuple(_mapped(_as_list(_pick(data, "data_model", "dataModel")), _to_entity)),
        builder_steps=tuple(
            _mapped(_as_list(_pick(data, "builder_steps", "builderSteps")), _to_step)
        ),
        export_plan=_to_export_plan(_pick(data, "export_plan", "exportPlan")),
        next_steps=_text_list(_pick(data, "next_steps", "nextSteps")),
        suggested_prompts=_text_list(_pick(data, "suggested_prompts", "suggestedPrompts")),
        builder=builder if builder is not None else profile.builder.key,
        source=SOURCE_LIVE,
    )
