"""Content template library: static text pools read from YAML on disk.

Selection logic lives in ``variants``; this module only parses and validates
the pools so content can be audited and extended without touching code.
"""

from __future__ import annotations

import logging
import operator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from aisales.domains.advisor.domain_logic.models import (
    BUILDER_PLACEHOLDER,
    SCORE_NAMES,
    Flag,
    LockedInsight,
    Rewrite,
    Scores,
)

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_DIR = Path(__file__).resolve().parent.parent / "content"

_COMPARATORS = {
    "lt": operator.lt,
    "lte": operator.le,
    "gt": operator.gt,
    "gte": operator.ge,
}


class TemplateLibraryError(Exception):
    """Raised when a content file is missing or malformed."""


@dataclass(frozen=True)
class ScorePredicate:
    """One comparison of a score against a threshold, e.g. confidence < 55."""

    metric: str
    op: str
    value: float

    def holds(self, scores: Scores) -> bool:
        return _COMPARATORS[self.op](getattr(scores, self.metric), self.value)


@dataclass(frozen=True)
class RuleGroup:
    """A predicate over the derived scores and the templates it unlocks."""

    id: str
    templates: tuple[Any, ...]
    predicates: tuple[ScorePredicate, ...] = ()
    always: bool = False

    def matches(self, scores: Scores) -> bool:
        if self.always:
            return True
        if not self.predicates:
            return False
        return all(p.holds(scores) for p in self.predicates)


@dataclass(frozen=True)
class TemplateLibrary:
    """All static pools used by the variant selector and fallback builders."""

    flag_groups: tuple[RuleGroup, ...]
    rewrite_groups: tuple[RuleGroup, ...]
    locked_insights: tuple[LockedInsight, ...]
    experiments: tuple[str, ...]
    checklist: tuple[str, ...]
    reassurance: str = ""
    suggested_prompts: tuple[str, ...] = ()
    visual_note: dict[str, str] = field(default_factory=dict)
    build_plan: dict[str, Any] = field(default_factory=dict)
    small_talk: dict[str, Any] = field(default_factory=dict)

    def all_flags(self) -> list[Flag]:
        return _union_templates(self.flag_groups, key=lambda f: f.title)

    def all_rewrites(self) -> list[Rewrite]:
        return _union_templates(self.rewrite_groups, key=lambda r: r.before)


def instantiate(text: str, builder_label: str, **extra: str) -> str:
    """Substitute ``{{builder}}`` (and any ``{{name}}`` in ``extra``) into text."""
    out = text.replace(BUILDER_PLACEHOLDER, builder_label)
    for name, value in extra.items():
        out = out.replace("{{" + name + "}}", value)
    return out


def matching_templates(groups: tuple[RuleGroup, ...], scores: Scores, key) -> list[Any]:
    """Ordered union of templates from every group whose predicate holds."""
    matched = [g for g in groups if g.matches(scores)]
    return _union_templates(tuple(matched), key=key)


def _union_templates(groups: tuple[RuleGroup, ...], key) -> list[Any]:
    seen: set[str] = set()
    out: list[Any] = []
    for group in groups:
        for template in group.templates:
            k = key(template)
            if k in seen:
                continue
            seen.add(k)
            out.append(template)
    return out


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def load_yaml_file(path: Path) -> dict[str, Any]:
    """Read one YAML mapping; raise TemplateLibraryError on anything else."""
    if not path.is_file():
        raise TemplateLibraryError(f"Content file not found: {path}")
    with open(path, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise TemplateLibraryError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TemplateLibraryError(f"Expected a mapping at the top of {path}")
    return data


def load_template_library(directory: str | Path | None = None) -> TemplateLibrary:
    """Load every pool from ``directory`` (defaults to the packaged content)."""
    directory = Path(directory) if directory else DEFAULT_CONTENT_DIR

    flags_data = load_yaml_file(directory / "flags.yaml")
    rewrites_data = load_yaml_file(directory / "rewrites.yaml")
    insights_data = load_yaml_file(directory / "insights.yaml")
    build_plan_data = load_yaml_file(directory / "build_plan.yaml")
    small_talk_data = load_yaml_file(directory / "small_talk.yaml")

    library = TemplateLibrary(
        flag_groups=_parse_groups(flags_data, _parse_flag, "flags.yaml"),
        rewrite_groups=_parse_groups(rewrites_data, _parse_rewrite, "rewrites.yaml"),
        locked_insights=tuple(
            LockedInsight(title=str(i["title"]), summary=str(i["summary"]).strip())
            for i in insights_data.get("locked_insights", [])
        ),
        experiments=tuple(str(e) for e in insights_data.get("experiments", [])),
        checklist=tuple(str(c) for c in insights_data.get("checklist", [])),
        reassurance=str(insights_data.get("reassurance", "")).strip(),
        suggested_prompts=tuple(str(p) for p in insights_data.get("suggested_prompts", [])),
        visual_note={str(k): str(v) for k, v in insights_data.get("visual_note", {}).items()},
        build_plan=build_plan_data,
        small_talk=small_talk_data,
    )
    logger.info(
        "Loaded template library from %s: %d flag groups, %d rewrite groups",
        directory,
        len(library.flag_groups),
        len(library.rewrite_groups),
    )
    return library


def _parse_groups(data: dict[str, Any], parse_template, source: str) -> tuple[RuleGroup, ...]:
    groups: list[RuleGroup] = []
    for raw in data.get("groups", []):
        try:
            groups.append(
                RuleGroup(
                    id=str(raw["id"]),
                    always=bool(raw.get("always", False)),
                    predicates=_parse_predicates(raw.get("when", {})),
                    templates=tuple(parse_template(t) for t in raw.get("templates", [])),
                )
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise TemplateLibraryError(f"Malformed rule group in {source}: {raw!r}") from exc
    if not groups:
        raise TemplateLibraryError(f"No rule groups defined in {source}")
    return tuple(groups)


def _parse_predicates(when: dict[str, Any]) -> tuple[ScorePredicate, ...]:
    predicates: list[ScorePredicate] = []
    for metric, comparisons in when.items():
        if metric not in SCORE_NAMES:
            raise ValueError(f"Unknown score in predicate: {metric}")
        for op, value in comparisons.items():
            if op not in _COMPARATORS:
                raise ValueError(f"Unknown comparison: {op}")
            predicates.append(ScorePredicate(metric=metric, op=op, value=float(value)))
    return tuple(predicates)


def _parse_flag(raw: dict[str, Any]) -> Flag:
    return Flag(
        title=str(raw["title"]).strip(),
        detail=str(raw["detail"]).strip(),
        evidence=str(raw.get("evidence", "")).strip(),
    )


def _parse_rewrite(raw: dict[str, Any]) -> Rewrite:
    return Rewrite(
        before=str(raw["before"]).strip(),
        after=str(raw["after"]).strip(),
        rationale=str(raw["rationale"]).strip(),
    )
