"""Scorecard and build plan value objects plus shared domain constants."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

SCORE_NAMES = ("confidence", "pushiness", "clarity")

SCORE_MIN = 0
SCORE_MAX = 100
SCORE_DEFAULT = 50

MAX_FLAGS = 3
MAX_LOCKED_INSIGHTS = 3
MAX_BUILDER_ACTIONS = 2
CHECKLIST_COUNT = 3
EXPERIMENT_COUNT_RANGE = (2, 3)

BUILDER_PLACEHOLDER = "{{builder}}"

# Where a scorecard came from.
SOURCE_LIVE = "live"
SOURCE_FALLBACK = "fallback"
SOURCE_SMALL_TALK = "small_talk"


# ---------------------------------------------------------------------------
# Scorecard
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Scores:
    """The three trust metrics, each an integer in [0, 100]."""

    confidence: int
    pushiness: int
    clarity: int

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.confidence, self.pushiness, self.clarity)

    @property
    def spread(self) -> int:
        values = self.as_tuple()
        return max(values) - min(values)

    def to_dict(self) -> dict[str, int]:
        return {
            "confidence": self.confidence,
            "pushiness": self.pushiness,
            "clarity": self.clarity,
        }


@dataclass(frozen=True)
class Flag:
    title: str
    detail: str
    evidence: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "detail": self.detail, "evidence": self.evidence}


@dataclass(frozen=True)
class Rewrite:
    before: str
    after: str
    rationale: str

    def to_dict(self) -> dict[str, str]:
        return {"before": self.before, "after": self.after, "rationale": self.rationale}


@dataclass(frozen=True)
class LockedInsight:
    """Teaser content shown in full only to subscribed sessions."""

    title: str
    summary: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "summary": self.summary}


@dataclass(frozen=True)
class Step:
    """A titled instruction, used for both builder actions and builder steps."""

    title: str
    detail: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "detail": self.detail}


@dataclass(frozen=True)
class Scorecard:
    """The structured critique returned by the advisor operation."""

    scores: Scores
    flags: tuple[Flag, ...]
    free_rewrite: Rewrite
    locked_insights: tuple[LockedInsight, ...]
    builder_actions: tuple[Step, ...]
    experiments: tuple[str, ...]
    checklist: tuple[str, ...]
    headline: str = ""
    summary: str = ""
    reassurance: str = ""
    suggested_prompts: tuple[str, ...] = ()
    mode: str = ""
    builder: str = ""
    source: str = SOURCE_FALLBACK
    seed: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "mode": self.mode,
            "builder": self.builder,
            "source": self.source,
            "seed": self.seed,
            "headline": self.headline,
            "summary": self.summary,
            "scores": self.scores.to_dict(),
            "flags": [f.to_dict() for f in self.flags],
            "freeRewrite": self.free_rewrite.to_dict(),
            "lockedInsights": [i.to_dict() for i in self.locked_insights],
            "builderActions": [a.to_dict() for a in self.builder_actions],
            "experiments": list(self.experiments),
            "checklist": list(self.checklist),
            "reassurance": self.reassurance,
            "suggestedPrompts": list(self.suggested_prompts),
        }


# ---------------------------------------------------------------------------
# Build plan
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Screen:
    name: str
    goal: str
    key_elements: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "goal": self.goal, "key_elements": list(self.key_elements)}


@dataclass(frozen=True)
class Flow:
    title: str
    steps: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "steps": list(self.steps)}


@dataclass(frozen=True)
class Entity:
    entity: str
    fields: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"entity": self.entity, "fields": list(self.fields)}


@dataclass(frozen=True)
class ExportFile:
    filename: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return {"filename": self.filename, "description": self.description}


@dataclass(frozen=True)
class ExportPlan:
    description: str
    files: tuple[ExportFile, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"description": self.description, "files": [f.to_dict() for f in self.files]}


@dataclass(frozen=True)
class BuildPlan:
    """The screens / flows / data model / steps output of the build operation."""

    build_id: str
    headline: str
    summary: str
    screens: tuple[Screen, ...] = ()
    flows: tuple[Flow, ...] = ()
    data_model: tuple[Entity, ...] = ()
    builder_steps: tuple[Step, ...] = ()
    export_plan: ExportPlan | None = None
    next_steps: tuple[str, ...] = ()
    suggested_prompts: tuple[str, ...] = ()
    builder: str = ""
    source: str = SOURCE_FALLBACK

    def to_dict(self) -> dict[str, Any]:
        return {
            "buildId": self.build_id,
            "builder": self.builder,
            "source": self.source,
            "headline": self.headline,
            "summary": self.summary,
            "screens": [s.to_dict() for s in self.screens],
            "flows": [f.to_dict() for f in self.flows],
            "dataModel": [e.to_dict() for e in self.data_model],
            "builderSteps": [s.to_dict() for s in self.builder_steps],
            "exportPlan": self.export_plan.to_dict() if self.export_plan else None,
            "nextSteps": list(self.next_steps),
            "suggestedPrompts": list(self.suggested_prompts),
        }


# ---------------------------------------------------------------------------
# Guidance
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BuilderProfile:
    """Implementation guidance for one no-code / low-code builder."""

    key: str
    label: str
    system_prompt: str
    knowledge: tuple[str, ...] = ()
    tips: tuple[Step, ...] = ()
    known: bool = True
