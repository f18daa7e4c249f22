"""Deterministic variant selector: seed + (tone, builder) -> Scorecard.

No external calls and no shared state. For a fixed seed and (tone, builder)
the returned Scorecard is identical across runs and processes. Draw order is
part of that contract: scores, flags, rewrite, locked insights, experiment
count, experiments, checklist, builder actions.
"""

from __future__ import annotations

import math
import sys
from dataclasses import replace
from typing import Any, TypeVar

from aisales.domains.advisor.domain_logic.guidance import (
    GuidanceProfile,
    GuidanceRegistry,
    ToneProfile,
)
from aisales.domains.advisor.domain_logic.models import (
    CHECKLIST_COUNT,
    EXPERIMENT_COUNT_RANGE,
    MAX_BUILDER_ACTIONS,
    MAX_FLAGS,
    MAX_LOCKED_INSIGHTS,
    SCORE_DEFAULT,
    SCORE_MAX,
    SCORE_MIN,
    SOURCE_FALLBACK,
    Flag,
    Rewrite,
    Scorecard,
    Scores,
    Step,
)
from aisales.domains.advisor.domain_logic.rng import Rng, jitter, mulberry32, randint
from aisales.domains.advisor.domain_logic.templates import (
    TemplateLibrary,
    instantiate,
    matching_templates,
)

T = TypeVar("T")

BASE_RANGE = (35, 82)
CONFIDENCE_JITTER = 5
PUSHINESS_JITTER = 6
CLARITY_JITTER = 4
SMOOTHING_JITTER = 4
COHERENCE_LIMIT = 10


# ---------------------------------------------------------------------------
# Numeric helpers
# ---------------------------------------------------------------------------

def round_half_up(value: float) -> int:
    """Round with .5 going up, matching the reference fixtures."""
    return math.floor(value + 0.5)


def coerce_number(value: Any) -> float | None:
    """Best-effort float conversion; None for bools, None and non-numerics."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            # Integers past the float range clamp to the matching bound.
            return sys.float_info.max if value > 0 else -sys.float_info.max
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def clamp_score(value: Any) -> int:
    """Round and clamp into [0, 100]; non-finite or non-numeric becomes 50."""
    number = coerce_number(value)
    if number is None or not math.isfinite(number):
        return SCORE_DEFAULT
    return max(SCORE_MIN, min(SCORE_MAX, round_half_up(number)))


# ---------------------------------------------------------------------------
# Scores
# ---------------------------------------------------------------------------

def derive_scores(rng: Rng) -> Scores:
    """Draw the three related trust scores.

    A single smoothing pass pulls all three around their mean when the spread
    exceeds COHERENCE_LIMIT. Because the smoothing jitter is an integer offset
    the post-smoothing spread is at most 2 * SMOOTHING_JITTER, so no further
    passes are needed.
    """
    base = randint(rng, *BASE_RANGE)
    confidence = clamp_score(base + jitter(rng, CONFIDENCE_JITTER))
    pushiness = clamp_score(confidence + jitter(rng, PUSHINESS_JITTER))
    clarity = clamp_score(
        round_half_up((confidence + pushiness) / 2) + jitter(rng, CLARITY_JITTER)
    )

    values = (confidence, pushiness, clarity)
    if max(values) - min(values) > COHERENCE_LIMIT:
        mean = sum(values) / 3
        confidence = clamp_score(mean + jitter(rng, SMOOTHING_JITTER))
        pushiness = clamp_score(mean + jitter(rng, SMOOTHING_JITTER))
        clarity = clamp_score(mean + jitter(rng, SMOOTHING_JITTER))

    return Scores(confidence=confidence, pushiness=pushiness, clarity=clarity)


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------

def sample_distinct(rng: Rng, pool: list[T] | tuple[T, ...], k: int) -> list[T]:
    """Pick up to ``k`` items without replacement, in draw order.

    Each pick takes a random index into the shrinking remainder. Short pools
    yield fewer items instead of raising.
    """
    remaining = list(pool)
    picked: list[T] = []
    for _ in range(min(max(k, 0), len(remaining))):
        idx = math.floor(rng() * len(remaining))
        picked.append(remaining.pop(idx))
    return picked


# ---------------------------------------------------------------------------
# Tone application
# ---------------------------------------------------------------------------

def apply_tone(card: Scorecard, tone: ToneProfile) -> Scorecard:
    """Run the tone rewrite over every prose field of a scorecard, once."""
    rw = tone.rewrite
    return replace(
        card,
        mode=tone.key,
        summary=rw(card.summary),
        reassurance=rw(card.reassurance),
        flags=tuple(replace(f, detail=rw(f.detail)) for f in card.flags),
        free_rewrite=replace(card.free_rewrite, rationale=rw(card.free_rewrite.rationale)),
        locked_insights=tuple(replace(i, summary=rw(i.summary)) for i in card.locked_insights),
        builder_actions=tuple(replace(a, detail=rw(a.detail)) for a in card.builder_actions),
        experiments=tuple(rw(e) for e in card.experiments),
        checklist=tuple(rw(c) for c in card.checklist),
    )


def visual_note(library: TemplateLibrary, attachment_count: int) -> str:
    notes = library.visual_note
    if attachment_count <= 0:
        return notes.get("none", "")
    if attachment_count == 1:
        return notes.get("one", "")
    return notes.get("many", "").replace("{count}", str(attachment_count))


def score_summary(scores: Scores) -> str:
    return (
        f"Confidence {scores.confidence}/100, pushiness {scores.pushiness}/100, "
        f"clarity {scores.clarity}/100."
    )


# ---------------------------------------------------------------------------
# Selector
# ---------------------------------------------------------------------------

class VariantSelector:
    """Builds complete fallback scorecards from the template library."""

    def __init__(self, library: TemplateLibrary, guidance: GuidanceRegistry) -> None:
        self.library = library
        self.guidance = guidance

    def generate(
        self,
        seed: int,
        tone: str | None = None,
        builder: str | None = None,
        *,
        attachment_count: int = 0,
    ) -> Scorecard:
        """Produce the scorecard variant for ``seed`` (tone already applied)."""
        profile = self.guidance.resolve(tone, builder)
        rng = mulberry32(seed)

        scores = derive_scores(rng)
        flags = self._select_flags(rng, scores, profile)
        rewrite = self._select_rewrite(rng, scores, profile)
        locked = sample_distinct(rng, self.library.locked_insights, MAX_LOCKED_INSIGHTS)
        experiment_count = randint(rng, *EXPERIMENT_COUNT_RANGE)
        experiments = sample_distinct(rng, self.library.experiments, experiment_count)
        checklist = sample_distinct(rng, self.library.checklist, CHECKLIST_COUNT)
        actions = self._select_builder_actions(rng, profile)

        label = profile.builder.label
        card = Scorecard(
            scores=scores,
            flags=tuple(flags),
            free_rewrite=rewrite,
            locked_insights=tuple(locked),
            builder_actions=tuple(actions),
            experiments=tuple(experiments),
            checklist=tuple(checklist),
            headline=profile.tone.headline,
            summary=visual_note(self.library, attachment_count) + score_summary(scores),
            reassurance=self.library.reassurance,
            suggested_prompts=tuple(instantiate(p, label) for p in self.library.suggested_prompts),
            builder=builder if builder is not None else profile.builder.key,
            source=SOURCE_FALLBACK,
            seed=seed,
        )
        return apply_tone(card, profile.tone)

    # --- internals ---

    def _select_flags(self, rng: Rng, scores: Scores, profile: GuidanceProfile) -> list[Flag]:
        pool = matching_templates(self.library.flag_groups, scores, key=lambda f: f.title)
        if not pool:
            pool = self.library.all_flags()
        label = profile.builder.label
        return [
            Flag(
                title=instantiate(f.title, label),
                detail=instantiate(f.detail, label),
                evidence=instantiate(f.evidence, label),
            )
            for f in sample_distinct(rng, pool, MAX_FLAGS)
        ]

    def _select_rewrite(self, rng: Rng, scores: Scores, profile: GuidanceProfile) -> Rewrite:
        pool = matching_templates(self.library.rewrite_groups, scores, key=lambda r: r.before)
        if not pool:
            pool = self.library.all_rewrites()
        picked = sample_distinct(rng, pool, 1)
        if not picked:
            return Rewrite(before="", after="", rationale="")
        label = profile.builder.label
        r = picked[0]
        return Rewrite(
            before=instantiate(r.before, label),
            after=instantiate(r.after, label),
            rationale=instantiate(r.rationale, label),
        )

    def _select_builder_actions(self, rng: Rng, profile: GuidanceProfile) -> list[Step]:
        label = profile.builder.label
        return [
            Step(title=instantiate(tip.title, label), detail=instantiate(tip.detail, label))
            for tip in sample_distinct(rng, profile.builder.tips, MAX_BUILDER_ACTIONS)
        ]
