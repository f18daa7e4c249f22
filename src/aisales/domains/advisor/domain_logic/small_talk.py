"""Greeting detection and the canned scorecard that answers it."""

from __future__ import annotations

from aisales.domains.advisor.domain_logic.guidance import GuidanceProfile
from aisales.domains.advisor.domain_logic.models import (
    SCORE_DEFAULT,
    SOURCE_SMALL_TALK,
    Flag,
    Rewrite,
    Scorecard,
    Scores,
    Step,
)
from aisales.domains.advisor.domain_logic.templates import TemplateLibrary, instantiate
from aisales.domains.advisor.domain_logic.variants import apply_tone


def is_small_talk(library: TemplateLibrary, prompt: str, attachment_count: int = 0) -> bool:
    """True for short greetings that carry nothing to review.

    Any attachment, any product keyword, or a long prompt means real work.
    """
    config = library.small_talk
    if not prompt or attachment_count > 0:
        return False
    text = prompt.strip().lower()
    if not text or len(text) > int(config.get("max_length", 160)):
        return False
    if any(kw in text for kw in config.get("engagement_keywords", [])):
        return False
    return any(phrase in text for phrase in config.get("triggers", []))


def small_talk_scorecard(
    library: TemplateLibrary,
    profile: GuidanceProfile,
    prompt: str = "",
    builder: str | None = None,
) -> Scorecard:
    config = library.small_talk
    label = profile.builder.label
    tip = profile.builder.tips[0].detail if profile.builder.tips else ""

    snippet = prompt.strip()
    summary = str(config.get("summary", "")).strip()
    if snippet:
        summary = f'You said "{snippet}." {summary}'

    flag_cfg = config.get("flag", {})
    action_cfg = config.get("action", {})

    card = Scorecard(
        scores=Scores(confidence=SCORE_DEFAULT, pushiness=SCORE_DEFAULT, clarity=SCORE_DEFAULT),
        flags=(
            Flag(
                title=str(flag_cfg.get("title", "")),
                detail=str(flag_cfg.get("detail", "")).strip(),
                evidence=str(flag_cfg.get("evidence", "")),
            ),
        ),
        free_rewrite=Rewrite(
            before="",
            after="",
            rationale=str(config.get("rewrite_rationale", "")).strip(),
        ),
        locked_insights=(),
        builder_actions=(
            Step(
                title=instantiate(str(action_cfg.get("title", "")), label),
                detail=instantiate(str(action_cfg.get("detail", "")).strip(), label, tip=tip),
            ),
        ),
        experiments=(),
        checklist=(),
        headline=str(config.get("headline", "")),
        summary=summary,
        reassurance=str(config.get("reassurance", "")).strip(),
        suggested_prompts=tuple(
            instantiate(str(p), label) for p in config.get("suggested_prompts", [])
        ),
        builder=builder if builder is not None else profile.builder.key,
        source=SOURCE_SMALL_TALK,
    )
    return apply_tone(card, profile.tone)
