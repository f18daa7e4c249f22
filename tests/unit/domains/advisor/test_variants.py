"""Tests for the deterministic variant selector."""

from __future__ import annotations

import math

import pytest

from aisales.domains.advisor.domain_logic.models import Flag, Rewrite, Scorecard, Scores
from aisales.domains.advisor.domain_logic.rng import mulberry32
from aisales.domains.advisor.domain_logic.variants import (
    apply_tone,
    clamp_score,
    derive_scores,
    round_half_up,
    sample_distinct,
)


class TestClampScore:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (42, 42),
            (42.5, 43),
            (42.4, 42),
            (-3, 0),
            (180, 100),
            ("71", 71),
            (" 12.6 ", 13),
        ],
    )
    def test_rounds_and_clamps(self, value, expected):
        assert clamp_score(value) == expected

    @pytest.mark.parametrize(
        "value", [None, "high", math.nan, math.inf, -math.inf, True, [], {}]
    )
    def test_non_numeric_becomes_fifty(self, value):
        assert clamp_score(value) == 50

    def test_idempotent(self):
        for value in (-10, 0, 33.3, 50, 99.5, 1000):
            once = clamp_score(value)
            assert clamp_score(once) == once

    def test_round_half_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3
        assert round_half_up(-0.5) == 0


class TestDeriveScores:
    def test_seed_one_scores(self):
        scores = derive_scores(mulberry32(1))
        assert scores == Scores(confidence=60, pushiness=60, clarity=64)

    def test_bounds_and_coherence_over_seed_pool(self):
        for seed in range(1, 1001):
            scores = derive_scores(mulberry32(seed))
            for value in scores.as_tuple():
                assert 0 <= value <= 100
            assert scores.spread <= 10, seed


class TestSampleDistinct:
    def test_no_duplicates(self):
        pool = list(range(10))
        picked = sample_distinct(mulberry32(4), pool, 6)
        assert len(picked) == 6
        assert len(set(picked)) == 6

    def test_short_pool_returns_fewer(self):
        assert sorted(sample_distinct(mulberry32(4), ["a", "b"], 3)) == ["a", "b"]

    def test_empty_pool(self):
        assert sample_distinct(mulberry32(4), [], 3) == []

    def test_does_not_mutate_pool(self):
        pool = ["a", "b", "c"]
        sample_distinct(mulberry32(4), pool, 2)
        assert pool == ["a", "b", "c"]


class TestGoldenVariant:
    """seed=1, tone=low-tech, builder=Bubble, worked out draw by draw."""

    @pytest.fixture
    def card(self, selector):
        return selector.generate(1, "low-tech", "Bubble")

    def test_scores(self, card):
        assert card.scores.to_dict() == {"confidence": 60, "pushiness": 60, "clarity": 64}

    def test_flag_titles_in_order(self, card):
        assert [f.title for f in card.flags] == [
            "Bubble builder defaults left unstyled",
            "Weak visual hierarchy",
            "Mobile layout buries the action",
        ]

    def test_free_rewrite(self, card):
        assert card.free_rewrite.before == "Contact us for pricing"

    def test_locked_insights(self, card):
        assert [i.title for i in card.locked_insights] == [
            "Pricing page psychology",
            "Mobile trust audit",
            "Checkout drop-off map",
        ]

    def test_experiments(self, card):
        assert len(card.experiments) == 2
        assert card.experiments[0].startswith("A/B test a specific main button label")
        assert card.experiments[1].startswith("Replace the hero image")

    def test_checklist_is_toned(self, card):
        assert card.checklist == (
            "Headline states the outcome in under ten words.",
            "Primary main button is the only filled button above the fold.",
            "Signup asks for three fields or fewer.",
        )

    def test_builder_actions(self, card):
        assert [a.title for a in card.builder_actions] == [
            "Tighten the hero group",
            "Add a testimonial repeating group",
        ]

    def test_metadata(self, card):
        assert card.mode == "low-tech"
        assert card.builder == "Bubble"
        assert card.source == "fallback"
        assert card.seed == 1
        assert card.headline == "Here is what will make things smoother:"

    def test_reproducible(self, selector, card):
        assert selector.generate(1, "low-tech", "Bubble") == card
        assert selector.generate(1, "low-tech", "Bubble").to_dict() == card.to_dict()


class TestSelector:
    def test_determinism_across_seeds(self, selector):
        for seed in (1, 7, 42, 99):
            assert selector.generate(seed, "mid-tech", "Webflow") == selector.generate(
                seed, "mid-tech", "Webflow"
            )

    def test_seed_seven_is_stable(self, selector):
        first = selector.generate(7).to_dict()
        second = selector.generate(7).to_dict()
        assert first == second
        assert first["seed"] == 7

    def test_shape_invariants(self, selector):
        for seed in range(1, 101):
            card = selector.generate(seed, "high-tech", "Glide")
            assert 1 <= len(card.flags) <= 3
            assert len({f.title for f in card.flags}) == len(card.flags)
            assert len(card.locked_insights) == 3
            assert 2 <= len(card.experiments) <= 3
            assert len(set(card.experiments)) == len(card.experiments)
            assert len(card.checklist) == 3
            assert len(card.builder_actions) <= 2

    def test_no_placeholder_leaks(self, selector):
        for seed in range(1, 51):
            text = str(selector.generate(seed, "low-tech", "Softr").to_dict())
            assert "{{" not in text

    def test_unknown_builder_uses_raw_label(self, selector):
        card = selector.generate(3, "mid-tech", "Carrd")
        assert card.builder == "Carrd"
        assert card.builder_actions
        assert any("Carrd" in p for p in card.suggested_prompts)

    def test_unknown_tone_falls_back_to_default(self, selector):
        assert selector.generate(5, "ultra-tech").mode == "mid-tech"

    def test_attachment_count_changes_only_summary(self, selector):
        plain = selector.generate(9, attachment_count=0)
        with_images = selector.generate(9, attachment_count=2)
        assert "2 visual assets" in with_images.summary
        assert plain.scores == with_images.scores
        assert plain.flags == with_images.flags

    def test_tone_changes_wording_not_depth(self, selector):
        low = selector.generate(11, "low-tech", "Bubble")
        high = selector.generate(11, "high-tech", "Bubble")
        assert low.scores == high.scores
        assert [f.title for f in low.flags] == [f.title for f in high.flags]
        assert len(low.checklist) == len(high.checklist)


class TestApplyTone:
    def test_high_tech_suffix_is_not_doubled(self, selector, guidance):
        card = selector.generate(2, "high-tech")
        again = apply_tone(card, guidance.resolve_tone("high-tech"))
        assert again.summary == card.summary
        assert card.summary.endswith("(align with your analytics & design system guardrails.)")

    def test_low_tech_replacements_are_case_insensitive(self, guidance):
        rewrite = guidance.resolve_tone("low-tech").rewrite
        assert rewrite("Fix the cta and reduce Friction") == (
            "Fix the main button and reduce confusing moment"
        )

    def test_titles_are_not_rewritten(self, guidance):
        card = Scorecard(
            scores=Scores(confidence=50, pushiness=50, clarity=50),
            flags=(Flag(title="CTA label is generic", detail="The CTA says Submit.", evidence=""),),
            free_rewrite=Rewrite(before="", after="", rationale=""),
            locked_insights=(),
            builder_actions=(),
            experiments=(),
            checklist=(),
        )
        toned = apply_tone(card, guidance.resolve_tone("low-tech"))
        assert toned.flags[0].title == "CTA label is generic"
        assert toned.flags[0].detail == "The main button says Submit."
