"""Tests for tone and builder resolution."""

from __future__ import annotations

import pytest

from aisales.domains.advisor.domain_logic.guidance import (
    NO_BUILDER,
    GuidanceProfile,
    load_guidance_registry,
    make_replace_rewrite,
    make_suffix_rewrite,
)
from aisales.domains.advisor.domain_logic.models import BuilderProfile
from aisales.domains.advisor.domain_logic.templates import TemplateLibraryError

KNOWN_BUILDERS = [
    "No builder",
    "Bubble",
    "Base44",
    "Webflow",
    "Glide",
    "Retool",
    "Softr",
    "FlutterFlow",
    "Adalo",
    "GlidePages",
]


class TestToneResolution:
    @pytest.mark.parametrize("tone", ["low-tech", "mid-tech", "high-tech"])
    def test_known_tones(self, guidance, tone):
        assert guidance.resolve_tone(tone).key == tone

    @pytest.mark.parametrize("tone", [None, "", "expert", "LOW-TECH"])
    def test_unknown_tone_uses_default(self, guidance, tone):
        assert guidance.resolve_tone(tone).key == "mid-tech"

    def test_mid_tech_is_identity(self, guidance):
        text = "Move the CTA to reduce friction."
        assert guidance.resolve_tone("mid-tech").rewrite(text) == text

    def test_every_tone_has_system_text(self, guidance):
        for tone in guidance.tones():
            assert tone.system
            assert tone.headline


class TestBuilderResolution:
    def test_all_known_builders_present(self, guidance):
        assert [b.key for b in guidance.builders()] == KNOWN_BUILDERS

    def test_bubble_label(self, guidance):
        profile = guidance.resolve_builder("Bubble")
        assert profile.label == "Bubble builder"
        assert profile.known
        assert len(profile.tips) == 3

    def test_case_insensitive_match(self, guidance):
        assert guidance.resolve_builder("webflow").key == "Webflow"

    def test_none_means_no_builder(self, guidance):
        assert guidance.resolve_builder(None).key == NO_BUILDER

    def test_unknown_builder_is_generic_with_raw_label(self, guidance):
        profile = guidance.resolve_builder("Carrd")
        assert profile.label == "Carrd"
        assert profile.key == "Carrd"
        assert not profile.known
        assert profile.system_prompt
        assert profile.tips

    def test_every_builder_has_tips(self, guidance):
        for builder in guidance.builders():
            assert builder.tips, builder.key
            assert builder.system_prompt, builder.key

    def test_system_instructions_order(self, guidance):
        profile = guidance.resolve("low-tech", "Glide")
        tone_text, builder_text = profile.system_instructions()
        assert tone_text == profile.tone.system
        assert builder_text.startswith(profile.builder.system_prompt)
        assert builder_text.endswith("Platform knowledge: Layout editor components; Theme and brand settings.")

    def test_builder_brief_without_knowledge(self, guidance):
        tone = guidance.resolve_tone("mid-tech")
        builder = BuilderProfile(key="Plain", label="Plain", system_prompt="Use plain HTML.")
        profile = GuidanceProfile(tone=tone, builder=builder)
        assert profile.builder_brief() == "Use plain HTML."


class TestRewriteFactories:
    def test_replace_applies_in_order(self):
        rewrite = make_replace_rewrite([("cta", "button"), ("button", "link")])
        assert rewrite("Click the CTA") == "Click the link"

    def test_replacement_text_is_literal(self):
        rewrite = make_replace_rewrite([("path", r"C:\new")])
        assert rewrite("the path") == r"the C:\new"

    def test_suffix_is_idempotent(self):
        rewrite = make_suffix_rewrite(" (done)")
        assert rewrite(rewrite("ok")) == "ok (done)"

    def test_suffix_skips_empty_text(self):
        assert make_suffix_rewrite(" (done)")("") == ""


class TestLoading:
    def test_missing_directory_raises(self, tmp_path):
        with pytest.raises(TemplateLibraryError):
            load_guidance_registry(tmp_path)

    def test_unknown_rewrite_kind_raises(self, tmp_path):
        (tmp_path / "tones.yaml").write_text(
            "default: plain\n"
            "tones:\n"
            "  plain:\n"
            "    label: Plain\n"
            "    rewrite: {kind: shout}\n"
        )
        (tmp_path / "builders.yaml").write_text("builders: {}\ngeneric: {}\n")
        with pytest.raises(TemplateLibraryError, match="shout"):
            load_guidance_registry(tmp_path)

    def test_undefined_default_tone_raises(self, tmp_path):
        (tmp_path / "tones.yaml").write_text(
            "default: missing\ntones:\n  plain:\n    label: Plain\n"
        )
        (tmp_path / "builders.yaml").write_text("builders: {}\n")
        with pytest.raises(TemplateLibraryError):
            load_guidance_registry(tmp_path)
