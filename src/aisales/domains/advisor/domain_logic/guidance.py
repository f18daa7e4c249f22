"""Guidance resolver: maps tone and builder keys to canned instruction text.

Pure lookups over tables loaded once from ``tones.yaml`` and ``builders.yaml``.
Unknown tones resolve to the default tone; unknown builders resolve to a
generic profile labelled with the raw builder name.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from aisales.domains.advisor.domain_logic.models import BuilderProfile, Step
from aisales.domains.advisor.domain_logic.templates import (
    DEFAULT_CONTENT_DIR,
    TemplateLibraryError,
    load_yaml_file,
)

logger = logging.getLogger(__name__)

DEFAULT_TONE = "mid-tech"
NO_BUILDER = "No builder"


@dataclass(frozen=True)
class ToneProfile:
    """Wording preset: label, system instruction, and a text rewrite."""

    key: str
    label: str
    system: str
    headline: str
    rewrite: Callable[[str], str] = field(compare=False, repr=False, default=lambda t: t)


@dataclass(frozen=True)
class GuidanceProfile:
    """Resolved (tone, builder) pair used for one request."""

    tone: ToneProfile
    builder: BuilderProfile

    def builder_brief(self) -> str:
        """Builder system text followed by its platform knowledge, if any."""
        if not self.builder.knowledge:
            return self.builder.system_prompt
        knowledge = "; ".join(self.builder.knowledge)
        return f"{self.builder.system_prompt}\nPlatform knowledge: {knowledge}."

    def system_instructions(self) -> list[str]:
        return [self.tone.system, self.builder_brief()]


# ---------------------------------------------------------------------------
# Tone rewrites
# ---------------------------------------------------------------------------

def make_replace_rewrite(replacements: list[tuple[str, str]]) -> Callable[[str], str]:
    """Case-insensitive literal substring replacement, applied in order."""
    compiled = [(re.compile(re.escape(src), re.IGNORECASE), dst) for src, dst in replacements]

    def rewrite(text: str) -> str:
        for pattern, dst in compiled:
            # Callable replacement so backslashes in dst stay literal.
            text = pattern.sub(lambda _m, d=dst: d, text)
        return text

    return rewrite


def make_suffix_rewrite(suffix: str) -> Callable[[str], str]:
    """Append a fixed sentence; never appended twice."""

    def rewrite(text: str) -> str:
        if not text or text.endswith(suffix):
            return text
        return f"{text}{suffix}"

    return rewrite


def _identity(text: str) -> str:
    return text


def _build_rewrite(rule: dict[str, Any]) -> Callable[[str], str]:
    kind = rule.get("kind", "identity")
    if kind == "replace":
        pairs = [(str(src), str(dst)) for src, dst in rule.get("replacements", [])]
        return make_replace_rewrite(pairs)
    if kind == "suffix":
        return make_suffix_rewrite(str(rule.get("suffix", "")))
    if kind == "identity":
        return _identity
    raise TemplateLibraryError(f"Unknown tone rewrite kind: {kind!r}")


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class GuidanceRegistry:
    """In-memory tone and builder tables with fallback resolution."""

    def __init__(
        self,
        tones: dict[str, ToneProfile],
        builders: dict[str, BuilderProfile],
        generic: dict[str, Any],
        default_tone: str = DEFAULT_TONE,
    ) -> None:
        if default_tone not in tones:
            raise TemplateLibraryError(f"Default tone {default_tone!r} is not defined")
        self._tones = tones
        self._builders = builders
        self._builders_lower = {k.lower(): v for k, v in builders.items()}
        self._generic = generic
        self.default_tone = default_tone

    # --- tones ---

    def resolve_tone(self, tone: str | None) -> ToneProfile:
        if tone and tone in self._tones:
            return self._tones[tone]
        if tone:
            logger.debug("Unknown tone %r, using %s", tone, self.default_tone)
        return self._tones[self.default_tone]

    def tones(self) -> list[ToneProfile]:
        return list(self._tones.values())

    # --- builders ---

    def resolve_builder(self, builder: str | None) -> BuilderProfile:
        name = builder if builder is not None else NO_BUILDER
        profile = self._builders.get(name) or self._builders_lower.get(name.strip().lower())
        if profile:
            return profile
        return BuilderProfile(
            key=name,
            label=name,
            system_prompt=str(self._generic.get("system", "")).strip(),
            knowledge=tuple(str(k) for k in self._generic.get("knowledge", [])),
            tips=_parse_tips(self._generic.get("tips", [])),
            known=False,
        )

    def builders(self) -> list[BuilderProfile]:
        return list(self._builders.values())

    # --- both ---

    def resolve(self, tone: str | None, builder: str | None) -> GuidanceProfile:
        return GuidanceProfile(tone=self.resolve_tone(tone), builder=self.resolve_builder(builder))


def load_guidance_registry(directory: str | Path | None = None) -> GuidanceRegistry:
    """Build a GuidanceRegistry from ``tones.yaml`` and ``builders.yaml``."""
    directory = Path(directory) if directory else DEFAULT_CONTENT_DIR
    tones_data = load_yaml_file(directory / "tones.yaml")
    builders_data = load_yaml_file(directory / "builders.yaml")

    tones: dict[str, ToneProfile] = {}
    for key, raw in (tones_data.get("tones") or {}).items():
        tones[key] = ToneProfile(
            key=key,
            label=str(raw.get("label", key)),
            system=str(raw.get("system", "")).strip(),
            headline=str(raw.get("headline", "")).strip(),
            rewrite=_build_rewrite(raw.get("rewrite") or {}),
        )

    builders: dict[str, BuilderProfile] = {}
    for key, raw in (builders_data.get("builders") or {}).items():
        builders[key] = BuilderProfile(
            key=key,
            label=str(raw.get("label", key)),
            system_prompt=str(raw.get("system", "")).strip(),
            knowledge=tuple(str(k) for k in raw.get("knowledge", [])),
            tips=_parse_tips(raw.get("tips", [])),
        )

    registry = GuidanceRegistry(
        tones=tones,
        builders=builders,
        generic=builders_data.get("generic") or {},
        default_tone=str(tones_data.get("default", DEFAULT_TONE)),
    )
    logger.info("Loaded %d tones and %d builders", len(tones), len(builders))
    return registry


def _parse_tips(raw_tips: list[Any]) -> tuple[Step, ...]:
    tips: list[Step] = []
    for idx, tip in enumerate(raw_tips):
        if isinstance(tip, dict):
            tips.append(
                Step(
                    title=str(tip.get("title") or f"Builder step {idx + 1}"),
                    detail=str(tip.get("detail", "")).strip(),
                )
            )
        else:
            tips.append(Step(title=f"Builder step {idx + 1}", detail=str(tip).strip()))
    return tuple(tips)
