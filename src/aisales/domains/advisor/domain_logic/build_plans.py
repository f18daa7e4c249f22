"""Deterministic starter build plan used when no live model answers."""

from __future__ import annotations

import uuid

from aisales.domains.advisor.domain_logic.guidance import GuidanceProfile
from aisales.domains.advisor.domain_logic.models import (
    SOURCE_FALLBACK,
    BuildPlan,
    Entity,
    ExportFile,
    ExportPlan,
    Flow,
    Screen,
    Step,
)
from aisales.domains.advisor.domain_logic.templates import TemplateLibrary, instantiate


def new_build_id() -> str:
    return str(uuid.uuid4())


def simulate_build_plan(
    library: TemplateLibrary,
    profile: GuidanceProfile,
    builder: str | None = None,
) -> BuildPlan:
    """Instantiate the YAML build plan template for the resolved builder.

    Everything except ``build_id`` is a pure function of the builder.
    """
    tpl = library.build_plan
    label = profile.builder.label
    tip = profile.builder.tips[0].detail if profile.builder.tips else ""

    def fill(text: object) -> str:
        return instantiate(str(text).strip(), label, tip=tip)

    export = tpl.get("export_plan")
    export_plan = None
    if isinstance(export, dict):
        export_plan = ExportPlan(
            description=fill(export.get("description", "")),
            files=tuple(
                ExportFile(filename=fill(f.get("filename", "")), description=fill(f.get("description", "")))
                for f in export.get("files", [])
            ),
        )

    return BuildPlan(
        build_id=new_build_id(),
        headline=fill(tpl.get("headline", "")),
        summary=fill(tpl.get("summary", "")),
        screens=tuple(
            Screen(
                name=fill(s.get("name", "")),
                goal=fill(s.get("goal", "")),
                key_elements=tuple(fill(e) for e in s.get("key_elements", [])),
            )
            for s in tpl.get("screens", [])
        ),
        flows=tuple(
            Flow(title=fill(f.get("title", "")), steps=tuple(fill(s) for s in f.get("steps", [])))
            for f in tpl.get("flows", [])
        ),
        data_model=tuple(
            Entity(entity=fill(e.get("entity", "")), fields=tuple(fill(x) for x in e.get("fields", [])))
            for e in tpl.get("data_model", [])
        ),
        builder_steps=tuple(
            Step(title=fill(s.get("title", "")), detail=fill(s.get("detail", "")))
            for s in tpl.get("builder_steps", [])
        ),
        export_plan=export_plan,
        next_steps=tuple(fill(s) for s in tpl.get("next_steps", [])),
        suggested_prompts=tuple(fill(p) for p in tpl.get("suggested_prompts", [])),
        builder=builder if builder is not None else profile.builder.key,
        source=SOURCE_FALLBACK,
    )
