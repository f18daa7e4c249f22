"""MCP Prompts: intake-style review and landing page audit."""

from __future__ import annotations

from fastmcp import FastMCP

from aisales.domains.advisor.domain_logic.guidance import NO_BUILDER

EVALUATION_BRIEF = (
    "Using the context above, deliver a cohesive evaluation that: "
    "1) identifies the biggest trust-blockers and missed persuasion opportunities, "
    "2) suggests precise UX, copy, and hierarchy adjustments, "
    "3) outlines builder-specific implementation steps, and "
    "4) proposes next experiments or metrics to watch."
)


def intake_questions(builder: str = NO_BUILDER) -> list[str]:
    """Default intake questions; the last one depends on the builder."""
    if not builder or builder == NO_BUILDER:
        builder_question = (
            "Which tooling or format are you using right now (code, design tool, slides, etc.)?"
        )
    else:
        builder_question = (
            f"Within {builder}, which components or flows do you want me to adjust or rebuild?"
        )
    return [
        "Who is the primary audience and what outcome do you need them to achieve "
        "when they land here?",
        "What part of the current experience feels weakest or causes drop-off right now?",
        builder_question,
    ]


def compose_intake_prompt(
    seed_request: str,
    answers: list[str],
    builder: str = NO_BUILDER,
    questions: list[str] | None = None,
) -> str:
    """Fold an intake conversation into one brief for the scorecard tool."""
    questions = questions or intake_questions(builder)
    segments: list[str] = []
    if seed_request.strip():
        segments.append(f"Initial request from user: {seed_request.strip()}")
    for idx, answer in enumerate(answers):
        if not answer.strip():
            continue
        question = questions[idx] if idx < len(questions) else f"Context question {idx + 1}"
        segments.append(f"{question}\nUser answer: {answer.strip()}")
    segments.append(
        f"Preferred builder: {builder or NO_BUILDER}. Tailor recommendations and "
        "implementation steps specifically for this builder where applicable."
    )
    segments.append(EVALUATION_BRIEF)
    return "\n\n".join(segments)


def register_advisor_prompts(mcp: FastMCP) -> None:
    """Register advisor MCP prompts."""

    @mcp.prompt()
    def intake_review_prompt(
        request: str,
        audience: str = "",
        weakest_part: str = "",
        builder_focus: str = "",
        builder: str = NO_BUILDER,
    ) -> str:
        """Compose an intake interview into a full trust review request."""
        return compose_intake_prompt(request, [audience, weakest_part, builder_focus], builder)

    @mcp.prompt()
    def landing_audit_prompt(page_url: str = "my landing page", goal: str = "sign-ups") -> str:
        """Prompt template for a quick landing page trust audit."""
        return f"""Please audit {page_url} for trust and conversion. The main goal is {goal}.

1. Score how confident, pushy and clear the page feels
2. Flag the three biggest trust-blockers
3. Rewrite the weakest line of copy
4. Give me builder-specific steps I can do today

Call the trust_scorecard tool with a short description of the page."""
