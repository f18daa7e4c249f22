"""Advisor orchestration: guidance + (live model or variant selector) + normalizer.

The service owns the process-wide pieces of state (seed cursor, session store)
and is what the MCP tools call. Live-model failures never reach callers; they
are logged and answered from the variant selector instead.
"""

from __future__ import annotations

import logging
from typing import Any

from aisales.core.llm.client import LiveModelClient, LiveModelError
from aisales.core.llm.schemas import (
    BUILD_PLAN_SCHEMA,
    BUILD_PLAN_SCHEMA_NAME,
    SCORECARD_SCHEMA,
    SCORECARD_SCHEMA_NAME,
)
from aisales.core.llm.system_prompt import (
    ADVISOR_SYSTEM_PROMPT,
    BUILDER_SYSTEM_PROMPT,
    build_system_messages,
    build_user_message,
)
from aisales.core.session.store import SENDER_ADVISOR, SENDER_USER, Session, SessionStore
from aisales.core.uploads.attachments import Attachment
from aisales.domains.advisor.domain_logic.build_plans import simulate_build_plan
from aisales.domains.advisor.domain_logic.guidance import GuidanceProfile, GuidanceRegistry
from aisales.domains.advisor.domain_logic.models import BuildPlan, Scorecard
from aisales.domains.advisor.domain_logic.normalizer import (
    normalize_build_plan,
    normalize_scorecard,
)
from aisales.domains.advisor.domain_logic.rng import SeedCursor
from aisales.domains.advisor.domain_logic.small_talk import is_small_talk, small_talk_scorecard
from aisales.domains.advisor.domain_logic.templates import TemplateLibrary
from aisales.domains.advisor.domain_logic.variants import VariantSelector

logger = logging.getLogger(__name__)


class BuildLimitReachedError(ValueError):
    """The session has used all of its free builds."""

    def __init__(self, limit: int) -> None:
        super().__init__(
            f"You have used your free build{'s' if limit != 1 else ''}. "
            "Upgrade to generate additional builds."
        )
        self.limit = limit


def flatten_scorecard(card: Scorecard) -> str:
    """Short text rendering of a scorecard for conversation history."""
    parts = [card.headline, card.summary]
    parts += [f"{f.title}: {f.detail}" for f in card.flags[:3]]
    parts += [f"{a.title}: {a.detail}" for a in card.builder_actions[:3]]
    return " ".join(p for p in parts if p)


class AdvisorService:
    """Answers review and build requests for one server process."""

    def __init__(
        self,
        library: TemplateLibrary,
        guidance: GuidanceRegistry,
        sessions: SessionStore,
        *,
        live_client: LiveModelClient | None = None,
        seed_cursor: SeedCursor | None = None,
        free_build_limit: int = 1,
    ) -> None:
        self.library = library
        self.guidance = guidance
        self.sessions = sessions
        self.live_client = live_client
        self.seed_cursor = seed_cursor or SeedCursor()
        self.free_build_limit = free_build_limit
        self.selector = VariantSelector(library, guidance)

    @property
    def live(self) -> bool:
        return self.live_client is not None

    # --- scorecards ---

    async def review(
        self,
        prompt: str,
        *,
        tone: str | None = None,
        builder: str | None = None,
        attachments: list[Attachment] | None = None,
        session_id: str | None = None,
        context: str = "",
    ) -> dict[str, Any]:
        """Produce a trust scorecard for a brief and/or screenshots."""
        attachments = attachments or []
        prompt = (prompt or "").strip()
        if not prompt and not attachments:
            raise ValueError("Please provide a description or at least one image.")

        session = self.sessions.get_or_create(session_id)
        profile = self.guidance.resolve(tone, builder)

        if is_small_talk(self.library, prompt, len(attachments)):
            card = small_talk_scorecard(self.library, profile, prompt, builder)
        else:
            if not context:
                context = self.sessions.conversation_context(session.session_id, prompt)
            card = await self._scorecard(prompt, profile, tone, builder, attachments, context)

        self.sessions.record_turn(session.session_id, SENDER_USER, prompt)
        self.sessions.record_turn(session.session_id, SENDER_ADVISOR, flatten_scorecard(card))
        logger.info(
            "Scorecard served: session=%s, source=%s, seed=%s",
            session.session_id,
            card.source,
            card.seed,
        )
        return self._with_session(card.to_dict(), session) | {
            "locked": not session.is_subscribed,
        }

    async def _scorecard(
        self,
        prompt: str,
        profile: GuidanceProfile,
        tone: str | None,
        builder: str | None,
        attachments: list[Attachment],
        context: str,
    ) -> Scorecard:
        if self.live_client is None:
            return self._fallback_scorecard(tone, builder, len(attachments))
        try:
            payload = await self.live_client.request(
                build_system_messages(ADVISOR_SYSTEM_PROMPT, profile.system_instructions()),
                build_user_message(
                    prompt,
                    tone_label=profile.tone.label,
                    builder_label=profile.builder.label,
                    context=context,
                ),
                output_schema=SCORECARD_SCHEMA,
                schema_name=SCORECARD_SCHEMA_NAME,
                attachments=attachments,
            )
        except LiveModelError:
            logger.exception("Falling back to a simulated scorecard")
            return self._fallback_scorecard(tone, builder, len(attachments))
        return normalize_scorecard(
            payload,
            self.selector,
            next_seed=self.seed_cursor.next_seed,
            tone=tone,
            builder=builder,
            attachment_count=len(attachments),
        )

    def _fallback_scorecard(
        self, tone: str | None, builder: str | None, attachment_count: int
    ) -> Scorecard:
        seed = self.seed_cursor.next_seed()
        return self.selector.generate(seed, tone, builder, attachment_count=attachment_count)

    # --- build plans ---

    async def build(
        self,
        prompt: str,
        *,
        tone: str | None = None,
        builder: str | None = None,
        attachments: list[Attachment] | None = None,
        session_id: str | None = None,
    ) -> dict[str, Any]:
        """Produce a build plan, counting it against the session's free builds."""
        attachments = attachments or []
        prompt = (prompt or "").strip()
        if not prompt:
            raise ValueError("Please describe what you want to build.")

        session = self.sessions.get_or_create(session_id)
        if not session.is_subscribed and session.builds_used >= self.free_build_limit:
            raise BuildLimitReachedError(self.free_build_limit)

        profile = self.guidance.resolve(tone, builder)
        plan = await self._build_plan(prompt, profile, builder, attachments)

        session = self.sessions.record_build(session.session_id, plan.build_id, plan.summary)
        self.sessions.record_turn(session.session_id, SENDER_USER, prompt)
        self.sessions.record_turn(
            session.session_id, SENDER_ADVISOR, f"{plan.headline} {plan.summary}"
        )
        logger.info(
            "Build plan served: session=%s, build=%s, source=%s",
            session.session_id,
            plan.build_id,
            plan.source,
        )
        return self._with_session(plan.to_dict(), session)

    async def _build_plan(
        self,
        prompt: str,
        profile: GuidanceProfile,
        builder: str | None,
        attachments: list[Attachment],
    ) -> BuildPlan:
        if self.live_client is None:
            return simulate_build_plan(self.library, profile, builder)
        try:
            payload = await self.live_client.request(
                build_system_messages(BUILDER_SYSTEM_PROMPT, profile.system_instructions()),
                build_user_message(
                    prompt,
                    tone_label=profile.tone.label,
                    builder_label=profile.builder.label,
                ),
                output_schema=BUILD_PLAN_SCHEMA,
                schema_name=BUILD_PLAN_SCHEMA_NAME,
                attachments=attachments,
            )
        except LiveModelError:
            logger.exception("Falling back to the starter build plan")
            return simulate_build_plan(self.library, profile, builder)
        return normalize_build_plan(payload, self.library, profile, builder=builder)

    # --- sessions ---

    def session_status(self, session_id: str | None = None) -> dict[str, Any]:
        session = self.sessions.get_or_create(session_id)
        return session.to_dict(self.free_build_limit)

    def _with_session(self, body: dict[str, Any], session: Session) -> dict[str, Any]:
        return body | {
            "sessionId": session.session_id,
            "buildsUsed": session.builds_used,
            "remainingFreeBuilds": session.remaining_free_builds(self.free_build_limit),
            "isSubscribed": session.is_subscribed,
        }
