"""AI Sales advisor MCP server: application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from aisales.core.config.settings import Settings, get_settings
from aisales.core.llm.client import LiveModelClient
from aisales.core.llm.provider import LLMProvider, create_provider
from aisales.core.session.store import SessionStore
from aisales.domains.advisor.domain_logic.guidance import load_guidance_registry
from aisales.domains.advisor.domain_logic.rng import SeedCursor
from aisales.domains.advisor.domain_logic.templates import load_template_library
from aisales.domains.advisor.prompts.advisor_prompts import register_advisor_prompts
from aisales.domains.advisor.resources.guidance import register_guidance_resources
from aisales.domains.advisor.service import AdvisorService
from aisales.domains.advisor.tools.advisor_tools import register_advisor_tools
from aisales.domains.advisor.tools.build_tools import register_build_tools
from aisales.domains.advisor.tools.session_tools import register_session_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "AI Sales Advisor"
SERVER_VERSION = "0.1.0"


def _select_provider(settings: Settings) -> LLMProvider | None:
    """Provider for the configured backend, or None to serve fallbacks only."""
    if settings.llm_provider == "none":
        return None
    if settings.llm_provider == "mock":
        return create_provider("mock")
    if settings.llm_provider == "openai":
        api_key, model = settings.openai_api_key, settings.openai_model
    elif settings.llm_provider == "anthropic":
        api_key, model = settings.anthropic_api_key, settings.anthropic_model
    else:  # pragma: no cover
        raise ValueError(f"Unknown LLM provider: {settings.llm_provider!r}")

    if not api_key:
        logger.warning(
            "No API key configured for provider '%s'; serving deterministic variants only",
            settings.llm_provider,
        )
        return None
    return create_provider(provider_name=settings.llm_provider, api_key=api_key, model=model)


def create_app(
    *,
    provider_override: LLMProvider | None = None,
    session_store_override: SessionStore | None = None,
    seed_cursor_override: SeedCursor | None = None,
) -> FastMCP:
    """Create and configure the AI Sales advisor MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Loads the template library and guidance tables
    3. Chooses the live-model provider (or none)
    4. Builds the advisor service around the session store and seed cursor
    5. Registers all tools, resources, and prompts
    """
    settings = get_settings()

    # --- Server instance ---
    server = FastMCP(
        SERVER_NAME,
        instructions=(
            "AI Sales reviews landing pages and app screens for trust and conversion, "
            "returning scored trust scorecards and build-ready plans tailored to "
            "no-code builders. Works offline with deterministic variants when no "
            "live model is configured."
        ),
    )

    # --- Content ---
    library = load_template_library(settings.content_dir or None)
    guidance = load_guidance_registry(settings.content_dir or None)

    # --- Live model ---
    provider = provider_override if provider_override is not None else _select_provider(settings)
    live_client = (
        LiveModelClient(provider, timeout_seconds=settings.llm_timeout_seconds)
        if provider is not None
        else None
    )

    # --- Service ---
    sessions = session_store_override or SessionStore(history_capacity=settings.history_capacity)
    service = AdvisorService(
        library,
        guidance,
        sessions,
        live_client=live_client,
        seed_cursor=seed_cursor_override or SeedCursor(pool_size=settings.seed_pool_size),
        free_build_limit=settings.free_build_limit,
    )
    logger.info(
        "Advisor service ready: live_model=%s, free_build_limit=%d",
        type(provider).__name__ if provider is not None else "none",
        settings.free_build_limit,
    )

    # --- Register tools ---
    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": SERVER_NAME,
            "version": SERVER_VERSION,
            "live_model": service.live,
            "llm_provider": settings.llm_provider,
            "tones": [t.key for t in guidance.tones()],
            "builders_known": len(guidance.builders()),
            "sessions": len(sessions),
        }

    register_advisor_tools(server, service, settings.upload_dir)
    register_build_tools(server, service, settings.upload_dir)
    register_session_tools(server, service)

    # --- Register resources ---
    register_guidance_resources(server, guidance)

    # --- Register prompts ---
    register_advisor_prompts(server)

    return server


# Module-level instance for FastMCP discovery.
# Lazy: only created when this module is loaded directly (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
