"""Server entry point: ``python -m aisales.core.server.main``."""

from __future__ import annotations

import logging
from ipaddress import ip_address

from aisales.core.config.settings import Settings, get_settings
from aisales.core.server.app import create_app
from aisales.core.uploads.attachments import prepare_upload_dir

logger = logging.getLogger(__name__)


def _is_loopback_host(host: str) -> bool:
    if host == "localhost":
        return True
    try:
        return ip_address(host).is_loopback
    except ValueError:
        return False


def check_bind(settings: Settings) -> None:
    """Refuse non-loopback binds unless explicitly allowed.

    The tools accept uploads and hand out free builds per session id, and
    nothing in front of them authenticates callers.
    """
    if settings.aisales_allow_insecure_bind or _is_loopback_host(settings.aisales_host):
        return
    raise RuntimeError(
        f"Refusing to serve the advisor on {settings.aisales_host}: free-build limits and "
        "staged uploads are unauthenticated. Set AISALES_ALLOW_INSECURE_BIND=true to override."
    )


def run() -> None:
    """Start the advisor MCP server with Streamable HTTP transport."""
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.aisales_log_level.upper(), logging.INFO))

    check_bind(settings)
    upload_dir = prepare_upload_dir(settings.upload_dir)
    logger.info(
        "Starting AI Sales advisor on %s:%d (llm_provider=%s, free_build_limit=%d, uploads=%s)",
        settings.aisales_host,
        settings.aisales_port,
        settings.llm_provider,
        settings.free_build_limit,
        upload_dir,
    )

    mcp = create_app()
    mcp.run(
        transport="streamable-http",
        host=settings.aisales_host,
        port=settings.aisales_port,
    )


if __name__ == "__main__":
    run()
