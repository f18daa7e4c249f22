"""MCP tools for session state."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from aisales.domains.advisor.service import AdvisorService


def register_session_tools(mcp: FastMCP, service: AdvisorService) -> None:
    """Register session inspection tools on the MCP server."""

    @mcp.tool
    async def session_status(ctx: Context, session_id: str = "") -> str:
        """Show build usage, free builds remaining and subscription status.

        Args:
            session_id: Session to inspect. A new one is created if empty.
        """
        return json.dumps(service.session_status(session_id or None))
