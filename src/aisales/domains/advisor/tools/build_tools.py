"""MCP tool for build-ready plans."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from aisales.domains.advisor.service import AdvisorService

from aisales.domains.advisor.tools.advisor_tools import collect_attachments

logger = logging.getLogger(__name__)


def register_build_tools(mcp: FastMCP, service: AdvisorService, upload_dir: str) -> None:
    """Register the build plan tool on the MCP server."""

    @mcp.tool
    async def build_plan(
        ctx: Context,
        prompt: str,
        tone: str = "low-tech",
        builder: str = "No builder",
        session_id: str = "",
        attachments: list[dict[str, Any]] | None = None,
        staged_files: list[str] | None = None,
    ) -> str:
        """Turn a product brief into screens, flows, a data model and builder steps.

        Each call uses one of the session's free builds unless it is subscribed.

        Args:
            prompt: What you want to build.
            tone: Wording style: 'low-tech', 'mid-tech' or 'high-tech'.
            builder: No-code builder to target (e.g. 'Glide', 'Retool', 'No builder').
            session_id: Session whose build allowance is charged.
            attachments: Inline reference images as {name, mime_type, data(base64)}.
            staged_files: Names of files already uploaded to the server's upload directory.
        """
        files = collect_attachments(upload_dir, attachments, staged_files)
        result = await service.build(
            prompt,
            tone=tone,
            builder=builder,
            attachments=files,
            session_id=session_id or None,
        )
        logger.debug("build_plan returned %s", result["buildId"])
        return json.dumps(result, indent=2)
