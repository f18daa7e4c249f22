"""MCP tool for trust scorecards on landing pages and app screens."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from fastmcp import Context, FastMCP

if TYPE_CHECKING:
    from aisales.domains.advisor.service import AdvisorService

from aisales.core.uploads.attachments import (
    MAX_FILES,
    Attachment,
    AttachmentError,
    consume_staged_files,
    validate_attachments,
)

logger = logging.getLogger(__name__)


def collect_attachments(
    upload_dir: str,
    attachments: list[dict[str, Any]] | None,
    staged_files: list[str] | None,
) -> list[Attachment]:
    """Inline and staged attachments together, within the per-request cap."""
    staged = consume_staged_files(upload_dir, staged_files)
    inline = validate_attachments(attachments)
    combined = staged + inline
    if len(combined) > MAX_FILES:
        raise AttachmentError(f"At most {MAX_FILES} attachments are allowed, got {len(combined)}")
    return combined


def register_advisor_tools(mcp: FastMCP, service: AdvisorService, upload_dir: str) -> None:
    """Register the scorecard tool on the MCP server."""

    @mcp.tool
    async def trust_scorecard(
        ctx: Context,
        prompt: str = "",
        tone: str = "low-tech",
        builder: str = "Bubble",
        session_id: str = "",
        context: str = "",
        attachments: list[dict[str, Any]] | None = None,
        staged_files: list[str] | None = None,
    ) -> str:
        """Review a landing page or app screen and return a trust scorecard.

        Scores confidence, pushiness and clarity (0-100), flags up to three
        issues, rewrites one line of copy and lists builder-specific actions.

        Args:
            prompt: Description of the page, audience and goal.
            tone: Wording style: 'low-tech', 'mid-tech' or 'high-tech'.
            builder: No-code builder in use (e.g. 'Bubble', 'Webflow', 'No builder').
            session_id: Session to attach this turn to. A new one is created if empty.
            context: Earlier conversation, flattened. Defaults to the session history.
            attachments: Inline screenshots as {name, mime_type, data(base64)}.
            staged_files: Names of files already uploaded to the server's upload directory.
        """
        files = collect_attachments(upload_dir, attachments, staged_files)
        result = await service.review(
            prompt,
            tone=tone,
            builder=builder,
            attachments=files,
            session_id=session_id or None,
            context=context,
        )
        return json.dumps(result, indent=2)
