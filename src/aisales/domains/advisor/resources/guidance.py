"""MCP Resources for tone and builder discovery."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from fastmcp import FastMCP

if TYPE_CHECKING:
    from aisales.domains.advisor.domain_logic.guidance import GuidanceRegistry


def register_guidance_resources(mcp: FastMCP, guidance: GuidanceRegistry) -> None:
    """Register tone and builder discovery resources on the MCP server."""

    @mcp.resource("guidance://tones")
    def tones_resource() -> str:
        """List the wording tones the advisor understands."""
        return json.dumps(
            {
                "default": guidance.default_tone,
                "tones": [
                    {"key": t.key, "label": t.label, "headline": t.headline}
                    for t in guidance.tones()
                ],
            },
            indent=2,
        )

    @mcp.resource("guidance://builders")
    def builders_resource() -> str:
        """List the no-code builders with tailored guidance."""
        return json.dumps(
            {
                "builder_count": len(guidance.builders()),
                "builders": [
                    {
                        "key": b.key,
                        "label": b.label,
                        "knowledge": list(b.knowledge),
                        "tips": [tip.to_dict() for tip in b.tips],
                    }
                    for b in guidance.builders()
                ],
            },
            indent=2,
        )
