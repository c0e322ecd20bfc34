from __future__ import annotations

import json
import logging

from mcp.server.fastmcp import FastMCP

from foundation_scout import services
from foundation_scout.config import get_settings
from foundation_scout.utils import normalize_input_url

log = logging.getLogger(__name__)


mcp = FastMCP(
    "Foundation Scout",
    instructions=(
        "Foundation Scout finds the charitable foundation behind an organization website "
        "(owned, associated or sponsored) and reports its upcoming fundraising events, "
        "their registration platforms and staff contacts. Read foundation-scout://overview "
        "for the resolution stages, then call research_foundation(url)."
    ),
    json_response=True,
)


# ---------------------------------------------------------------------------
# Resource
# ---------------------------------------------------------------------------


@mcp.resource("foundation-scout://overview")
def foundation_scout_overview() -> str:
    """Overview of Foundation Scout: resolution stages, relationship types and confidence."""
    weights = get_settings().weights
    return json.dumps({
        "system": "Foundation Scout",
        "description": (
            "Given an organization URL, resolves an affiliated foundation with an ordered "
            "chain of strategies (first success wins), then extracts events, registration "
            "platforms and development contacts from the foundation's site."
        ),
        "stages": [
            "self_check: the organization page itself is a foundation",
            "link_scan: best foundation-keyword link on the home page",
            "path_probe: /foundation, /giving, /donate and similar paths",
            "subdomain_probe: foundation., giving., donate. subdomains",
            "sponsor_scan: external foundations mentioned on community/sponsorship pages",
            "reverse_lookup: known regional foundations that list the organization",
        ],
        "relationship_types": {
            "owned": "The foundation is run by the organization itself.",
            "associated": "A linked foundation on another domain.",
            "sponsored": "An external foundation the organization supports or is listed by.",
        },
        "confidence": {
            "range": "Integers 0-100.",
            "overall": (
                "Mean of the foundation confidence, "
                f"{weights.events_found} if events were found and "
                f"{weights.contacts_found} if contacts were found; "
                f"{weights.default_overall} when nothing contributed."
            ),
        },
        "outcomes": {
            "report": "Foundation, events, registration_tools, team_contacts, confidence_score, meta.",
            "FOUNDATION_NOT_FOUND": "No stage produced a foundation; lists the stages attempted.",
            "error": "The organization's own page could not be fetched, or an internal fault.",
        },
    }, indent=2)


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------


@mcp.tool()
async def research_foundation(url: str) -> dict:
    """Research the foundation behind an organization website.

    Args:
        url: Organization website, with or without scheme (e.g. "acme.org").

    Returns the full report, a FOUNDATION_NOT_FOUND payload listing the
    stages attempted, or an error payload when the site cannot be fetched.
    """
    normalized = normalize_input_url(url)
    if not normalized:
        return {"error": "URL is required"}
    result = await services.research(normalized)
    return services.result_payload(result)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main():
    """Run the Foundation Scout MCP server over stdio."""
    mcp.run()


if __name__ == "__main__":
    main()
