"""Research pipeline shared by the HTTP API and the MCP server."""
from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import httpx
from lxml.html import HtmlElement

from foundation_scout.config import Settings, get_settings
from foundation_scout.contacts import extract_contacts
from foundation_scout.debug_log import DebugLog
from foundation_scout.dom import meta_description, page_title, parse_html
from foundation_scout.events import collect_events
from foundation_scout.fetcher import Fetcher, open_fetcher
from foundation_scout.models import (
    Contact,
    Event,
    ExtractionSuccess,
    Foundation,
    NotFound,
    Organization,
    RegistrationTool,
    Report,
    ReportMeta,
    ResearchError,
)
from foundation_scout.platforms import attach_registration
from foundation_scout.resolver import Candidate, RelationshipResolver, ResolutionContext
from foundation_scout.scorer import overall_confidence
from foundation_scout.utils import get_domain, name_from_title, org_name_from_url
from foundation_scout.vocabulary import UNKNOWN_PLATFORM

log = logging.getLogger(__name__)

ResearchResult = Report | NotFound | ResearchError

_MISSION_LENGTH = 500


# ---------------------------------------------------------------------------
# Pipeline steps
# ---------------------------------------------------------------------------


def _same_page(a: str, b: str) -> bool:
    return a.rstrip("/").lower() == b.rstrip("/").lower()


async def _load_foundation(
    fetcher: Fetcher, candidate: Candidate, page_url: str, home_doc: HtmlElement,
) -> tuple[Foundation, HtmlElement | None]:
    """Foundation details from its own page, plus that page's document if it loaded."""
    if _same_page(candidate.website, page_url):
        doc = home_doc
    else:
        result = await fetcher.fetch(candidate.website)
        doc = parse_html(result.html) if result.success else None
        if doc is None:
            fetcher.debug.log("DETAILS", "Could not load foundation page", {"url": candidate.website})

    name = candidate.name
    mission = None
    if doc is not None:
        name = name_from_title(page_title(doc)) or name or get_domain(candidate.website)
        description = meta_description(doc)
        mission = description[:_MISSION_LENGTH] if description else None

    foundation = Foundation(
        name=name or "Foundation",
        website=candidate.website,
        mission=mission,
        relationship_type=candidate.relationship_type,
        confidence=candidate.confidence,
        corroborating_pages=candidate.corroborating_pages,
    )
    fetcher.debug.log("DETAILS", "Loaded foundation details", {"name": foundation.name, "mission": bool(mission)})
    return foundation, doc


async def _events_step(
    fetcher: Fetcher, doc: HtmlElement | None, foundation_url: str, settings: Settings, now: datetime | None,
) -> list[Event]:
    if doc is None:
        return []
    try:
        events = await collect_events(fetcher, doc, foundation_url, max_pages=settings.max_event_pages, now=now)
    except Exception as exc:
        log.warning("Event extraction failed for %s: %s", foundation_url, exc)
        fetcher.debug.log("ERROR", "Error extracting events", {"error": str(exc)})
        return []
    try:
        await attach_registration(fetcher, events, limit=settings.max_event_crawls)
    except Exception as exc:
        log.warning("Registration detection failed for %s: %s", foundation_url, exc)
        fetcher.debug.log("ERROR", "Error crawling event pages", {"error": str(exc)})
    return events


def _contacts_step(fetcher: Fetcher, doc: HtmlElement | None, settings: Settings) -> list[Contact]:
    if doc is None:
        return []
    try:
        return extract_contacts(doc, limit=settings.max_contacts, debug=fetcher.debug)
    except Exception as exc:
        log.warning("Contact extraction failed: %s", exc)
        fetcher.debug.log("ERROR", "Error extracting contacts", {"error": str(exc)})
        return []


def _registration_tools(events: list[Event]) -> list[RegistrationTool]:
    return [
        RegistrationTool(
            event_name=e.name,
            registration_platform=e.registration_platform or UNKNOWN_PLATFORM,
            registration_link=e.registration_link,
            sponsorship_link=e.sponsorship_link,
        )
        for e in events
    ]


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def _run(url: str, fetcher: Fetcher, settings: Settings, debug: DebugLog, now: datetime | None) -> ResearchResult:
    organization = Organization(source_url=url, base_domain=get_domain(url), name=org_name_from_url(url))
    debug.log("INIT", "Starting research", {"url": url, "organization": organization.name})

    home = await fetcher.fetch(url)
    home_doc = parse_html(home.html) if home.success else None
    if home_doc is None:
        return ResearchError(
            kind="fetch_failed",
            error="Failed to fetch the provided URL",
            details=home.error or "Empty or unparsable response",
            url=url,
            debug_log=debug.entries,
        )

    page_url = home.final_url.rstrip("/") or url
    ctx = ResolutionContext(
        organization=organization, page_url=page_url, doc=home_doc,
        fetcher=fetcher, settings=settings, debug=debug,
    )
    resolution = await RelationshipResolver.default(settings).resolve(ctx)
    if resolution.candidate is None:
        return NotFound(
            searched_url=url,
            organization_name=organization.name,
            stages_attempted=resolution.attempted,
            search_steps_completed=resolution.steps,
            debug_log=debug.entries,
        )

    candidate = resolution.candidate
    foundation, foundation_doc = await _load_foundation(fetcher, candidate, page_url, home_doc)
    events = await _events_step(fetcher, foundation_doc, candidate.website, settings, now)
    contacts = _contacts_step(fetcher, foundation_doc, settings)
    tools = _registration_tools(events)
    score = overall_confidence(foundation.confidence, len(events), len(contacts), settings.weights)

    debug.log("COMPLETE", "Research complete", {
        "foundation": foundation.name, "type": foundation.relationship_type,
        "events": len(events), "contacts": len(contacts), "confidence": score,
    })
    return Report(
        foundation=foundation,
        events=events,
        registration_tools=tools,
        team_contacts=contacts,
        other_sponsored_foundations=candidate.runners_up or None,
        confidence_score=score,
        meta=ReportMeta(
            source_url=url,
            organization_name=organization.name,
            foundation_url=candidate.website,
            search_method=resolution.stage,
            scraped_at=datetime.now(UTC),
            events_found=len(events),
            contacts_found=len(contacts),
            extraction_success=ExtractionSuccess(
                foundation=True,
                events=bool(events),
                tools=any(t.registration_platform != UNKNOWN_PLATFORM for t in tools),
                contacts=bool(contacts),
            ),
        ),
        debug_log=debug.entries,
    )


async def research(
    url: str,
    *,
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    now: datetime | None = None,
) -> ResearchResult:
    """Resolve the foundation behind *url* and harvest its events and contacts.

    *url* must already be normalized (see ``utils.normalize_input_url``).
    Never raises: failures come back as :class:`ResearchError`.
    """
    settings = settings or get_settings()
    debug = DebugLog()
    try:
        async with open_fetcher(settings, debug, transport=transport) as fetcher:
            return await _run(url, fetcher, settings, debug, now)
    except Exception as exc:
        log.exception("Research failed for %s", url)
        debug.log("ERROR", "Unexpected error", {"error": str(exc)})
        return ResearchError(
            kind="internal", error="Internal error while researching the organization",
            details=str(exc), url=url, debug_log=debug.entries,
        )


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

_ERROR_STATUS = {"fetch_failed": 502, "internal": 500}


def status_code_for(result: ResearchResult) -> int:
    if isinstance(result, ResearchError):
        return _ERROR_STATUS[result.kind]
    return 200


def result_payload(result: ResearchResult) -> dict[str, Any]:
    """JSON-ready dict for any research outcome."""
    return result.model_dump(mode="json")
