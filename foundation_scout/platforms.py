"""Registration platform detection for extracted events."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from lxml.html import HtmlElement

from foundation_scout.dom import parse_html, text_of
from foundation_scout.fetcher import Fetcher
from foundation_scout.models import Event
from foundation_scout.utils import absolutize, contains_any, normalize_whitespace
from foundation_scout.vocabulary import REGISTRATION_KEYWORDS, REGISTRATION_PLATFORMS, UNKNOWN_PLATFORM

log = logging.getLogger(__name__)

# Checked in order; the first attribute kind with a match decides the platform.
_EMBED_XPATHS: tuple[str, ...] = (
    "//iframe/@src",
    "//form/@action",
    "//script/@src",
    "//a/@href",
)


@dataclass
class EventPageInfo:
    platform: str | None = None
    registration_link: str | None = None
    sponsorship_link: str | None = None


def detect_from_url(url: str | None) -> str | None:
    """Name of the first platform whose pattern occurs in *url*, else None."""
    if not url:
        return None
    lower = url.lower()
    for platform, patterns in REGISTRATION_PLATFORMS:
        if any(p in lower for p in patterns):
            return platform
    return None


def detect_from_page(doc: HtmlElement, url: str) -> str | None:
    platform = detect_from_url(url)
    if platform:
        return platform
    for xpath in _EMBED_XPATHS:
        for value in doc.xpath(xpath):
            platform = detect_from_url(value)
            if platform:
                return platform
    return None


def _registration_link(doc: HtmlElement, page_url: str) -> str | None:
    for anchor in doc.xpath("//a[@href]"):
        href = anchor.get("href", "")
        if contains_any(text_of(anchor), REGISTRATION_KEYWORDS) or contains_any(href, REGISTRATION_KEYWORDS):
            link = absolutize(page_url, href)
            if link:
                return link
    return None


def _sponsorship_link(doc: HtmlElement, page_url: str) -> str | None:
    for anchor in doc.xpath("//a[@href]"):
        if "sponsor" in normalize_whitespace(text_of(anchor)).lower():
            link = absolutize(page_url, anchor.get("href"))
            if link:
                return link
    return None


async def crawl_event_page(fetcher: Fetcher, url: str) -> EventPageInfo | None:
    """Fetch an event's detail page and read its registration details.

    Returns None when the page cannot be fetched or parsed.
    """
    result = await fetcher.fetch(url, max_retries=1)
    doc = parse_html(result.html) if result.success else None
    if doc is None:
        return None

    page_url = result.final_url
    info = EventPageInfo(
        platform=detect_from_page(doc, page_url),
        registration_link=_registration_link(doc, page_url),
        sponsorship_link=_sponsorship_link(doc, page_url),
    )
    if not info.platform and info.registration_link:
        info.platform = detect_from_url(info.registration_link)
    fetcher.debug.log("PLATFORM", "Crawled event page", {
        "url": url, "platform": info.platform, "registration_link": info.registration_link,
    })
    return info


async def attach_registration(fetcher: Fetcher, events: list[Event], limit: int = 8) -> list[Event]:
    """Fill the registration fields of *events* in place.

    The first *limit* events with a link get their page crawled; the rest are
    classified from the link URL alone.
    """
    crawled = 0
    for event in events:
        if not event.link:
            event.registration_platform = UNKNOWN_PLATFORM
            continue

        if crawled >= limit:
            event.registration_platform = detect_from_url(event.link) or UNKNOWN_PLATFORM
            event.registration_link = event.link
            continue

        crawled += 1
        try:
            info = await crawl_event_page(fetcher, event.link)
        except Exception as exc:
            log.warning("Event page crawl failed for %s: %s", event.link, exc)
            fetcher.debug.log("PLATFORM", "Error crawling event page", {"url": event.link, "error": str(exc)})
            info = None

        if info is None:
            event.registration_platform = detect_from_url(event.link) or UNKNOWN_PLATFORM
            event.registration_link = event.link
            continue
        event.registration_platform = info.platform or UNKNOWN_PLATFORM
        event.registration_link = info.registration_link or event.link
        event.sponsorship_link = info.sponsorship_link

    fetcher.debug.log("PLATFORM", f"Attached registration info to {len(events)} events", {"crawled": crawled})
    return events
