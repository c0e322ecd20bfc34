from __future__ import annotations

import logging
import re
from datetime import date, datetime

from lxml.html import HtmlElement

from foundation_scout.debug_log import DebugLog
from foundation_scout.dom import contains_pred, first_text, parse_html, text_of
from foundation_scout.fetcher import Fetcher
from foundation_scout.models import Event
from foundation_scout.utils import absolutize, contains_any, is_placeholder_text, normalize_text, normalize_whitespace
from foundation_scout.vocabulary import (
    DEFAULT_EVENT_CATEGORY,
    EVENT_CATEGORY_LADDER,
    EVENT_KEYWORDS,
    EVENT_NAME_STOPWORDS,
    EVENT_PAGE_PATHS,
)

log = logging.getLogger(__name__)

DATE_RE = re.compile(
    r"\b(?:january|february|march|april|may|june|july|august|september|october|november|december"
    r"|jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)[a-z]*\.?\s+\d{1,2}(?:st|nd|rd|th)?(?:,?\s+\d{4})?"
    r"|\d{1,2}/\d{1,2}/\d{2,4}",
    re.IGNORECASE,
)
_MONTH_DAY_RE = re.compile(r"([a-z]{3})[a-z]*\.?\s+(\d{1,2})", re.IGNORECASE)
_NUMERIC_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{2,4})")
_YEAR_RE = re.compile(r"\b((?:19|20)\d{2})\b")
_MONTHS = {m: i for i, m in enumerate(
    ("jan", "feb", "mar", "apr", "may", "jun", "jul", "aug", "sep", "oct", "nov", "dec"), start=1)}

EVENT_REGION_XPATH = "//*[{}] | //article | //li[not(ancestor::nav)]".format(" or ".join((
    contains_pred("class", "event", "calendar", "card", "listing", "upcoming", "program", "gala"),
    contains_pred("id", "event", "calendar"),
)))
_NAME_XPATH = (
    ".//*[self::h1 or self::h2 or self::h3 or self::h4 or self::h5 or "
    + contains_pred("class", "title", "name", "heading") + "]"
)
_HEADING_XPATH = ".//*[self::h1 or self::h2 or self::h3 or self::h4 or self::h5]"
_LOCATION_XPATH = ".//*[self::address or " + contains_pred("class", "location", "venue", "place") + "]"

_MIN_NAME, _MAX_NAME, _STORED_NAME = 3, 200, 150


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def parse_event_date(raw: str | None, now: datetime | None = None) -> tuple[date | None, bool | None]:
    """Parse a listing date and decide whether it is upcoming.

    Returns ``(date, is_future)``; ``is_future`` is None when the text cannot
    be parsed. A month/day without a year that has already passed this year
    is taken to be next year's edition of an annual event.
    """
    if not raw:
        return None, None
    today = (now or datetime.now()).date()

    numeric = _NUMERIC_RE.search(raw)
    if numeric:
        month, day, year = (int(g) for g in numeric.groups())
        if year < 100:
            year += 2000
        try:
            parsed = date(year, month, day)
        except ValueError:
            return None, None
        return parsed, parsed >= today

    match = _MONTH_DAY_RE.search(raw)
    month = _MONTHS.get(match.group(1).lower()) if match else None
    if month is None:
        return None, None
    day = int(match.group(2))
    year_match = _YEAR_RE.search(raw)
    year = int(year_match.group(1)) if year_match else today.year
    try:
        parsed = date(year, month, day)
        if parsed < today and not year_match:
            parsed = parsed.replace(year=today.year + 1)
    except ValueError:
        return None, None
    return parsed, parsed >= today


def categorize(text: str) -> str:
    lower = text.lower()
    for category, keywords in EVENT_CATEGORY_LADDER:
        if any(k in lower for k in keywords):
            return category
    return DEFAULT_EVENT_CATEGORY


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def _event_name(region: HtmlElement) -> str:
    name = first_text(region, _NAME_XPATH)
    if not name:
        name = first_text(region, ".//a")
    return normalize_whitespace(name)


def _event_location(region: HtmlElement) -> str | None:
    for node in region.xpath(_LOCATION_XPATH):
        text = normalize_whitespace(text_of(node))
        if 3 < len(text) < 150 and not is_placeholder_text(text):
            return text
    return None


def _event_link(region: HtmlElement, base_url: str) -> str | None:
    hrefs = region.xpath(".//a/@href")
    return absolutize(base_url, hrefs[0]) if hrefs else None


def _has_event_signal(text: str) -> bool:
    return contains_any(text, EVENT_KEYWORDS) or DATE_RE.search(text) is not None


def _is_listing(region: HtmlElement, regions: set[HtmlElement]) -> bool:
    """True when *region* wraps two or more headed event regions of its own."""
    items = 0
    for node in region.iterdescendants():
        if node in regions and node.xpath(_HEADING_XPATH) and _has_event_signal(text_of(node)):
            items += 1
            if items >= 2:
                return True
    return False


def extract_events(
    doc: HtmlElement, base_url: str, seen: set[str],
    debug: DebugLog | None = None, now: datetime | None = None,
) -> list[Event]:
    """Extract upcoming events from one page.

    *seen* holds normalized names already accepted on other pages of the same
    request and is updated in place.
    """
    events: list[Event] = []
    regions = doc.xpath(EVENT_REGION_XPATH)
    region_set = set(regions)
    # regions inside an event that was already read belong to that event
    claimed: set[HtmlElement] = set()
    for region in regions:
        if region in claimed or _is_listing(region, region_set):
            continue
        text = text_of(region)
        if not _has_event_signal(text):
            continue
        date_match = DATE_RE.search(text)

        name = _event_name(region)
        if not (_MIN_NAME <= len(name) <= _MAX_NAME):
            continue
        key = normalize_text(name)
        if key in seen or key in EVENT_NAME_STOPWORDS or is_placeholder_text(name):
            continue
        seen.add(key)
        claimed.update(node for node in region.iterdescendants() if node in region_set)

        raw_date = date_match.group(0) if date_match else None
        _, is_future = parse_event_date(raw_date, now)
        if is_future is False:
            if debug:
                debug.log("EVENT", f"Skipping past event: {name}", {"date": raw_date})
            continue

        events.append(Event(
            name=name[:_STORED_NAME],
            category=categorize(text),
            date=raw_date,
            is_future=is_future,
            location=_event_location(region),
            link=_event_link(region, base_url),
        ))

    if debug:
        debug.log("EVENT", f"Extracted {len(events)} events from {base_url}")
    return events


async def collect_events(
    fetcher: Fetcher, doc: HtmlElement, foundation_url: str,
    max_pages: int = 3, now: datetime | None = None,
) -> list[Event]:
    """Events from the foundation page plus up to *max_pages* event-listing pages."""
    seen: set[str] = set()
    events = extract_events(doc, foundation_url, seen, fetcher.debug, now)

    pages = await fetcher.find_existing_pages(foundation_url, EVENT_PAGE_PATHS, limit=max_pages)
    for page_url in pages:
        result = await fetcher.fetch(page_url, max_retries=1)
        page_doc = parse_html(result.html) if result.success else None
        if page_doc is None:
            continue
        try:
            events.extend(extract_events(page_doc, result.final_url, seen, fetcher.debug, now))
        except Exception as exc:
            log.warning("Event extraction failed for %s: %s", page_url, exc)
            fetcher.debug.log("EVENT", "Error extracting events", {"page": page_url, "error": str(exc)})

    fetcher.debug.log("EVENT", f"Total unique events: {len(events)}")
    return events
