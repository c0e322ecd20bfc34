from __future__ import annotations

import logging
import re
from urllib.parse import urlparse

from lxml.html import HtmlElement

from foundation_scout.debug_log import DebugLog
from foundation_scout.dom import contains_pred, first_text, text_of
from foundation_scout.models import Contact
from foundation_scout.utils import is_placeholder_text, normalize_text, normalize_whitespace
from foundation_scout.vocabulary import PLACEHOLDER_PATTERNS, TEAM_TITLES

log = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_RE = re.compile(r"(?:\+1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")

STAFF_CONTAINER_XPATH = "//*[{}]//*".format(" or ".join((
    contains_pred("class", "staff", "team", "leadership", "people", "directory", "contact"),
    contains_pred("id", "staff", "team", "leadership"),
)))
_NAME_XPATH = (
    ".//*[self::h2 or self::h3 or self::h4 or self::h5 or self::strong or self::b or "
    + contains_pred("class", "name") + "]"
)

_MIN_NAME, _MAX_NAME, _MAX_LINE_NAME = 3, 100, 50
_BASE_CONFIDENCE, _EMAIL_BONUS, _PHONE_BONUS, _LINKEDIN_BONUS = 30, 30, 20, 20


# ---------------------------------------------------------------------------
# Validators
# ---------------------------------------------------------------------------


def is_valid_email(email: str | None) -> bool:
    if not email or not EMAIL_RE.fullmatch(email):
        return False
    lower = email.lower()
    return not any(p in lower for p in PLACEHOLDER_PATTERNS)


def is_valid_phone(phone: str | None) -> bool:
    """US numbers: 10 digits, or 11 with the country code."""
    if not phone:
        return False
    digits = re.sub(r"\D", "", phone)
    return 10 <= len(digits) <= 11


def is_valid_linkedin_url(url: str | None) -> bool:
    if not url or "linkedin.com/in/" not in url:
        return False
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return False
    return "linkedin.com" in host


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


def _matched_title(text: str) -> str | None:
    lower = text.lower()
    return next((t for t in TEAM_TITLES if t in lower), None)


def _contact_name(el: HtmlElement) -> str:
    name = first_text(el, _NAME_XPATH)
    if name:
        return normalize_whitespace(name)
    lines = [line.strip() for chunk in el.itertext() for line in chunk.split("\n") if line.strip()]
    if lines and len(lines[0]) < _MAX_LINE_NAME:
        return normalize_whitespace(lines[0])
    return ""


def _is_card_group(el: HtmlElement, cards: set[HtmlElement]) -> bool:
    """True when *el* wraps two or more staff cards, e.g. a grid of team members."""
    inner = 0
    for node in el.iterdescendants():
        if node in cards:
            inner += 1
            if inner >= 2:
                return True
    return False


def _is_title_phrase(name: str) -> bool:
    lower = normalize_text(name)
    return any(lower == t or lower.startswith(t) for t in TEAM_TITLES)


def _first_valid(pattern: re.Pattern[str], text: str, check) -> str | None:
    return next((m for m in pattern.findall(text) if check(m)), None)


def _linkedin(el: HtmlElement) -> str | None:
    for href in el.xpath(".//a[contains(@href, 'linkedin')]/@href"):
        if is_valid_linkedin_url(href):
            return href
    return None


def extract_contacts(doc: HtmlElement, limit: int = 15, debug: DebugLog | None = None) -> list[Contact]:
    """Staff contacts whose text names a fundraising or events role, best first."""
    contacts: list[Contact] = []
    seen: set[str] = set()

    candidates = []
    for el in doc.xpath(STAFF_CONTAINER_XPATH):
        full_text = text_of(el)
        title = _matched_title(full_text)
        if title:
            candidates.append((el, full_text, title))
    cards = {el for el, _, _ in candidates if el.xpath(_NAME_XPATH)}

    for el, full_text, title in candidates:
        if _is_card_group(el, cards):
            continue

        name = _contact_name(el)
        if not (_MIN_NAME <= len(name) <= _MAX_NAME) or is_placeholder_text(name) or _is_title_phrase(name):
            continue
        key = normalize_text(name)
        if key in seen:
            continue
        seen.add(key)

        email = _first_valid(EMAIL_RE, full_text, is_valid_email)
        phone = _first_valid(PHONE_RE, full_text, is_valid_phone)
        linkedin = _linkedin(el)
        confidence = (
            _BASE_CONFIDENCE
            + (_EMAIL_BONUS if email else 0)
            + (_PHONE_BONUS if phone else 0)
            + (_LINKEDIN_BONUS if linkedin else 0)
        )
        contacts.append(Contact(
            name=name,
            title=" ".join(w[:1].upper() + w[1:] for w in title.split(" ")),
            email=email,
            phone=phone,
            linkedin_url=linkedin,
            confidence=confidence,
        ))

    contacts.sort(key=lambda c: c.confidence, reverse=True)
    if debug:
        debug.log("CONTACTS", f"Found {len(contacts)} team contacts", {"kept": min(len(contacts), limit)})
    return contacts[:limit]
