"""Shared text and URL helpers used across foundation_scout modules."""
from __future__ import annotations

import re
from collections.abc import Iterable
from urllib.parse import urldefrag, urljoin, urlparse

from foundation_scout.vocabulary import PLACEHOLDER_PATTERNS, SOCIAL_DOMAINS

_WS_RE = re.compile(r"\s+")
_TITLE_SPLIT_RE = re.compile(r"[|\-:]")
_SKIPPED_SCHEMES = ("javascript:", "mailto:", "tel:", "data:")


def normalize_whitespace(text: str | None) -> str:
    return _WS_RE.sub(" ", (text or "").replace("\xa0", " ")).strip()


def normalize_text(text: str | None) -> str:
    """Dedup key for names: collapsed whitespace, lowercased, trimmed."""
    return normalize_whitespace(text).lower()


def get_domain(url: str) -> str:
    """Host of *url* without a leading ``www.``; the input itself if unparsable."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        return url
    if not host:
        return url
    return host.removeprefix("www.")


def get_base_url(url: str) -> str:
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return url
    return f"{parsed.scheme}://{parsed.netloc}"


def registrable_domain(domain: str) -> str:
    return ".".join(domain.split(".")[-2:])


def domain_token(domain: str) -> str:
    return domain.split(".")[0]


def org_name_from_url(url: str) -> str:
    token = domain_token(get_domain(url))
    return token[:1].upper() + token[1:]


def name_from_title(title: str) -> str:
    """Leading segment of a page title, cut at the first ``|``, ``-`` or ``:``."""
    return _TITLE_SPLIT_RE.split(title, maxsplit=1)[0].strip()


def absolutize(base_url: str, href: str | None) -> str | None:
    """Resolve *href* against *base_url*, returning an absolute http(s) URL or None.

    Script, mail and fragment-only links are rejected; fragments are stripped.
    """
    href = (href or "").strip()
    if not href or href.startswith("#") or href.lower().startswith(_SKIPPED_SCHEMES):
        return None
    try:
        resolved, _ = urldefrag(urljoin(base_url, href))
        parsed = urlparse(resolved)
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return None
    return resolved


def matching_keywords(text: str, keywords: Iterable[str]) -> list[str]:
    lower = text.lower()
    return [k for k in keywords if k in lower]


def contains_any(text: str, keywords: Iterable[str]) -> bool:
    lower = text.lower()
    return any(k in lower for k in keywords)


def is_placeholder_text(text: str | None) -> bool:
    lower = (text or "").strip().lower()
    if len(lower) < 2:
        return True
    return any(p in lower for p in PLACEHOLDER_PATTERNS)


def is_social_url(url: str) -> bool:
    lower = url.lower()
    return any(s in lower for s in SOCIAL_DOMAINS)


def normalize_input_url(url: str | None) -> str | None:
    """Sanitize a user-supplied URL: strip quotes/brackets, add a scheme, drop the trailing slash."""
    if not url or not isinstance(url, str):
        return None
    url = re.sub(r"[<>\"']", "", url.strip())
    if not url:
        return None
    if not url.startswith(("http://", "https://")):
        url = "https://" + url
    url = url.rstrip("/")
    if not urlparse(url).hostname:
        return None
    return url
