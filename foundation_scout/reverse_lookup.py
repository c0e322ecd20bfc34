"""Reverse lookup: search known regional foundations for mentions of the organization.

Used only after every on-site strategy has failed, when the organization's
own pages carry no outbound trace of a foundation relationship.
"""
from __future__ import annotations

import logging
import re

from lxml.html import HtmlElement

from foundation_scout.dom import body_text, contains_pred, page_title, parse_html, text_of
from foundation_scout.models import Organization, SponsoredCandidate
from foundation_scout.resolver import Candidate, ResolutionContext, ResolutionStrategy
from foundation_scout.utils import get_domain, name_from_title, normalize_text
from foundation_scout.vocabulary import KNOWN_FOUNDATIONS, REGIONS, REVERSE_LOOKUP_PATHS, KnownFoundation

log = logging.getLogger(__name__)

_MIN_VARIANT_LENGTH = 4
_FALLBACK_REGISTRY_SIZE = 3
_GENERIC_NAMES = frozenset({"home", "homepage", "welcome", "welcome to", "index", "about", "about us"})


def _word_pattern(phrase: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(phrase)}\b")


def extract_regions(doc: HtmlElement) -> list[str]:
    """Places from the region vocabulary mentioned on the page.

    Address-like elements and the footer are read first so their regions
    come before ones that only appear in running body text.
    """
    located = doc.xpath(
        f"//address | //*[{contains_pred('class', 'address')}] | //*[@itemprop='address'] | //footer"
    )
    chunks = [text_of(el) for el in located]
    chunks.append(body_text(doc))

    regions: list[str] = []
    for chunk in chunks:
        text = normalize_text(chunk)
        for region in REGIONS:
            if region not in regions and _word_pattern(region).search(text):
                regions.append(region)
    return regions


def candidate_foundations(regions: list[str], limit: int) -> list[KnownFoundation]:
    wanted = set(regions)
    matched = [f for f in KNOWN_FOUNDATIONS if f.regions & wanted]
    if not matched:
        matched = list(KNOWN_FOUNDATIONS[:_FALLBACK_REGISTRY_SIZE])
    return matched[:limit]


def name_variants(organization: Organization, doc: HtmlElement) -> list[str]:
    """Normalized spellings of the organization name worth searching for."""
    variants: list[str] = []
    title_name = normalize_text(name_from_title(page_title(doc)))
    if title_name:
        variants.append(title_name)
        tokens = title_name.split()
        if len(tokens) > 2:
            variants.append(" ".join(tokens[:2]))
    variants.append(normalize_text(organization.name))

    unique: list[str] = []
    for v in variants:
        if len(v) >= _MIN_VARIANT_LENGTH and v not in _GENERIC_NAMES and v not in unique:
            unique.append(v)
    return unique


class ReverseLookup(ResolutionStrategy):
    name = "reverse_lookup"
    description = "Searched known regional foundations for mentions of the organization"

    async def attempt(self, ctx: ResolutionContext) -> Candidate | None:
        variants = name_variants(ctx.organization, ctx.doc)
        if not variants:
            return None
        patterns = [_word_pattern(v) for v in variants]
        regions = extract_regions(ctx.doc)
        registry = candidate_foundations(regions, ctx.settings.max_reverse_lookup_foundations)
        ctx.debug.log("REVERSE", "Reverse lookup candidates", {
            "regions": regions, "foundations": [f.name for f in registry], "variants": variants,
        })

        weights = ctx.weights
        matches: list[SponsoredCandidate] = []
        for foundation in registry:
            if get_domain(foundation.website).lower() == ctx.domain:
                continue
            pages = await self._matching_pages(ctx, foundation, patterns)
            if not pages:
                continue
            confidence = min(100, weights.reverse_lookup_base + weights.reverse_lookup_per_page * len(pages))
            matches.append(SponsoredCandidate(
                name=foundation.name, website=foundation.website, context="reverse_lookup",
                source_page=pages[0], confidence=confidence, corroborating_pages=pages,
            ))
            ctx.debug.log("REVERSE", "Organization mentioned by foundation", {
                "foundation": foundation.name, "pages": pages,
            })

        if not matches:
            return None
        matches.sort(key=lambda c: c.confidence, reverse=True)
        best = matches[0]
        return Candidate(
            name=best.name, website=best.website, relationship_type="sponsored",
            confidence=best.confidence, corroborating_pages=best.corroborating_pages,
            runners_up=matches[1:1 + ctx.settings.max_other_sponsored],
        )

    async def _matching_pages(
        self, ctx: ResolutionContext, foundation: KnownFoundation, patterns: list[re.Pattern[str]],
    ) -> list[str]:
        pages: list[str] = []
        root = foundation.website.rstrip("/")
        for path in REVERSE_LOOKUP_PATHS:
            url = root + path
            result = await ctx.fetcher.fetch(url, max_retries=0)
            doc = parse_html(result.html) if result.success else None
            if doc is None:
                continue
            text = normalize_text(body_text(doc))
            if any(p.search(text) for p in patterns):
                pages.append(url)
        return pages
