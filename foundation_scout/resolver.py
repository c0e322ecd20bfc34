"""Relationship resolution: find the foundation behind an organization website.

Architecture
------------
Resolution is an ordered chain of independent strategies, each implementing
``attempt(ctx) -> Candidate | None``:

- **self_check**: the organization page itself is a foundation.
- **link_scan**: best-scoring foundation-keyword link on the page.
- **path_probe**: conventional giving paths on the organization's host.
- **subdomain_probe**: ``foundation.``/``giving.``/``donate.`` subdomains.
- **sponsor_scan**: external foundations the organization sponsors.
- **reverse_lookup**: known regional foundations that list the organization
  (see :mod:`foundation_scout.reverse_lookup`).

The first strategy that yields a website wins and the rest are skipped.
Stages are alternatives rather than signals to combine, so they always run
sequentially. A strategy that raises is logged and treated as having found
nothing.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from lxml.html import HtmlElement

from foundation_scout.config import ConfidenceWeights, Settings
from foundation_scout.debug_log import DebugLog
from foundation_scout.dom import page_title, parse_html, text_of
from foundation_scout.fetcher import Fetcher
from foundation_scout.models import Organization, RelationshipType, SponsoredCandidate
from foundation_scout.utils import (
    absolutize,
    contains_any,
    domain_token,
    get_domain,
    is_social_url,
    matching_keywords,
    name_from_title,
    normalize_whitespace,
    registrable_domain,
)
from foundation_scout.vocabulary import (
    COMMUNITY_PAGE_PATHS,
    FOUNDATION_KEYWORDS,
    FOUNDATION_PAGE_PATHS,
    FOUNDATION_SUBDOMAINS,
    SPONSORSHIP_CONTEXT_KEYWORDS,
)

log = logging.getLogger(__name__)


@dataclass
class Candidate:
    name: str | None
    website: str
    relationship_type: RelationshipType
    confidence: int
    corroborating_pages: list[str] | None = None
    runners_up: list[SponsoredCandidate] = field(default_factory=list)


@dataclass
class ResolutionContext:
    organization: Organization
    page_url: str
    doc: HtmlElement
    fetcher: Fetcher
    settings: Settings
    debug: DebugLog

    @property
    def domain(self) -> str:
        return get_domain(self.page_url).lower()

    @property
    def weights(self) -> ConfidenceWeights:
        return self.settings.weights


@dataclass
class Resolution:
    candidate: Candidate | None
    stage: str | None
    attempted: list[str]
    steps: list[str]


class ResolutionStrategy:
    name: str = ""
    description: str = ""

    async def attempt(self, ctx: ResolutionContext) -> Candidate | None:
        raise NotImplementedError


# ---------------------------------------------------------------------------
# Domain relatedness
# ---------------------------------------------------------------------------


def shares_base_token(candidate_domain: str, org_domain: str) -> bool:
    """True when either host's first label appears inside the other host."""
    cand_token, org_token = domain_token(candidate_domain), domain_token(org_domain)
    if not cand_token or not org_token:
        return False
    return org_token in candidate_domain or cand_token in org_domain


def domain_relatedness(candidate_domain: str, org_domain: str, weights: ConfidenceWeights) -> int:
    """Confidence that an outbound foundation link belongs to the organization.

    Uses the registrable-domain token (``acme`` for ``shop.acme.com``), so a
    link can be related here while failing the stricter first-label check.
    """
    org_token = domain_token(registrable_domain(org_domain))
    if org_token and org_token in candidate_domain:
        return weights.related_shared_token
    if "foundation" in candidate_domain and org_token[:4] and org_token[:4] in candidate_domain:
        return weights.related_branded_partial
    return weights.related_unrelated


def classify_link(candidate_url: str, org_url: str, weights: ConfidenceWeights) -> tuple[RelationshipType, int]:
    candidate_domain = get_domain(candidate_url).lower()
    org_domain = get_domain(org_url).lower()
    if shares_base_token(candidate_domain, org_domain):
        return "owned", weights.link_owned
    return "associated", domain_relatedness(candidate_domain, org_domain, weights)


# ---------------------------------------------------------------------------
# Strategies: owned / associated
# ---------------------------------------------------------------------------


class SelfCheck(ResolutionStrategy):
    name = "self_check"
    description = "Checked whether the organization page is itself a foundation"

    async def attempt(self, ctx: ResolutionContext) -> Candidate | None:
        title = page_title(ctx.doc)
        if not contains_any(title, FOUNDATION_KEYWORDS):
            return None
        name = name_from_title(title) or f"{ctx.organization.name} Foundation"
        ctx.debug.log("FOUNDATION", "Current page is a foundation", {"name": name})
        return Candidate(
            name=name, website=ctx.page_url, relationship_type="owned",
            confidence=ctx.weights.self_check,
        )


class LinkScan(ResolutionStrategy):
    name = "link_scan"
    description = "Checked main page for foundation links"

    async def attempt(self, ctx: ResolutionContext) -> Candidate | None:
        best: tuple[int, str, str] | None = None
        for anchor in ctx.doc.xpath("//a[@href]"):
            href = anchor.get("href", "")
            text = normalize_whitespace(text_of(anchor))
            hits = set(matching_keywords(href, FOUNDATION_KEYWORDS)) | set(matching_keywords(text, FOUNDATION_KEYWORDS))
            if not hits:
                continue
            url = absolutize(ctx.page_url, href)
            if not url or is_social_url(url):
                continue
            # strict ">" keeps the earliest link on ties
            if best is None or len(hits) > best[0]:
                best = (len(hits), url, text)

        if best is None:
            return None
        _, url, text = best
        relationship, confidence = classify_link(url, ctx.page_url, ctx.weights)
        ctx.debug.log("FOUNDATION", "Found foundation link", {
            "url": url, "type": relationship, "confidence": confidence,
        })
        return Candidate(name=text or "Foundation", website=url,
                         relationship_type=relationship, confidence=confidence)


class PathProbe(ResolutionStrategy):
    name = "path_probe"
    description = "Checked common foundation URL paths"

    async def attempt(self, ctx: ResolutionContext) -> Candidate | None:
        found = await ctx.fetcher.find_existing_pages(ctx.page_url, FOUNDATION_PAGE_PATHS, limit=1)
        if not found:
            return None
        ctx.debug.log("FOUNDATION", "Found foundation page", {"url": found[0]})
        return Candidate(
            name=f"{ctx.organization.name} Foundation", website=found[0],
            relationship_type="owned", confidence=ctx.weights.path_probe,
        )


class SubdomainProbe(ResolutionStrategy):
    name = "subdomain_probe"
    description = "Checked foundation subdomains"

    async def attempt(self, ctx: ResolutionContext) -> Candidate | None:
        base = registrable_domain(ctx.domain)
        for prefix in FOUNDATION_SUBDOMAINS:
            url = f"https://{prefix}.{base}"
            if await ctx.fetcher.exists(url):
                ctx.debug.log("FOUNDATION", "Found foundation subdomain", {"url": url})
                return Candidate(
                    name=f"{ctx.organization.name} Foundation", website=url,
                    relationship_type="owned", confidence=ctx.weights.subdomain_probe,
                )
        return None


# ---------------------------------------------------------------------------
# Strategy: sponsored
# ---------------------------------------------------------------------------


class SponsorScan(ResolutionStrategy):
    name = "sponsor_scan"
    description = "Searched community/sponsorship pages"

    async def attempt(self, ctx: ResolutionContext) -> Candidate | None:
        seen: set[str] = set()
        found: list[SponsoredCandidate] = []
        self._scan_page(ctx, ctx.doc, ctx.page_url, seen, found)

        pages = await ctx.fetcher.find_existing_pages(
            ctx.page_url, COMMUNITY_PAGE_PATHS, limit=ctx.settings.max_community_pages,
        )
        ctx.debug.log("SPONSORED", f"Found {len(pages)} community pages to search")
        for page_url in pages:
            result = await ctx.fetcher.fetch(page_url, max_retries=1)
            doc = parse_html(result.html) if result.success else None
            if doc is None:
                continue
            try:
                self._scan_page(ctx, doc, page_url, seen, found)
            except Exception as exc:
                ctx.debug.log("SPONSORED", "Error searching page", {"page": page_url, "error": str(exc)})

        ctx.debug.log("SPONSORED", f"Total sponsored foundations found: {len(found)}")
        if not found:
            return None
        found.sort(key=lambda c: c.confidence, reverse=True)
        best = found[0]
        return Candidate(
            name=best.name, website=best.website, relationship_type="sponsored",
            confidence=best.confidence,
            runners_up=found[1:1 + ctx.settings.max_other_sponsored],
        )

    def _is_external(self, url: str, org_domain: str) -> bool:
        return get_domain(url).lower() != org_domain and not is_social_url(url)

    def _scan_page(
        self, ctx: ResolutionContext, doc: HtmlElement, page_url: str,
        seen: set[str], found: list[SponsoredCandidate],
    ) -> None:
        weights = ctx.weights
        for anchor in doc.xpath("//a[@href]"):
            url = absolutize(page_url, anchor.get("href"))
            if not url or not self._is_external(url, ctx.domain):
                continue
            domain = get_domain(url).lower()
            if domain in seen:
                continue
            text = normalize_whitespace(text_of(anchor))
            parent = anchor.getparent()
            grandparent = parent.getparent() if parent is not None else None
            neighborhood = " ".join(text_of(n) for n in (parent, grandparent) if n is not None)

            if contains_any(neighborhood, SPONSORSHIP_CONTEXT_KEYWORDS):
                context, confidence = "sponsor_mention", weights.sponsor_context
            elif contains_any(url, FOUNDATION_KEYWORDS) or contains_any(text, FOUNDATION_KEYWORDS):
                context, confidence = "foundation_link", weights.sponsor_keyword_link
            else:
                continue
            seen.add(domain)
            found.append(SponsoredCandidate(
                name=text or domain, website=url, context=context,
                source_page=page_url, confidence=confidence,
            ))
            ctx.debug.log("SPONSORED", "Found potential sponsored foundation", {"name": text or domain, "context": context})

        for img in doc.xpath("//img[@alt]"):
            alt = normalize_whitespace(img.get("alt"))
            if not contains_any(alt, FOUNDATION_KEYWORDS):
                continue
            links = img.xpath("ancestor::a[@href][1]/@href")
            url = absolutize(page_url, links[0]) if links else None
            if not url or not self._is_external(url, ctx.domain):
                continue
            domain = get_domain(url).lower()
            if domain in seen:
                continue
            seen.add(domain)
            found.append(SponsoredCandidate(
                name=alt, website=url, context="sponsor_logo",
                source_page=page_url, confidence=weights.sponsor_logo,
            ))
            ctx.debug.log("SPONSORED", "Found sponsored foundation via logo", {"name": alt})


# ---------------------------------------------------------------------------
# Runner
# ---------------------------------------------------------------------------


class RelationshipResolver:
    def __init__(self, strategies: list[ResolutionStrategy]):
        self.strategies = strategies

    @classmethod
    def default(cls, settings: Settings) -> RelationshipResolver:
        strategies: list[ResolutionStrategy] = [
            SelfCheck(), LinkScan(), PathProbe(), SubdomainProbe(), SponsorScan(),
        ]
        if settings.reverse_lookup_enabled:
            from foundation_scout.reverse_lookup import ReverseLookup
            strategies.append(ReverseLookup())
        return cls(strategies)

    async def resolve(self, ctx: ResolutionContext) -> Resolution:
        attempted: list[str] = []
        steps: list[str] = []
        for strategy in self.strategies:
            attempted.append(strategy.name)
            steps.append(strategy.description)
            ctx.debug.log("FOUNDATION", f"Attempting {strategy.name}")
            try:
                candidate = await strategy.attempt(ctx)
            except Exception as exc:
                log.warning("Resolution stage %s failed for %s: %s", strategy.name, ctx.page_url, exc)
                ctx.debug.log("FOUNDATION", f"Error in {strategy.name}", {"error": str(exc)})
                continue
            if candidate is not None and candidate.website:
                return Resolution(candidate=candidate, stage=strategy.name, attempted=attempted, steps=steps)
        ctx.debug.log("FOUNDATION", "No foundation found", {"attempted": attempted})
        return Resolution(candidate=None, stage=None, attempted=attempted, steps=steps)
