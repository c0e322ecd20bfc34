"""Static keyword, path and pattern tables used by the resolution and extraction stages."""
from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Foundation resolution
# ---------------------------------------------------------------------------

FOUNDATION_KEYWORDS: tuple[str, ...] = (
    "foundation", "philanthropy", "giving", "donate", "donation",
    "charitable", "nonprofit", "non-profit", "support us", "make a gift",
    "ways to give", "give now", "donor", "fundraising", "development",
)

SPONSORSHIP_CONTEXT_KEYWORDS: tuple[str, ...] = (
    "proud sponsor", "proudly sponsor", "we sponsor", "sponsor of",
    "community partner", "community involvement", "giving back",
    "corporate responsibility", "social responsibility", "csr",
    "we support", "proudly support", "proud to support", "supporter of",
    "partner with", "partnered with", "in partnership", "partnership with",
    "committed to", "supporting", "contributor", "donation to",
    "charitable partner", "nonprofit partner", "community support",
    "sponsored event", "event sponsor", "title sponsor", "presenting sponsor",
)

FOUNDATION_PAGE_PATHS: tuple[str, ...] = (
    "/foundation", "/giving", "/donate", "/philanthropy", "/support",
    "/ways-to-give", "/support-us", "/make-a-gift", "/get-involved",
)

FOUNDATION_SUBDOMAINS: tuple[str, ...] = ("foundation", "giving", "donate")

COMMUNITY_PAGE_PATHS: tuple[str, ...] = (
    "/community", "/community-involvement", "/about-us", "/about",
    "/corporate-responsibility", "/csr", "/social-responsibility",
    "/giving-back", "/our-community", "/partnerships", "/partners",
    "/sponsorships", "/sponsor", "/charitable-giving", "/outreach",
    "/involvement", "/commitments", "/values", "/who-we-are",
    "/news", "/press", "/media", "/blog",
)

# Outbound links to these hosts are never foundation candidates.
SOCIAL_DOMAINS: tuple[str, ...] = (
    "facebook.", "twitter.", "x.com", "linkedin.", "instagram.",
    "youtube.", "google.", "tiktok.", "pinterest.",
)

# Paths on a known foundation's site where supporters are usually listed.
REVERSE_LOOKUP_PATHS: tuple[str, ...] = (
    "", "/sponsors", "/our-sponsors", "/donors", "/our-donors", "/partners",
    "/corporate-partners", "/supporters", "/annual-report",
)

# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------

EVENT_KEYWORDS: tuple[str, ...] = (
    "event", "gala", "golf", "auction", "dinner", "luncheon",
    "fundraiser", "benefit", "walk", "run", "ball", "celebration",
    "awards", "ceremony", "concert", "festival", "tournament", "annual",
)

# Evaluated top to bottom; the first category whose keywords appear wins.
EVENT_CATEGORY_LADDER: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Gala", ("gala",)),
    ("Golf Tournament", ("golf",)),
    ("Auction", ("auction",)),
    ("Walk/Run", ("walk", "run", "5k")),
    ("Dinner/Luncheon", ("dinner", "luncheon")),
    ("Concert", ("concert",)),
    ("Festival", ("festival",)),
    ("Ball", ("ball",)),
)
DEFAULT_EVENT_CATEGORY = "General Event"

EVENT_NAME_STOPWORDS: frozenset[str] = frozenset({
    "events", "calendar", "event", "upcoming events", "past events", "all events",
    "event calendar", "events calendar", "view all events", "see all events",
})

EVENT_PAGE_PATHS: tuple[str, ...] = (
    "/events", "/event", "/calendar", "/upcoming-events", "/event-calendar",
    "/fundraising-events", "/special-events", "/community-events", "/galas",
)

# ---------------------------------------------------------------------------
# Registration platforms
# ---------------------------------------------------------------------------

REGISTRATION_PLATFORMS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Eventbrite", ("eventbrite.com", "eventbrite.")),
    ("GiveSmart", ("givesmart.com", "e.givesmart", "givesmart")),
    ("OneCause", ("onecause.com", "e.onecause", "onecause")),
    ("Classy", ("classy.org", "secure.classy", "classy")),
    ("Greater Giving", ("greatergiving.com", "greatergiving")),
    ("Blackbaud", ("blackbaud.com", "blackbaud")),
    ("Network for Good", ("networkforgood.com", "networkforgood")),
    ("Qgiv", ("qgiv.com", "secure.qgiv")),
    ("Handbid", ("handbid.com", "handbid")),
    ("BidPal", ("bidpal.com", "bidpal")),
    ("Bloomerang", ("bloomerang.com", "bloomerang")),
    ("DonorPerfect", ("donorperfect.com", "donorperfect")),
    ("Fundly", ("fundly.com",)),
    ("GoFundMe Charity", ("gofundme.com/charity",)),
    ("JustGiving", ("justgiving.com",)),
    ("Rallybound", ("rallybound.com",)),
    ("RegFox", ("regfox.com",)),
    ("Splash", ("splashthat.com",)),
    ("Wild Apricot", ("wildapricot.org", "wildapricot")),
    ("Active.com", ("active.com", "activenetwork")),
)

REGISTRATION_KEYWORDS: tuple[str, ...] = (
    "register", "ticket", "sign up", "rsvp", "buy ticket", "get ticket", "attend", "join us",
)

UNKNOWN_PLATFORM = "UNKNOWN"

# ---------------------------------------------------------------------------
# Contacts
# ---------------------------------------------------------------------------

TEAM_TITLES: tuple[str, ...] = (
    "head of events", "events coordinator", "event coordinator", "events manager",
    "director of development", "development director", "chief development officer",
    "database manager", "director of philanthropy", "philanthropy director",
    "major gifts officer", "major gifts", "foundation director", "foundation president",
    "executive director", "vp of development", "vice president of development",
    "gift officer", "annual giving", "planned giving", "donor relations",
    "special events", "event manager", "event director", "gala chair",
)

PLACEHOLDER_PATTERNS: tuple[str, ...] = (
    "lorem ipsum", "john doe", "jane doe", "example@", "test@",
    "your name", "name here", "email here", "phone here",
    "coming soon", "tbd", "to be announced", "placeholder",
)

# ---------------------------------------------------------------------------
# Geography and known foundations (reverse lookup)
# ---------------------------------------------------------------------------

REGIONS: tuple[str, ...] = (
    # states
    "alabama", "alaska", "arizona", "arkansas", "california", "colorado",
    "connecticut", "delaware", "florida", "georgia", "hawaii", "idaho",
    "illinois", "indiana", "iowa", "kansas", "kentucky", "louisiana", "maine",
    "maryland", "massachusetts", "michigan", "minnesota", "mississippi",
    "missouri", "montana", "nebraska", "nevada", "new hampshire", "new jersey",
    "new mexico", "new york", "north carolina", "north dakota", "ohio",
    "oklahoma", "oregon", "pennsylvania", "rhode island", "south carolina",
    "south dakota", "tennessee", "texas", "utah", "vermont", "virginia",
    "washington", "west virginia", "wisconsin", "wyoming",
    # metro areas and named regions
    "atlanta", "bay area", "boston", "central ohio", "chicago", "cleveland",
    "columbus", "dallas", "denver", "houston", "los angeles", "minneapolis",
    "northeast ohio", "pittsburgh", "portland", "san diego", "san jose",
    "seattle", "silicon valley",
)


@dataclass(frozen=True)
class KnownFoundation:
    name: str
    website: str
    regions: frozenset[str]


KNOWN_FOUNDATIONS: tuple[KnownFoundation, ...] = (
    KnownFoundation("The Columbus Foundation", "https://columbusfoundation.org",
                    frozenset({"columbus", "central ohio", "ohio"})),
    KnownFoundation("The Cleveland Foundation", "https://www.clevelandfoundation.org",
                    frozenset({"cleveland", "northeast ohio", "ohio"})),
    KnownFoundation("The Chicago Community Trust", "https://www.cct.org",
                    frozenset({"chicago", "illinois"})),
    KnownFoundation("The New York Community Trust", "https://www.nycommunitytrust.org",
                    frozenset({"new york"})),
    KnownFoundation("Silicon Valley Community Foundation", "https://www.siliconvalleycf.org",
                    frozenset({"silicon valley", "san jose", "bay area", "california"})),
    KnownFoundation("California Community Foundation", "https://www.calfund.org",
                    frozenset({"los angeles", "california"})),
    KnownFoundation("The San Diego Foundation", "https://www.sdfoundation.org",
                    frozenset({"san diego", "california"})),
    KnownFoundation("The Boston Foundation", "https://www.tbf.org",
                    frozenset({"boston", "massachusetts"})),
    KnownFoundation("The Denver Foundation", "https://denverfoundation.org",
                    frozenset({"denver", "colorado"})),
    KnownFoundation("Seattle Foundation", "https://www.seattlefoundation.org",
                    frozenset({"seattle", "washington"})),
    KnownFoundation("The Minneapolis Foundation", "https://www.minneapolisfoundation.org",
                    frozenset({"minneapolis", "minnesota"})),
    KnownFoundation("Greater Houston Community Foundation", "https://ghcf.org",
                    frozenset({"houston", "texas"})),
    KnownFoundation("The Dallas Foundation", "https://www.dallasfoundation.org",
                    frozenset({"dallas", "texas"})),
    KnownFoundation("Community Foundation for Greater Atlanta", "https://cfgreateratlanta.org",
                    frozenset({"atlanta", "georgia"})),
    KnownFoundation("The Pittsburgh Foundation", "https://pittsburghfoundation.org",
                    frozenset({"pittsburgh", "pennsylvania"})),
    KnownFoundation("Oregon Community Foundation", "https://oregoncf.org",
                    frozenset({"portland", "oregon"})),
)
