from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, model_validator

RelationshipType = Literal["owned", "associated", "sponsored", "unknown"]
Confidence = Annotated[int, Field(ge=0, le=100)]


class DebugLogEntry(BaseModel):
    timestamp: datetime
    stage: str
    message: str
    data: dict[str, Any] | None = None


class Organization(BaseModel, frozen=True):
    source_url: str
    base_domain: str
    name: str


class Foundation(BaseModel):
    name: str | None = None
    website: str | None = None
    mission: str | None = Field(default=None, max_length=500)
    relationship_type: RelationshipType | None = None
    confidence: Confidence = 0
    corroborating_pages: list[str] | None = None

    @model_validator(mode="after")
    def _relationship_tracks_website(self) -> Foundation:
        if (self.website is None) != (self.relationship_type is None):
            raise ValueError("relationship_type must be set exactly when website is set")
        return self


class Event(BaseModel):
    name: str = Field(max_length=150)
    category: str = "General Event"
    date: str | None = None
    is_future: bool | None = None
    location: str | None = None
    link: str | None = None
    registration_platform: str | None = None
    registration_link: str | None = None
    sponsorship_link: str | None = None


class Contact(BaseModel):
    name: str = Field(max_length=100)
    title: str
    email: str | None = None
    phone: str | None = None
    linkedin_url: str | None = None
    confidence: Confidence = 0


class RegistrationTool(BaseModel):
    event_name: str
    registration_platform: str
    registration_link: str | None = None
    sponsorship_link: str | None = None


class SponsoredCandidate(BaseModel):
    name: str
    website: str
    context: Literal["sponsor_mention", "foundation_link", "sponsor_logo", "reverse_lookup"]
    source_page: str | None = None
    confidence: Confidence = 0
    corroborating_pages: list[str] = []


# ---------------------------------------------------------------------------
# Result shapes
# ---------------------------------------------------------------------------


class ExtractionSuccess(BaseModel):
    foundation: bool
    events: bool
    tools: bool
    contacts: bool


class ReportMeta(BaseModel):
    source_url: str
    organization_name: str
    foundation_url: str | None
    search_method: str | None
    scraped_at: datetime
    events_found: int
    contacts_found: int
    extraction_success: ExtractionSuccess


class Report(BaseModel):
    foundation: Foundation
    events: list[Event] = []
    registration_tools: list[RegistrationTool] = []
    team_contacts: list[Contact] = []
    other_sponsored_foundations: list[SponsoredCandidate] | None = None
    confidence_score: Confidence = 0
    meta: ReportMeta
    debug_log: list[DebugLogEntry] = []


class NotFound(BaseModel):
    error: Literal["FOUNDATION_NOT_FOUND"] = "FOUNDATION_NOT_FOUND"
    message: str = (
        "Could not identify a foundation owned by, associated with, "
        "or sponsored by this organization."
    )
    searched_url: str
    organization_name: str
    confidence_score: int = 0
    stages_attempted: list[str] = []
    search_steps_completed: list[str] = []
    debug_log: list[DebugLogEntry] = []


class ResearchError(BaseModel):
    kind: Literal["fetch_failed", "internal"]
    error: str
    details: str | None = None
    url: str
    debug_log: list[DebugLogEntry] = []
