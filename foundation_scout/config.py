from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, Field


class ConfidenceWeights(BaseModel):
    """Confidence constants for each resolution outcome and report aggregation.

    Every value is an integer in 0-100. Override through
    ``Settings(weights=ConfidenceWeights(...))``.
    """

    self_check: int = 95
    link_owned: int = 85
    related_shared_token: int = 90
    related_branded_partial: int = 80
    related_unrelated: int = 60
    path_probe: int = 80
    subdomain_probe: int = 85
    sponsor_context: int = 75
    sponsor_logo: int = 70
    sponsor_keyword_link: int = 60
    reverse_lookup_base: int = 75
    reverse_lookup_per_page: int = 5
    events_found: int = 70
    contacts_found: int = 60
    default_overall: int = 50


class Settings(BaseModel):
    request_timeout_seconds: float = 15.0
    probe_timeout_seconds: float = 5.0
    max_retries: int = 2
    retry_delay_seconds: float = 1.0
    max_redirects: int = 5

    max_event_pages: int = 3
    max_community_pages: int = 5
    max_event_crawls: int = 8
    max_reverse_lookup_foundations: int = 3
    max_contacts: int = 15
    max_other_sponsored: int = 5

    reverse_lookup_enabled: bool = True

    headers: dict[str, str] = Field(
        default_factory=lambda: {
            "User-Agent": (
                "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
                "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
            ),
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
            "Connection": "keep-alive",
        }
    )

    weights: ConfidenceWeights = Field(default_factory=ConfidenceWeights)


def _env_overrides() -> dict[str, object]:
    overrides: dict[str, object] = {}
    timeout = os.getenv("FOUNDATION_SCOUT_TIMEOUT", "").strip()
    if timeout:
        overrides["request_timeout_seconds"] = float(timeout)
    retries = os.getenv("FOUNDATION_SCOUT_MAX_RETRIES", "").strip()
    if retries:
        overrides["max_retries"] = int(retries)
    delay = os.getenv("FOUNDATION_SCOUT_RETRY_DELAY", "").strip()
    if delay:
        overrides["retry_delay_seconds"] = float(delay)
    reverse = os.getenv("FOUNDATION_SCOUT_REVERSE_LOOKUP", "").strip().lower()
    if reverse:
        overrides["reverse_lookup_enabled"] = reverse in ("1", "true", "yes", "on")
    return overrides


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings(**_env_overrides())
