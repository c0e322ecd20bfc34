"""End-to-end tests for the research pipeline against an in-memory web."""
from __future__ import annotations

from datetime import datetime
from unittest.mock import patch

import pytest

from foundation_scout.config import Settings
from foundation_scout.models import NotFound, Report, ResearchError
from foundation_scout.services import research, result_payload, status_code_for

NOW = datetime(2024, 4, 1)

ORG_HOME = """<html><head><title>Acme Widgets</title></head><body>
  <nav><a href="/products">Products</a> <a href="https://acmefoundation.org">Acme Foundation</a></nav>
  <p>Widgets for everyone.</p>
</body></html>"""

FOUNDATION_HOME = """<html><head>
  <title>Acme Foundation | Home</title>
  <meta name="description" content="Supporting families across central Ohio.">
</head><body>
  <section class="upcoming-events">
    <div class="event-item">
      <h3>Spring Gala</h3><p>May 2</p>
      <a href="/events/spring-gala">Details</a>
    </div>
    <div class="event-item">
      <h3>Charity Golf Classic</h3><p>June 12</p>
    </div>
  </section>
  <section class="staff">
    <div class="member">
      <h3>Jane Smith</h3>
      <p>Director of Development</p>
      <p>jane@acmefoundation.org</p>
    </div>
  </section>
</body></html>"""

GALA_PAGE = """<html><body>
  <a href="https://e.givesmart.com/events/gala/">Buy tickets</a>
  <iframe src="https://e.givesmart.com/events/gala/embed"></iframe>
</body></html>"""

PLAIN_HOME = "<html><head><title>Plain Co</title></head><body><p>We make boxes.</p></body></html>"


class TestReport:
    @pytest.mark.asyncio
    async def test_full_report(self, settings, site):
        site.add("https://acme.org", ORG_HOME)
        site.add("https://acmefoundation.org", FOUNDATION_HOME)
        site.add("https://acmefoundation.org/events/spring-gala", GALA_PAGE)

        result = await research("https://acme.org", settings=settings, transport=site.transport, now=NOW)

        assert isinstance(result, Report)
        assert result.foundation.name == "Acme Foundation"
        assert result.foundation.website == "https://acmefoundation.org"
        assert result.foundation.relationship_type == "owned"
        assert result.foundation.confidence == 85
        assert result.foundation.mission == "Supporting families across central Ohio."

        assert [e.name for e in result.events] == ["Spring Gala", "Charity Golf Classic"]
        tools = {t.event_name: t for t in result.registration_tools}
        assert tools["Spring Gala"].registration_platform == "GiveSmart"
        assert tools["Spring Gala"].registration_link == "https://e.givesmart.com/events/gala/"
        assert tools["Charity Golf Classic"].registration_platform == "UNKNOWN"

        assert [c.name for c in result.team_contacts] == ["Jane Smith"]
        assert result.confidence_score == 72  # mean(85, 70, 60)
        assert result.other_sponsored_foundations is None

        meta = result.meta
        assert meta.source_url == "https://acme.org"
        assert meta.organization_name == "Acme"
        assert meta.foundation_url == "https://acmefoundation.org"
        assert meta.search_method == "link_scan"
        assert (meta.events_found, meta.contacts_found) == (2, 1)
        assert meta.extraction_success.model_dump() == {
            "foundation": True, "events": True, "tools": True, "contacts": True,
        }
        assert result.debug_log
        assert status_code_for(result) == 200

    @pytest.mark.asyncio
    async def test_self_check_reuses_home_page(self, settings, site):
        site.add("https://acme.org", """<html><head><title>Acme Community Foundation</title></head>
            <body><p>Giving since 1950.</p></body></html>""")
        result = await research("https://acme.org", settings=settings, transport=site.transport, now=NOW)

        assert isinstance(result, Report)
        assert result.meta.search_method == "self_check"
        assert result.foundation.website == "https://acme.org"
        assert result.foundation.confidence == 95
        assert len(site.gets("https://acme.org")) == 1
        assert result.confidence_score == 95

    @pytest.mark.asyncio
    async def test_unreachable_foundation_page_still_reports(self, settings, site):
        site.add("https://acme.org", ORG_HOME)
        result = await research("https://acme.org", settings=settings, transport=site.transport, now=NOW)

        assert isinstance(result, Report)
        assert result.foundation.name == "Acme Foundation"
        assert result.foundation.mission is None
        assert result.events == []
        assert result.team_contacts == []
        assert result.confidence_score == 85

    @pytest.mark.asyncio
    async def test_sponsored_runners_up(self, settings, site):
        site.add("https://acme.org", """<html><head><title>Acme Widgets</title></head><body>
            <div><div><p>We are a proud sponsor of <a href="https://kidsfund.org">Kids Fund</a>.</p></div></div>
            <div class="logos"><div><a href="https://artscouncil.org"><img src="/a.png" alt="Arts Foundation"></a></div></div>
        </body></html>""")
        result = await research("https://acme.org", settings=settings, transport=site.transport, now=NOW)

        assert isinstance(result, Report)
        assert result.meta.search_method == "sponsor_scan"
        assert result.foundation.relationship_type == "sponsored"
        assert result.foundation.website == "https://kidsfund.org"
        assert [s.website for s in result.other_sponsored_foundations] == ["https://artscouncil.org"]

    @pytest.mark.asyncio
    async def test_step_failure_is_isolated(self, settings, site):
        site.add("https://acme.org", ORG_HOME)
        site.add("https://acmefoundation.org", FOUNDATION_HOME)
        with patch("foundation_scout.services.extract_contacts", side_effect=RuntimeError("bad markup")):
            result = await research("https://acme.org", settings=settings, transport=site.transport, now=NOW)

        assert isinstance(result, Report)
        assert result.team_contacts == []
        assert len(result.events) == 2
        assert any(e.message == "Error extracting contacts" for e in result.debug_log)


class TestNotFound:
    @pytest.mark.asyncio
    async def test_lists_attempted_stages(self, settings, site):
        site.add("https://plainco.com", PLAIN_HOME)
        result = await research("https://plainco.com", settings=settings, transport=site.transport)

        assert isinstance(result, NotFound)
        assert result.error == "FOUNDATION_NOT_FOUND"
        assert result.organization_name == "Plainco"
        assert result.searched_url == "https://plainco.com"
        assert result.confidence_score == 0
        assert result.stages_attempted == [
            "self_check", "link_scan", "path_probe", "subdomain_probe", "sponsor_scan",
        ]
        assert result.search_steps_completed[1] == "Checked main page for foundation links"
        assert status_code_for(result) == 200

    @pytest.mark.asyncio
    async def test_reverse_lookup_stage_when_enabled(self, site):
        settings = Settings(retry_delay_seconds=0, reverse_lookup_enabled=True)
        site.add("https://plainco.com", PLAIN_HOME)
        result = await research("https://plainco.com", settings=settings, transport=site.transport)

        assert isinstance(result, NotFound)
        assert result.stages_attempted[-1] == "reverse_lookup"
        assert len(result.search_steps_completed) == 6


class TestErrors:
    @pytest.mark.asyncio
    async def test_home_fetch_failure(self, site):
        settings = Settings(retry_delay_seconds=0, max_retries=0)
        result = await research("https://down.example", settings=settings, transport=site.transport)

        assert isinstance(result, ResearchError)
        assert result.kind == "fetch_failed"
        assert result.error == "Failed to fetch the provided URL"
        assert result.url == "https://down.example"
        assert status_code_for(result) == 502
        assert result_payload(result)["error"] == "Failed to fetch the provided URL"

    @pytest.mark.asyncio
    async def test_internal_fault(self, settings, site):
        site.add("https://acme.org", ORG_HOME)
        with patch("foundation_scout.services.RelationshipResolver.default", side_effect=RuntimeError("boom")):
            result = await research("https://acme.org", settings=settings, transport=site.transport)

        assert isinstance(result, ResearchError)
        assert result.kind == "internal"
        assert result.details == "boom"
        assert status_code_for(result) == 500
