"""Integration tests for the FastAPI endpoints.

Uses TestClient with the research pipeline patched out.
"""
from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from foundation_scout.models import ExtractionSuccess, Foundation, NotFound, Report, ReportMeta, ResearchError


@pytest.fixture()
def client():
    from foundation_scout.app import app

    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


def _report() -> Report:
    return Report(
        foundation=Foundation(
            name="Acme Foundation", website="https://acmefoundation.org",
            relationship_type="owned", confidence=85,
        ),
        confidence_score=85,
        meta=ReportMeta(
            source_url="https://acme.org", organization_name="Acme",
            foundation_url="https://acmefoundation.org", search_method="link_scan",
            scraped_at=datetime(2024, 4, 1, tzinfo=timezone.utc), events_found=0, contacts_found=0,
            extraction_success=ExtractionSuccess(foundation=True, events=False, tools=False, contacts=False),
        ),
    )


def _research(result):
    return patch("foundation_scout.services.research", new_callable=AsyncMock, return_value=result)


class TestResearchEndpoint:
    def test_report(self, client):
        with _research(_report()) as research:
            resp = client.post("/api/research", json={"url": "  acme.org/ "})
        assert resp.status_code == 200
        research.assert_awaited_once_with("https://acme.org")
        data = resp.json()
        assert data["foundation"]["relationship_type"] == "owned"
        assert data["meta"]["search_method"] == "link_scan"
        assert data["other_sponsored_foundations"] is None

    def test_not_found_is_200(self, client):
        result = NotFound(searched_url="https://plainco.com", organization_name="Plainco",
                          stages_attempted=["self_check", "link_scan"])
        with _research(result):
            resp = client.post("/api/research", json={"url": "https://plainco.com"})
        assert resp.status_code == 200
        assert resp.json()["error"] == "FOUNDATION_NOT_FOUND"
        assert resp.json()["stages_attempted"] == ["self_check", "link_scan"]

    def test_fetch_failure_is_502(self, client):
        result = ResearchError(kind="fetch_failed", error="Failed to fetch the provided URL",
                               details="HTTP 503", url="https://down.example")
        with _research(result):
            resp = client.post("/api/research", json={"url": "down.example"})
        assert resp.status_code == 502
        assert resp.json()["error"] == "Failed to fetch the provided URL"
        assert resp.json()["details"] == "HTTP 503"

    def test_internal_fault_is_500(self, client):
        result = ResearchError(kind="internal", error="Internal error while researching the organization",
                               details="boom", url="https://acme.org")
        with _research(result):
            resp = client.post("/api/research", json={"url": "acme.org"})
        assert resp.status_code == 500

    @pytest.mark.parametrize("body", [{}, {"url": ""}, {"url": "   "}, {"url": "\"\""}])
    def test_url_required(self, client, body):
        with _research(_report()) as research:
            resp = client.post("/api/research", json=body)
        assert resp.status_code == 400
        assert resp.json() == {"error": "URL is required"}
        research.assert_not_awaited()

    def test_invalid_json(self, client):
        resp = client.post("/api/research", content="not json",
                           headers={"Content-Type": "application/json"})
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid request body"}

    def test_wrong_type(self, client):
        resp = client.post("/api/research", json={"url": 42})
        assert resp.status_code == 400

    def test_cors_preflight(self, client):
        resp = client.options("/api/research", headers={
            "Origin": "https://example.org",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "Content-Type",
        })
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "*"


class TestHealthEndpoint:
    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}
