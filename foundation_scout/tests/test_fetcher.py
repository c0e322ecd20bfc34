"""Tests for the retried page fetcher and existence probes."""
from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from foundation_scout.config import Settings
from foundation_scout.debug_log import DebugLog
from foundation_scout.fetcher import open_fetcher


def _counting_transport(responses: list):
    """Transport that replays *responses* in order, repeating the last one.

    Items are status codes, ``(status, body)`` pairs, or exceptions to raise.
    """
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(str(request.url))
        item = responses[min(len(calls) - 1, len(responses) - 1)]
        if isinstance(item, Exception):
            raise item
        status, body = item if isinstance(item, tuple) else (item, "")
        return httpx.Response(status, text=body)

    return httpx.MockTransport(handler), calls


# ---------------------------------------------------------------------------
# Tests: fetch
# ---------------------------------------------------------------------------


class TestFetch:
    @pytest.mark.asyncio
    async def test_success(self, settings, site):
        site.add("https://acme.org", "<html><title>Acme</title></html>")
        async with open_fetcher(settings, transport=site.transport) as fetcher:
            result = await fetcher.fetch("https://acme.org")
        assert result.success
        assert "<title>Acme</title>" in result.html
        assert result.status_code == 200
        assert result.error is None

    @pytest.mark.asyncio
    async def test_http_error_is_retried_then_reported(self, settings):
        transport, calls = _counting_transport([(500, "oops")])
        async with open_fetcher(settings, transport=transport) as fetcher:
            result = await fetcher.fetch("https://acme.org", max_retries=2)
        assert not result.success
        assert result.html is None
        assert result.status_code == 500
        assert result.error
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_default_retries_from_settings(self):
        settings = Settings(retry_delay_seconds=0, max_retries=1)
        transport, calls = _counting_transport([404])
        async with open_fetcher(settings, transport=transport) as fetcher:
            result = await fetcher.fetch("https://acme.org")
        assert not result.success
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_recovers_on_retry(self, settings):
        transport, calls = _counting_transport([503, (200, "<p>ok</p>")])
        debug = DebugLog()
        async with open_fetcher(settings, debug, transport=transport) as fetcher:
            result = await fetcher.fetch("https://acme.org", max_retries=2)
        assert result.success
        assert len(calls) == 2
        assert any("Retry attempt 1" in e.message for e in debug.entries)

    @pytest.mark.asyncio
    async def test_transport_error_never_raises(self, settings):
        transport, calls = _counting_transport([httpx.ConnectError("connection refused")])
        async with open_fetcher(settings, transport=transport) as fetcher:
            result = await fetcher.fetch("https://acme.org", max_retries=1)
        assert not result.success
        assert "connection refused" in result.error
        assert result.status_code is None
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_zero_retries_means_single_attempt(self, settings):
        transport, calls = _counting_transport([500])
        async with open_fetcher(settings, transport=transport) as fetcher:
            await fetcher.fetch("https://acme.org", max_retries=0)
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_linear_backoff(self):
        settings = Settings(retry_delay_seconds=1.5)
        transport, _ = _counting_transport([500])
        with patch("foundation_scout.fetcher.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
            async with open_fetcher(settings, transport=transport) as fetcher:
                await fetcher.fetch("https://acme.org", max_retries=2)
        assert [c.args[0] for c in mock_sleep.await_args_list] == [1.5, 3.0]

    @pytest.mark.asyncio
    async def test_follows_redirects(self, settings, site):
        site.add("https://www.acme.org", "<p>moved here</p>")

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "acme.org":
                return httpx.Response(301, headers={"location": "https://www.acme.org/"})
            return site.handler(request)

        async with open_fetcher(settings, transport=httpx.MockTransport(handler)) as fetcher:
            result = await fetcher.fetch("https://acme.org")
        assert result.success
        assert result.final_url.startswith("https://www.acme.org")

    @pytest.mark.asyncio
    async def test_sends_browser_headers(self, settings):
        seen: dict[str, str] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.headers)
            return httpx.Response(200, text="<p>hi</p>")

        async with open_fetcher(settings, transport=httpx.MockTransport(handler)) as fetcher:
            await fetcher.fetch("https://acme.org")
        assert "Mozilla/5.0" in seen["user-agent"]
        assert seen["accept-language"].startswith("en-US")


# ---------------------------------------------------------------------------
# Tests: exists / find_existing_pages
# ---------------------------------------------------------------------------


class TestExists:
    @pytest.mark.asyncio
    async def test_exists_uses_head(self, settings, site):
        site.add("https://acme.org/giving", "<p>give</p>")
        async with open_fetcher(settings, transport=site.transport) as fetcher:
            assert await fetcher.exists("https://acme.org/giving")
            assert not await fetcher.exists("https://acme.org/donate")
        assert site.requests == [
            ("HEAD", "https://acme.org/giving"), ("HEAD", "https://acme.org/donate"),
        ]

    @pytest.mark.asyncio
    async def test_exists_false_on_server_error(self, settings, site):
        site.fail("https://acme.org/giving", 503)
        async with open_fetcher(settings, transport=site.transport) as fetcher:
            assert not await fetcher.exists("https://acme.org/giving")

    @pytest.mark.asyncio
    async def test_exists_false_on_transport_error(self, settings):
        transport, _ = _counting_transport([httpx.ConnectTimeout("timed out")])
        async with open_fetcher(settings, transport=transport) as fetcher:
            assert not await fetcher.exists("https://acme.org/giving")

    @pytest.mark.asyncio
    async def test_find_existing_pages_in_order(self, settings, site):
        site.add("https://acme.org/b", "b").add("https://acme.org/c", "c")
        async with open_fetcher(settings, transport=site.transport) as fetcher:
            found = await fetcher.find_existing_pages("https://acme.org/some/page", ["/a", "/b", "/c"])
        assert found == ["https://acme.org/b", "https://acme.org/c"]

    @pytest.mark.asyncio
    async def test_find_existing_pages_stops_at_limit(self, settings, site):
        for path in ("/a", "/b", "/c"):
            site.add("https://acme.org" + path, path)
        async with open_fetcher(settings, transport=site.transport) as fetcher:
            found = await fetcher.find_existing_pages("https://acme.org", ["/a", "/b", "/c"], limit=2)
        assert found == ["https://acme.org/a", "https://acme.org/b"]
        assert ("HEAD", "https://acme.org/c") not in site.requests
