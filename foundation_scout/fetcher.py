from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Iterable
from contextlib import asynccontextmanager
from dataclasses import dataclass

import httpx

from foundation_scout.config import Settings, get_settings
from foundation_scout.debug_log import DebugLog
from foundation_scout.utils import get_base_url

log = logging.getLogger(__name__)


@dataclass
class FetchResult:
    html: str | None
    final_url: str
    success: bool
    error: str | None = None
    status_code: int | None = None


class Fetcher:
    """Retried, timeout-bounded page retrieval plus cheap existence probes.

    ``fetch`` never raises: transport errors and HTTP status >= 400 are
    retried with a linearly growing delay, then reported in the result.
    """

    def __init__(self, client: httpx.AsyncClient, settings: Settings, debug: DebugLog):
        self._client = client
        self.settings = settings
        self.debug = debug

    async def fetch(self, url: str, max_retries: int | None = None) -> FetchResult:
        retries = self.settings.max_retries if max_retries is None else max_retries
        last_error: str | None = None
        last_status: int | None = None

        for attempt in range(retries + 1):
            if attempt > 0:
                self.debug.log("FETCH", f"Retry attempt {attempt} for {url}")
                await asyncio.sleep(self.settings.retry_delay_seconds * attempt)
            try:
                resp = await self._client.get(url)
                last_status = resp.status_code
                resp.raise_for_status()
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                last_error = str(exc) or exc.__class__.__name__
                self.debug.log("FETCH", f"Failed attempt {attempt}: {url}", {"error": last_error})
                continue
            self.debug.log("FETCH", f"Success: {url}", {"status": resp.status_code})
            return FetchResult(
                html=resp.text, final_url=str(resp.url), success=True, status_code=resp.status_code,
            )

        log.warning("Giving up on %s after %d attempt(s): %s", url, retries + 1, last_error)
        return FetchResult(html=None, final_url=url, success=False, error=last_error, status_code=last_status)

    async def exists(self, url: str) -> bool:
        """HEAD probe; True only if the (redirect-followed) response is 200."""
        try:
            resp = await self._client.head(url, timeout=self.settings.probe_timeout_seconds)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            log.debug("Probe failed for %s: %s", url, exc)
            return False
        return resp.status_code == 200

    async def find_existing_pages(
        self, base_url: str, paths: Iterable[str], limit: int | None = None,
    ) -> list[str]:
        """Probe ``scheme://host + path`` for each path in order, stopping after *limit* hits."""
        base = get_base_url(base_url)
        found: list[str] = []
        for path in paths:
            url = base + path
            if await self.exists(url):
                found.append(url)
                if limit is not None and len(found) >= limit:
                    break
        return found


@asynccontextmanager
async def open_fetcher(
    settings: Settings | None = None,
    debug: DebugLog | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[Fetcher]:
    """Async context manager yielding a :class:`Fetcher` that owns its HTTP client.

    Usage::

        async with open_fetcher(settings, debug) as fetcher:
            result = await fetcher.fetch(url)
    """
    settings = settings or get_settings()
    async with httpx.AsyncClient(
        follow_redirects=True,
        max_redirects=settings.max_redirects,
        timeout=httpx.Timeout(settings.request_timeout_seconds),
        headers=settings.headers,
        transport=transport,
    ) as client:
        yield Fetcher(client, settings, debug or DebugLog())
