"""Shared fixtures: an in-memory website served through httpx.MockTransport."""
from __future__ import annotations

import httpx
import pytest

from foundation_scout.config import Settings


def page_key(url: httpx.URL | str) -> str:
    url = httpx.URL(str(url))
    return f"{url.scheme}://{url.host}{url.path}".rstrip("/")


class FakeSite:
    """Routes GET/HEAD requests to canned HTML; unknown URLs get a 404."""

    def __init__(self, pages: dict[str, str] | None = None):
        self.pages: dict[str, str] = {}
        self.statuses: dict[str, int] = {}
        self.requests: list[tuple[str, str]] = []
        for url, html in (pages or {}).items():
            self.add(url, html)

    def add(self, url: str, html: str) -> FakeSite:
        self.pages[page_key(url)] = html
        return self

    def fail(self, url: str, status: int = 500) -> FakeSite:
        self.statuses[page_key(url)] = status
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        key = page_key(request.url)
        self.requests.append((request.method, key))
        if key in self.statuses:
            return httpx.Response(self.statuses[key], text="error")
        html = self.pages.get(key)
        if html is None:
            return httpx.Response(404, text="not found")
        if request.method == "HEAD":
            return httpx.Response(200)
        return httpx.Response(200, text=html, headers={"content-type": "text/html; charset=utf-8"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def gets(self, url: str | None = None) -> list[str]:
        keys = [k for m, k in self.requests if m == "GET"]
        if url is None:
            return keys
        return [k for k in keys if k == page_key(url)]


@pytest.fixture()
def settings() -> Settings:
    return Settings(retry_delay_seconds=0, reverse_lookup_enabled=False)


@pytest.fixture()
def site() -> FakeSite:
    return FakeSite()
