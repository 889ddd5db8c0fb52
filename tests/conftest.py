"""Shared fixtures: an in-memory website served through httpx.MockTransport."""

import pytest
import httpx


class FakeSite:
    """Maps URLs to canned responses and records every request made."""

    def __init__(self):
        self.pages = {}
        self.requested = []

    def add(self, url, body="", status=200, headers=None):
        """Serve body at url. body may be str, bytes or an exception to raise."""
        self.pages[url] = (status, body, headers or {})
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requested.append(url)

        if url not in self.pages:
            return httpx.Response(404, text="Not Found")

        status, body, headers = self.pages[url]
        if isinstance(body, Exception):
            raise body
        if isinstance(body, str):
            body = body.encode("utf-8")
        return httpx.Response(status, content=body, headers=headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def request_count(self, url):
        return self.requested.count(url)


def urlset(count, lastmod=True, priority=False, changefreq=False, base="https://example.com/page"):
    """Build a standard sitemap with count <url> entries."""
    entries = []
    for i in range(count):
        parts = [f"<loc>{base}{i}</loc>"]
        if lastmod:
            parts.append("<lastmod>2024-01-01</lastmod>")
        if priority:
            parts.append("<priority>0.5</priority>")
        if changefreq:
            parts.append("<changefreq>weekly</changefreq>")
        entries.append(f"<url>{''.join(parts)}</url>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        + "\n".join(entries)
        + "\n</urlset>"
    )


def sitemap_index(*locs, lastmod=True):
    """Build a sitemap index referencing the given child sitemaps."""
    entries = []
    for loc in locs:
        stamp = "<lastmod>2024-01-01</lastmod>" if lastmod else ""
        entries.append(f"<sitemap><loc>{loc}</loc>{stamp}</sitemap>")
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">\n'
        + "\n".join(entries)
        + "\n</sitemapindex>"
    )


@pytest.fixture
def site():
    """An empty fake site; every unknown URL answers 404."""
    return FakeSite()
