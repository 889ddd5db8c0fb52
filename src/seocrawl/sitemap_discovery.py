"""
Sitemap Discovery

Explores the sitemap reference graph of a site:
- Sitemaps declared in robots.txt (seeds)
- Well-known fallback locations when no seed resolves
- Numbered sitemaps (sitemap-0.xml, sitemap_0.xml, ...)
- Child sitemaps referenced from sitemap indexes, followed transitively

Each URL is fetched at most once per discovery run. Fetch failures are never
fatal; the run returns whatever it managed to collect.
"""

import asyncio
import logging
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional, Set
from urllib.parse import urljoin

from seocrawl.config import CrawlabilityThresholds, default_thresholds
from seocrawl.constants import COMMON_SITEMAP_PATHS, NUMERIC_SITEMAP_PATTERNS
from seocrawl.fetcher import AsyncFetcher
from seocrawl.models import DiscoveryResult, SitemapRecord
from seocrawl.sitemap_parser import SitemapClassifier

logger = logging.getLogger(__name__)


class DiscoverySession:
    """State of one discovery run. Never shared between audits."""

    def __init__(self, base_origin: str):
        self.base_origin = base_origin.rstrip('/')
        self.visited: Set[str] = set()
        self.records: List[SitemapRecord] = []
        self.records_by_url: Dict[str, SitemapRecord] = {}
        self.all_discovered_urls: List[str] = []
        self.nested_sitemap_urls: List[str] = []
        self.pending: Deque[str] = deque()
        self.sitemap_exists = False
        self.fetch_count = 0
        self._discovered: Set[str] = set()
        self._staged_seeds: Dict[int, SitemapRecord] = {}

    def add_discovered(self, url: str) -> None:
        if url not in self._discovered:
            self._discovered.add(url)
            self.all_discovered_urls.append(url)

    def add_record(self, record: SitemapRecord) -> None:
        """Store a classified sitemap and queue the sitemaps it references."""
        self.records.append(record)
        self.records_by_url[record.url] = record
        for loc in record.nested_sitemap_urls:
            nested_url = urljoin(record.url, loc)
            if nested_url not in self.nested_sitemap_urls:
                self.nested_sitemap_urls.append(nested_url)
            self.add_discovered(nested_url)
            self.pending.append(nested_url)

    def stage_seed(self, index: int, record: SitemapRecord) -> None:
        """Hold a finished seed until the seed phase commits them in order."""
        self._staged_seeds[index] = record
        self.sitemap_exists = True

    def commit_seeds(self) -> None:
        """Record staged seeds in seed order."""
        for index in sorted(self._staged_seeds):
            self.add_record(self._staged_seeds[index])
        self._staged_seeds.clear()

    def to_result(self) -> DiscoveryResult:
        # Seeds finished before a cancelled run still count
        self.commit_seeds()
        return DiscoveryResult(
            records=list(self.records),
            sitemap_exists=self.sitemap_exists,
            all_discovered_urls=list(self.all_discovered_urls),
            nested_sitemap_urls=list(self.nested_sitemap_urls),
        )


class SitemapDiscoveryEngine:
    """Find, fetch and classify every sitemap reachable for a site."""

    def __init__(
        self,
        fetcher: AsyncFetcher,
        classifier: Optional[SitemapClassifier] = None,
        thresholds: Optional[CrawlabilityThresholds] = None,
    ):
        """
        Initialize the engine.

        Args:
            fetcher: Open AsyncFetcher used for every sitemap request
            classifier: Sitemap classifier (default: SitemapClassifier)
            thresholds: Discovery bounds and analysis limits
        """
        self.fetcher = fetcher
        self.thresholds = thresholds or default_thresholds
        self.classifier = classifier or SitemapClassifier(self.thresholds)

    async def discover(
        self,
        base_origin: str,
        seeds: Iterable[str] = (),
        session: Optional[DiscoverySession] = None,
    ) -> DiscoveryResult:
        """Run every discovery phase for a site.

        Args:
            base_origin: Scheme and host, e.g. https://example.com
            seeds: Sitemap URLs declared in robots.txt
            session: Session to collect into; callers pass one in when they
                need partial results after cancellation

        Returns:
            DiscoveryResult with every sitemap that was fetched
        """
        session = session or DiscoverySession(base_origin)
        seed_urls = []
        for seed in seeds:
            seed_url = urljoin(f"{session.base_origin}/", seed)
            if seed_url not in seed_urls:
                seed_urls.append(seed_url)
                session.add_discovered(seed_url)

        if seed_urls:
            await self._seed_phase(session, seed_urls)

        if not session.sitemap_exists:
            await self._fallback_phase(session)

        if session.sitemap_exists:
            await self._numeric_phase(session)

        await self._nested_phase(session)

        logger.info(
            f"Sitemap discovery for {session.base_origin}: {len(session.records)} sitemaps, "
            f"{sum(r.url_count for r in session.records)} URLs"
        )
        return session.to_result()

    async def _seed_phase(self, session: DiscoverySession, seed_urls: List[str]) -> None:
        """Fetch robots.txt sitemaps concurrently, recording in seed order."""

        async def fetch_seed(index: int, url: str) -> None:
            record = await self._fetch_record(session, url)
            if record is not None:
                session.stage_seed(index, record)

        await asyncio.gather(*(fetch_seed(i, url) for i, url in enumerate(seed_urls)))
        session.commit_seeds()

    async def _fallback_phase(self, session: DiscoverySession) -> None:
        """Probe well-known locations, stopping at the first that resolves."""
        for path in COMMON_SITEMAP_PATHS:
            url = f"{session.base_origin}{path}"
            if url in session.visited:
                continue
            record = await self._check_sitemap(session, url)
            if record is not None:
                logger.info(f"Found sitemap at fallback location {url}")
                session.sitemap_exists = True
                session.add_discovered(url)
                break

    async def _numeric_phase(self, session: DiscoverySession) -> None:
        """Probe numbered sitemaps, stopping each convention at its first gap."""
        for prefix, extension in NUMERIC_SITEMAP_PATTERNS:
            for index in range(self.thresholds.numeric_probe_max_index + 1):
                url = f"{session.base_origin}{prefix}{index}{extension}"
                if url in session.visited:
                    if url in session.records_by_url:
                        continue
                    break
                record = await self._check_sitemap(session, url)
                if record is None:
                    break
                session.add_discovered(url)

    async def _nested_phase(self, session: DiscoverySession) -> None:
        """Drain the nested-reference queue until no new sitemaps turn up."""
        visited_nested: Set[str] = set()
        while session.pending:
            url = session.pending.popleft()
            if url in visited_nested:
                continue
            visited_nested.add(url)
            await self._check_sitemap(session, url)

    async def _check_sitemap(self, session: DiscoverySession, url: str) -> Optional[SitemapRecord]:
        """Fetch, classify and record a sitemap URL."""
        record = await self._fetch_record(session, url)
        if record is not None:
            session.add_record(record)
        return record

    async def _fetch_record(self, session: DiscoverySession, url: str) -> Optional[SitemapRecord]:
        """Fetch and classify a sitemap URL without recording it.

        Returns None when the URL was already visited, the fetch budget is
        spent, or the fetch failed.
        """
        if url in session.visited:
            return None

        if session.fetch_count >= self.thresholds.max_sitemap_fetches:
            logger.warning(
                f"Sitemap fetch limit ({self.thresholds.max_sitemap_fetches}) reached, skipping {url}"
            )
            return None

        # Mark before awaiting so concurrent seed fetches never race on a URL
        session.visited.add(url)
        session.fetch_count += 1

        result = await self.fetcher.fetch(url)
        if not result.success:
            logger.debug(f"No sitemap at {url}: {result.error}")
            return None

        is_compressed = result.content_encoding == 'gzip' or result.gzip_body
        return self.classifier.build_record(
            url,
            result.text,
            is_compressed=is_compressed,
            size_bytes=len(result.content),
        )
