"""
Crawlability Analyzer

Audits the factors that decide how well search engines can crawl a site:
- robots.txt presence and rules
- XML sitemap discovery, classification and quality
- Canonical tag on the audited page

and combines them into recommendations and a 0-100 crawlability score.
"""

import asyncio
import logging
from typing import List, Optional
from urllib.parse import urlparse

import httpx

from seocrawl.canonical import CanonicalTagProber
from seocrawl.config import Config, CrawlabilityThresholds, default_thresholds, settings
from seocrawl.constants import (
    MAX_SCORE,
    MOBILE_AGENT_MARKER,
    REC_ADD_DISALLOW,
    REC_CANONICAL,
    REC_CREATE_ROBOTS,
    REC_CREATE_SITEMAP,
    REC_FEW_URLS,
    REC_HREFLANG,
    REC_IMAGE_SITEMAP,
    REC_NEWS_SITEMAP,
    REC_SITEMAP_IN_ROBOTS,
    ROBOTS_TXT_PATH,
    SCORE_CANONICAL,
    SCORE_LARGE_URL_COUNT,
    SCORE_MULTIPLE_SITEMAPS_MAX,
    SCORE_PER_SITEMAP_TYPE,
    SCORE_ROBOTS_TXT,
    SCORE_SITEMAP,
    SCORE_SITEMAP_IN_ROBOTS,
    SCORE_SITEMAP_TYPES_MAX,
    TIMELY_CONTENT_MARKERS,
)
from seocrawl.fetcher import AsyncFetcher
from seocrawl.models import (
    CanonicalResult,
    CrawlabilityReport,
    DiscoveryResult,
    RobotsDirectives,
    SitemapType,
)
from seocrawl.robots import RobotsDirectiveLoader
from seocrawl.sitemap_discovery import DiscoverySession, SitemapDiscoveryEngine
from seocrawl.sitemap_parser import sitemap_recommendations

logger = logging.getLogger(__name__)


class InvalidTargetURLError(ValueError):
    """Raised when no site origin can be derived from the target URL."""

    def __init__(self, url: str, reason: str = "not an absolute http(s) URL"):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid target URL {url!r}: {reason}")


def site_origin(target_url: str) -> str:
    """Derive scheme://host[:port] from an absolute URL.

    Raises:
        InvalidTargetURLError: If the URL is not absolute http(s)
    """
    if not isinstance(target_url, str) or not target_url.strip():
        raise InvalidTargetURLError(str(target_url), "empty URL")

    parsed = urlparse(target_url.strip())
    if parsed.scheme not in ("http", "https"):
        raise InvalidTargetURLError(target_url, "scheme must be http or https")
    if not parsed.hostname:
        raise InvalidTargetURLError(target_url, "missing host")
    try:
        parsed.port
    except ValueError as e:
        raise InvalidTargetURLError(target_url, str(e)) from e

    host = parsed.netloc.rsplit("@", 1)[-1]
    return f"{parsed.scheme}://{host}"


def calculate_crawlability_score(
    robots_txt_exists: bool,
    sitemap_exists: bool,
    has_canonical: bool,
    has_sitemap_in_robots: bool,
    sitemap_url_count: int = 0,
    total_url_count: int = 0,
    sitemap_types: int = 0,
    thresholds: Optional[CrawlabilityThresholds] = None,
) -> int:
    """Calculate the crawlability score (0-100).

    Args:
        robots_txt_exists: robots.txt was fetched
        sitemap_exists: At least one sitemap resolved
        has_canonical: The page declares a canonical URL
        has_sitemap_in_robots: robots.txt declares at least one sitemap
        sitemap_url_count: Number of discovered sitemap URLs
        total_url_count: <url> entries across all sitemaps
        sitemap_types: Number of distinct sitemap types found

    Returns:
        Additive score capped at 100
    """
    thresholds = thresholds or default_thresholds
    points = 0

    if robots_txt_exists:
        points += SCORE_ROBOTS_TXT
    if sitemap_exists:
        points += SCORE_SITEMAP
    if has_canonical:
        points += SCORE_CANONICAL
    if has_sitemap_in_robots:
        points += SCORE_SITEMAP_IN_ROBOTS

    # Bonus for multiple sitemaps and a good URL count
    if sitemap_url_count > 1:
        points += min(SCORE_MULTIPLE_SITEMAPS_MAX, sitemap_url_count)
    if total_url_count > thresholds.large_url_count_threshold:
        points += SCORE_LARGE_URL_COUNT

    # Bonus for diverse sitemap types
    if sitemap_types > 1:
        points += min(SCORE_SITEMAP_TYPES_MAX, sitemap_types * SCORE_PER_SITEMAP_TYPE)

    return max(0, min(MAX_SCORE, points))


def _dedupe(items: List[str]) -> List[str]:
    return list(dict.fromkeys(items))


def build_recommendations(
    robots: RobotsDirectives,
    discovery: DiscoveryResult,
    canonical: CanonicalResult,
    thresholds: Optional[CrawlabilityThresholds] = None,
) -> List[str]:
    """Generate ordered, de-duplicated crawlability recommendations."""
    thresholds = thresholds or default_thresholds
    recommendations = []

    if not robots.exists:
        recommendations.append(REC_CREATE_ROBOTS)
    elif not robots.disallow_rules:
        recommendations.append(REC_ADD_DISALLOW)

    if not discovery.sitemap_exists:
        recommendations.append(REC_CREATE_SITEMAP)
    elif (
        discovery.total_url_count < thresholds.few_urls_threshold
        and not discovery.nested_sitemap_urls
    ):
        recommendations.append(REC_FEW_URLS)

    if discovery.sitemap_exists and robots.exists and not robots.declared_sitemaps:
        recommendations.append(REC_SITEMAP_IN_ROBOTS)

    for record in discovery.records:
        recommendations.extend(sitemap_recommendations(record, thresholds))
    recommendations = _dedupe(recommendations)

    if discovery.sitemap_exists:
        breakdown = discovery.type_breakdown()
        if breakdown[SitemapType.IMAGE] == 0:
            recommendations.append(REC_IMAGE_SITEMAP)
        if breakdown[SitemapType.NEWS] == 0 and any(
            marker in record.url.lower()
            for record in discovery.records
            for marker in TIMELY_CONTENT_MARKERS
        ):
            recommendations.append(REC_NEWS_SITEMAP)
        if breakdown[SitemapType.HREFLANG] == 0 and any(
            MOBILE_AGENT_MARKER in agent.lower() for agent in robots.agents
        ):
            recommendations.append(REC_HREFLANG)

    if not canonical.has_canonical:
        recommendations.append(REC_CANONICAL)

    return _dedupe(recommendations)


def build_report(
    target_url: str,
    robots: RobotsDirectives,
    discovery: DiscoveryResult,
    canonical: CanonicalResult,
    thresholds: Optional[CrawlabilityThresholds] = None,
) -> CrawlabilityReport:
    """Combine robots, sitemap and canonical findings into a report."""
    thresholds = thresholds or default_thresholds
    breakdown = discovery.type_breakdown()

    score = calculate_crawlability_score(
        robots_txt_exists=robots.exists,
        sitemap_exists=discovery.sitemap_exists,
        has_canonical=canonical.has_canonical,
        has_sitemap_in_robots=bool(robots.declared_sitemaps),
        sitemap_url_count=len(discovery.all_discovered_urls),
        total_url_count=discovery.total_url_count,
        sitemap_types=sum(1 for count in breakdown.values() if count > 0),
        thresholds=thresholds,
    )

    return CrawlabilityReport(
        target_url=target_url,
        robots_txt_url=robots.url,
        robots_txt_exists=robots.exists,
        disallow_rules=list(robots.disallow_rules),
        allow_rules=list(robots.allow_rules),
        declared_agents=list(robots.agents),
        sitemaps_in_robots=list(robots.declared_sitemaps),
        sitemap_exists=discovery.sitemap_exists,
        all_discovered_sitemap_urls=list(discovery.all_discovered_urls),
        total_url_count=discovery.total_url_count,
        sitemap_type_breakdown=breakdown,
        per_sitemap_details=list(discovery.records),
        sitemap_improvements={
            record.url: sitemap_recommendations(record, thresholds)
            for record in discovery.records
        },
        has_canonical=canonical.has_canonical,
        canonical_url=canonical.canonical_url,
        recommendations=build_recommendations(robots, discovery, canonical, thresholds),
        crawlability_score=score,
    )


class CrawlabilityAnalyzer:
    """Run crawlability audits."""

    def __init__(
        self,
        config: Optional[Config] = None,
        thresholds: Optional[CrawlabilityThresholds] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the analyzer.

        Args:
            config: Request settings (default: settings from the environment)
            thresholds: Sitemap limits and scoring thresholds
            transport: Optional httpx transport shared by every request
        """
        self.config = config or settings
        self.thresholds = thresholds or default_thresholds
        self.transport = transport

    async def audit(self, target_url: str) -> CrawlabilityReport:
        """Audit a page's site for crawlability.

        Upstream failures never raise; whatever could not be fetched is
        reported as absent.

        Args:
            target_url: Absolute URL of the page to audit

        Returns:
            CrawlabilityReport

        Raises:
            InvalidTargetURLError: If no origin can be derived from target_url
        """
        origin = site_origin(target_url)
        logger.info(f"Starting crawlability audit for {target_url}")

        robots = RobotsDirectives.missing(f"{origin}{ROBOTS_TXT_PATH}")
        session = DiscoverySession(origin)
        canonical = CanonicalResult()

        async with AsyncFetcher(
            user_agent=self.config.user_agent,
            timeout=self.config.timeout,
            max_concurrent=self.config.max_concurrent_requests,
            transport=self.transport,
        ) as fetcher:
            loader = RobotsDirectiveLoader(fetcher)
            engine = SitemapDiscoveryEngine(fetcher, thresholds=self.thresholds)
            prober = CanonicalTagProber(fetcher)

            async def robots_then_sitemaps():
                nonlocal robots
                robots = await loader.load(origin)
                await engine.discover(origin, robots.declared_sitemaps, session=session)

            sitemap_task = asyncio.create_task(robots_then_sitemaps())
            canonical_task = asyncio.create_task(prober.probe(target_url))
            tasks = [sitemap_task, canonical_task]

            try:
                done, pending = await asyncio.wait(tasks, timeout=self.config.audit_timeout)
                if pending:
                    logger.warning(
                        f"Audit of {target_url} exceeded {self.config.audit_timeout}s, "
                        f"reporting partial results"
                    )
                    for task in pending:
                        task.cancel()
                    await asyncio.gather(*pending, return_exceptions=True)
            finally:
                for task in tasks:
                    if not task.done():
                        task.cancel()

            if sitemap_task in done:
                sitemap_task.result()
            if canonical_task in done:
                canonical = canonical_task.result()

        report = build_report(target_url, robots, session.to_result(), canonical, self.thresholds)
        logger.info(
            f"Crawlability score for {target_url}: {report.crawlability_score}/100 "
            f"({fetcher.total_requests} requests, {fetcher.failed_requests} failed)"
        )
        return report


async def audit_crawlability(
    target_url: str,
    config: Optional[Config] = None,
    thresholds: Optional[CrawlabilityThresholds] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> CrawlabilityReport:
    """Convenience coroutine to audit one URL."""
    analyzer = CrawlabilityAnalyzer(config=config, thresholds=thresholds, transport=transport)
    return await analyzer.audit(target_url)


def audit_crawlability_sync(
    target_url: str,
    config: Optional[Config] = None,
    thresholds: Optional[CrawlabilityThresholds] = None,
) -> CrawlabilityReport:
    """Blocking wrapper around audit_crawlability."""
    return asyncio.run(audit_crawlability(target_url, config=config, thresholds=thresholds))
