"""Tests for the crawlability analyzer: scoring, recommendations and full audits."""

import asyncio
import itertools
from typing import Dict, List, Tuple, get_type_hints

import pytest
import httpx

from seocrawl.config import Config
from seocrawl.constants import (
    REC_ADD_DISALLOW,
    REC_CANONICAL,
    REC_CREATE_ROBOTS,
    REC_CREATE_SITEMAP,
    REC_FEW_URLS,
    REC_HREFLANG,
    REC_IMAGE_SITEMAP,
    REC_NEWS_SITEMAP,
    REC_SITEMAP_IN_ROBOTS,
    REC_STANDARD_LASTMOD,
    REC_STANDARD_PRIORITY,
)
from seocrawl.crawlability import (
    CrawlabilityAnalyzer,
    InvalidTargetURLError,
    audit_crawlability,
    audit_crawlability_sync,
    build_recommendations,
    calculate_crawlability_score,
    site_origin,
)
from seocrawl.models import (
    CanonicalResult,
    CrawlabilityReport,
    DiscoveryResult,
    RobotsDirectives,
    RobotsRule,
    SitemapRecord,
    SitemapType,
)

from conftest import sitemap_index, urlset

BASE = "https://example.com"
PAGE = f"{BASE}/page"
CANONICAL_PAGE = f'<html><head><link rel="canonical" href="{PAGE}"></head></html>'


def standard(url, url_count=0, **kwargs):
    return SitemapRecord(url=url, type=SitemapType.STANDARD, url_count=url_count, **kwargs)


class TestCalculateCrawlabilityScore:
    """Test cases for calculate_crawlability_score."""

    def test_nothing_found(self):
        assert calculate_crawlability_score(False, False, False, False) == 0

    def test_presence_points(self):
        assert calculate_crawlability_score(True, True, True, True) == 75

    def test_multiple_sitemaps_bonus(self):
        """Test the bonus only applies to more than one sitemap and caps at 5."""
        assert calculate_crawlability_score(False, False, False, False, sitemap_url_count=1) == 0
        assert calculate_crawlability_score(False, False, False, False, sitemap_url_count=3) == 3
        assert calculate_crawlability_score(False, False, False, False, sitemap_url_count=40) == 5

    def test_url_count_bonus(self):
        assert calculate_crawlability_score(False, False, False, False, total_url_count=50) == 0
        assert calculate_crawlability_score(False, False, False, False, total_url_count=51) == 5

    def test_sitemap_types_bonus(self):
        """Test the type bonus needs two types and caps at 15."""
        assert calculate_crawlability_score(False, False, False, False, sitemap_types=1) == 0
        assert calculate_crawlability_score(False, False, False, False, sitemap_types=2) == 6
        assert calculate_crawlability_score(False, False, False, False, sitemap_types=8) == 15

    def test_maximum(self):
        score = calculate_crawlability_score(
            True, True, True, True, sitemap_url_count=10, total_url_count=1000, sitemap_types=8
        )
        assert score == 100

    def test_score_bounds(self):
        """Test that every input combination stays within 0-100."""
        for flags in itertools.product([False, True], repeat=4):
            for url_count, total, types in itertools.product([0, 1, 2, 6, 500], [0, 51, 10**6], range(9)):
                score = calculate_crawlability_score(
                    *flags, sitemap_url_count=url_count, total_url_count=total, sitemap_types=types
                )
                assert 0 <= score <= 100


class TestBuildRecommendations:
    """Test cases for build_recommendations."""

    def test_everything_missing(self):
        recs = build_recommendations(RobotsDirectives.missing(), DiscoveryResult(), CanonicalResult())
        assert recs == [REC_CREATE_ROBOTS, REC_CREATE_SITEMAP, REC_CANONICAL]

    def test_robots_without_disallow(self):
        robots = RobotsDirectives(exists=True, agents=("*",))
        recs = build_recommendations(robots, DiscoveryResult(), CanonicalResult(True, PAGE))
        assert recs == [REC_ADD_DISALLOW, REC_CREATE_SITEMAP]

    def test_few_urls_and_missing_robots_reference(self):
        """Test small-sitemap and cross-reference suggestions."""
        robots = RobotsDirectives(exists=True, disallow_rules=(RobotsRule("*", "/admin"),))
        discovery = DiscoveryResult(
            records=[standard(f"{BASE}/sitemap.xml", 3, has_lastmod=True, has_priority=True, has_changefreq=True)],
            sitemap_exists=True,
        )
        recs = build_recommendations(robots, discovery, CanonicalResult(True, PAGE))

        assert recs == [REC_FEW_URLS, REC_SITEMAP_IN_ROBOTS, REC_IMAGE_SITEMAP]

    def test_few_urls_skipped_when_nested_found(self):
        robots = RobotsDirectives(exists=True, disallow_rules=(RobotsRule("*", "/a"),),
                                  declared_sitemaps=(f"{BASE}/i.xml",))
        discovery = DiscoveryResult(
            records=[SitemapRecord(url=f"{BASE}/i.xml", type=SitemapType.INDEX,
                                   nested_sitemap_urls=(f"{BASE}/a.xml", f"{BASE}/b.xml"))],
            sitemap_exists=True,
            nested_sitemap_urls=[f"{BASE}/a.xml", f"{BASE}/b.xml"],
        )
        recs = build_recommendations(robots, discovery, CanonicalResult(True, PAGE))

        assert REC_FEW_URLS not in recs

    def test_per_sitemap_recommendations_deduplicated(self):
        """Test that identical suggestions from several sitemaps appear once."""
        robots = RobotsDirectives(exists=True, disallow_rules=(RobotsRule("*", "/a"),),
                                  declared_sitemaps=(f"{BASE}/a.xml",))
        discovery = DiscoveryResult(
            records=[standard(f"{BASE}/a.xml", 30), standard(f"{BASE}/b.xml", 30)],
            sitemap_exists=True,
        )
        recs = build_recommendations(robots, discovery, CanonicalResult())

        assert recs.count(REC_STANDARD_LASTMOD) == 1
        assert recs.count(REC_STANDARD_PRIORITY) == 1
        assert len(recs) == len(set(recs))
        assert recs[-1] == REC_CANONICAL

    def test_news_sitemap_suggested_for_blog(self):
        robots = RobotsDirectives(exists=True, disallow_rules=(RobotsRule("*", "/a"),),
                                  declared_sitemaps=(f"{BASE}/blog-sitemap.xml",))
        discovery = DiscoveryResult(
            records=[standard(f"{BASE}/blog-sitemap.xml", 20, has_lastmod=True, has_priority=True, has_changefreq=True)],
            sitemap_exists=True,
        )
        recs = build_recommendations(robots, discovery, CanonicalResult(True, PAGE))

        assert recs == [REC_IMAGE_SITEMAP, REC_NEWS_SITEMAP]

    def test_news_sitemap_not_suggested_when_present(self):
        robots = RobotsDirectives(exists=True, disallow_rules=(RobotsRule("*", "/a"),),
                                  declared_sitemaps=(f"{BASE}/news.xml",))
        discovery = DiscoveryResult(
            records=[SitemapRecord(url=f"{BASE}/news.xml", type=SitemapType.NEWS, has_lastmod=True, url_count=20)],
            sitemap_exists=True,
        )
        recs = build_recommendations(robots, discovery, CanonicalResult(True, PAGE))

        assert REC_NEWS_SITEMAP not in recs

    def test_hreflang_suggested_for_mobile_agent(self):
        robots = RobotsDirectives(exists=True, agents=("googlebot-mobile",),
                                  disallow_rules=(RobotsRule("googlebot-mobile", "/a"),),
                                  declared_sitemaps=(f"{BASE}/s.xml",))
        discovery = DiscoveryResult(
            records=[standard(f"{BASE}/s.xml", 20, has_lastmod=True, has_priority=True, has_changefreq=True)],
            sitemap_exists=True,
        )
        recs = build_recommendations(robots, discovery, CanonicalResult(True, PAGE))

        assert recs == [REC_IMAGE_SITEMAP, REC_HREFLANG]


class TestModelAnnotations:
    """Test that model fields declare their element types."""

    def test_element_types(self):
        assert get_type_hints(RobotsDirectives)["disallow_rules"] == Tuple[RobotsRule, ...]
        assert get_type_hints(DiscoveryResult)["records"] == List[SitemapRecord]
        assert get_type_hints(CrawlabilityReport)["sitemap_type_breakdown"] == Dict[SitemapType, int]


class TestSiteOrigin:
    """Test cases for site_origin."""

    def test_origin_strips_path_and_credentials(self):
        assert site_origin("https://user:pw@example.com:8443/a/b?c=1#d") == "https://example.com:8443"

    def test_plain_origin(self):
        assert site_origin("http://example.com") == "http://example.com"

    @pytest.mark.parametrize("url", ["", "   ", "not a url", "example.com/page", "ftp://example.com/", "https://", "http://example.com:notaport/"])
    def test_invalid(self, url):
        with pytest.raises(InvalidTargetURLError):
            site_origin(url)

    def test_invalid_is_value_error(self):
        with pytest.raises(ValueError):
            site_origin("mailto:someone@example.com")


class TestCrawlabilityAudit:
    """End-to-end audits against a fake site."""

    @pytest.mark.asyncio
    async def test_scenario_single_standard_sitemap(self, site):
        """robots.txt declares one standard sitemap and the page has a canonical tag."""
        site.add(f"{BASE}/robots.txt", f"User-agent: *\nDisallow: /admin\nSitemap: {BASE}/sitemap.xml\n")
        site.add(f"{BASE}/sitemap.xml", urlset(120))
        site.add(PAGE, CANONICAL_PAGE)

        report = await audit_crawlability(PAGE, transport=site.transport)

        assert report.robots_txt_exists is True
        assert report.sitemap_exists is True
        assert report.total_url_count == 120
        assert report.has_canonical is True
        assert report.canonical_url == PAGE
        assert report.all_discovered_sitemap_urls == [f"{BASE}/sitemap.xml"]
        assert report.crawlability_score == 80

    @pytest.mark.asyncio
    async def test_scenario_nothing_found(self, site):
        """No robots.txt, no sitemap anywhere and no canonical tag."""
        site.add(PAGE, "<html><head></head></html>")

        report = await audit_crawlability(PAGE, transport=site.transport)

        assert report.robots_txt_exists is False
        assert report.sitemap_exists is False
        assert report.has_canonical is False
        assert report.crawlability_score == 0
        assert report.recommendations == [REC_CREATE_ROBOTS, REC_CREATE_SITEMAP, REC_CANONICAL]

    @pytest.mark.asyncio
    async def test_scenario_sitemap_index(self, site):
        """robots.txt declares an index with two standard child sitemaps."""
        site.add(f"{BASE}/robots.txt", f"User-agent: *\nDisallow: /cart\nSitemap: {BASE}/sitemap_index.xml\n")
        site.add(f"{BASE}/sitemap_index.xml", sitemap_index(f"{BASE}/posts.xml", f"{BASE}/pages.xml"))
        site.add(f"{BASE}/posts.xml", urlset(30))
        site.add(f"{BASE}/pages.xml", urlset(40))

        report = await audit_crawlability(PAGE, transport=site.transport)

        assert report.total_url_count == 70
        assert report.sitemap_type_breakdown[SitemapType.INDEX] == 1
        assert report.sitemap_type_breakdown[SitemapType.STANDARD] == 2
        assert report.sitemap_type_breakdown[SitemapType.NEWS] == 0
        # 25 robots + 25 sitemap + 10 declared + 3 sitemaps + 5 urls + 6 types
        assert report.crawlability_score == 74
        assert report.recommendations == [REC_STANDARD_PRIORITY, REC_IMAGE_SITEMAP, REC_CANONICAL]

    @pytest.mark.asyncio
    async def test_all_fetches_fail(self):
        """Test that network failures everywhere still produce a report."""

        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        report = await audit_crawlability(PAGE, transport=httpx.MockTransport(handler))

        assert report.robots_txt_exists is False
        assert report.sitemap_exists is False
        assert report.has_canonical is False
        assert report.crawlability_score == 0

    @pytest.mark.asyncio
    async def test_invalid_url_raises(self, site):
        with pytest.raises(InvalidTargetURLError):
            await audit_crawlability("not-a-url", transport=site.transport)
        assert site.requested == []

    @pytest.mark.asyncio
    async def test_audit_timeout_keeps_partial_results(self):
        """Test that an overall timeout cancels slow fetches and reports what finished."""

        async def handler(request):
            url = str(request.url)
            if url == f"{BASE}/robots.txt":
                return httpx.Response(200, text=f"User-agent: *\nSitemap: {BASE}/slow.xml\n")
            if url == PAGE:
                return httpx.Response(200, text=CANONICAL_PAGE)
            if url == f"{BASE}/slow.xml":
                await asyncio.sleep(30)
            return httpx.Response(404)

        analyzer = CrawlabilityAnalyzer(
            config=Config(audit_timeout=0.5),
            transport=httpx.MockTransport(handler),
        )
        report = await analyzer.audit(PAGE)

        assert report.robots_txt_exists is True
        assert report.sitemap_exists is False
        assert report.has_canonical is True
        assert report.all_discovered_sitemap_urls == [f"{BASE}/slow.xml"]

    @pytest.mark.asyncio
    async def test_audit_timeout_keeps_finished_seed_sitemaps(self):
        """Test that seeds resolved before the timeout still count as found."""

        async def handler(request):
            url = str(request.url)
            if url == f"{BASE}/robots.txt":
                return httpx.Response(
                    200,
                    text=f"User-agent: *\nDisallow: /a\nSitemap: {BASE}/fast.xml\nSitemap: {BASE}/slow.xml\n",
                )
            if url == f"{BASE}/fast.xml":
                return httpx.Response(200, text=urlset(60))
            if url == f"{BASE}/slow.xml":
                await asyncio.sleep(30)
            return httpx.Response(404)

        analyzer = CrawlabilityAnalyzer(
            config=Config(audit_timeout=0.5),
            transport=httpx.MockTransport(handler),
        )
        report = await analyzer.audit(PAGE)

        assert report.sitemap_exists is True
        assert report.total_url_count == 60
        assert [r.url for r in report.per_sitemap_details] == [f"{BASE}/fast.xml"]
        assert REC_CREATE_SITEMAP not in report.recommendations
        # 25 robots + 25 sitemap + 10 declared + 2 sitemaps + 5 urls
        assert report.crawlability_score == 67

    @pytest.mark.asyncio
    async def test_audits_do_not_share_state(self, site):
        """Test that a second audit refetches everything."""
        site.add(f"{BASE}/sitemap.xml", urlset(3))
        analyzer = CrawlabilityAnalyzer(transport=site.transport)

        first = await analyzer.audit(PAGE)
        second = await analyzer.audit(PAGE)

        assert site.request_count(f"{BASE}/sitemap.xml") == 2
        assert first.total_url_count == second.total_url_count == 3

    @pytest.mark.asyncio
    async def test_to_dict_contract(self, site):
        """Test the serialized field names and shapes."""
        site.add(f"{BASE}/robots.txt", f"User-agent: *\nDisallow: /admin\nAllow: /admin/ok\nSitemap: {BASE}/sitemap.xml\n")
        site.add(f"{BASE}/sitemap.xml", urlset(2, lastmod=False))

        report = await audit_crawlability(PAGE, transport=site.transport)
        data = report.to_dict()

        assert set(data) == {
            "robotsTxtExists", "disallowRules", "allowRules", "declaredAgents",
            "sitemapExists", "allDiscoveredSitemapUrls", "totalUrlCount",
            "hasCanonical", "canonicalUrl", "sitemapTypeBreakdown",
            "perSitemapDetails", "recommendations", "crawlabilityScore",
        }
        assert data["disallowRules"] == ["*: /admin"]
        assert data["allowRules"] == ["*: /admin/ok"]
        assert data["sitemapTypeBreakdown"]["standard"] == 1
        assert len(data["sitemapTypeBreakdown"]) == 8
        detail = data["perSitemapDetails"][0]
        assert detail["url"] == f"{BASE}/sitemap.xml"
        assert detail["type"] == "standard"
        assert detail["urlCount"] == 2
        assert detail["hasLastmod"] is False
        assert "Missing lastmod dates" in detail["errors"]
        assert REC_STANDARD_LASTMOD in detail["improvements"]

    @pytest.mark.integration
    def test_live_audit(self):
        """Test a real audit against example.com."""
        report = audit_crawlability_sync("https://example.com/")
        assert 0 <= report.crawlability_score <= 100
