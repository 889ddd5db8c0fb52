"""Crawlability auditing: robots.txt, sitemap discovery and canonical tags."""

__version__ = "0.1.0"

from seocrawl.crawlability import (
    CrawlabilityAnalyzer,
    InvalidTargetURLError,
    audit_crawlability,
    audit_crawlability_sync,
    calculate_crawlability_score,
)
from seocrawl.robots import RobotsDirectiveLoader, parse_robots_txt
from seocrawl.sitemap_discovery import SitemapDiscoveryEngine, DiscoverySession
from seocrawl.sitemap_parser import SitemapClassifier, quick_classify, analyze_quality
from seocrawl.canonical import CanonicalTagProber
from seocrawl.fetcher import AsyncFetcher, FetchResult
from seocrawl.models import (
    RobotsDirectives,
    RobotsRule,
    SitemapType,
    SitemapRecord,
    DiscoveryResult,
    CanonicalResult,
    CrawlabilityReport,
)
from seocrawl.config import settings, Config, CrawlabilityThresholds

__all__ = [
    # Core
    "CrawlabilityAnalyzer",
    "InvalidTargetURLError",
    "audit_crawlability",
    "audit_crawlability_sync",
    "calculate_crawlability_score",
    "RobotsDirectiveLoader",
    "parse_robots_txt",
    "SitemapDiscoveryEngine",
    "DiscoverySession",
    "SitemapClassifier",
    "quick_classify",
    "analyze_quality",
    "CanonicalTagProber",
    "AsyncFetcher",
    "FetchResult",
    # Models
    "RobotsDirectives",
    "RobotsRule",
    "SitemapType",
    "SitemapRecord",
    "DiscoveryResult",
    "CanonicalResult",
    "CrawlabilityReport",
    # Config
    "settings",
    "Config",
    "CrawlabilityThresholds",
]
