"""Data models for crawlability analysis."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, NamedTuple, Optional, Tuple


class SitemapType(str, Enum):
    """Semantic kind of a sitemap document."""

    STANDARD = "standard"
    INDEX = "index"
    NEWS = "news"
    IMAGE = "image"
    VIDEO = "video"
    MOBILE = "mobile"
    HREFLANG = "hreflang"
    UNKNOWN = "unknown"


class RobotsRule(NamedTuple):
    """A single allow/disallow rule scoped to a user-agent group."""

    agent: str
    pattern: str

    def __str__(self) -> str:
        return f"{self.agent}: {self.pattern}"


# ============================================================================
# Robots.txt Models
# ============================================================================

@dataclass(frozen=True)
class RobotsDirectives:
    """Directives parsed from a site's robots.txt."""

    exists: bool = False
    url: Optional[str] = None
    agents: Tuple[str, ...] = ()  # Lowercased, unique, first-seen order
    disallow_rules: Tuple[RobotsRule, ...] = ()  # Duplicates allowed
    allow_rules: Tuple[RobotsRule, ...] = ()
    declared_sitemaps: Tuple[str, ...] = ()  # Unique by exact string, first-seen order

    @classmethod
    def missing(cls, url: Optional[str] = None) -> "RobotsDirectives":
        """Directives for a robots.txt that could not be fetched."""
        return cls(exists=False, url=url)


# ============================================================================
# Sitemap Models
# ============================================================================

@dataclass(frozen=True)
class SitemapRecord:
    """A fetched and classified sitemap document."""

    url: str
    type: SitemapType = SitemapType.UNKNOWN
    url_count: int = 0  # <url> entries
    has_lastmod: bool = False
    has_priority: bool = False
    has_changefreq: bool = False
    is_compressed: bool = False
    size_bytes: int = 0
    quality_issues: Tuple[str, ...] = ()
    nested_sitemap_urls: Tuple[str, ...] = ()  # <sitemap><loc> references


@dataclass
class DiscoveryResult:
    """Everything a sitemap discovery run collected."""

    records: List[SitemapRecord] = field(default_factory=list)  # Fetch order
    sitemap_exists: bool = False
    all_discovered_urls: List[str] = field(default_factory=list)
    nested_sitemap_urls: List[str] = field(default_factory=list)  # References found inside indexes

    @property
    def total_url_count(self) -> int:
        """Sum of <url> entries over every fetched sitemap."""
        return sum(record.url_count for record in self.records)

    def type_breakdown(self) -> Dict[SitemapType, int]:
        """Count of fetched sitemaps per type, every type present."""
        breakdown = {sitemap_type: 0 for sitemap_type in SitemapType}
        for record in self.records:
            breakdown[record.type] += 1
        return breakdown


@dataclass
class CanonicalResult:
    """Canonical link tag found on the audited page."""

    has_canonical: bool = False
    canonical_url: str = ""


# ============================================================================
# Report Models
# ============================================================================

@dataclass
class CrawlabilityReport:
    """Crawlability section of a technical SEO audit."""

    target_url: str
    robots_txt_url: Optional[str] = None

    # robots.txt
    robots_txt_exists: bool = False
    disallow_rules: List[RobotsRule] = field(default_factory=list)
    allow_rules: List[RobotsRule] = field(default_factory=list)
    declared_agents: List[str] = field(default_factory=list)
    sitemaps_in_robots: List[str] = field(default_factory=list)

    # XML sitemaps
    sitemap_exists: bool = False
    all_discovered_sitemap_urls: List[str] = field(default_factory=list)
    total_url_count: int = 0
    sitemap_type_breakdown: Dict[SitemapType, int] = field(default_factory=dict)
    per_sitemap_details: List[SitemapRecord] = field(default_factory=list)
    sitemap_improvements: Dict[str, List[str]] = field(default_factory=dict)  # Keyed by sitemap URL

    # Canonical
    has_canonical: bool = False
    canonical_url: str = ""

    recommendations: List[str] = field(default_factory=list)
    crawlability_score: int = 0  # 0-100

    def to_dict(self) -> dict:
        """Serialize using the field names downstream consumers rely on."""
        return {
            "robotsTxtExists": self.robots_txt_exists,
            "disallowRules": [str(rule) for rule in self.disallow_rules],
            "allowRules": [str(rule) for rule in self.allow_rules],
            "declaredAgents": list(self.declared_agents),
            "sitemapExists": self.sitemap_exists,
            "allDiscoveredSitemapUrls": list(self.all_discovered_sitemap_urls),
            "totalUrlCount": self.total_url_count,
            "hasCanonical": self.has_canonical,
            "canonicalUrl": self.canonical_url,
            "sitemapTypeBreakdown": {
                SitemapType(sitemap_type).value: count
                for sitemap_type, count in self.sitemap_type_breakdown.items()
            },
            "perSitemapDetails": [
                {
                    "url": record.url,
                    "type": record.type.value,
                    "urlCount": record.url_count,
                    "hasLastmod": record.has_lastmod,
                    "errors": list(record.quality_issues),
                    "improvements": list(self.sitemap_improvements.get(record.url, [])),
                }
                for record in self.per_sitemap_details
            ],
            "recommendations": list(self.recommendations),
            "crawlabilityScore": self.crawlability_score,
        }
