# src/seocrawl/constants.py
"""Centralized constants for the crawlability audit.

This module contains magic numbers and fixed policy values that are used
across multiple modules. For user-configurable limits, see config.py
and CrawlabilityThresholds.
"""

# =============================================================================
# HTTP Constants
# =============================================================================

# Default request timeout in seconds
DEFAULT_REQUEST_TIMEOUT_SECONDS = 15.0

# Default concurrent requests per audit
DEFAULT_MAX_CONCURRENT_REQUESTS = 6

# Default user agent for outbound requests
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; SEOCrawl/1.0; +https://github.com/seocrawl/seocrawl)"

# First two bytes of any gzip stream
GZIP_MAGIC = b"\x1f\x8b"


# =============================================================================
# Robots.txt Constants
# =============================================================================

ROBOTS_TXT_PATH = "/robots.txt"

# Agent assumed for rules that appear before any User-agent line
DEFAULT_USER_AGENT_GROUP = "*"


# =============================================================================
# Sitemap Discovery Constants
# =============================================================================

# Well-known sitemap locations, probed in this order until one resolves
COMMON_SITEMAP_PATHS = [
    "/sitemap.xml",
    "/sitemap_index.xml",
    "/sitemap-index.xml",
    "/sitemap-0.xml",
    "/sitemap_0.xml",
    "/sitemap-posts.xml",
    "/sitemap-pages.xml",
    "/sitemap-products.xml",
    "/sitemap-categories.xml",
    "/sitemap-news.xml",
    "/sitemap-video.xml",
    "/sitemap-image.xml",
    "/sitemap/sitemap.xml",
    "/wp-sitemap.xml",  # WordPress
    "/sitemapindex.xml",  # Magento and others
]

# Numbered sitemap naming conventions as (prefix, extension)
NUMERIC_SITEMAP_PATTERNS = [
    ("/sitemap-", ".xml"),
    ("/sitemap_", ".xml"),
]


# =============================================================================
# Scoring Constants
# =============================================================================

SCORE_ROBOTS_TXT = 25
SCORE_SITEMAP = 25
SCORE_CANONICAL = 15
SCORE_SITEMAP_IN_ROBOTS = 10
SCORE_MULTIPLE_SITEMAPS_MAX = 5
SCORE_LARGE_URL_COUNT = 5
SCORE_PER_SITEMAP_TYPE = 3
SCORE_SITEMAP_TYPES_MAX = 15
MAX_SCORE = 100

# Sitemap URL substrings that suggest timely content
TIMELY_CONTENT_MARKERS = ("blog", "news")

# Agent substring suggesting a mobile/international crawl setup
MOBILE_AGENT_MARKER = "googlebot-mobile"


# =============================================================================
# Recommendation Texts
# =============================================================================

REC_CREATE_ROBOTS = "Create a robots.txt file to guide search engine crawlers."
REC_ADD_DISALLOW = "Consider adding specific disallow rules to prevent crawling of non-essential pages."
REC_CREATE_SITEMAP = "Create a sitemap.xml file to help search engines discover your content."
REC_FEW_URLS = "Your sitemap contains few URLs. Make sure all important pages are included."
REC_SITEMAP_IN_ROBOTS = "Add your sitemap URL to your robots.txt file for better discovery."
REC_IMAGE_SITEMAP = "Consider adding an image sitemap if your site contains important images."
REC_NEWS_SITEMAP = "Consider adding a news sitemap for timely content like blog posts or news articles."
REC_HREFLANG = "Consider adding hreflang annotations if your site targets multiple languages or regions."
REC_CANONICAL = "Add canonical tags to prevent duplicate content issues."

REC_STANDARD_LASTMOD = "Add lastmod dates to help search engines identify updated content"
REC_STANDARD_PRIORITY = "Consider adding priority and changefreq attributes for better crawl guidance"
REC_INDEX_FEW_CHILDREN = (
    "Your sitemap index contains few child sitemaps. "
    "Consider organizing content into more specific sitemaps"
)
REC_NEWS_LASTMOD = "News sitemaps require lastmod dates for all entries"
REC_NEWS_FRESHNESS = "Ensure news sitemaps contain articles published in the last 48 hours"
REC_IMAGE_CAPTIONS = "Ensure all images have descriptive captions and titles for better image SEO"
REC_VIDEO_METADATA = "Add thumbnail, title, description and duration for all video entries"
REC_HREFLANG_VARIANTS = "Ensure hreflang annotations correctly reference all language/region variants"
REC_COMPRESS = "Consider compressing your sitemap with gzip for faster processing"

ISSUE_XML_SYNTAX = "Potential XML syntax errors detected"
ISSUE_MISSING_LASTMOD = "Missing lastmod dates"
ISSUE_TOO_LARGE = "Sitemap exceeds recommended 50MB size limit"
ISSUE_TOO_MANY_URLS = "Exceeds 50,000 URL limit, consider splitting into multiple sitemaps"
