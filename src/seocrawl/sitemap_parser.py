"""Sitemap classification and quality checks.

Sitemaps in the wild are frequently malformed, so classification works on
substring markers rather than a strict XML parse. All of the marker logic
lives behind SitemapClassifier so a stricter parser can replace it without
changing what callers receive.
"""

import html
import logging
import re
from typing import List, Optional

from seocrawl.config import CrawlabilityThresholds, default_thresholds
from seocrawl.constants import (
    ISSUE_MISSING_LASTMOD,
    ISSUE_TOO_LARGE,
    ISSUE_TOO_MANY_URLS,
    ISSUE_XML_SYNTAX,
    REC_COMPRESS,
    REC_HREFLANG_VARIANTS,
    REC_IMAGE_CAPTIONS,
    REC_INDEX_FEW_CHILDREN,
    REC_NEWS_FRESHNESS,
    REC_NEWS_LASTMOD,
    REC_STANDARD_LASTMOD,
    REC_STANDARD_PRIORITY,
    REC_VIDEO_METADATA,
)
from seocrawl.models import SitemapRecord, SitemapType

logger = logging.getLogger(__name__)

URL_ENTRY_RE = re.compile(r'<url[\s>]')
SITEMAP_BLOCK_RE = re.compile(r'<sitemap(?:\s[^>]*)?>(.*?)</sitemap>', re.DOTALL)
LOC_RE = re.compile(r'<loc>\s*(.*?)\s*</loc>', re.DOTALL)

# (type, content marker, URL marker); order is significant, first match wins
_TYPE_MARKERS = [
    (SitemapType.NEWS, 'news:news', 'news-sitemap'),
    (SitemapType.IMAGE, 'image:image', 'image-sitemap'),
    (SitemapType.VIDEO, 'video:video', 'video-sitemap'),
    (SitemapType.MOBILE, 'mobile:mobile', 'mobile-sitemap'),
]


def quick_classify(url: str, content: str) -> SitemapType:
    """Determine a sitemap's type from substring markers.

    Args:
        url: Where the sitemap was fetched from
        content: Sitemap body

    Returns:
        The first matching SitemapType
    """
    if '<sitemapindex' in content:
        return SitemapType.INDEX

    for sitemap_type, content_marker, url_marker in _TYPE_MARKERS:
        if content_marker in content or url_marker in url:
            return sitemap_type

    if 'hreflang' in content and 'alternate' in content:
        return SitemapType.HREFLANG
    if '<urlset' in content:
        return SitemapType.STANDARD
    return SitemapType.UNKNOWN


def count_url_entries(content: str) -> int:
    """Count <url> entries in a sitemap body."""
    return len(URL_ENTRY_RE.findall(content))


def extract_nested_sitemaps(content: str) -> List[str]:
    """Extract the <loc> of every <sitemap> block in a sitemap index."""
    nested = []
    for block in SITEMAP_BLOCK_RE.findall(content):
        loc = LOC_RE.search(block)
        if loc and loc.group(1):
            nested.append(html.unescape(loc.group(1)))
    return nested


def analyze_quality(
    content: str,
    sitemap_type: SitemapType,
    size_bytes: Optional[int] = None,
    thresholds: Optional[CrawlabilityThresholds] = None,
) -> List[str]:
    """Flag structural and content issues in a sitemap.

    Args:
        content: Sitemap body
        sitemap_type: Result of quick_classify
        size_bytes: Body size; measured from content when omitted
        thresholds: Protocol limits

    Returns:
        Independent issue strings, empty when nothing was flagged
    """
    thresholds = thresholds or default_thresholds
    issues = []

    has_closing_root = '</urlset>' in content or '</sitemapindex>' in content
    if '<?xml' not in content or not has_closing_root:
        issues.append(ISSUE_XML_SYNTAX)

    if '<lastmod>' not in content:
        issues.append(ISSUE_MISSING_LASTMOD)

    if size_bytes is None:
        size_bytes = len(content.encode('utf-8'))
    if size_bytes > thresholds.max_sitemap_bytes:
        issues.append(ISSUE_TOO_LARGE)

    if sitemap_type == SitemapType.STANDARD:
        if count_url_entries(content) > thresholds.max_urls_per_sitemap:
            issues.append(ISSUE_TOO_MANY_URLS)

    return issues


class SitemapClassifier:
    """Turn a fetched sitemap body into a SitemapRecord."""

    def __init__(self, thresholds: Optional[CrawlabilityThresholds] = None):
        self.thresholds = thresholds or default_thresholds

    def build_record(
        self,
        url: str,
        content: str,
        is_compressed: bool = False,
        size_bytes: Optional[int] = None,
    ) -> SitemapRecord:
        """Classify a sitemap and collect its quality signals.

        Args:
            url: Sitemap URL
            content: Decoded sitemap body
            is_compressed: Whether the sitemap was served gzip-compressed
            size_bytes: Uncompressed body size

        Returns:
            SitemapRecord for this document
        """
        if size_bytes is None:
            size_bytes = len(content.encode('utf-8'))

        sitemap_type = quick_classify(url, content)
        record = SitemapRecord(
            url=url,
            type=sitemap_type,
            url_count=count_url_entries(content),
            has_lastmod='<lastmod>' in content,
            has_priority='<priority>' in content,
            has_changefreq='<changefreq>' in content,
            is_compressed=is_compressed,
            size_bytes=size_bytes,
            quality_issues=tuple(analyze_quality(content, sitemap_type, size_bytes, self.thresholds)),
            nested_sitemap_urls=tuple(extract_nested_sitemaps(content)),
        )
        logger.debug(
            f"Classified {url} as {sitemap_type.value}: {record.url_count} URLs, "
            f"{len(record.nested_sitemap_urls)} nested sitemaps"
        )
        return record


def sitemap_recommendations(
    record: SitemapRecord,
    thresholds: Optional[CrawlabilityThresholds] = None,
) -> List[str]:
    """Type-specific improvement suggestions for one sitemap."""
    thresholds = thresholds or default_thresholds
    improvements = []

    if record.type == SitemapType.STANDARD:
        if not record.has_lastmod:
            improvements.append(REC_STANDARD_LASTMOD)
        if not record.has_priority or not record.has_changefreq:
            improvements.append(REC_STANDARD_PRIORITY)
    elif record.type == SitemapType.INDEX:
        if len(record.nested_sitemap_urls) < thresholds.min_index_children:
            improvements.append(REC_INDEX_FEW_CHILDREN)
    elif record.type == SitemapType.NEWS:
        if not record.has_lastmod:
            improvements.append(REC_NEWS_LASTMOD)
        improvements.append(REC_NEWS_FRESHNESS)
    elif record.type == SitemapType.IMAGE:
        improvements.append(REC_IMAGE_CAPTIONS)
    elif record.type == SitemapType.VIDEO:
        improvements.append(REC_VIDEO_METADATA)
    elif record.type == SitemapType.HREFLANG:
        improvements.append(REC_HREFLANG_VARIANTS)

    if record.quality_issues:
        improvements.append(f"Fix detected issues: {', '.join(record.quality_issues)}")

    if not record.is_compressed and record.size_bytes > thresholds.compression_suggest_bytes:
        improvements.append(REC_COMPRESS)

    return improvements
