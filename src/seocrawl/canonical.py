"""Canonical link tag detection for the audited page."""

import logging
from typing import Optional

from bs4 import BeautifulSoup

from seocrawl.fetcher import AsyncFetcher
from seocrawl.models import CanonicalResult

logger = logging.getLogger(__name__)


def _is_canonical_rel(rel) -> bool:
    # BeautifulSoup returns rel as a list of tokens
    if not rel:
        return False
    tokens = rel if isinstance(rel, list) else str(rel).split()
    return any(token.lower() == "canonical" for token in tokens)


def find_canonical(html: str) -> Optional[str]:
    """Return the href of the first canonical link tag, if any."""
    soup = BeautifulSoup(html, "html.parser")
    for link in soup.find_all("link", rel=_is_canonical_rel):
        href = (link.get("href") or "").strip()
        if href:
            return href
    return None


class CanonicalTagProber:
    """Check the audited page for a canonical link tag."""

    def __init__(self, fetcher: AsyncFetcher):
        self.fetcher = fetcher

    async def probe(self, target_url: str) -> CanonicalResult:
        result = await self.fetcher.fetch(target_url)
        if not result.success:
            logger.info(f"Could not fetch {target_url} for canonical check: {result.error}")
            return CanonicalResult()

        canonical_url = find_canonical(result.text)
        if canonical_url is None:
            return CanonicalResult()

        logger.debug(f"Canonical URL for {target_url}: {canonical_url}")
        return CanonicalResult(has_canonical=True, canonical_url=canonical_url)
