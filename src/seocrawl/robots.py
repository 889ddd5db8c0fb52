"""
Robots.txt loading and parsing.

The parser is deliberately tolerant: it walks the file line by line, matches
directive keywords case-insensitively and ignores anything it does not
recognize. It never raises on malformed input.
"""

import logging
from typing import Optional

from seocrawl.constants import DEFAULT_USER_AGENT_GROUP, ROBOTS_TXT_PATH
from seocrawl.fetcher import AsyncFetcher
from seocrawl.models import RobotsDirectives, RobotsRule

logger = logging.getLogger(__name__)


def _split_directive(line: str):
    """Split 'Key: value' into (lowercased key, value) or return None."""
    if ':' not in line:
        return None
    key, value = line.split(':', 1)
    return key.strip().lower(), value.strip()


def parse_robots_txt(content: str, url: Optional[str] = None) -> RobotsDirectives:
    """Parse robots.txt content into directives.

    Args:
        content: Raw robots.txt body
        url: Where the content was fetched from

    Returns:
        RobotsDirectives with exists=True
    """
    agents = []
    disallow_rules = []
    allow_rules = []
    sitemaps = []
    current_agent = DEFAULT_USER_AGENT_GROUP

    for raw_line in content.lstrip('\ufeff').splitlines():
        # Sitemap URL fragments are meaningless, so '#' always starts a comment
        line = raw_line.split('#', 1)[0].strip()
        if not line:
            continue

        directive = _split_directive(line)
        if directive is None:
            continue
        key, value = directive

        # Agents and rule paths are stored lowercased; sitemap URLs keep their case
        if key == 'user-agent':
            current_agent = value.lower()
            if current_agent not in agents:
                agents.append(current_agent)
        elif key == 'disallow':
            if value:
                disallow_rules.append(RobotsRule(current_agent, value.lower()))
        elif key == 'allow':
            if value:
                allow_rules.append(RobotsRule(current_agent, value.lower()))
        elif key == 'sitemap':
            if value and value not in sitemaps:
                sitemaps.append(value)

    return RobotsDirectives(
        exists=True,
        url=url,
        agents=tuple(agents),
        disallow_rules=tuple(disallow_rules),
        allow_rules=tuple(allow_rules),
        declared_sitemaps=tuple(sitemaps),
    )


class RobotsDirectiveLoader:
    """Fetch and parse a site's robots.txt."""

    def __init__(self, fetcher: AsyncFetcher):
        self.fetcher = fetcher

    async def load(self, site_origin: str) -> RobotsDirectives:
        """Load robots.txt for an origin.

        Args:
            site_origin: Scheme and host, e.g. https://example.com

        Returns:
            Parsed directives, or RobotsDirectives.missing() if unavailable
        """
        robots_url = f"{site_origin.rstrip('/')}{ROBOTS_TXT_PATH}"
        result = await self.fetcher.fetch(robots_url)

        if not result.success:
            logger.info(f"robots.txt not available at {robots_url}: {result.error}")
            return RobotsDirectives.missing(robots_url)

        directives = parse_robots_txt(result.text, url=robots_url)
        logger.info(
            f"robots.txt: {len(directives.agents)} user-agents, "
            f"{len(directives.disallow_rules)} disallow rules, "
            f"{len(directives.declared_sitemaps)} sitemaps"
        )
        return directives
