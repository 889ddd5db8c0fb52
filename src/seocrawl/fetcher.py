"""Async HTTP fetcher shared by every outbound request of an audit."""

import asyncio
import gzip
import logging
import zlib
from dataclasses import dataclass, field
from typing import Optional

import httpx

from seocrawl.constants import (
    DEFAULT_MAX_CONCURRENT_REQUESTS,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    GZIP_MAGIC,
)

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Outcome of a single GET request."""

    url: str
    success: bool = False
    status_code: Optional[int] = None
    text: str = ""
    content: bytes = b""
    headers: dict = field(default_factory=dict)  # Lower-cased header names
    gzip_body: bool = False  # Body was a raw gzip stream inflated locally
    error: Optional[str] = None

    @property
    def content_encoding(self) -> str:
        return self.headers.get("content-encoding", "").lower()


class AsyncFetcher:
    """Fetches URLs over one httpx.AsyncClient with bounded time and concurrency.

    Upstream failures never raise: timeouts, connection errors and non-2xx
    responses all come back as an unsuccessful FetchResult.

    Usage:
        async with AsyncFetcher(timeout=10) as fetcher:
            result = await fetcher.fetch("https://example.com/robots.txt")
    """

    def __init__(
        self,
        user_agent: Optional[str] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS,
        max_concurrent: int = DEFAULT_MAX_CONCURRENT_REQUESTS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the fetcher.

        Args:
            user_agent: User agent sent with every request
            timeout: Per-request timeout in seconds
            max_concurrent: Maximum requests in flight at once
            transport: Optional httpx transport (tests inject httpx.MockTransport)
        """
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        self.timeout = timeout
        self.max_concurrent = max_concurrent
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self.total_requests = 0
        self.failed_requests = 0

    async def __aenter__(self) -> "AsyncFetcher":
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            transport=self._transport,
            headers={
                "User-Agent": self.user_agent,
                "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,text/plain;q=0.8,*/*;q=0.5",
                "Accept-Encoding": "gzip, deflate",
            },
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str) -> FetchResult:
        """GET a URL.

        Args:
            url: Absolute URL to fetch

        Returns:
            FetchResult; success is False for any upstream failure
        """
        if self._client is None:
            raise RuntimeError("AsyncFetcher must be used as an async context manager")

        async with self._semaphore:
            self.total_requests += 1
            try:
                response = await self._client.get(url)
            except httpx.TimeoutException:
                return self._failure(url, f"Request timeout after {self.timeout}s")
            except httpx.HTTPError as e:
                return self._failure(url, f"{type(e).__name__}: {e}")
            except (httpx.InvalidURL, ValueError) as e:
                return self._failure(url, f"Invalid URL: {e}")

        headers = {name.lower(): value for name, value in response.headers.items()}

        if not response.is_success:
            return self._failure(url, f"HTTP {response.status_code}", response.status_code, headers)

        content = response.content
        text = response.text
        gzip_body = False

        # .xml.gz files are usually served as application/x-gzip with no
        # content-encoding, so httpx hands back the compressed stream
        if content[:2] == GZIP_MAGIC:
            try:
                content = gzip.decompress(content)
            except (OSError, EOFError, zlib.error) as e:
                logger.debug(f"Could not inflate gzip body from {url}: {e}")
            else:
                gzip_body = True
                text = content.decode(response.encoding or "utf-8", errors="replace")

        logger.debug(f"Fetched {url} ({response.status_code}, {len(content)} bytes)")

        return FetchResult(
            url=url,
            success=True,
            status_code=response.status_code,
            text=text,
            content=content,
            headers=headers,
            gzip_body=gzip_body,
        )

    def _failure(
        self,
        url: str,
        error: str,
        status_code: Optional[int] = None,
        headers: Optional[dict] = None,
    ) -> FetchResult:
        self.failed_requests += 1
        logger.debug(f"Fetch failed for {url}: {error}")
        return FetchResult(
            url=url,
            success=False,
            status_code=status_code,
            headers=headers or {},
            error=error,
        )
