"""
Aiohttp-based implementation of the Fetcher interface.

This module fetches the pages returned by a web search with one shared
aiohttp session, parses the HTML with the ContentExtractor in a worker thread
off the event loop, and normalizes every
failure (timeout, HTTP error, network error, cancellation) into a per-URL
error result. All URLs of a request are fetched concurrently and each one is
isolated: a slow or broken page never delays or aborts the others.

Example:
    ```python
    async with AiohttpFetcher(settings.fetch) as fetcher:
        results = await fetcher.fetch_all(["https://example.com", "https://bad.invalid"])
        for r in results:
            print(r.url, r.error or r.content[:80])
    ```
"""
import asyncio
import logging
from typing import List, Optional, Sequence
from urllib.parse import urlparse

import aiohttp

from verixa.config.settings import FetchSettings
from verixa.core.context import RequestContext
from verixa.core.errors import RequestCancelled
from verixa.core.http import SessionClient
from verixa.core.implementations.content_extractor import ContentExtractor
from verixa.core.interfaces.extractor import PageContent
from verixa.core.interfaces.fetcher import NO_CONTENT_PLACEHOLDER, Fetcher, FetchResult

logger = logging.getLogger(__name__)


class HttpStatusError(Exception):
    """Non-2xx response."""


class AiohttpFetcher(SessionClient, Fetcher):
    """
    Asynchronous page fetcher using aiohttp.

    This implementation:
    1. Uses one aiohttp session for all requests
    2. Limits concurrent requests via a semaphore
    3. Applies the shorter of its own timeout and the request deadline
       to download and extraction together
    4. Converts every failure into FetchResult.failure(...)

    Attributes:
        settings: Fetch timeout, content caps and User-Agent
        extractor: Turns HTML into (title, content)
        semaphore: Limits concurrent requests
    """

    def __init__(self, settings: Optional[FetchSettings] = None,
                 session: Optional[aiohttp.ClientSession] = None,
                 extractor: Optional[ContentExtractor] = None,
                 concurrency: int = 20):
        super().__init__(session)
        self.settings = settings or FetchSettings()
        self.extractor = extractor or ContentExtractor(self.settings)
        self.semaphore = asyncio.Semaphore(concurrency)
        self.headers = {
            "User-Agent": self.settings.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
            "DNT": "1",
            "Upgrade-Insecure-Requests": "1",
        }

    async def get(self, url: str) -> str:
        """
        GET a URL and return its body text.

        Raises:
            HttpStatusError: for non-2xx responses
            aiohttp.ClientError: for network failures
        """
        session = self._ensure_session()
        async with self.semaphore:
            async with session.get(url, headers=self.headers) as response:
                if response.status >= 400:
                    raise HttpStatusError(f"HTTP {response.status}: {response.reason}")
                return await response.text(errors="replace")

    async def load(self, url: str) -> PageContent:
        """Download a page and extract it in a worker thread."""
        html = await self.get(url)
        return await asyncio.to_thread(self.extractor.extract, html)

    async def fetch(self, url: str, ctx: Optional[RequestContext] = None) -> FetchResult:
        """
        Fetch one URL and extract its content.

        Args:
            url: The URL to fetch
            ctx: Request context (deadline + cancellation token)

        Returns:
            FetchResult with content, or with an error message on failure

        Example:
            >>> result = await fetcher.fetch("https://slow.example.com")
            >>> result.error
            'Request timeout: https://slow.example.com took longer than 10 seconds to respond'
        """
        ctx = ctx or RequestContext()
        try:
            page = await ctx.guard(self.load(url), timeout=self.settings.timeout)
        except RequestCancelled:
            return FetchResult.failure(url, f"Request cancelled: {url}")
        except asyncio.TimeoutError:
            logger.warning("Timeout fetching %s", url)
            return FetchResult.failure(
                url, f"Request timeout: {url} took longer than {self.settings.timeout:g} seconds to respond"
            )
        except Exception as e:
            logger.warning("Error fetching %s: %s", url, e)
            return FetchResult.failure(url, f"Failed to fetch {url}: {str(e) or type(e).__name__}")

        return FetchResult(
            url=url,
            title=page.title or urlparse(url).hostname or url,
            content=page.content or NO_CONTENT_PLACEHOLDER,
        )

    async def fetch_all(self, urls: Sequence[str],
                        ctx: Optional[RequestContext] = None) -> List[FetchResult]:
        """
        Fetch all URLs concurrently.

        Returns:
            One FetchResult per URL, same order as `urls`
        """
        ctx = ctx or RequestContext()
        results = await asyncio.gather(*(self.fetch(u, ctx) for u in urls))
        ok = sum(1 for r in results if r.ok)
        logger.info("Fetched %d/%d pages", ok, len(results))
        return list(results)
