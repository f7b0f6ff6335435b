"""
Interface for fetching result pages.

This module defines the interface for fetching the pages a web search points
at. It provides a protocol for implementing different fetching strategies
(e.g., aiohttp, a recorded fixture, a scraping service) and the immutable
result type every strategy returns.

Example:
    ```python
    class MyFetcher(Fetcher):
        async def fetch(self, url: str, ctx=None) -> FetchResult:
            return FetchResult(url=url, title="Example", content="Main text...")

        async def fetch_all(self, urls, ctx=None):
            return [await self.fetch(u, ctx) for u in urls]
    ```
"""
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from verixa.core.context import RequestContext

NO_CONTENT_PLACEHOLDER = "No content extracted"


@dataclass(frozen=True)
class FetchResult:
    """
    Result of fetching and extracting one URL.

    Exactly one of `content` and `error` is meaningful: a failed fetch has an
    error message and empty title/content, a successful one has content
    (possibly the "No content extracted" placeholder) and no error.

    Attributes:
        url: The URL that was fetched
        title: Page title, or the URL's host name when the page has none
        content: Cleaned main text of the page
        error: Error message if the fetch failed (optional)

    Example:
        >>> FetchResult(url="https://example.com", title="Example", content="Hello").ok
        True
        >>> FetchResult.failure("https://example.com", "Request timeout").ok
        False
    """
    url: str
    title: str
    content: str
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.error

    @classmethod
    def failure(cls, url: str, error: str) -> "FetchResult":
        return cls(url=url, title="", content="", error=error)


class Fetcher(Protocol):
    """
    Protocol for fetching result pages.

    Implementations must never raise for a single bad URL: failures are
    reported as `FetchResult.failure(...)` so that one broken page cannot
    abort the others.
    """

    async def fetch(self, url: str, ctx: Optional[RequestContext] = None) -> FetchResult:
        """
        Fetch one URL and extract its title and main content.

        Args:
            url: The URL to fetch
            ctx: Request context carrying the deadline and cancellation token

        Returns:
            FetchResult with either content or an error message
        """
        ...

    async def fetch_all(self, urls: Sequence[str],
                        ctx: Optional[RequestContext] = None) -> List[FetchResult]:
        """
        Fetch many URLs concurrently.

        Returns:
            One FetchResult per input URL, in input order
        """
        ...
