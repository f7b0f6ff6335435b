"""
Web search provider interface.

The search provider is an external collaborator: given a query it returns
candidate pages. It may return fewer than `limit` hits, and zero hits is a
valid answer that short-circuits the pipeline.
"""
from dataclasses import dataclass
from typing import List, Protocol


@dataclass(frozen=True)
class Source:
    """A cited page: title plus URL."""
    title: str
    url: str


@dataclass(frozen=True)
class SearchHit:
    """
    One web search result.

    Attributes:
        title: Result title
        url: Result URL
        snippet: Short description from the search engine
    """
    title: str
    url: str
    snippet: str = ""

    def as_source(self) -> Source:
        return Source(title=self.title, url=self.url)


class SearchProvider(Protocol):

    async def search(self, query: str, limit: int) -> List[SearchHit]:
        """
        Search the web.

        Args:
            query: The user's query
            limit: Maximum number of hits wanted

        Returns:
            Up to `limit` hits, best first
        """
        ...
