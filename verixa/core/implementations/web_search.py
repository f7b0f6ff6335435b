"""
Web search providers.

The pipeline asks a FallbackSearchProvider for hits; it tries SerpAPI, then
Google Custom Search, then returns demo results that tell the operator which
keys to configure. A provider that is not configured is skipped; one that
errors or times out hands over to the next. An empty result list from a
configured provider is a real answer and is returned as is.

Example:
    ```python
    search = build_search_provider(settings.search, session)
    hits = await search.search("weather in Delhi", limit=5)
    ```
"""
import asyncio
import logging
from typing import List, Optional, Sequence

import aiohttp

from verixa.config.settings import SearchSettings
from verixa.core.errors import ProviderError
from verixa.core.http import SessionClient
from verixa.core.interfaces.search import SearchHit, SearchProvider

logger = logging.getLogger(__name__)

SERPAPI_URL = "https://serpapi.com/search.json"
GOOGLE_CSE_URL = "https://www.googleapis.com/customsearch/v1"


class _JsonSearch(SessionClient):
    name = "search"
    url = ""

    def __init__(self, timeout: float, session: Optional[aiohttp.ClientSession] = None):
        super().__init__(session)
        self.timeout = timeout

    async def get_json(self, params: dict) -> dict:
        session = self._ensure_session()
        async with session.get(
            self.url, params=params, timeout=aiohttp.ClientTimeout(total=self.timeout)
        ) as response:
            if response.status != 200:
                body = await response.text()
                raise ProviderError(self.name, f"HTTP {response.status}: {body[:200]}", response.status)
            return await response.json()


class SerpApiSearch(_JsonSearch, SearchProvider):
    """Google results through SerpAPI."""
    name = "SerpAPI"
    url = SERPAPI_URL

    def __init__(self, api_key: str, timeout: float = 10.0,
                 session: Optional[aiohttp.ClientSession] = None):
        super().__init__(timeout, session)
        self.api_key = api_key

    async def search(self, query: str, limit: int) -> List[SearchHit]:
        data = await self.get_json({
            "engine": "google",
            "q": query,
            "num": limit,
            "hl": "en",
            "gl": "us",
            "api_key": self.api_key,
        })
        if data.get("error"):
            raise ProviderError(self.name, str(data["error"]))
        return [
            SearchHit(title=r.get("title", ""), url=r.get("link", ""), snippet=r.get("snippet", ""))
            for r in data.get("organic_results") or []
            if r.get("link")
        ][:limit]


class GoogleCustomSearch(_JsonSearch, SearchProvider):
    """Google Programmable Search Engine JSON API."""
    name = "Google Search"
    url = GOOGLE_CSE_URL

    def __init__(self, api_key: str, engine_id: str, timeout: float = 8.0,
                 session: Optional[aiohttp.ClientSession] = None):
        super().__init__(timeout, session)
        self.api_key = api_key
        self.engine_id = engine_id

    async def search(self, query: str, limit: int) -> List[SearchHit]:
        data = await self.get_json({
            "key": self.api_key,
            "cx": self.engine_id,
            "q": query,
            "num": min(limit, 10),
        })
        return [
            SearchHit(title=item.get("title", ""), url=item.get("link", ""), snippet=item.get("snippet", ""))
            for item in data.get("items") or []
            if item.get("link")
        ][:limit]


class DemoSearch(SearchProvider):
    """Placeholder hits shown when no search API is configured."""
    name = "demo"

    async def search(self, query: str, limit: int) -> List[SearchHit]:
        hits = [
            SearchHit(
                title=f'Search Results for "{query}"',
                url="https://example.com",
                snippet=(
                    f'This is a demo result for your search query: "{query}". '
                    "Please configure your API keys to get real search results."
                ),
            ),
            SearchHit(
                title="Configure API Keys",
                url="https://docs.example.com/setup",
                snippet=(
                    "To get real search results, please set SERPAPI_KEY or "
                    "GOOGLE_SEARCH_API_KEY and GOOGLE_SEARCH_ENGINE_ID."
                ),
            ),
        ]
        return hits[:limit]


class FallbackSearchProvider(SearchProvider):
    """
    Tries search providers in order.

    Attributes:
        providers: Configured providers, best first; the last one must not fail
    """

    def __init__(self, providers: Sequence[SearchProvider]):
        self.providers = list(providers)

    async def search(self, query: str, limit: int) -> List[SearchHit]:
        for provider in self.providers[:-1]:
            try:
                hits = await provider.search(query, limit)
            except asyncio.TimeoutError:
                logger.warning("%s search timed out, trying next provider", provider.name)
                continue
            except Exception as e:
                logger.warning("%s search error: %s", provider.name, e)
                continue
            logger.info("%s returned %d results", provider.name, len(hits))
            return hits
        return await self.providers[-1].search(query, limit)

    async def close(self) -> None:
        for provider in self.providers:
            if isinstance(provider, SessionClient):
                await provider.close()


def build_search_provider(settings: SearchSettings,
                          session: Optional[aiohttp.ClientSession] = None) -> FallbackSearchProvider:
    """Chain SerpAPI, Google Custom Search and demo results per configured keys."""
    providers: List[SearchProvider] = []
    if settings.serpapi_key:
        providers.append(SerpApiSearch(settings.serpapi_key, settings.serpapi_timeout, session))
    if settings.google_api_key and settings.google_engine_id:
        providers.append(GoogleCustomSearch(
            settings.google_api_key, settings.google_engine_id, settings.google_timeout, session
        ))
    if not providers:
        logger.warning("No search API configured, returning demo results")
    providers.append(DemoSearch())
    return FallbackSearchProvider(providers)
