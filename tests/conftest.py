"""Shared fakes and fixtures for the Verixa tests.

Nothing here touches the network: HTTP sessions, encoders, search providers
and language-model providers are all replaced by small in-process fakes.
"""

import asyncio
from typing import Dict, List, Optional

import pytest

from verixa.answer.generator import AnswerGenerator
from verixa.config.settings import EmbeddingSettings, PipelineSettings, SearchSettings
from verixa.core.implementations.memory_storage import InMemoryVectorStore
from verixa.core.interfaces.fetcher import FetchResult
from verixa.core.interfaces.llm import AnswerProvider
from verixa.core.interfaces.search import SearchHit
from verixa.embedder.embedder import Embedder
from verixa.pipeline.orchestrator import SearchPipeline

DIM = 4


class FakeResponse:
    """Async context manager mimicking an aiohttp response."""

    def __init__(self, status=200, body="", payload=None, reason="OK", delay=0.0, exc=None):
        self.status = status
        self.body = body
        self.payload = payload
        self.reason = reason
        self.delay = delay
        self.exc = exc

    async def __aenter__(self):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def text(self, errors="strict"):
        return self.body

    async def json(self):
        return self.payload


class FakeSession:
    """Routes GET/POST calls to canned FakeResponses by URL."""

    closed = False

    def __init__(self, routes: Dict[str, FakeResponse]):
        self.routes = routes
        self.calls: List[tuple] = []

    def get(self, url, **kwargs):
        self.calls.append(("GET", url, kwargs))
        return self.routes[url]

    def post(self, url, **kwargs):
        self.calls.append(("POST", url, kwargs))
        return self.routes[url]


class RecordingEncoder:
    """Encoder returning fixed vectors; records batch sizes and concurrency."""

    def __init__(self, dim=DIM, vectors: Optional[Dict[str, List[float]]] = None,
                 fail_on_calls=(), delay=0.0):
        self.dim = dim
        self.vectors = vectors or {}
        self.fail_on_calls = set(fail_on_calls)
        self.delay = delay
        self.batches: List[List[str]] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def encode(self, texts):
        self.batches.append(list(texts))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if len(self.batches) in self.fail_on_calls:
                raise RuntimeError("embedding provider unavailable")
            return [self.vectors.get(t, [1.0] * self.dim) for t in texts]
        finally:
            self.in_flight -= 1


class FakeSearch:
    name = "fake"

    def __init__(self, hits: List[SearchHit], exc: Exception = None):
        self.hits = hits
        self.exc = exc
        self.calls = 0

    async def search(self, query, limit):
        self.calls += 1
        if self.exc is not None:
            raise self.exc
        return self.hits[:limit]


class FakeFetcher:
    def __init__(self, pages: Dict[str, FetchResult], after_fetch=None):
        self.pages = pages
        self.after_fetch = after_fetch
        self.calls = 0

    async def fetch(self, url, ctx=None):
        return self.pages.get(url) or FetchResult.failure(url, f"Failed to fetch {url}: not found")

    async def fetch_all(self, urls, ctx=None):
        self.calls += 1
        results = [await self.fetch(u, ctx) for u in urls]
        if self.after_fetch is not None:
            self.after_fetch()
        return results


class FakeProvider(AnswerProvider):
    """Provider whose outcome is scripted: text, exception or a slow call."""

    def __init__(self, name="fake", text=None, exc=None, delay=0.0, timeout=1.0):
        self.name = name
        self.text = text
        self.exc = exc
        self.delay = delay
        self.timeout = timeout
        self.calls = 0
        self.cancelled = False

    async def complete(self, query, context, sources, weather):
        self.calls += 1
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        if self.exc is not None:
            raise self.exc
        return self.text


LONG_CONTENT = (
    "Retrieval augmented generation combines a search step with a language model. "
    "The model answers using passages fetched from the web and cites them."
)


@pytest.fixture
def hits():
    return [
        SearchHit(title="RAG Explained", url="https://a.example/rag", snippet="..."),
        SearchHit(title="Search Basics", url="https://b.example/search", snippet="..."),
    ]


@pytest.fixture
def pages(hits):
    return {
        hit.url: FetchResult(url=hit.url, title=hit.title, content=LONG_CONTENT)
        for hit in hits
    }


@pytest.fixture
def encoder():
    return RecordingEncoder()


@pytest.fixture
def embedder(encoder):
    return Embedder(EmbeddingSettings(dim=DIM), encoder)


def make_pipeline(search, fetcher, embedder, providers, **pipeline_settings):
    return SearchPipeline(
        search_provider=search,
        fetcher=fetcher,
        embedder=embedder,
        store=InMemoryVectorStore(embedder),
        generator=AnswerGenerator(providers, global_timeout=5.0),
        settings=PipelineSettings(**pipeline_settings),
        search_settings=SearchSettings(),
    )
