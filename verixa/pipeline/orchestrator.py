"""
End-to-end query pipeline.

Sequences web search, fetching, embedding, vector storage, context
optimization and answer generation for one query. The pipeline checks the
request's cancellation token before every stage, so a client that goes away
never causes embedding or generation work, and it turns every outcome into a
PipelineResult instead of raising.

Example:
    ```python
    pipeline = build_pipeline(settings, session)
    result = await pipeline.run("weather in Delhi", max_results=5)
    print(result.status, result.response)
    for source in result.sources:
        print(source.title, source.url)
    ```
"""
import asyncio
import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional

from verixa.answer.generator import AnswerGenerator, overloaded_answer
from verixa.answer.quick_answers import quick_answer
from verixa.config.settings import PipelineSettings, SearchSettings
from verixa.core.context import RequestContext
from verixa.core.errors import InvalidQueryError, RequestCancelled
from verixa.core.interfaces.fetcher import Fetcher, FetchResult
from verixa.core.interfaces.search import SearchProvider, Source
from verixa.core.interfaces.storage import RankedPassage, VectorStore
from verixa.embedder.embedder import Embedder
from verixa.search.optimizer import ContextOptimizer

logger = logging.getLogger(__name__)

NO_RESULTS_MESSAGE = (
    "I couldn't find any relevant information for your query. "
    "Please try rephrasing your question."
)
NO_CONTENT_MESSAGE = (
    "I found some relevant sources but couldn't access their content. "
    "Please try a different query."
)
CANCELLED_MESSAGE = "Request was cancelled"
INTERNAL_ERROR_MESSAGE = "Internal server error"


@dataclass
class PipelineResult:
    """
    Outcome of one query.

    Attributes:
        status: "ok", "cancelled" or "error"
        response: The answer text (empty unless status is "ok")
        sources: Search hits the answer is based on
        error: Error message for "cancelled" and "error"
        passages: Ranked passages used to build the context
    """
    status: str
    response: str = ""
    sources: List[Source] = field(default_factory=list)
    error: Optional[str] = None
    passages: List[RankedPassage] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == "ok"


class SearchPipeline:
    """
    Runs a query through every stage of the pipeline.

    Attributes:
        search_provider: Web search
        fetcher: Page fetcher and extractor
        embedder: Passage embedder
        store: Vector store (process-wide)
        generator: LLM fallback chain
        optimizer: Builds the prompt context from ranked passages
    """

    def __init__(self, search_provider: SearchProvider, fetcher: Fetcher, embedder: Embedder,
                 store: VectorStore, generator: AnswerGenerator,
                 settings: Optional[PipelineSettings] = None,
                 search_settings: Optional[SearchSettings] = None):
        self.search_provider = search_provider
        self.fetcher = fetcher
        self.embedder = embedder
        self.store = store
        self.generator = generator
        self.settings = settings or PipelineSettings()
        self.search_settings = search_settings or SearchSettings()
        self.optimizer = ContextOptimizer(self.settings.min_passage_chars)

    async def run(self, query: str, max_results: int = 5,
                  cancel_event: Optional[asyncio.Event] = None) -> PipelineResult:
        """
        Answer one query.

        Args:
            query: The user's question
            max_results: Number of search hits to use (clamped to 1..10)
            cancel_event: Set by the caller to abort the request

        Returns:
            PipelineResult with status "ok", "cancelled" or "error"

        Raises:
            InvalidQueryError: if the query is empty or blank
        """
        if not query or not query.strip():
            raise InvalidQueryError("Query is required")
        query = query.strip()

        canned = quick_answer(query)
        if canned is not None:
            return PipelineResult(status="ok", response=canned)

        ctx = RequestContext(self.settings.request_timeout, cancel_event)
        try:
            return await self._run(query, max(1, min(int(max_results), 10)), ctx)
        except RequestCancelled:
            logger.info("Request cancelled: %s", query[:50])
            return PipelineResult(status="cancelled", error=CANCELLED_MESSAGE)
        except Exception:
            logger.exception("Search API error for query: %s", query[:50])
            return PipelineResult(status="error", error=INTERNAL_ERROR_MESSAGE)

    async def _run(self, query: str, max_results: int, ctx: RequestContext) -> PipelineResult:
        ctx.check()
        logger.info("🔍 Searching web for: %s", query)
        try:
            hits = await ctx.guard(self.search_provider.search(query, max_results))
        except asyncio.TimeoutError:
            logger.warning("Request deadline reached during web search")
            hits = []
        if not hits:
            return PipelineResult(status="ok", response=NO_RESULTS_MESSAGE)
        sources = [hit.as_source() for hit in hits]

        ctx.check()
        logger.info("🕷️ Fetching %d pages", len(hits))
        pages = await self.fetcher.fetch_all([hit.url for hit in hits], ctx)
        # Fetch failures caused by cancellation look like ordinary per-URL errors.
        ctx.check()
        valid = [page for page in pages if page.ok and page.content]
        if not valid:
            return PipelineResult(status="ok", response=NO_CONTENT_MESSAGE, sources=sources)

        logger.info("🧠 Embedding %d pages", len(valid))
        try:
            passages = await self._retrieve(query, valid, ctx)
        except asyncio.TimeoutError:
            logger.warning("Request deadline reached while ranking passages, answering from fetched pages")
            passages = [
                RankedPassage(content=p.content, url=p.url, title=p.title, score=math.nan)
                for p in valid[:self.search_settings.top_k]
            ]
            kept = self.optimizer.select(passages)
            context = self.optimizer.build_context(kept, query)
            response = overloaded_answer(query, context, [Source(title=p.title, url=p.url) for p in kept] or sources)
            return PipelineResult(status="ok", response=response, sources=sources, passages=passages)

        kept = self.optimizer.select(passages)
        context = self.optimizer.build_context(kept, query)
        cited = [Source(title=p.title, url=p.url) for p in kept] or sources

        ctx.check()
        logger.info("✍️ Generating answer from %d passages", len(kept))
        try:
            response = await ctx.guard(
                self.generator.generate(query, context, cited, ctx),
                timeout=self.settings.generation_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Response generation timed out after %.0fs", self.settings.generation_timeout)
            response = overloaded_answer(query, context, cited)

        return PipelineResult(status="ok", response=response, sources=sources, passages=passages)

    async def _retrieve(self, query: str, pages: List[FetchResult],
                        ctx: RequestContext) -> List[RankedPassage]:
        """Embed and store the pages, then rank stored passages against the query."""
        vectors = await ctx.guard(self.embedder.embed_batch([page.content for page in pages]))
        await ctx.guard(self.store.upsert(vectors, [{"url": p.url, "title": p.title} for p in pages]))
        return await ctx.guard(self.store.search(query, self.search_settings.top_k))

    async def close(self) -> None:
        """Release provider clients held by the generator and the embedder."""
        await self.generator.close()
        await self.embedder.close()
