"""
Wiring for the query pipeline.

Builds every component from one Settings object. Fetching and web search
share one aiohttp session; the language-model and embedding providers use
their SDK clients. Providers without credentials are left out of the answer chain; an
unconfigured embedding provider puts the embedder in degraded mode.
"""
import logging
from typing import List, Optional

import aiohttp

from verixa.answer.generator import AnswerGenerator
from verixa.config.settings import LLMSettings, Settings
from verixa.core.implementations.aiohttp_fetcher import AiohttpFetcher
from verixa.core.implementations.gemini_provider import GeminiProvider
from verixa.core.implementations.huggingface_provider import HuggingFaceProvider
from verixa.core.implementations.openai_encoder import OpenAIEncoder
from verixa.core.implementations.openai_provider import OpenAIProvider
from verixa.core.implementations.web_search import build_search_provider
from verixa.core.interfaces.llm import AnswerProvider
from verixa.core.interfaces.storage import VectorStore
from verixa.embedder.embedder import Embedder
from verixa.pipeline.orchestrator import SearchPipeline
from verixa.search.semantic import build_vector_store

logger = logging.getLogger(__name__)


def build_providers(settings: LLMSettings) -> List[AnswerProvider]:
    """Configured providers in fallback order: OpenAI, Gemini, Hugging Face."""
    providers: List[AnswerProvider] = []
    if settings.openai.api_key:
        providers.append(OpenAIProvider(settings.openai))
    if settings.gemini.api_key:
        providers.append(GeminiProvider(settings.gemini))
    if settings.huggingface.api_key:
        providers.append(HuggingFaceProvider(settings.huggingface))
    logger.info("Available AI services: %s", [p.name for p in providers] or "none")
    return providers


def build_embedder(settings: Settings) -> Embedder:
    encoder = OpenAIEncoder(settings.embedding) if settings.embedding.api_key else None
    return Embedder(settings.embedding, encoder)


def build_pipeline(settings: Settings, session: Optional[aiohttp.ClientSession] = None,
                   store: Optional[VectorStore] = None) -> SearchPipeline:
    """
    Assemble a SearchPipeline.

    Args:
        settings: Loaded settings (timeouts are checked here)
        session: Shared HTTP session; components open their own when None
        store: Existing vector store to reuse (built from settings when None)

    Returns:
        A ready-to-run SearchPipeline
    """
    settings.check_timeouts()
    embedder = build_embedder(settings)
    return SearchPipeline(
        search_provider=build_search_provider(settings.search, session),
        fetcher=AiohttpFetcher(settings.fetch, session),
        embedder=embedder,
        store=store if store is not None else build_vector_store(settings.vector_store, embedder),
        generator=AnswerGenerator(build_providers(settings.llm), settings.llm.global_timeout),
        settings=settings.pipeline,
        search_settings=settings.search,
    )
