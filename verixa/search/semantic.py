"""
Vector store selection and semantic search for the Verixa pipeline.

This module decides, once per process, where embedded passages live:
• No Pinecone key: the bounded in-memory store only
• Pinecone key: Pinecone first, with the in-memory store as a per-call fallback
• Pinecone client fails to initialise: the in-memory store only

Example:
    ```python
    embedder = Embedder(settings.embedding, encoder)
    store = build_vector_store(settings.vector_store, embedder)
    await store.upsert(vectors, sources)
    passages = await store.search("custom software development", top_k=3)
    ```
"""
import logging
from typing import List, Mapping, Sequence

from verixa.config.settings import VectorStoreSettings
from verixa.core.implementations.memory_storage import InMemoryVectorStore
from verixa.core.interfaces.storage import EmbeddingVector, RankedPassage, VectorStore
from verixa.embedder.embedder import Embedder

logger = logging.getLogger(__name__)


class FallbackVectorStore(VectorStore):
    """
    Primary store with an in-memory fallback.

    Any error from the primary on a given call sends that call to the
    fallback instead; the next call tries the primary again.

    Attributes:
        primary: Persistent store (Pinecone)
        fallback: In-memory store
    """

    def __init__(self, primary: VectorStore, fallback: InMemoryVectorStore):
        self.primary = primary
        self.fallback = fallback

    async def upsert(self, vectors: Sequence[EmbeddingVector],
                     sources: Sequence[Mapping[str, str]]) -> None:
        try:
            await self.primary.upsert(vectors, sources)
        except Exception as e:
            logger.warning("Vector DB storage error, using in-memory store: %s", e)
            await self.fallback.upsert(vectors, sources)

    async def search(self, query: str, top_k: int = 5) -> List[RankedPassage]:
        try:
            return await self.primary.search(query, top_k)
        except Exception as e:
            logger.warning("Vector DB search error, using in-memory store: %s", e)
            return await self.fallback.search(query, top_k)

    async def size(self) -> int:
        try:
            return await self.primary.size()
        except Exception as e:
            logger.warning("Vector DB stats error, using in-memory store: %s", e)
            return await self.fallback.size()


def build_vector_store(settings: VectorStoreSettings, embedder: Embedder) -> VectorStore:
    """
    Pick the vector store backend for this process.

    Args:
        settings: Pinecone key, index name and in-memory capacity
        embedder: Shared by both backends for query embedding

    Returns:
        InMemoryVectorStore, or FallbackVectorStore(Pinecone, in-memory)
    """
    memory = InMemoryVectorStore(embedder, capacity=settings.memory_capacity)
    if not settings.pinecone_api_key:
        logger.info("PINECONE_API_KEY not set, using in-memory vector store")
        return memory

    # Imported here so the in-memory path works without touching the SDK.
    from verixa.core.implementations.pinecone_storage import PineconeVectorStore
    try:
        primary = PineconeVectorStore(settings, embedder)
    except Exception as e:
        logger.warning("Pinecone unavailable, using in-memory vector store: %s", e)
        return memory
    return FallbackVectorStore(primary, memory)


def format_passages(passages: Sequence[RankedPassage]) -> str:
    """Format ranked passages for display."""
    output = []
    for rank, p in enumerate(passages, 1):
        output.append(f"\n#{rank}  score={p.score:.3f}  {p.url}\n{p.content[:300]}…")
    return "\n".join(output)
