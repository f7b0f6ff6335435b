"""
Pinecone implementation of the VectorStore interface.

Passages are upserted with metadata `{text, url, title, timestamp}` and
searched by embedding the query and asking the index for its nearest
neighbours. The Pinecone SDK is synchronous, so every call runs in a worker
thread to keep the event loop free.

Example:
    ```python
    store = PineconeVectorStore(settings.vector_store, embedder)
    await store.upsert(vectors, [{"url": r.url, "title": r.title} for r in pages])
    passages = await store.search("weather in Delhi", top_k=3)
    ```
"""
import asyncio
import logging
import uuid
from typing import List, Mapping, Sequence

from pinecone import Pinecone

from verixa.config.settings import VectorStoreSettings
from verixa.core.implementations.memory_storage import now_ms
from verixa.core.interfaces.storage import EmbeddingVector, RankedPassage, VectorStore
from verixa.embedder.embedder import Embedder

logger = logging.getLogger(__name__)


class PineconeVectorStore(VectorStore):
    """
    Vector store backed by a hosted Pinecone index.

    Attributes:
        embedder: Used to embed queries
        index_name: Name of the Pinecone index
        index: The Pinecone index handle
    """

    def __init__(self, settings: VectorStoreSettings, embedder: Embedder, index=None):
        """
        Connect to the configured index.

        Args:
            settings: API key and index name
            embedder: Used to embed search queries
            index: Pre-built index handle (skips client creation)

        Raises:
            ValueError: if no API key is configured
        """
        self.embedder = embedder
        self.index_name = settings.index_name
        if index is None:
            if not settings.pinecone_api_key:
                raise ValueError("PINECONE_API_KEY is required for the Pinecone store")
            client = Pinecone(api_key=settings.pinecone_api_key)
            index = client.Index(self.index_name)
        self.index = index
        logger.info("Using Pinecone index: %s", self.index_name)

    async def upsert(self, vectors: Sequence[EmbeddingVector],
                     sources: Sequence[Mapping[str, str]]) -> None:
        stamp = now_ms()
        records = []
        for i, vector in enumerate(vectors):
            meta = sources[i] if i < len(sources) else {}
            records.append({
                "id": uuid.uuid4().hex,
                "values": vector.embedding,
                "metadata": {
                    "text": vector.text,
                    "url": meta.get("url", ""),
                    "title": meta.get("title", ""),
                    "timestamp": stamp,
                },
            })
        if not records:
            return
        await asyncio.to_thread(self.index.upsert, vectors=records)
        logger.info("Upserted %d vectors to Pinecone", len(records))

    async def search(self, query: str, top_k: int = 5) -> List[RankedPassage]:
        query_vec = await self.embedder.embed_query(query)
        response = await asyncio.to_thread(
            self.index.query, vector=query_vec, top_k=top_k, include_metadata=True
        )
        passages = []
        for match in response.matches or []:
            meta = match.metadata or {}
            passages.append(RankedPassage(
                content=str(meta.get("text", "")),
                url=str(meta.get("url", "")),
                title=str(meta.get("title", "")),
                score=float(match.score or 0.0),
            ))
        passages.sort(key=lambda p: p.score, reverse=True)
        return passages[:top_k]

    async def size(self) -> int:
        stats = await asyncio.to_thread(self.index.describe_index_stats)
        return int(stats.total_vector_count)
