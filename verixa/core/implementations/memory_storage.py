"""
Bounded in-memory implementation of the VectorStore interface.

Documents live in a plain list for the lifetime of the process. When an upsert
pushes the list past its capacity (1000 by default) only the newest documents
are kept, ordered by (stored_at_ms, insertion order). Search is a full scan
with cosine similarity, which is fine at this size.

Example:
    ```python
    store = InMemoryVectorStore(embedder, capacity=1000)
    await store.upsert(vectors, [{"url": "https://a.example", "title": "A"}])
    print(await store.size())  # 1
    ```
"""
import itertools
import logging
import math
import threading
import time
import uuid
from typing import List, Mapping, Sequence, Tuple

from verixa.core.interfaces.storage import (
    EmbeddingVector,
    RankedPassage,
    StoredDocument,
    VectorStore,
)
from verixa.embedder.embedder import Embedder, cosine_similarity

logger = logging.getLogger(__name__)


def now_ms() -> int:
    return int(time.time() * 1000)


class InMemoryVectorStore(VectorStore):
    """
    Append-only document list with capacity-based eviction.

    Every upsert runs as one critical section under `_lock`: append, then
    evict. Readers take the same lock to copy the list, so a search never
    observes a half-applied upsert.

    Attributes:
        embedder: Used to embed queries
        capacity: Maximum number of documents kept
    """

    def __init__(self, embedder: Embedder, capacity: int = 1000):
        self.embedder = embedder
        self.capacity = capacity
        self._docs: List[Tuple[int, StoredDocument]] = []
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def add(self, vectors: Sequence[EmbeddingVector],
            sources: Sequence[Mapping[str, str]]) -> List[StoredDocument]:
        """Synchronous upsert; returns the documents that were stored."""
        stamp = now_ms()
        with self._lock:
            added = []
            for i, vector in enumerate(vectors):
                meta = sources[i] if i < len(sources) else {}
                doc = StoredDocument(
                    id=uuid.uuid4().hex,
                    embedding=vector,
                    url=meta.get("url", ""),
                    title=meta.get("title", ""),
                    stored_at_ms=stamp,
                )
                self._docs.append((next(self._counter), doc))
                added.append(doc)

            overflow = len(self._docs) - self.capacity
            if overflow > 0:
                self._docs.sort(key=lambda entry: (entry[1].stored_at_ms, entry[0]))
                del self._docs[:overflow]
                logger.info("Evicted %d oldest documents from memory store", overflow)
        return added

    def snapshot(self) -> List[StoredDocument]:
        with self._lock:
            return [doc for _, doc in self._docs]

    async def upsert(self, vectors: Sequence[EmbeddingVector],
                     sources: Sequence[Mapping[str, str]]) -> None:
        added = self.add(vectors, sources)
        logger.info("Stored %d documents in memory (total %d)", len(added), await self.size())

    def rank(self, query_vec: Sequence[float], top_k: int) -> List[RankedPassage]:
        """
        Score every stored document against a query vector.

        NaN scores sort after every real score; equal scores keep storage order.
        """
        scored = []
        for doc in self.snapshot():
            try:
                score = cosine_similarity(query_vec, doc.embedding.embedding)
            except ValueError as e:
                logger.warning("Skipping document %s: %s", doc.id, e)
                continue
            scored.append(RankedPassage(
                content=doc.embedding.text,
                url=doc.url,
                title=doc.title,
                score=score,
            ))
        scored.sort(key=lambda p: (math.isnan(p.score), -p.score if not math.isnan(p.score) else 0.0))
        return scored[:max(0, top_k)]

    async def search(self, query: str, top_k: int = 5) -> List[RankedPassage]:
        query_vec = await self.embedder.embed_query(query)
        return self.rank(query_vec, top_k)

    async def size(self) -> int:
        with self._lock:
            return len(self._docs)
