"""
Vector storage interface for the Verixa pipeline.

This module defines the interface for storing embedded passages and running
top-K semantic search over them, together with the record types involved.
Two backends implement it (a Pinecone index and a bounded in-memory list)
behind one identical contract.

Example:
    ```python
    store = InMemoryVectorStore(embedder)
    await store.upsert(vectors, [{"url": r.url, "title": r.title} for r in pages])
    passages = await store.search("weather in Delhi", top_k=3)
    ```
"""
from dataclasses import dataclass, field
from typing import List, Mapping, Protocol, Sequence


@dataclass
class EmbeddingVector:
    """
    A text and its embedding.

    Attributes:
        text: The embedded text
        embedding: The vector (1536 floats for the default provider)
    """
    text: str
    embedding: List[float] = field(repr=False)


@dataclass(frozen=True)
class StoredDocument:
    """
    One stored passage, owned by the vector store.

    Attributes:
        id: Unique id assigned at upsert time
        embedding: The embedded text and its vector
        url: Source page URL
        title: Source page title
        stored_at_ms: Epoch milliseconds at upsert time
    """
    id: str
    embedding: EmbeddingVector
    url: str
    title: str
    stored_at_ms: int


@dataclass(frozen=True)
class RankedPassage:
    """
    A search hit from the vector store.

    Attributes:
        content: Passage text
        url: Source page URL
        title: Source page title
        score: Cosine similarity to the query, in [-1, 1] (NaN ranks last)
    """
    content: str
    url: str
    title: str
    score: float


class VectorStore(Protocol):
    """
    Interface for storing passages and searching them by similarity.
    """

    async def upsert(self, vectors: Sequence[EmbeddingVector],
                     sources: Sequence[Mapping[str, str]]) -> None:
        """
        Store one document per (vector, source) pair at the same index.

        Args:
            vectors: Embedded passages
            sources: Parallel sequence of {"url": ..., "title": ...}
        """
        ...

    async def search(self, query: str, top_k: int = 5) -> List[RankedPassage]:
        """
        Return at most `top_k` passages, best first.
        """
        ...

    async def size(self) -> int:
        """Number of stored documents."""
        ...
