"""
Embedding generation for the Verixa pipeline.

This module turns passages and queries into fixed-length vectors:
• Sends texts to the embedding provider in batches of 10, one batch at a time
• Falls back to pseudo-random vectors for any batch the provider cannot serve
• Provides the cosine similarity used to rank stored passages

Degraded vectors keep the pipeline running when the provider is missing or
failing. They carry no meaning, so rankings built on them are arbitrary, but
every text still gets a vector of the right length and nothing is raised.

Example:
    ```python
    embedder = Embedder(settings.embedding, OpenAIEncoder(settings.embedding))
    vectors = await embedder.embed_batch(["passage one", "passage two"])
    query_vec = await embedder.embed_query("weather in Delhi")
    score = cosine_similarity(query_vec, vectors[0].embedding)
    ```
"""
import logging
import math
from typing import List, Optional, Sequence

import numpy as np

from verixa.config.settings import EmbeddingSettings
from verixa.core.errors import VectorLengthMismatch
from verixa.core.interfaces.encoder import Encoder
from verixa.core.interfaces.storage import EmbeddingVector

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors.

    Args:
        a: First vector
        b: Second vector

    Returns:
        dot(a, b) / (|a| * |b|), or NaN when either vector is all zeros

    Raises:
        VectorLengthMismatch: if the vectors differ in length

    Example:
        >>> cosine_similarity([1.0, 0.0], [1.0, 0.0])
        1.0
        >>> cosine_similarity([1.0, 0.0], [0.0, 0.0])
        nan
    """
    if len(a) != len(b):
        raise VectorLengthMismatch(len(a), len(b))
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm = np.linalg.norm(va) * np.linalg.norm(vb)
    if norm == 0:
        return math.nan
    return float(np.dot(va, vb) / norm)


class Embedder:
    """
    Batches texts through an Encoder with a per-batch degraded fallback.

    This class manages the process of:
    1. Splitting texts into batches of `batch_size`
    2. Encoding each batch with one provider request, sequentially
    3. Validating the reply (count and dimension)
    4. Substituting random vectors for a batch that failed validation

    Attributes:
        encoder: Embedding provider, or None when unconfigured
        dim: Vector length (1536)
        batch_size: Texts per provider request
    """

    def __init__(self, settings: Optional[EmbeddingSettings] = None,
                 encoder: Optional[Encoder] = None,
                 rng: Optional[np.random.Generator] = None):
        settings = settings or EmbeddingSettings()
        self.encoder = encoder
        self.dim = settings.dim
        self.batch_size = settings.batch_size
        self.rng = rng if rng is not None else np.random.default_rng()

    def degraded_vector(self) -> List[float]:
        """A vector of `dim` independent uniform values in [-0.5, 0.5)."""
        return (self.rng.random(self.dim) - 0.5).tolist()

    async def _encode_batch(self, batch: List[str]) -> List[List[float]]:
        if self.encoder is None:
            return [self.degraded_vector() for _ in batch]
        try:
            vectors = await self.encoder.encode(batch)
            if len(vectors) != len(batch):
                raise ValueError(f"expected {len(batch)} vectors, got {len(vectors)}")
            for vec in vectors:
                if len(vec) != self.dim:
                    raise VectorLengthMismatch(len(vec), self.dim)
            return [list(vec) for vec in vectors]
        except Exception as e:
            logger.warning("Embedding batch of %d failed, using degraded vectors: %s", len(batch), e)
            return [self.degraded_vector() for _ in batch]

    async def embed_batch(self, texts: Sequence[str]) -> List[EmbeddingVector]:
        """
        Embed texts, preserving order.

        Args:
            texts: Passages to embed

        Returns:
            One EmbeddingVector per text, in input order

        Example:
            >>> vectors = await embedder.embed_batch(["a", "b", "c"])
            >>> [v.text for v in vectors]
            ['a', 'b', 'c']
        """
        texts = list(texts)
        if self.encoder is None and texts:
            logger.warning("No embedding provider configured, using degraded vectors")

        results: List[EmbeddingVector] = []
        for start in range(0, len(texts), self.batch_size):
            batch = texts[start:start + self.batch_size]
            vectors = await self._encode_batch(batch)
            results.extend(EmbeddingVector(text=t, embedding=v) for t, v in zip(batch, vectors))
        return results

    async def embed_query(self, text: str) -> List[float]:
        """Embed a single text."""
        return (await self._encode_batch([text]))[0]

    async def close(self) -> None:
        close = getattr(self.encoder, "close", None)
        if close is not None:
            await close()
