"""
Encoder interface for the Verixa pipeline.

This module defines the interface for the external embedding provider. It
provides a protocol for implementing different providers (e.g., OpenAI, a
self-hosted model) while keeping a consistent, batch-oriented interface.

Encoders fail wholesale: a provider error raises for the whole batch. The
degraded-mode fallback lives in `verixa.embedder.embedder.Embedder`, not in
the encoder.

Example:
    ```python
    class ConstantEncoder(Encoder):
        dim = 1536

        async def encode(self, texts: List[str]) -> List[List[float]]:
            return [[0.1] * self.dim for _ in texts]
    ```
"""
from typing import List, Protocol


class Encoder(Protocol):
    """
    Interface for encoding text into vectors.

    Attributes:
        dim: The dimensionality of the output vectors
    """
    dim: int  # vector length

    async def encode(self, texts: List[str]) -> List[List[float]]:
        """
        Encode texts into vectors.

        Args:
            texts: List of texts to encode (one provider request)

        Returns:
            List of vectors, one per text, in input order

        Raises:
            Exception: any provider failure, for the batch as a whole
        """
        ...
