"""
OpenAI embeddings implementation of the Encoder interface.

Sends one `embeddings.create` request per call through the official async
client and returns the vectors in input order. Any API error raises;
batching and the degraded fallback are the Embedder's job.

Example:
    ```python
    encoder = OpenAIEncoder(settings.embedding)
    vectors = await encoder.encode(["first passage", "second passage"])
    print(len(vectors), len(vectors[0]))  # 2 1536
    await encoder.close()
    ```
"""
from typing import List, Optional

import openai
from openai import AsyncOpenAI

from verixa.config.settings import EmbeddingSettings
from verixa.core.errors import ProviderError
from verixa.core.interfaces.encoder import Encoder


class OpenAIEncoder(Encoder):
    """
    Encoder backed by the OpenAI embeddings endpoint.

    Attributes:
        settings: API key, model, endpoint and timeout
        dim: Expected vector length
        client: openai AsyncOpenAI client
    """

    def __init__(self, settings: EmbeddingSettings, client: Optional[AsyncOpenAI] = None):
        if client is None and not settings.api_key:
            raise ProviderError("openai", "OPENAI_API_KEY is not configured")
        self.settings = settings
        self.dim = settings.dim
        # Retries are left to the caller; a failed batch degrades instead.
        self.client = client or AsyncOpenAI(
            api_key=settings.api_key,
            base_url=settings.base_url,
            timeout=settings.timeout,
            max_retries=0,
        )

    async def encode(self, texts: List[str]) -> List[List[float]]:
        if not texts:
            return []
        try:
            response = await self.client.embeddings.create(model=self.settings.model, input=list(texts))
        except openai.APIStatusError as e:
            raise ProviderError("openai", f"HTTP {e.status_code}: {e.message}", e.status_code) from e

        # The API may return items out of order; "index" is authoritative.
        items = sorted(response.data, key=lambda item: item.index)
        return [list(item.embedding) for item in items]

    async def close(self) -> None:
        await self.client.close()
