"""
Hugging Face text-generation answer provider.

Last in the fallback chain: a small hosted model with a bare
Context/Question/Answer prompt, called through huggingface_hub's async
inference client.
"""
from typing import Sequence

from huggingface_hub import AsyncInferenceClient

from verixa.answer.prompts import plain_prompt
from verixa.config.settings import ProviderSettings
from verixa.core.interfaces.llm import AnswerProvider
from verixa.core.interfaces.search import Source


class HuggingFaceProvider(AnswerProvider):
    """
    Answer provider backed by the Hugging Face Inference API.

    Attributes:
        settings: Token, model, timeout, max_tokens and temperature
        client: huggingface_hub AsyncInferenceClient
    """
    name = "Hugging Face"

    def __init__(self, settings: ProviderSettings, client: AsyncInferenceClient = None):
        self.settings = settings
        self.timeout = settings.timeout
        self.client = client or AsyncInferenceClient(model=settings.model, token=settings.api_key)

    async def complete(self, query: str, context: str, sources: Sequence[Source],
                       weather: bool) -> str:
        return await self.client.text_generation(
            plain_prompt(query, context),
            max_new_tokens=self.settings.max_tokens,
            temperature=self.settings.temperature,
            do_sample=True,
            return_full_text=False,
        )

    async def close(self) -> None:
        await self.client.close()
