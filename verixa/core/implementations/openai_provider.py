"""
OpenAI chat-completions answer provider.

First in the fallback chain. Sends a system message (weather or general
template) and a user message carrying the context, question and sources.
"""
from typing import Optional, Sequence

import openai
from openai import AsyncOpenAI

from verixa.answer.prompts import chat_messages
from verixa.config.settings import ProviderSettings
from verixa.core.errors import ProviderError
from verixa.core.interfaces.llm import AnswerProvider
from verixa.core.interfaces.search import Source


class OpenAIProvider(AnswerProvider):
    """
    Answer provider backed by OpenAI chat completions.

    Attributes:
        settings: API key, model, timeout, max_tokens and temperature
        client: openai AsyncOpenAI client
    """
    name = "OpenAI"

    def __init__(self, settings: ProviderSettings, client: Optional[AsyncOpenAI] = None):
        self.settings = settings
        self.timeout = settings.timeout
        self.client = client or AsyncOpenAI(
            api_key=settings.api_key, timeout=settings.timeout, max_retries=0
        )

    async def complete(self, query: str, context: str, sources: Sequence[Source],
                       weather: bool) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.settings.model,
                messages=chat_messages(query, context, sources, weather),
                max_tokens=self.settings.max_tokens,
                temperature=self.settings.temperature,
            )
        except openai.APIStatusError as e:
            raise ProviderError(self.name, f"HTTP {e.status_code}: {e.message}", e.status_code) from e

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def close(self) -> None:
        await self.client.close()
