"""
Google Gemini answer provider.

Second in the fallback chain. Gemini gets one combined prompt (instructions,
question and context in a single user turn) plus the generation config and
safety settings, sent through the google-genai async client.
"""
from typing import Optional, Sequence

from google import genai
from google.genai import errors, types

from verixa.answer.prompts import combined_prompt
from verixa.config.settings import ProviderSettings
from verixa.core.errors import ProviderError
from verixa.core.interfaces.llm import AnswerProvider
from verixa.core.interfaces.search import Source

HARM_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)


class GeminiProvider(AnswerProvider):
    """Answer provider backed by the Gemini API."""
    name = "Gemini"

    def __init__(self, settings: ProviderSettings, client: Optional[genai.Client] = None):
        self.settings = settings
        self.timeout = settings.timeout
        self.client = client or genai.Client(api_key=settings.api_key)

    def build_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            temperature=self.settings.temperature,
            top_k=40,
            top_p=0.95,
            max_output_tokens=self.settings.max_tokens,
            safety_settings=[
                types.SafetySetting(category=category, threshold="BLOCK_MEDIUM_AND_ABOVE")
                for category in HARM_CATEGORIES
            ],
        )

    async def complete(self, query: str, context: str, sources: Sequence[Source],
                       weather: bool) -> str:
        try:
            response = await self.client.aio.models.generate_content(
                model=self.settings.model,
                contents=combined_prompt(query, context, weather),
                config=self.build_config(),
            )
        except errors.APIError as e:
            raise ProviderError(self.name, f"HTTP {e.code}: {e.message}", e.code) from e
        # `text` is None when the reply has no candidates (e.g. blocked by safety filters).
        return response.text or ""
