"""
Language-model provider interface.

Each provider in the answer chain exposes the same `attempt()` operation and
reports success or failure as a value, so the answer generator can walk an
ordered list of providers instead of nesting try/except blocks.

Example:
    ```python
    class EchoProvider(AnswerProvider):
        name = "echo"
        timeout = 1.0

        async def complete(self, query, context, sources, weather):
            return f"You asked: {query}"
    ```
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from verixa.core.context import RequestContext
from verixa.core.errors import RequestCancelled
from verixa.core.interfaces.search import Source
from verixa.core.weather import is_weather_prompt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderAttempt:
    """
    Outcome of one provider attempt.

    Attributes:
        provider: Provider name
        text: Accepted answer text (None on failure)
        error: Why the attempt failed (None on success)
    """
    provider: str
    text: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.text is not None


class AnswerProvider:
    """
    Base class for a language-model provider in the fallback chain.

    Subclasses implement `complete()`; `attempt()` adds the timeout, the
    empty-response check and the conversion of errors into a failed attempt.

    Attributes:
        name: Provider name used in logs
        timeout: The provider's own time budget in seconds
    """
    name = "provider"
    timeout = 10.0

    async def complete(self, query: str, context: str, sources: Sequence[Source],
                       weather: bool) -> str:
        raise NotImplementedError

    async def attempt(self, query: str, context: str, sources: Sequence[Source],
                      ctx: RequestContext) -> ProviderAttempt:
        """
        Ask this provider for an answer.

        Args:
            query: The user's question
            context: Prompt-ready context assembled from ranked passages
            sources: Sources the context came from
            ctx: Request context (deadline + cancellation)

        Returns:
            ProviderAttempt carrying the text, or the failure reason

        Raises:
            RequestCancelled: the request was aborted mid-call
        """
        weather = is_weather_prompt(query)
        try:
            text = await ctx.guard(
                self.complete(query, context, sources, weather), timeout=self.timeout
            )
        except RequestCancelled:
            raise
        except asyncio.TimeoutError:
            logger.warning("%s timed out after %.0fs", self.name, self.timeout)
            return ProviderAttempt(self.name, error=f"{self.name} API timeout")
        except Exception as e:
            logger.warning("%s API error: %s", self.name, e)
            return ProviderAttempt(self.name, error=str(e) or type(e).__name__)

        if not text or not text.strip():
            logger.warning("%s returned an empty response", self.name)
            return ProviderAttempt(self.name, error=f"{self.name} returned an empty response")

        logger.info("%s response generated successfully", self.name)
        return ProviderAttempt(self.name, text=text)
