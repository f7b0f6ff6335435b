"""
Answer generation with a multi-provider fallback chain.

The generator turns (query, context, sources) into the final answer:

1. Canned replies for greetings and stock questions (no provider called)
2. Each configured provider in order until one returns non-empty text
3. A deterministic answer built from the context when every provider fails

The whole chain runs under one global timeout. Whatever happens, the caller
gets a non-empty string; only request cancellation is raised.

Example:
    ```python
    generator = AnswerGenerator([OpenAIProvider(...), GeminiProvider(...)], global_timeout=30)
    answer = await generator.generate("weather in Delhi", context, sources, ctx)
    ```
"""
import asyncio
import logging
from typing import List, Optional, Sequence

from verixa.answer.quick_answers import quick_answer
from verixa.core.context import RequestContext
from verixa.core.interfaces.llm import AnswerProvider, ProviderAttempt
from verixa.core.interfaces.search import Source

logger = logging.getLogger(__name__)

QUOTA_MARKERS = ("quota", "exceeded", "rate limit", "429")
CREDENTIAL_MARKERS = ("invalid", "key", "401", "403")


def source_titles(sources: Sequence[Source], limit: int = 3) -> str:
    return "\n".join(f"• {s.title}" for s in list(sources)[:limit])


def exhausted_answer(query: str, context: str, sources: Sequence[Source],
                     last_error: Optional[str] = None) -> str:
    """
    Deterministic answer used when no provider produced text.

    The wording depends on the last provider error: quota/rate-limit errors
    get the high-demand message, credential errors the technical-difficulties
    message, anything else (or no error) the standard one.

    Args:
        query: The user's question
        context: The prompt context
        sources: Cited sources; up to 3 titles are listed
        last_error: Error message of the last provider tried

    Returns:
        A non-empty answer
    """
    error = (last_error or "").lower()
    if any(marker in error for marker in QUOTA_MARKERS):
        opening = "I'm currently experiencing high demand. Please try again in a few moments."
    elif any(marker in error for marker in CREDENTIAL_MARKERS):
        opening = "I'm having some technical difficulties right now."
    else:
        opening = ""

    if len(context) >= 100:
        found = f'I found relevant information about "{query}" from {len(sources)} sources:'
        body = f"{found}\n\n{context[:400]}..."
    else:
        body = (
            f'I searched for "{query}" but couldn\'t generate a detailed response right now. '
            f"However, I found {len(sources)} relevant sources that might help answer your question. "
            "Please try rephrasing your query or ask something more specific."
        )

    parts = [p for p in (opening, body) if p]
    if sources:
        parts.append(f"**Sources:**\n{source_titles(sources)}")
    return "\n\n".join(parts)


def timeout_answer(context: str, sources: Sequence[Source]) -> str:
    """Answer used when the provider chain runs out of time."""
    parts = [
        "I apologize, but I'm experiencing some technical difficulties right now. "
        "Here's what I found from the search results:",
        f"{context[:300]}...",
    ]
    if sources:
        parts.append(f"**Sources:**\n{source_titles(sources)}")
    parts.append("Please try asking your question again, or check the sources below for more information.")
    return "\n\n".join(parts)


def overloaded_answer(query: str, context: str, sources: Sequence[Source]) -> str:
    """Answer used when the caller's response deadline expires."""
    parts = [
        f'I found relevant information about "{query}" but couldn\'t generate a complete '
        "response due to high server load. Here's what I found:",
        f"{context[:500]}...",
    ]
    if sources:
        parts.append(f"**Sources:**\n{source_titles(sources)}")
    parts.append("Please try again in a moment.")
    return "\n\n".join(parts)


class AnswerGenerator:
    """
    Runs the provider chain under a global timeout.

    Attributes:
        providers: Configured providers in fallback order
        global_timeout: Budget for the whole chain in seconds
    """

    def __init__(self, providers: Sequence[AnswerProvider], global_timeout: float = 30.0):
        self.providers: List[AnswerProvider] = list(providers)
        self.global_timeout = global_timeout

    async def _run_chain(self, query: str, context: str, sources: Sequence[Source],
                         ctx: RequestContext) -> str:
        last: Optional[ProviderAttempt] = None
        for provider in self.providers:
            logger.info("Trying %s...", provider.name)
            attempt = await provider.attempt(query, context, sources, ctx)
            if attempt.ok:
                return attempt.text
            last = attempt

        logger.warning("All AI services failed (last error: %s), using fallback response",
                       last.error if last else "no providers configured")
        return exhausted_answer(query, context, sources, last.error if last else None)

    async def generate(self, query: str, context: str, sources: Sequence[Source],
                       ctx: Optional[RequestContext] = None) -> str:
        """
        Produce the final answer.

        Args:
            query: The user's question
            context: Prompt-ready context
            sources: Sources the context came from
            ctx: Request context (deadline + cancellation)

        Returns:
            A non-empty answer

        Raises:
            RequestCancelled: the request was aborted
        """
        canned = quick_answer(query)
        if canned is not None:
            logger.info("Using quick response")
            return canned

        ctx = ctx or RequestContext()
        logger.info("Generating response with %d provider(s)", len(self.providers))
        try:
            return await ctx.guard(
                self._run_chain(query, context, sources, ctx), timeout=self.global_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Response generation timed out after %.0fs", self.global_timeout)
            return timeout_answer(context, sources)

    async def close(self) -> None:
        for provider in self.providers:
            close = getattr(provider, "close", None)
            if close is not None:
                await close()
