"""
Shared aiohttp session handling.

Every component that talks HTTP (fetcher, embedding encoder, LLM providers,
web search) either borrows a session owned by the application or lazily opens
its own, and closes only what it opened.

Example:
    ```python
    async with aiohttp.ClientSession() as session:
        fetcher = AiohttpFetcher(settings.fetch, session=session)
        encoder = OpenAIEncoder(settings.embedding, session=session)
    ```
"""
from typing import Optional

import aiohttp


class SessionClient:
    """
    Mixin that owns or borrows an aiohttp.ClientSession.

    Attributes:
        session: The session in use (None until first request if not borrowed)
    """

    def __init__(self, session: Optional[aiohttp.ClientSession] = None):
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self):
        self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession()
            self._owns_session = True
        return self.session

    async def close(self) -> None:
        """Close the session if this object opened it."""
        if self._owns_session and self.session is not None:
            await self.session.close()
            self.session = None
