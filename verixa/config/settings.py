"""
Central configuration for the Verixa answer pipeline.

Settings are read from the environment exactly once, at process start
(`Settings.from_env()` in the CLI and in the API lifespan), and each
component receives its own section through its constructor. Nothing below
the entry points reads `os.environ` directly.

Example:
    ```python
    settings = Settings.from_env()
    settings.check_timeouts()
    fetcher = AiohttpFetcher(settings.fetch)
    ```
"""
import os
from dataclasses import dataclass, field
from typing import Mapping, Optional


def _env(environ: Mapping[str, str], name: str, default: Optional[str] = None) -> Optional[str]:
    value = environ.get(name)
    if value is None or not value.strip():
        return default
    return value.strip()


# Fetcher configuration
@dataclass(frozen=True)
class FetchSettings:
    timeout: float = 10.0
    max_content_chars: int = 3_000
    min_content_chars: int = 100
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    )


# Embedding configuration
@dataclass(frozen=True)
class EmbeddingSettings:
    api_key: Optional[str] = None
    model: str = "text-embedding-ada-002"
    base_url: str = "https://api.openai.com/v1"
    dim: int = 1536
    batch_size: int = 10
    timeout: float = 15.0


# Vector store configuration
@dataclass(frozen=True)
class VectorStoreSettings:
    pinecone_api_key: Optional[str] = None
    index_name: str = "verixa-ai"
    memory_capacity: int = 1_000


@dataclass(frozen=True)
class ProviderSettings:
    """One language-model provider; `api_key=None` means not configured."""
    name: str
    api_key: Optional[str]
    model: str
    timeout: float
    max_tokens: int = 1500
    temperature: float = 0.3


# Language model configuration, providers in fallback order
@dataclass(frozen=True)
class LLMSettings:
    openai: ProviderSettings = field(
        default_factory=lambda: ProviderSettings("openai", None, "gpt-4o-mini", 15.0)
    )
    gemini: ProviderSettings = field(
        default_factory=lambda: ProviderSettings(
            "gemini", None, "gemini-1.5-flash", 12.0, max_tokens=2048, temperature=0.7
        )
    )
    huggingface: ProviderSettings = field(
        default_factory=lambda: ProviderSettings(
            "huggingface", None, "microsoft/DialoGPT-small", 10.0, max_tokens=100, temperature=0.5
        )
    )
    global_timeout: float = 30.0

    @property
    def providers(self) -> tuple:
        return (self.openai, self.gemini, self.huggingface)


# Web search configuration
@dataclass(frozen=True)
class SearchSettings:
    serpapi_key: Optional[str] = None
    google_api_key: Optional[str] = None
    google_engine_id: Optional[str] = None
    serpapi_timeout: float = 10.0
    google_timeout: float = 8.0
    max_results: int = 5
    top_k: int = 3


# Orchestrator configuration
@dataclass(frozen=True)
class PipelineSettings:
    request_timeout: float = 45.0
    generation_timeout: float = 40.0
    min_passage_chars: int = 50
    max_urls: int = 10
    max_texts: int = 50


@dataclass(frozen=True)
class Settings:
    fetch: FetchSettings = field(default_factory=FetchSettings)
    embedding: EmbeddingSettings = field(default_factory=EmbeddingSettings)
    vector_store: VectorStoreSettings = field(default_factory=VectorStoreSettings)
    llm: LLMSettings = field(default_factory=LLMSettings)
    search: SearchSettings = field(default_factory=SearchSettings)
    pipeline: PipelineSettings = field(default_factory=PipelineSettings)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            A fully populated, immutable Settings object

        Example:
            >>> Settings.from_env({"OPENAI_API_KEY": "sk-test"}).embedding.api_key
            'sk-test'
        """
        env = os.environ if environ is None else environ
        openai_key = _env(env, "OPENAI_API_KEY")

        llm = LLMSettings(
            openai=ProviderSettings(
                "openai",
                openai_key,
                _env(env, "CHAT_MODEL", "gpt-4o-mini"),
                15.0,
                max_tokens=int(_env(env, "MAX_TOKENS", "1500")),
                temperature=float(_env(env, "TEMPERATURE", "0.3")),
            ),
            gemini=ProviderSettings(
                "gemini",
                _env(env, "GEMINI_API_KEY"),
                _env(env, "GEMINI_MODEL", "gemini-1.5-flash"),
                12.0,
                max_tokens=2048,
                temperature=0.7,
            ),
            huggingface=ProviderSettings(
                "huggingface",
                _env(env, "HUGGINGFACE_API_TOKEN"),
                _env(env, "HUGGINGFACE_MODEL", "microsoft/DialoGPT-small"),
                10.0,
                max_tokens=100,
                temperature=0.5,
            ),
            global_timeout=float(_env(env, "GENERATION_TIMEOUT", "30")),
        )

        return cls(
            fetch=FetchSettings(timeout=float(_env(env, "FETCH_TIMEOUT", "10"))),
            embedding=EmbeddingSettings(
                api_key=openai_key,
                model=_env(env, "EMBEDDING_MODEL", "text-embedding-ada-002"),
            ),
            vector_store=VectorStoreSettings(
                pinecone_api_key=_env(env, "PINECONE_API_KEY"),
                index_name=_env(env, "PINECONE_INDEX_NAME", "verixa-ai"),
            ),
            llm=llm,
            search=SearchSettings(
                serpapi_key=_env(env, "SERPAPI_KEY"),
                google_api_key=_env(env, "GOOGLE_SEARCH_API_KEY"),
                google_engine_id=_env(env, "GOOGLE_SEARCH_ENGINE_ID"),
            ),
            pipeline=PipelineSettings(
                request_timeout=float(_env(env, "REQUEST_TIMEOUT", "45")),
                generation_timeout=float(_env(env, "RESPONSE_TIMEOUT", "40")),
            ),
        )

    def check_timeouts(self) -> None:
        """
        Make sure inner timeouts fire before outer ones.

        Order: fetch <= every provider < global generation < response-level
        <= request deadline. Web search (both providers), the fetch and one
        embedding batch must also fit inside the request deadline together.

        Raises:
            ValueError: if the configured timeouts are out of order
        """
        provider_timeouts = [p.timeout for p in self.llm.providers]
        retrieval = (
            self.search.serpapi_timeout + self.search.google_timeout
            + self.fetch.timeout + self.embedding.timeout
        )
        ladder = [
            ("fetch", self.fetch.timeout, "shortest provider", min(provider_timeouts)),
            ("longest provider", max(provider_timeouts), "generation", self.llm.global_timeout),
            ("generation", self.llm.global_timeout, "response", self.pipeline.generation_timeout),
            ("response", self.pipeline.generation_timeout, "request", self.pipeline.request_timeout),
            ("search + fetch + embedding", retrieval, "request", self.pipeline.request_timeout),
        ]
        for inner_name, inner, outer_name, outer in ladder:
            strict = inner_name in ("longest provider", "generation", "search + fetch + embedding")
            if inner > outer or (strict and inner == outer):
                raise ValueError(
                    f"{inner_name} timeout ({inner}s) must fire before {outer_name} timeout ({outer}s)"
                )
