"""
FastAPI server for the Verixa answer pipeline.

This server provides endpoints for:
1. Answering a question from live web results (/api/search)
2. Fetching and extracting pages (/api/crawl)
3. Embedding texts (/api/embed)

Run with:
    uvicorn api.main:app --port 8000
"""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from dataclasses import asdict
from typing import List, Optional

import aiohttp
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from verixa.config.settings import Settings
from verixa.core.errors import InvalidQueryError
from verixa.pipeline.factory import build_pipeline
from verixa.pipeline.orchestrator import SearchPipeline

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """One settings load, one HTTP session and one vector store per process."""
    settings = Settings.from_env()
    async with aiohttp.ClientSession() as session:
        app.state.pipeline = build_pipeline(settings, session)
        logger.info("Verixa API started")
        yield
        await app.state.pipeline.close()


# Create FastAPI app
app = FastAPI(
    title="Verixa API",
    description="Answers questions from live web results with cited sources",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Pydantic models for request/response
class SearchRequest(BaseModel):
    query: Optional[str] = None
    maxResults: Optional[int] = 5


class SourceModel(BaseModel):
    title: str
    url: str


class SearchResponse(BaseModel):
    response: str
    sources: List[SourceModel]


class CrawlRequest(BaseModel):
    urls: List[str] = []


class EmbedRequest(BaseModel):
    texts: List[str] = []


def get_pipeline(request: Request) -> SearchPipeline:
    return request.app.state.pipeline


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    """Malformed JSON and wrong field types are client errors (400)."""
    logger.warning("Invalid request to %s: %s", request.url.path, exc.errors())
    return error_response(400, "Invalid JSON format")


async def watch_disconnect(request: Request, cancel_event: asyncio.Event,
                           interval: float = 0.25) -> None:
    """Set `cancel_event` as soon as the client goes away."""
    while not cancel_event.is_set():
        if await request.is_disconnected():
            logger.info("🚨 Client disconnected, cancelling request")
            cancel_event.set()
            return
        await asyncio.sleep(interval)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "Verixa API is running", "version": "1.0.0"}


@app.post("/api/search", response_model=SearchResponse)
async def search(body: SearchRequest, request: Request,
                 pipeline: SearchPipeline = Depends(get_pipeline)):
    """
    Answer a question.

    This endpoint:
    1. Watches for client disconnect while the pipeline runs
    2. Runs search, fetch, embed, rank and generate
    3. Returns the answer and the search hits it is based on
    """
    cancel_event = asyncio.Event()
    watcher = asyncio.create_task(watch_disconnect(request, cancel_event))
    try:
        result = await pipeline.run(body.query or "", body.maxResults or 5, cancel_event)
    except InvalidQueryError as e:
        return error_response(400, str(e))
    finally:
        watcher.cancel()
        with suppress(asyncio.CancelledError):
            await watcher

    if result.status == "cancelled":
        return error_response(499, result.error)
    if result.status == "error":
        return error_response(500, result.error)
    return {
        "response": result.response,
        "sources": [{"title": s.title, "url": s.url} for s in result.sources],
    }


@app.post("/api/crawl")
async def crawl(body: CrawlRequest, pipeline: SearchPipeline = Depends(get_pipeline)):
    """Fetch and extract up to 10 URLs."""
    if not body.urls:
        return error_response(400, "URLs array is required")
    try:
        results = await pipeline.fetcher.fetch_all(body.urls[:pipeline.settings.max_urls])
    except Exception:
        logger.exception("Crawl API error")
        return error_response(500, "Internal server error")
    return {"results": [asdict(r) for r in results]}


@app.post("/api/embed")
async def embed(body: EmbedRequest, pipeline: SearchPipeline = Depends(get_pipeline)):
    """Embed up to 50 texts."""
    if not body.texts:
        return error_response(400, "Texts array is required")
    try:
        vectors = await pipeline.embedder.embed_batch(body.texts[:pipeline.settings.max_texts])
    except Exception:
        logger.exception("Embed API error")
        return error_response(500, "Internal server error")
    return {"embeddings": [{"text": v.text, "embedding": v.embedding} for v in vectors]}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
