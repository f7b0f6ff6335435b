"""Tests for the vector store backends and backend selection."""

import asyncio
import math
from concurrent.futures import ThreadPoolExecutor
from types import SimpleNamespace

import pytest

from conftest import DIM, RecordingEncoder
from verixa.config.settings import EmbeddingSettings, VectorStoreSettings
from verixa.core.implementations.memory_storage import InMemoryVectorStore
from verixa.core.implementations.pinecone_storage import PineconeVectorStore
from verixa.core.interfaces.storage import EmbeddingVector
from verixa.embedder.embedder import Embedder
from verixa.search.semantic import FallbackVectorStore, build_vector_store


def vec(text, values):
    return EmbeddingVector(text=text, embedding=list(values))


@pytest.fixture
def query_embedder():
    encoder = RecordingEncoder(vectors={"query": [1.0, 0.0, 0.0, 0.0]})
    return Embedder(EmbeddingSettings(dim=DIM), encoder)


@pytest.mark.asyncio
async def test_capacity_keeps_newest_thousand(embedder):
    store = InMemoryVectorStore(embedder, capacity=1000)
    for batch in range(12):
        vectors = [vec(f"doc-{batch * 100 + i}", [1.0] * DIM) for i in range(100)]
        await store.upsert(vectors, [{"url": "u", "title": "t"}] * 100)

    assert await store.size() == 1000
    texts = [doc.embedding.text for doc in store.snapshot()]
    assert texts == [f"doc-{i}" for i in range(200, 1200)]


@pytest.mark.asyncio
async def test_upsert_assigns_ids_and_metadata(embedder):
    store = InMemoryVectorStore(embedder)
    added = store.add([vec("a", [1.0] * DIM), vec("b", [1.0] * DIM)], [{"url": "https://a", "title": "A"}])

    assert len({doc.id for doc in added}) == 2
    assert (added[0].url, added[0].title) == ("https://a", "A")
    # no metadata at that index
    assert (added[1].url, added[1].title) == ("", "")
    assert added[0].stored_at_ms > 0


@pytest.mark.asyncio
async def test_search_is_sorted_and_bounded(query_embedder):
    store = InMemoryVectorStore(query_embedder)
    await store.upsert(
        [
            vec("orthogonal", [0.0, 1.0, 0.0, 0.0]),
            vec("zero", [0.0, 0.0, 0.0, 0.0]),
            vec("exact", [2.0, 0.0, 0.0, 0.0]),
            vec("close", [0.7, 0.7, 0.0, 0.0]),
        ],
        [{"url": f"https://{i}", "title": str(i)} for i in range(4)],
    )

    top = await store.search("query", top_k=3)
    assert [p.content for p in top] == ["exact", "close", "orthogonal"]
    assert top[0].score == pytest.approx(1.0)

    everything = await store.search("query", top_k=10)
    assert len(everything) == 4
    assert everything[-1].content == "zero"
    assert math.isnan(everything[-1].score)


@pytest.mark.asyncio
async def test_search_empty_store(query_embedder):
    assert await InMemoryVectorStore(query_embedder).search("query") == []


class BrokenStore:
    async def upsert(self, vectors, sources):
        raise ConnectionError("index unreachable")

    async def search(self, query, top_k=5):
        raise ConnectionError("index unreachable")

    async def size(self):
        raise ConnectionError("index unreachable")


@pytest.mark.asyncio
async def test_fallback_store_uses_memory_on_primary_failure(query_embedder):
    memory = InMemoryVectorStore(query_embedder)
    store = FallbackVectorStore(BrokenStore(), memory)

    await store.upsert([vec("exact", [1.0, 0.0, 0.0, 0.0])], [{"url": "https://x", "title": "X"}])
    assert await store.size() == 1
    [passage] = await store.search("query", top_k=3)
    assert (passage.content, passage.url, passage.title) == ("exact", "https://x", "X")


def test_build_without_key_is_memory_only(embedder):
    store = build_vector_store(VectorStoreSettings(), embedder)
    assert isinstance(store, InMemoryVectorStore)


def test_build_falls_back_when_pinecone_init_fails(embedder, monkeypatch):
    def broken_client(api_key):
        raise RuntimeError("bad key")

    monkeypatch.setattr("verixa.core.implementations.pinecone_storage.Pinecone", broken_client)
    store = build_vector_store(VectorStoreSettings(pinecone_api_key="pc-test"), embedder)
    assert isinstance(store, InMemoryVectorStore)


def test_build_with_key_wraps_pinecone(embedder, monkeypatch):
    client = SimpleNamespace(Index=lambda name: FakeIndex())
    monkeypatch.setattr("verixa.core.implementations.pinecone_storage.Pinecone", lambda api_key: client)
    store = build_vector_store(VectorStoreSettings(pinecone_api_key="pc-test"), embedder)
    assert isinstance(store, FallbackVectorStore)
    assert isinstance(store.primary, PineconeVectorStore)


class FakeIndex:
    def __init__(self):
        self.upserted = []

    def upsert(self, vectors):
        self.upserted.extend(vectors)

    def query(self, vector, top_k, include_metadata):
        matches = [
            SimpleNamespace(score=0.4, metadata={"text": "second", "url": "https://b", "title": "B"}),
            SimpleNamespace(score=0.9, metadata={"text": "first", "url": "https://a", "title": "A"}),
        ]
        return SimpleNamespace(matches=matches[:top_k])

    def describe_index_stats(self):
        return SimpleNamespace(total_vector_count=len(self.upserted))


@pytest.mark.asyncio
async def test_pinecone_store_upsert_and_search(query_embedder):
    index = FakeIndex()
    store = PineconeVectorStore(VectorStoreSettings(), query_embedder, index=index)

    await store.upsert([vec("hello", [1.0] * DIM)], [{"url": "https://h", "title": "H"}])
    [record] = index.upserted
    assert record["values"] == [1.0] * DIM
    assert record["metadata"]["text"] == "hello"
    assert record["metadata"]["url"] == "https://h"
    assert isinstance(record["metadata"]["timestamp"], int)
    assert await store.size() == 1

    passages = await store.search("query", top_k=2)
    assert [p.content for p in passages] == ["first", "second"]


def seed(store, count):
    store.add([vec(f"seed-{i}", [1.0] * DIM) for i in range(count)], [])


def test_threaded_upserts_and_reads_see_whole_batches(embedder):
    store = InMemoryVectorStore(embedder, capacity=1000)
    seed(store, 950)
    lengths = []

    def write(worker):
        for batch in range(10):
            store.add([vec(f"w{worker}-{batch}-{i}", [1.0] * DIM) for i in range(10)], [])

    def read():
        for _ in range(50):
            lengths.append(len(store.snapshot()))
            assert len(store.rank([1.0] * DIM, 5)) == 5

    with ThreadPoolExecutor(max_workers=8) as pool:
        futures = [pool.submit(write, w) for w in range(4)] + [pool.submit(read) for _ in range(4)]
        for future in futures:
            future.result()

    texts = {doc.embedding.text for doc in store.snapshot()}
    assert len(store.snapshot()) == 1000
    assert all(length <= 1000 and length % 10 == 0 for length in lengths)
    written = {f"w{w}-{b}-{i}" for w in range(4) for b in range(10) for i in range(10)}
    assert written <= texts


@pytest.mark.asyncio
async def test_overlapping_upserts_and_searches_near_capacity(embedder):
    store = InMemoryVectorStore(embedder, capacity=1000)
    seed(store, 990)

    async def write(batch):
        await store.upsert([vec(f"b{batch}-{i}", [1.0] * DIM) for i in range(10)], [])

    async def read():
        passages = await store.search("query", top_k=3)
        return len(passages), await store.size()

    results = await asyncio.gather(*[write(b) for b in range(5)], *[read() for _ in range(5)])

    assert await store.size() == 1000
    for found, size in results[5:]:
        assert found == 3
        assert size in (990, 1000)
