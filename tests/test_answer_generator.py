"""Tests for the provider fallback chain."""

import pytest

from conftest import FakeProvider
from verixa.answer.generator import AnswerGenerator, exhausted_answer
from verixa.answer.quick_answers import SHORT_QUERY_REPLY, quick_answer
from verixa.core.context import RequestContext
from verixa.core.errors import ProviderError, RequestCancelled
from verixa.core.interfaces.search import Source

SOURCES = [
    Source(title="Delhi Weather Today", url="https://w.example/delhi"),
    Source(title="IMD Forecast", url="https://imd.example"),
    Source(title="City Guide", url="https://guide.example"),
    Source(title="Fourth Source", url="https://four.example"),
]
CONTEXT = "**Delhi Weather Today**\nWeather in Delhi: Temperature: 32°C. Condition: sunny. " * 3


@pytest.mark.asyncio
async def test_first_non_empty_provider_wins():
    first = FakeProvider("first", text="Answer from first")
    second = FakeProvider("second", text="Answer from second")
    answer = await AnswerGenerator([first, second]).generate("weather in Delhi", CONTEXT, SOURCES)
    assert answer == "Answer from first"
    assert second.calls == 0


@pytest.mark.asyncio
async def test_falls_through_error_empty_and_timeout():
    providers = [
        FakeProvider("broken", exc=ProviderError("broken", "HTTP 500: boom")),
        FakeProvider("blank", text="   "),
        FakeProvider("slow", text="late", delay=1.0, timeout=0.05),
        FakeProvider("good", text="Final answer"),
    ]
    answer = await AnswerGenerator(providers).generate("weather in Delhi", CONTEXT, SOURCES)
    assert answer == "Final answer"
    assert [p.calls for p in providers] == [1, 1, 1, 1]
    assert providers[2].cancelled


@pytest.mark.asyncio
async def test_attempt_reports_failure_reasons():
    ctx = RequestContext()
    timed_out = await FakeProvider("slow", text="x", delay=1.0, timeout=0.05).attempt("q", "", [], ctx)
    empty = await FakeProvider("blank", text="").attempt("q", "", [], ctx)
    assert timed_out.error == "slow API timeout"
    assert empty.error == "blank returned an empty response"
    assert not timed_out.ok and not empty.ok


@pytest.mark.asyncio
async def test_exhaustion_lists_source_titles():
    providers = [FakeProvider("a", exc=RuntimeError("boom")), FakeProvider("b", text="")]
    answer = await AnswerGenerator(providers).generate("weather in Delhi", CONTEXT, SOURCES)
    assert CONTEXT[:400] in answer
    assert "• Delhi Weather Today" in answer
    assert "• City Guide" in answer
    assert "Fourth Source" not in answer


@pytest.mark.asyncio
async def test_no_providers_still_answers():
    answer = await AnswerGenerator([]).generate("weather in Delhi", CONTEXT, SOURCES)
    assert "Delhi Weather Today" in answer


def test_exhaustion_wording_follows_last_error():
    quota = exhausted_answer("q", CONTEXT, SOURCES, "429 Too Many Requests: quota exceeded")
    credential = exhausted_answer("q", CONTEXT, SOURCES, "HTTP 401: invalid api key")
    other = exhausted_answer("q", CONTEXT, SOURCES, "connection reset")
    assert quota.startswith("I'm currently experiencing high demand")
    assert credential.startswith("I'm having some technical difficulties")
    assert other.startswith('I found relevant information about "q"')


def test_short_context_uses_could_not_generate_wording():
    answer = exhausted_answer("rare topic", "tiny", SOURCES[:1], None)
    assert "couldn't generate a detailed response" in answer
    assert "Delhi Weather Today" in answer


@pytest.mark.asyncio
async def test_global_timeout_returns_partial_context():
    slow = FakeProvider("slow", text="never", delay=1.0, timeout=5.0)
    generator = AnswerGenerator([slow], global_timeout=0.05)
    answer = await generator.generate("weather in Delhi", CONTEXT, SOURCES)
    assert answer.startswith("I apologize, but I'm experiencing some technical difficulties")
    assert CONTEXT[:300] in answer
    assert "Delhi Weather Today" in answer
    assert slow.cancelled


@pytest.mark.asyncio
async def test_quick_answers_skip_providers():
    provider = FakeProvider("p", text="from provider")
    generator = AnswerGenerator([provider])
    assert await generator.generate("Namaste", "", []) == "Namaste! Kaise hain aap?"
    assert await generator.generate("ok", "", []) == SHORT_QUERY_REPLY
    assert provider.calls == 0


def test_quick_answer_lookup_is_exact():
    assert quick_answer("hello") is not None
    assert quick_answer("hello, what's the weather in Delhi?") is None


@pytest.mark.asyncio
async def test_cancellation_propagates():
    ctx = RequestContext()
    ctx.cancel()
    provider = FakeProvider("p", text="x")
    with pytest.raises(RequestCancelled):
        await AnswerGenerator([provider]).generate("weather in Delhi", CONTEXT, SOURCES, ctx)
    assert provider.calls == 0
