"""Tests for the request cancellation token and deadline."""

import asyncio

import pytest

from verixa.core.context import RequestContext
from verixa.core.errors import RequestCancelled


async def value_after(delay, value):
    await asyncio.sleep(delay)
    return value


@pytest.mark.asyncio
async def test_guard_returns_result():
    assert await RequestContext().guard(value_after(0, 42), timeout=1) == 42


@pytest.mark.asyncio
async def test_guard_times_out_and_cancels_inner_task():
    state = {}

    async def slow():
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            state["cancelled"] = True
            raise

    with pytest.raises(asyncio.TimeoutError):
        await RequestContext().guard(slow(), timeout=0.05)
    assert state["cancelled"]


@pytest.mark.asyncio
async def test_guard_aborts_on_cancel_event():
    ctx = RequestContext()
    asyncio.get_running_loop().call_later(0.05, ctx.cancel)
    with pytest.raises(RequestCancelled):
        await ctx.guard(value_after(5, "late"))


@pytest.mark.asyncio
async def test_deadline_caps_component_timeout():
    ctx = RequestContext(deadline_s=0.05)
    with pytest.raises(asyncio.TimeoutError):
        await ctx.guard(value_after(5, "late"), timeout=10)


@pytest.mark.asyncio
async def test_guard_propagates_inner_errors():
    async def broken():
        raise ValueError("bad")

    with pytest.raises(ValueError):
        await RequestContext().guard(broken())


@pytest.mark.asyncio
async def test_check_and_timeout_for():
    ctx = RequestContext(deadline_s=2)
    ctx.check()
    assert ctx.timeout_for(10) <= 2
    assert ctx.timeout_for(1) == 1
    ctx.cancel()
    with pytest.raises(RequestCancelled):
        ctx.check()


@pytest.mark.asyncio
async def test_unbounded_context():
    ctx = RequestContext()
    assert ctx.remaining() is None
    assert ctx.timeout_for(None) is None
    assert ctx.timeout_for(3) == 3
