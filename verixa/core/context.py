"""
Per-request cancellation token and deadline.

A `RequestContext` is created by the orchestrator for every query and threaded
through every suspendable call. Components never start their own timers:
they ask the context to run an awaitable under the shortest of their own
timeout and whatever is left of the request deadline, and the context also
aborts the call as soon as the caller cancels.

Example:
    ```python
    ctx = RequestContext(deadline_s=45, cancel_event=disconnect_event)
    ctx.check()                                  # raises RequestCancelled
    html = await ctx.guard(session_get(url), timeout=10)
    ```
"""
import asyncio
import time
from typing import Awaitable, Optional, TypeVar

from verixa.core.errors import RequestCancelled

T = TypeVar("T")


class RequestContext:
    """
    Cancellation token plus absolute deadline for one request.

    Attributes:
        cancel_event: Set by the caller (or `cancel()`) to abort the request
        deadline: Absolute `time.monotonic()` value, or None for no deadline
    """

    def __init__(self, deadline_s: Optional[float] = None,
                 cancel_event: Optional[asyncio.Event] = None):
        self.cancel_event = cancel_event if cancel_event is not None else asyncio.Event()
        self.deadline = time.monotonic() + deadline_s if deadline_s is not None else None

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        self.cancel_event.set()

    def check(self) -> None:
        """Raise RequestCancelled if the caller has aborted."""
        if self.cancelled:
            raise RequestCancelled("Request was cancelled")

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline (never negative), None if unbounded."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def timeout_for(self, own: Optional[float]) -> Optional[float]:
        """Shortest of a component's own timeout and the inherited deadline."""
        left = self.remaining()
        if own is None:
            return left
        if left is None:
            return own
        return min(own, left)

    async def guard(self, aw: Awaitable[T], timeout: Optional[float] = None) -> T:
        """
        Await `aw` unless the request is cancelled or the timeout expires first.

        The awaitable runs as its own task. If the cancellation event fires or
        the effective timeout elapses, the task is cancelled and awaited so
        that sockets and other resources it holds are released before this
        method returns.

        Args:
            aw: Coroutine or future to run
            timeout: The component's own timeout in seconds (None = deadline only)

        Returns:
            Whatever `aw` returns

        Raises:
            RequestCancelled: the caller aborted
            asyncio.TimeoutError: the effective timeout elapsed
        """
        self.check()
        task = asyncio.ensure_future(aw)
        cancel_waiter = asyncio.ensure_future(self.cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {task, cancel_waiter},
                timeout=self.timeout_for(timeout),
                return_when=asyncio.FIRST_COMPLETED,
            )
        except asyncio.CancelledError:
            await _discard(task)
            raise
        finally:
            cancel_waiter.cancel()

        if task in done:
            return task.result()

        await _discard(task)
        if self.cancelled:
            raise RequestCancelled("Request was cancelled")
        raise asyncio.TimeoutError()


async def _discard(task: asyncio.Future) -> None:
    """Cancel a task and wait for its teardown."""
    if task.done():
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    except Exception:
        # The task failed while being torn down; its result is unwanted.
        pass
