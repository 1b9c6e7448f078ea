"""
Lectio - Async Utilities

Async patterns used by the content engine:
- Request coalescing for concurrent identical loads
- Shielded background completion so abandoned callers do not cancel work
"""

from __future__ import annotations

import asyncio
from typing import (
    Awaitable,
    Callable,
    Dict,
    Generic,
    Hashable,
    TypeVar,
)

from opentelemetry import trace

K = TypeVar("K", bound=Hashable)
T = TypeVar("T")

tracer = trace.get_tracer(__name__)


class RequestCoalescer(Generic[K, T]):
    """
    In-flight request map.

    The first caller for a key starts the load as a task; later callers for
    the same key await that task instead of starting their own. The task is
    shielded, so a caller that gets cancelled leaves the load running and its
    side effects (cache writes) still happen.

    Usage:
        coalescer = RequestCoalescer[ChapterKey, List[VerseRecord]]()
        verses = await coalescer.run(key, lambda: fetch_and_store(key))
    """

    def __init__(self) -> None:
        self._pending: Dict[K, asyncio.Task] = {}

    @property
    def in_flight(self) -> int:
        """Number of loads currently running."""
        return len(self._pending)

    async def run(self, key: K, factory: Callable[[], Awaitable[T]]) -> T:
        """Await the pending load for key, starting one if none is running."""
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._pending[key] = task
            task.add_done_callback(lambda done, k=key: self._forget(k, done))
        else:
            span = trace.get_current_span()
            if span and span.is_recording():
                span.set_attribute("coalesced", True)
        return await asyncio.shield(task)

    def _forget(self, key: K, task: asyncio.Task) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
        # Marks the exception retrieved; awaiting callers re-raise it themselves.
        if not task.cancelled():
            task.exception()
