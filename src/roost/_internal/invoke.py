"""Invoke helpers — call sync or async operations uniformly.

Operations can be ``def`` or ``async def``. Coroutine functions are
awaited on the event loop; plain functions run in an anyio worker thread
so a slow handler only ties up its own request.

Sync calls share one unbounded ``CapacityLimiter``. anyio's default
limiter admits 40 threads and queues the rest, which would let a burst
of slow handlers hold up every other sync route.

Usage::

    from roost._internal.invoke import invoke

    result = await invoke(handler, *args)
"""

import functools
import inspect
import math
from typing import Any

import anyio

_limiter: anyio.CapacityLimiter | None = None


def thread_limiter() -> anyio.CapacityLimiter:
    """The process-wide limiter for sync operations (no upper bound)."""
    global _limiter
    if _limiter is None:
        _limiter = anyio.CapacityLimiter(math.inf)
    return _limiter


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable."""
    if inspect.iscoroutinefunction(handler):
        return await handler(*args, **kwargs)

    call = functools.partial(handler, *args, **kwargs)
    result = await anyio.to_thread.run_sync(call, limiter=thread_limiter())
    if inspect.isawaitable(result):
        result = await result
    return result
