"""asyncio host - drive braid tasks and streams from a running event loop.

Children adapted from coroutines may await asyncio futures (asyncio.sleep,
queues, locks...) as well as braid signals. Cancelling the asyncio task
that awaits drive() closes the hosted combinator, releasing its children.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from functools import partial
from typing import Any

from braid.kernel.adapters import into_stream, into_task
from braid.kernel.ports import release
from braid.kernel.waker import Waker


def _loop_waker(woken: asyncio.Event) -> Waker:
    loop = asyncio.get_running_loop()
    return Waker(partial(loop.call_soon_threadsafe, woken.set))


async def drive(task: Any) -> Any:
    """Await a braid task (or anything into_task accepts) on the running loop."""
    task = into_task(task)
    woken = asyncio.Event()
    waker = _loop_waker(woken)
    completed = False
    try:
        while True:
            woken.clear()
            polled = task.poll(waker)
            if polled.is_ready:
                completed = True
                return polled.value
            await woken.wait()
    finally:
        if not completed:
            release(task)


async def iterate(stream: Any) -> AsyncIterator[Any]:
    """Iterate a braid stream asynchronously."""
    stream = into_stream(stream)
    woken = asyncio.Event()
    waker = _loop_waker(woken)
    try:
        while True:
            woken.clear()
            polled = stream.poll_next(waker)
            if polled.is_exhausted:
                return
            if polled.is_ready:
                yield polled.value
                continue
            await woken.wait()
    finally:
        release(stream)
