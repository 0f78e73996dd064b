"""Blocking host - drive a task or stream to completion on the calling thread."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from typing import Any

from braid.config import RuntimeSettings
from braid.kernel.adapters import into_stream, into_task
from braid.kernel.errors import DeadlockError
from braid.kernel.ports import release
from braid.kernel.waker import Waker

LOG = logging.getLogger("braid.runtime")


class _Parker:
    """Puts the host thread to sleep until some child fires its waker."""

    def __init__(self, settings: RuntimeSettings) -> None:
        self._event = threading.Event()
        self._timeout = settings.idle_timeout
        self.waker = Waker(self._event.set)

    def reset(self) -> None:
        self._event.clear()

    def park(self, what: Any) -> None:
        if not self._event.wait(self._timeout):
            LOG.debug("%r stayed pending for %ss with no wake", what, self._timeout)
            raise DeadlockError(f"{what!r} is pending and nothing woke it")


def block_on(task: Any, settings: RuntimeSettings | None = None) -> Any:
    """Drive `task` until it completes and return its outcome.

    The task is polled once up front and then again after each wake. If it
    stays pending without a wake for `settings.idle_timeout` seconds,
    DeadlockError is raised. A task that does not complete is closed before
    block_on returns or raises.
    """
    parker = _Parker(settings or RuntimeSettings())
    task = into_task(task)
    completed = False
    try:
        while True:
            parker.reset()
            polled = task.poll(parker.waker)
            if polled.is_ready:
                completed = True
                return polled.value
            parker.park(task)
    finally:
        if not completed:
            release(task)


def iterate(stream: Any, settings: RuntimeSettings | None = None) -> Iterator[Any]:
    """Yield the items of `stream`, blocking between them.

    Closing the generator early closes the stream.
    """
    parker = _Parker(settings or RuntimeSettings())
    stream = into_stream(stream)
    try:
        while True:
            parker.reset()
            polled = stream.poll_next(parker.waker)
            if polled.is_exhausted:
                return
            if polled.is_ready:
                yield polled.value
                continue
            parker.park(stream)
    finally:
        release(stream)


def collect(stream: Any, settings: RuntimeSettings | None = None) -> list[Any]:
    """Drain `stream` into a list."""
    return list(iterate(stream, settings))
