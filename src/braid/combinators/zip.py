"""Zip - one item from every stream, emitted together."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from braid.engine import Driver
from braid.kernel.adapters import into_stream
from braid.kernel.poll import EXHAUSTED, PENDING, Poll
from braid.kernel.task import Stream
from braid.kernel.trace import Trace
from braid.kernel.waker import Waker


class Zip(Stream[Any]):
    """Yield a tuple (or list) of items once every stream has produced one.

    A stream holding an item is not driven again until the group is emitted.
    The zip is exhausted as soon as any stream is; zipping nothing yields
    nothing.
    """

    def __init__(self, streams: Iterable[Any], *, as_tuple: bool = True, trace: Trace | None = None) -> None:
        self._driver = Driver((into_stream(s) for s in streams), kind="stream", trace=trace)
        self._width = self._driver.capacity
        self._items: list[Any] = [None] * self._width
        self._filled: set[int] = set()
        self._as_tuple = as_tuple
        self._done = self._width == 0

    def poll_next(self, waker: Waker) -> Poll[Any]:
        if self._done:
            return EXHAUSTED

        self._driver.set_waker(waker)
        for slot in self._driver.step(exclude=self._filled):
            if slot.failed:
                self.close()
                raise slot.error  # type: ignore[misc]
            if not slot.is_pending:
                self.close()
                return EXHAUSTED
            self._items[slot.index] = slot.take()
            self._filled.add(slot.index)

        if len(self._filled) < self._width:
            return PENDING

        items, self._items = self._items, [None] * self._width
        self._filled.clear()
        self._driver.mark_all_ready()
        return Poll.Ready(tuple(items) if self._as_tuple else items)

    def close(self) -> None:
        self._done = True
        self._items = []
        self._filled.clear()
        self._driver.close()
