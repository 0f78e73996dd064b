"""Merge - fairly interleave items from several streams."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from braid.engine import Driver
from braid.kernel.adapters import into_stream
from braid.kernel.poll import EXHAUSTED, PENDING, Poll
from braid.kernel.task import Stream
from braid.kernel.trace import Trace
from braid.kernel.waker import Waker


class Merge(Stream[Any]):
    """
    Yield items from every stream as they become available.

    Selection is round-robin starting just after the stream that produced
    the previous item, so while several streams are ready none of them is
    skipped twice in a row. Only one item is pulled per poll; a stream that
    produced an item is flagged to be tried again. Exhausted streams leave
    the rotation, and once all are exhausted every later poll reports
    exhaustion.

    A stream that raises leaves the rotation and its exception propagates
    from poll_next(); the remaining streams can still be drained.
    """

    def __init__(self, streams: Iterable[Any], *, trace: Trace | None = None) -> None:
        self._driver = Driver((into_stream(s) for s in streams), kind="stream", trace=trace)
        self._cursor = 0
        self._exhausted = self._driver.outstanding == 0

    @property
    def live(self) -> int:
        """Number of streams not yet exhausted."""
        return self._driver.outstanding

    def poll_next(self, waker: Waker) -> Poll[Any]:
        if self._exhausted:
            return EXHAUSTED

        self._driver.set_waker(waker)
        while (slot := self._driver.advance_next(self._cursor)) is not None:
            self._cursor = (slot.index + 1) % self._driver.capacity
            if slot.is_pending:
                self._driver.mark_ready(slot.index)
                return Poll.Ready(slot.take())
            if self._driver.outstanding == 0:
                self._exhausted = True
            if slot.failed:
                raise slot.error  # type: ignore[misc]
            if self._exhausted:
                return EXHAUSTED
        return PENDING

    def close(self) -> None:
        self._driver.close()
        self._exhausted = True

    def __repr__(self) -> str:
        return f"Merge({self._driver!r})"
