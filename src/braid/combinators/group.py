"""Growable groups of tasks or streams that act as a single stream."""

from __future__ import annotations

from typing import Any

from braid.engine import Driver
from braid.kernel.adapters import into_stream, into_task
from braid.kernel.poll import EXHAUSTED, PENDING, Poll
from braid.kernel.task import Stream
from braid.kernel.trace import Trace
from braid.kernel.waker import Waker


class _Group(Stream[Any]):
    """Shared bookkeeping: keyed membership and round-robin polling.

    Keys are slot indices; a key freed by removal or completion may be
    handed out again by a later insert.
    """

    _kind = "task"

    def __init__(self, *, trace: Trace | None = None) -> None:
        self._driver = Driver(kind=self._kind, trace=trace)  # type: ignore[arg-type]
        self._cursor = 0
        self._host: Waker | None = None

    def __len__(self) -> int:
        return self._driver.outstanding

    def __bool__(self) -> bool:
        return self._driver.outstanding > 0

    def __contains__(self, key: object) -> bool:
        return key in self._driver and self._driver[key].is_pending  # type: ignore[index]

    def _adopt(self, child: Any) -> int:
        key = self._driver.insert(child)
        # New members start flagged ready; the host must learn there is work.
        if self._host is not None:
            self._host.fire()
        return key

    def remove(self, key: int) -> bool:
        """Release the member under `key`. Returns False if there was none."""
        if key not in self:
            return False
        self._driver.discard(key)
        return True

    def _next_slot(self, waker: Waker) -> Any:
        self._host = waker
        self._driver.set_waker(waker)
        slot = self._driver.advance_next(self._cursor)
        if slot is not None:
            self._cursor = (slot.index + 1) % self._driver.capacity
        return slot

    def close(self) -> None:
        for slot in list(self._driver):
            self._driver.discard(slot.index)


class FutureGroup(_Group):
    """
    A growable set of tasks whose outcomes are yielded as they complete.

    An empty group reports exhaustion, but inserting more tasks makes it
    productive again. A member that raises is removed and its exception
    propagates from poll_next().

    Example:
        group = FutureGroup()
        group.insert(ready(2))
        group.insert(ready(4))
        assert sorted(collect(group)) == [2, 4]
    """

    _kind = "task"

    def insert(self, task: Any) -> int:
        """Take ownership of a task. Returns its key."""
        return self._adopt(into_task(task))

    def poll_next(self, waker: Waker) -> Poll[Any]:
        if not self:
            return EXHAUSTED
        slot = self._next_slot(waker)
        if slot is None:
            return PENDING
        self._driver.discard(slot.index)
        if slot.failed:
            raise slot.error
        return Poll.Ready(slot.take())


class StreamGroup(_Group):
    """
    A growable set of streams merged into one, with Merge's fairness.

    Exhausted members leave the group; the group itself reports exhaustion
    whenever it is empty.
    """

    _kind = "stream"

    def insert(self, stream: Any) -> int:
        """Take ownership of a stream. Returns its key."""
        return self._adopt(into_stream(stream))

    def poll_next(self, waker: Waker) -> Poll[Any]:
        while self:
            slot = self._next_slot(waker)
            if slot is None:
                return PENDING
            if slot.is_pending:
                self._driver.mark_ready(slot.index)
                return Poll.Ready(slot.take())
            self._driver.discard(slot.index)
            if slot.failed:
                raise slot.error
        return EXHAUSTED
