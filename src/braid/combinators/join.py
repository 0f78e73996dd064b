"""Join and TryJoin - wait for every child, in original order."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from braid.engine import Driver
from braid.kernel.adapters import into_task
from braid.kernel.errors import InvalidStateError
from braid.kernel.poll import PENDING, Poll
from braid.kernel.task import Task
from braid.kernel.trace import Trace
from braid.kernel.waker import Waker

LOG = logging.getLogger("braid.combinators")


class Join(Task[Any]):
    """Wait for every child and return their outcomes in construction order.

    Never short-circuits. A child that raises has its exception recorded in
    its position like any other outcome, as asyncio.gather does with
    return_exceptions=True.

    Args:
        tasks: Children; each is anything into_task() accepts
        as_tuple: Return a tuple instead of a list
        trace: Optional trace receiving slot transitions
    """

    def __init__(self, tasks: Iterable[Any], *, as_tuple: bool = False, trace: Trace | None = None) -> None:
        self._driver = Driver((into_task(t) for t in tasks), trace=trace)
        self._outcomes: list[Any] = [None] * self._driver.capacity
        self._as_tuple = as_tuple
        self._consumed = False

    def __len__(self) -> int:
        return self._driver.capacity

    @property
    def outstanding(self) -> int:
        return self._driver.outstanding

    def poll(self, waker: Waker) -> Poll[Any]:
        if self._consumed:
            raise InvalidStateError("join polled after completion")

        self._driver.set_waker(waker)
        for slot in self._driver.step():
            self._outcomes[slot.index] = slot.error if slot.failed else slot.take()

        if self._driver.outstanding:
            return PENDING
        return self._finish(self._outcomes)

    def _finish(self, outcomes: list[Any]) -> Poll[Any]:
        self._consumed = True
        self._outcomes = []
        return Poll.Ready(tuple(outcomes) if self._as_tuple else outcomes)

    def close(self) -> None:
        self._driver.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._driver!r})"


class TryJoin(Join):
    """Like Join, but the first child to raise aborts the rest.

    When several children fail in the same step the lowest index wins. The
    failure is re-raised after every other pending child has been released.
    """

    def poll(self, waker: Waker) -> Poll[Any]:
        if self._consumed:
            raise InvalidStateError("try_join polled after completion")

        self._driver.set_waker(waker)
        for slot in self._driver.step():
            if slot.failed:
                self._consumed = True
                released = self._driver.close()
                LOG.debug("try_join short-circuited on child %d, released %d", slot.index, released)
                raise slot.error  # type: ignore[misc]
            self._outcomes[slot.index] = slot.take()

        if self._driver.outstanding:
            return PENDING
        return self._finish(self._outcomes)
