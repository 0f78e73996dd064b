"""ForEach and TryForEach - run an action on every stream item, at most K at a time."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from braid.config import BufferedConfig, validated
from braid.engine import Driver
from braid.kernel.adapters import into_stream
from braid.kernel.errors import AggregateError, InvalidStateError
from braid.kernel.poll import PENDING, Poll
from braid.kernel.ports import release
from braid.kernel.task import Task
from braid.kernel.trace import Trace
from braid.kernel.waker import Waker

from .buffered import start_transformation

LOG = logging.getLogger("braid.combinators")

# Refill rounds a single poll may run before handing control back to the host.
ROUNDS_PER_POLL = 32


class ForEach(Task[int]):
    """
    Apply `action` to every source item with at most `limit` actions in flight.

    Completes with the number of items processed once the source is
    exhausted and every action has finished. Actions finish in any order;
    a free place is refilled from the source within the same poll, and a
    long run of ready work hands control back to the host between rounds. An
    action that raises does not stop the others: once everything has
    finished, the failures are raised together as AggregateError, in
    source order. A source that raises releases every action in flight
    and its exception propagates.

    Raises:
        ConfigurationError: If limit < 1
    """

    def __init__(
        self,
        source: Any,
        action: Callable[[Any], Any],
        limit: int,
        *,
        trace: Trace | None = None,
    ) -> None:
        self.config = validated(BufferedConfig, limit=limit)
        self._source: Any = into_stream(source)
        self._source_ready = True
        self._source_waker = Waker(self._wake_source)
        self._parent: Waker | None = None
        self._action = action
        self._driver = Driver(kind="task", trace=trace)
        self._positions: dict[int, int] = {}
        self._failures: list[tuple[int, Exception]] = []
        self._count = 0
        self._consumed = False

    @property
    def in_flight(self) -> int:
        return self._driver.outstanding

    def _wake_source(self) -> None:
        if self._source_ready:
            return
        self._source_ready = True
        if self._parent is not None:
            self._parent.fire()

    def poll(self, waker: Waker) -> Poll[int]:
        if self._consumed:
            raise InvalidStateError(f"{type(self).__name__} polled after completion")

        self._parent = waker
        self._driver.set_waker(waker)
        for _ in range(ROUNDS_PER_POLL):
            pulled = self._fill()
            finished = self._driver.step()
            for slot in sorted(finished, key=lambda s: self._positions[s.index]):
                position = self._positions.pop(slot.index)
                self._driver.discard(slot.index)
                if slot.failed:
                    self._fail(position, slot.error)  # type: ignore[arg-type]

            if self._source is None and self._driver.outstanding == 0:
                return self._finish()
            if not pulled and not (finished and self._source_ready):
                return PENDING

        waker.fire()
        return PENDING

    def _fill(self) -> bool:
        """Pull source items while there is room. Returns whether any were pulled."""
        pulled = False
        while (
            self._source is not None
            and self._source_ready
            and self._driver.outstanding < self.config.limit
        ):
            self._source_ready = False
            try:
                polled = self._source.poll_next(self._source_waker)
            except Exception:
                self.close()
                raise
            if polled.is_pending:
                break
            if polled.is_exhausted:
                self._source = None
                break
            self._source_ready = True
            self._admit(polled.value)
            pulled = True
        return pulled

    def _admit(self, item: Any) -> None:
        position = self._count
        self._count += 1
        try:
            task = start_transformation(self._action, item)
        except Exception as exc:
            self._fail(position, exc)
            return
        self._positions[self._driver.insert(task)] = position

    def _fail(self, position: int, error: Exception) -> None:
        self._failures.append((position, error))

    def _finish(self) -> Poll[int]:
        self._consumed = True
        if self._failures:
            self._failures.sort(key=lambda failure: failure[0])
            raise AggregateError(error for _, error in self._failures)
        return Poll.Ready(self._count)

    def close(self) -> None:
        self._consumed = True
        self._driver.close()
        self._positions.clear()
        source, self._source = self._source, None
        if source is not None:
            release(source)


class TryForEach(ForEach):
    """Like ForEach, but the first action to raise aborts the rest.

    The source and every action still in flight are released before the
    failure is re-raised. When several actions fail in the same poll the
    one for the earliest source item wins.
    """

    def _fail(self, position: int, error: Exception) -> None:
        self.close()
        LOG.debug("try_for_each short-circuited on item %d", position)
        raise error
