"""Race and RaceOk - the first child to finish wins."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from braid.engine import Driver, Slot
from braid.kernel.adapters import into_task
from braid.kernel.errors import AggregateError, ConfigurationError, InvalidStateError
from braid.kernel.poll import PENDING, Poll
from braid.kernel.task import Task
from braid.kernel.trace import Trace
from braid.kernel.waker import Waker

LOG = logging.getLogger("braid.combinators")

T = TypeVar("T")


@dataclass(frozen=True)
class Winner(Generic[T]):
    """The child that decided a race.

    Attributes:
        index: Original position of the child
        value: Its outcome
    """

    index: int
    value: T


class Race(Task[Any]):
    """Complete with the outcome of the first child to finish.

    Among children finishing in the same step the lowest index wins; every
    other child is released and any outcome it produced is discarded. A
    winner that raised is re-raised. Racing zero children is rejected at
    construction.
    """

    def __init__(self, tasks: Iterable[Any], *, trace: Trace | None = None) -> None:
        self._driver = Driver((into_task(t) for t in tasks), trace=trace)
        self._check_arity()
        self.winner: Winner[Any] | None = None
        self._consumed = False

    def _check_arity(self) -> None:
        if self._driver.capacity == 0:
            raise ConfigurationError("cannot race zero children")

    def __len__(self) -> int:
        return self._driver.capacity

    def poll(self, waker: Waker) -> Poll[Any]:
        if self._consumed:
            raise InvalidStateError("race polled after completion")

        self._driver.set_waker(waker)
        changed = self._driver.step()
        if not changed:
            return PENDING
        return self._win(changed[0])

    def _win(self, slot: Slot) -> Poll[Any]:
        self._consumed = True
        self._driver.close()
        LOG.debug("race decided by child %d", slot.index)
        if slot.failed:
            raise slot.error  # type: ignore[misc]
        self.winner = Winner(index=slot.index, value=slot.take())
        return Poll.Ready(self.winner.value)

    def close(self) -> None:
        self._driver.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._driver!r})"


class RaceOk(Race):
    """Complete with the first child that finishes without raising.

    Failing children drop out of the race. When every child has failed the
    race raises AggregateError holding each failure in original index order;
    with zero children it does so on the first poll.
    """

    def __init__(self, tasks: Iterable[Any], *, trace: Trace | None = None) -> None:
        super().__init__(tasks, trace=trace)
        self._errors: list[Exception | None] = [None] * self._driver.capacity

    def _check_arity(self) -> None:
        return None

    def poll(self, waker: Waker) -> Poll[Any]:
        if self._consumed:
            raise InvalidStateError("race_ok polled after completion")

        self._driver.set_waker(waker)
        for slot in self._driver.step():
            if not slot.failed:
                return self._win(slot)
            self._errors[slot.index] = slot.error

        if self._driver.outstanding:
            return PENDING
        self._consumed = True
        raise AggregateError(e for e in self._errors if e is not None)
