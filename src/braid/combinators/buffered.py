"""Bounded Concurrent Map - up to K transformations in flight, output in source order."""

from __future__ import annotations

import inspect
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

from braid.config import BufferedConfig, validated
from braid.engine import Driver
from braid.kernel.adapters import ReadyTask, into_stream, into_task
from braid.kernel.poll import EXHAUSTED, PENDING, Poll
from braid.kernel.ports import release
from braid.kernel.task import Stream, Task
from braid.kernel.trace import Trace
from braid.kernel.waker import Waker


@dataclass(eq=False)
class Cell:
    """One position of the output window.

    Attributes:
        source_index: Position of the item in the source stream
        key: Driver slot running the transformation; None if it failed to start
        state: in_flight until the transformation finishes
        value: The transformation's outcome
        error: Exception the transformation raised, if any
    """

    source_index: int
    key: int | None
    state: Literal["in_flight", "ready"] = "in_flight"
    value: Any = None
    error: Exception | None = field(default=None)


def start_transformation(transform: Callable[[Any], Any], item: Any) -> Any:
    """Run `transform` on one item and wrap whatever it returned as a task."""
    result = transform(item)
    if isinstance(result, Task) or inspect.isawaitable(result):
        return into_task(result)
    return ReadyTask(result)


class BufferedMap(Stream[Any]):
    """
    Apply `transform` to every source item with at most `limit` in flight.

    The window holds one cell per pulled item, oldest first. Cells are
    emitted strictly in source order: a newer cell that finishes early is
    held until every older cell has been emitted. Emitting the oldest cell
    frees room, which the next poll refills from the source before driving
    anything else.

    `transform` may return a Task, a coroutine, any awaitable, or a plain
    value; any other object is a value, even one with a poll attribute.
    A transformation that raises is re-raised in its turn; later
    items are still delivered. A source that raises stops pulling; cells
    already in flight are still drained.

    Raises:
        ConfigurationError: If limit < 1
    """

    def __init__(
        self,
        source: Any,
        transform: Callable[[Any], Any],
        limit: int,
        *,
        trace: Trace | None = None,
    ) -> None:
        self.config = validated(BufferedConfig, limit=limit)
        self._source: Any = into_stream(source)
        self._source_ready = True
        self._source_waker = Waker(self._wake_source)
        self._parent: Waker | None = None
        self._transform = transform
        self._driver = Driver(kind="task", trace=trace)
        self._window: deque[Cell] = deque()
        self._cells: dict[int, Cell] = {}
        self._next_index = 0

    @property
    def in_flight(self) -> int:
        return len(self._window)

    def _wake_source(self) -> None:
        if self._source_ready:
            return
        self._source_ready = True
        if self._parent is not None:
            self._parent.fire()

    def poll_next(self, waker: Waker) -> Poll[Any]:
        self._parent = waker
        self._driver.set_waker(waker)

        while True:
            pulled = self._fill()
            self._drive()

            if self._window and self._window[0].state == "ready":
                cell = self._window.popleft()
                if cell.key is not None:
                    self._driver.discard(cell.key)
                    del self._cells[cell.key]
                if cell.error is not None:
                    raise cell.error
                return Poll.Ready(cell.value)

            if self._source is None and not self._window:
                return EXHAUSTED
            if not pulled:
                return PENDING

    def _fill(self) -> bool:
        """Pull source items while the window has room. Returns whether any were pulled."""
        pulled = False
        while (
            self._source is not None
            and self._source_ready
            and len(self._window) < self.config.limit
        ):
            self._source_ready = False
            try:
                polled = self._source.poll_next(self._source_waker)
            except Exception:
                self._source = None
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
        source_index = self._next_index
        self._next_index += 1
        try:
            task = start_transformation(self._transform, item)
        except Exception as exc:
            self._window.append(Cell(source_index=source_index, key=None, state="ready", error=exc))
            return
        key = self._driver.insert(task)
        cell = Cell(source_index=source_index, key=key)
        self._window.append(cell)
        self._cells[key] = cell

    def _drive(self) -> None:
        for slot in self._driver.step():
            cell = self._cells[slot.index]
            cell.state = "ready"
            if slot.failed:
                cell.error = slot.error
            else:
                cell.value = slot.take()

    def close(self) -> None:
        self._driver.close()
        self._window.clear()
        self._cells.clear()
        source, self._source = self._source, None
        if source is not None:
            release(source)
