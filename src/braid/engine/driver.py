"""Readiness-Tracking Driver - drives only the slots that asked to be resumed."""

from __future__ import annotations

import logging
from collections.abc import Container, Iterable, Iterator
from functools import partial
from typing import Any, Literal

from braid.engine.readiness import Readiness
from braid.engine.slot import Slot
from braid.kernel.trace import Trace
from braid.kernel.waker import Waker

LOG = logging.getLogger("braid.engine")


class Driver:
    """
    Owns an ordered collection of slots.

    Each slot gets its own waker; firing it flags only that slot for the
    next step, and wakes the combinator's host if the slot was idle. A slot
    that settled (done, exhausted or released) is retired from the
    readiness tracker and never driven again.

    Attributes:
        kind: "task" or "stream", the contract every child follows
        outstanding: Number of slots still pending
    """

    def __init__(
        self,
        children: Iterable[Any] = (),
        *,
        kind: Literal["task", "stream"] = "task",
        trace: Trace | None = None,
    ) -> None:
        self.kind = kind
        self.outstanding = 0
        self._slots: list[Slot | None] = []
        self._free: list[int] = []
        self._readiness = Readiness()
        self._trace = trace
        for child in children:
            self.insert(child)

    def __len__(self) -> int:
        return self.outstanding

    def __getitem__(self, index: int) -> Slot:
        slot = self._slots[index]
        if slot is None:
            raise KeyError(index)
        return slot

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and 0 <= index < len(self._slots) and self._slots[index] is not None

    def __iter__(self) -> Iterator[Slot]:
        return (slot for slot in self._slots if slot is not None)

    @property
    def capacity(self) -> int:
        """Number of indices allocated, live or free."""
        return len(self._slots)

    def insert(self, child: Any) -> int:
        """Take ownership of a child. Returns the index of its slot.

        Indices freed by discard() are reused before new ones are allocated.
        """
        if self._free:
            index = self._free.pop()
            epoch = self._readiness.revive(index)
        else:
            index = self._readiness.grow()
            epoch = 0
            self._slots.append(None)
        waker = Waker(partial(self._readiness.wake, index, epoch))
        self._slots[index] = Slot(index=index, child=child, waker=waker, kind=self.kind)
        self.outstanding += 1
        return index

    def set_waker(self, waker: Waker) -> None:
        """Register the host's waker; call at the start of every poll."""
        self._readiness.set_parent(waker)

    def mark_ready(self, index: int) -> None:
        """Flag a pending slot for the next step without waking the host."""
        self._readiness.set_ready(index)

    def mark_all_ready(self) -> None:
        for slot in self._slots:
            if slot is not None and slot.is_pending:
                self._readiness.set_ready(slot.index)

    def any_ready(self) -> bool:
        return self._readiness.any_ready()

    def step(self, exclude: Container[int] = ()) -> list[Slot]:
        """Advance every flagged slot once.

        Args:
            exclude: Indices to leave flagged without driving them

        Returns:
            Slots that produced something, in ascending index order
        """
        changed: list[Slot] = []
        held: list[int] = []
        for index in self._readiness.take():
            if index in exclude:
                held.append(index)
                continue
            slot = self._slots[index]
            if slot is not None and slot.advance():
                self._settle(slot)
                changed.append(slot)
        for index in held:
            self._readiness.set_ready(index)
        return changed

    def advance_next(self, start: int = 0) -> Slot | None:
        """Advance the slots flagged when the call began, in rotation from `start`,
        until one produces something.

        Candidates after the producing one stay flagged. A slot that wakes
        itself while being advanced is left for the next call; its wake has
        already reached the host.
        """
        candidates = self._readiness.take_rotated(start)
        for position, index in enumerate(candidates):
            slot = self._slots[index]
            if slot is not None and slot.advance():
                self._settle(slot)
                for rest in candidates[position + 1 :]:
                    self._readiness.set_ready(rest)
                return slot
        return None

    def _settle(self, slot: Slot) -> None:
        if slot.is_pending:
            return
        self.outstanding -= 1
        self._readiness.retire(slot.index)
        if self._trace is not None:
            action = "slot_failed" if slot.failed else f"slot_{slot.state}"
            self._trace.record(action, info={"index": slot.index})

    def release(self, index: int) -> bool:
        """Give up one pending slot. Returns False if it had already settled."""
        slot = self[index]
        if not slot.release():
            return False
        self.outstanding -= 1
        self._readiness.retire(index)
        if self._trace is not None:
            self._trace.record("slot_released", info={"index": index})
        return True

    def discard(self, index: int) -> Slot:
        """Forget a slot, releasing it first if needed; its index becomes reusable."""
        slot = self[index]
        self.release(index)
        self._slots[index] = None
        self._free.append(index)
        return slot

    def close(self) -> int:
        """Release every pending slot. Returns how many were released."""
        released = 0
        for slot in self._slots:
            if slot is not None and slot.is_pending and self.release(slot.index):
                released += 1
        if released:
            LOG.debug("released %d outstanding %s slot(s)", released, self.kind)
        return released

    def __repr__(self) -> str:
        states = [slot.state if slot is not None else "free" for slot in self._slots]
        return f"Driver(kind={self.kind!r}, outstanding={self.outstanding}, slots={states})"
