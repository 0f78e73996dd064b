"""Task Slot - one owned child plus its completion state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from braid.kernel.ports import release
from braid.kernel.waker import Waker

SlotState = Literal["pending", "done", "exhausted", "released"]


@dataclass(eq=False)
class Slot:
    """
    A single child owned by a Driver.

    Attributes:
        index: Position of the slot in its Driver
        child: The owned task or stream; dropped once the slot settles
        waker: Resume handle passed to the child on every advance
        kind: Whether the child follows the task or the stream contract
        state: pending → done (tasks) or pending → exhausted (streams);
            released when the owner gives the child up early
        value: Outcome of a done task, or the last item of a stream
        error: Exception the child raised, if any
    """

    index: int
    child: Any
    waker: Waker
    kind: Literal["task", "stream"] = "task"
    state: SlotState = "pending"
    value: Any = None
    error: Exception | None = None

    @property
    def is_pending(self) -> bool:
        return self.state == "pending"

    @property
    def failed(self) -> bool:
        return self.error is not None

    def advance(self) -> bool:
        """Drive the child once.

        Returns True when the slot produced something: an outcome, an item,
        exhaustion, or a failure.
        """
        try:
            if self.kind == "task":
                polled = self.child.poll(self.waker)
            else:
                polled = self.child.poll_next(self.waker)
        except Exception as exc:
            self.error = exc
            self.state = "done" if self.kind == "task" else "exhausted"
            self.child = None
            return True

        if polled.is_pending:
            return False
        if polled.is_exhausted:
            if self.kind == "task":
                raise TypeError(f"task {self.child!r} reported exhaustion")
            self.state = "exhausted"
            self.child = None
            return True

        self.value = polled.value
        if self.kind == "task":
            self.state = "done"
            self.child = None
        return True

    def take(self) -> Any:
        """Hand the stored value to the owner and forget it."""
        value, self.value = self.value, None
        return value

    def release(self) -> bool:
        """Give up a still-pending child, discarding its in-flight work."""
        if self.state != "pending":
            return False
        child, self.child = self.child, None
        self.state = "released"
        release(child)
        return True
