"""Per-slot readiness flags plus the queue of slots woken since the last step.

The queue holds exactly the indices whose flag is READY, so taking the
candidates for a step costs O(woken slots) rather than O(all slots).
Retired slots (done, exhausted or released) can never be re-queued.
"""

from __future__ import annotations

from braid.kernel.waker import Waker

IDLE = 0
READY = 1
RETIRED = 2


class Readiness:
    """Tracks which slots asked to be driven again."""

    def __init__(self, size: int = 0) -> None:
        self._flags: list[int] = [READY] * size
        self._epochs: list[int] = [0] * size
        self._queue: list[int] = list(range(size))
        self._parent: Waker | None = None

    def __len__(self) -> int:
        return len(self._flags)

    def set_parent(self, waker: Waker) -> None:
        """Set the waker of whoever drives the owning combinator.

        Must be refreshed at the start of every poll.
        """
        self._parent = waker

    def epoch(self, index: int) -> int:
        return self._epochs[index]

    def set_ready(self, index: int) -> bool:
        """Flag a slot as ready. Returns whether it was already flagged (or retired)."""
        flag = self._flags[index]
        if flag != IDLE:
            return True
        self._flags[index] = READY
        self._queue.append(index)
        return False

    def wake(self, index: int, epoch: int) -> None:
        """Resume callback of one slot; stale callbacks from a previous occupant are ignored."""
        if self._epochs[index] != epoch:
            return
        if not self.set_ready(index) and self._parent is not None:
            self._parent.fire()

    def is_ready(self, index: int) -> bool:
        return self._flags[index] == READY

    def any_ready(self) -> bool:
        return bool(self._queue)

    def take(self) -> list[int]:
        """Clear and return every flagged index, in ascending order."""
        queue, self._queue = self._queue, []
        for index in queue:
            self._flags[index] = IDLE
        queue.sort()
        return queue

    def take_rotated(self, start: int) -> list[int]:
        """Clear and return every flagged index, nearest to `start` first, wrapping around."""
        size = len(self._flags)
        return sorted(self.take(), key=lambda index: (index - start) % size)

    def retire(self, index: int) -> None:
        if self._flags[index] == READY:
            self._queue.remove(index)
        self._flags[index] = RETIRED

    def grow(self) -> int:
        """Append a new slot, flagged ready. Returns its index."""
        index = len(self._flags)
        self._flags.append(READY)
        self._epochs.append(0)
        self._queue.append(index)
        return index

    def revive(self, index: int) -> int:
        """Reuse a retired index for a new occupant. Returns the new epoch."""
        if self._flags[index] != RETIRED:
            raise ValueError(f"slot {index} is still live")
        self._epochs[index] += 1
        self._flags[index] = READY
        self._queue.append(index)
        return self._epochs[index]
