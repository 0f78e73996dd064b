"""WaitUntil and StreamWaitUntil - hold a task or stream back until a deadline task completes."""

from __future__ import annotations

from typing import Any, Literal

from braid.kernel.adapters import into_stream, into_task
from braid.kernel.errors import InvalidStateError
from braid.kernel.poll import EXHAUSTED, PENDING, Poll
from braid.kernel.ports import release
from braid.kernel.task import Stream, Task
from braid.kernel.waker import Waker


class WaitUntil(Task[Any]):
    """Drive `deadline` to completion, then drive `task` and return its outcome.

    The deadline's own outcome is discarded; if it raises, the task is
    released and the exception propagates.
    """

    def __init__(self, task: Any, deadline: Any) -> None:
        self._task: Any = into_task(task)
        self._deadline: Any = into_task(deadline)
        self._state: Literal["started", "running", "completed"] = "started"

    def poll(self, waker: Waker) -> Poll[Any]:
        if self._state == "completed":
            raise InvalidStateError("wait_until polled after completion")

        if self._state == "started":
            try:
                polled = self._deadline.poll(waker)
            except Exception:
                self.close()
                raise
            if polled.is_pending:
                return PENDING
            self._deadline = None
            self._state = "running"

        try:
            polled = self._task.poll(waker)
        except Exception:
            self._task = None
            self._state = "completed"
            raise
        if polled.is_ready:
            self._task = None
            self._state = "completed"
        return polled

    def close(self) -> None:
        for child in (self._deadline, self._task):
            if child is not None:
                release(child)
        self._deadline = self._task = None
        self._state = "completed"


class StreamWaitUntil(Stream[Any]):
    """Drive `deadline` to completion, then pass `stream`'s items through.

    Nothing is pulled from the stream before the deadline completes. If the
    deadline raises, the stream is released and the exception propagates;
    every later poll reports exhaustion.
    """

    def __init__(self, stream: Any, deadline: Any) -> None:
        self._stream: Any = into_stream(stream)
        self._deadline: Any = into_task(deadline)

    def poll_next(self, waker: Waker) -> Poll[Any]:
        if self._stream is None:
            return EXHAUSTED

        if self._deadline is not None:
            try:
                polled = self._deadline.poll(waker)
            except Exception:
                self.close()
                raise
            if polled.is_pending:
                return PENDING
            self._deadline = None

        try:
            polled = self._stream.poll_next(waker)
        except Exception:
            self._stream = None
            raise
        if polled.is_exhausted:
            self._stream = None
        return polled

    def close(self) -> None:
        for child in (self._deadline, self._stream):
            if child is not None:
                release(child)
        self._deadline = self._stream = None
