"""Kernel layer - the advance contract, resume notifications and adapters."""

from braid.kernel.adapters import (
    AsyncIteratorStream,
    CoroutineTask,
    IteratorStream,
    into_stream,
    into_task,
    pending,
    poll_fn,
    ready,
)
from braid.kernel.errors import (
    AggregateError,
    BraidError,
    ConfigurationError,
    DeadlockError,
    InvalidStateError,
)
from braid.kernel.poll import EXHAUSTED, PENDING, Poll
from braid.kernel.ports import StreamPort, TaskPort, release
from braid.kernel.task import Stream, Task
from braid.kernel.trace import Evidence, Trace
from braid.kernel.waker import Event, Signal, Waker, noop_waker

__all__ = [
    "Poll",
    "PENDING",
    "EXHAUSTED",
    "Task",
    "Stream",
    "TaskPort",
    "StreamPort",
    "release",
    # Resume notifications
    "Waker",
    "Signal",
    "Event",
    "noop_waker",
    # Adapters
    "CoroutineTask",
    "IteratorStream",
    "AsyncIteratorStream",
    "into_task",
    "into_stream",
    "ready",
    "pending",
    "poll_fn",
    # Errors
    "BraidError",
    "AggregateError",
    "InvalidStateError",
    "ConfigurationError",
    "DeadlockError",
    # Tracing
    "Evidence",
    "Trace",
]
