"""Port protocols for Braid - the advance contract children must satisfy."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from braid.kernel.poll import Poll
from braid.kernel.waker import Waker


@runtime_checkable
class TaskPort(Protocol):
    """A suspended computation that eventually produces exactly one outcome.

    poll() must register the waker with whatever will resume it before
    returning pending. Raising from poll() is the child's failure outcome.
    """

    def poll(self, waker: Waker) -> Poll[Any]: ...


@runtime_checkable
class StreamPort(Protocol):
    """A suspended computation producing items until it reports exhaustion.

    poll_next() produces at most one item per call.
    """

    def poll_next(self, waker: Waker) -> Poll[Any]: ...


@runtime_checkable
class Closeable(Protocol):
    """Children that hold in-flight work implement close() to discard it."""

    def close(self) -> None: ...


def release(child: Any) -> None:
    """Discard a child's in-flight work if it knows how to."""
    if isinstance(child, Closeable):
        child.close()
