"""Adapters turning Python coroutines, awaitables and iterables into braid children."""

from __future__ import annotations

import inspect
from collections.abc import AsyncIterator, Awaitable, Callable, Coroutine, Iterator
from typing import Any, TypeVar

from braid.kernel.errors import InvalidStateError
from braid.kernel.poll import EXHAUSTED, PENDING, Poll
from braid.kernel.ports import StreamPort, TaskPort
from braid.kernel.task import Stream, Task
from braid.kernel.waker import Waker

T = TypeVar("T")


def _is_asyncio_future(obj: Any) -> bool:
    return getattr(obj, "_asyncio_future_blocking", None) is not None


def _park(yielded: Any, waker: Waker) -> None:
    """Arrange for `waker` to fire once whatever a coroutine yielded is ready."""
    if yielded is None:
        # Bare yield (asyncio.sleep(0) and friends): ask to be driven again.
        waker.fire()
    elif hasattr(yielded, "register_interest"):
        yielded.register_interest(waker)
    else:
        raise TypeError(f"coroutine yielded an object braid cannot wait on: {yielded!r}")


class CoroutineTask(Task[T]):
    """Drives a coroutine one `send(None)` at a time.

    Closing the task closes the coroutine synchronously, so its finally
    blocks run before close() returns.
    """

    def __init__(self, coro: Coroutine[Any, Any, T]) -> None:
        self._coro: Coroutine[Any, Any, T] | None = coro
        self._blocker: Any = None
        self._waker: Waker | None = None

    def poll(self, waker: Waker) -> Poll[T]:
        if self._coro is None:
            raise InvalidStateError("coroutine task polled after completion")
        self._waker = waker
        if self._blocker is not None:
            # Resuming before the asyncio future resolves is an error in asyncio.
            if not self._blocker.done():
                return PENDING
            self._blocker = None
        try:
            yielded = self._coro.send(None)
        except StopIteration as stop:
            self._coro = None
            return Poll.Ready(stop.value)
        except Exception:
            self._coro = None
            raise
        if _is_asyncio_future(yielded):
            yielded._asyncio_future_blocking = False
            yielded.add_done_callback(self._resume)
            self._blocker = yielded
            return PENDING
        try:
            _park(yielded, waker)
        except TypeError:
            self.close()
            raise
        return PENDING

    def _resume(self, _future: Any) -> None:
        # Fires whichever waker the latest poll supplied.
        if self._waker is not None:
            self._waker.fire()

    def close(self) -> None:
        if self._blocker is not None:
            blocker, self._blocker = self._blocker, None
            blocker.remove_done_callback(self._resume)
        self._waker = None
        if self._coro is not None:
            coro, self._coro = self._coro, None
            coro.close()

    def __repr__(self) -> str:
        return f"CoroutineTask({self._coro!r})"


class ReadyTask(Task[T]):
    """Completes on its first poll."""

    def __init__(self, value: T) -> None:
        self._value = value
        self._done = False

    def poll(self, waker: Waker) -> Poll[T]:
        if self._done:
            raise InvalidStateError("ready task polled after completion")
        self._done = True
        return Poll.Ready(self._value)


class PendingTask(Task[Any]):
    """Never completes and never registers interest."""

    def poll(self, waker: Waker) -> Poll[Any]:
        return PENDING


class PollFnTask(Task[T]):
    """Task whose advance step is a plain function of the waker."""

    def __init__(self, fn: Callable[[Waker], Poll[T]]) -> None:
        self._fn = fn

    def poll(self, waker: Waker) -> Poll[T]:
        return self._fn(waker)


class IteratorStream(Stream[T]):
    """Always-ready stream over a synchronous iterator."""

    def __init__(self, iterator: Iterator[T]) -> None:
        self._iterator: Iterator[T] | None = iterator

    def poll_next(self, waker: Waker) -> Poll[T]:
        if self._iterator is None:
            return EXHAUSTED
        try:
            return Poll.Ready(next(self._iterator))
        except StopIteration:
            self._iterator = None
            return EXHAUSTED

    def close(self) -> None:
        iterator, self._iterator = self._iterator, None
        close = getattr(iterator, "close", None)
        if close is not None:
            close()


async def _anext(iterator: AsyncIterator[T]) -> T:
    return await iterator.__anext__()


class AsyncIteratorStream(Stream[T]):
    """Stream over an async iterator; each item is fetched by a CoroutineTask."""

    def __init__(self, iterator: AsyncIterator[T]) -> None:
        self._iterator: AsyncIterator[T] | None = iterator
        self._fetch: CoroutineTask[T] | None = None

    def poll_next(self, waker: Waker) -> Poll[T]:
        if self._iterator is None:
            return EXHAUSTED
        if self._fetch is None:
            self._fetch = CoroutineTask(_anext(self._iterator))
        try:
            polled = self._fetch.poll(waker)
        except StopAsyncIteration:
            self._fetch = None
            self._iterator = None
            return EXHAUSTED
        except Exception:
            self._fetch = None
            self._iterator = None
            raise
        if polled.is_ready:
            self._fetch = None
        return polled

    def close(self) -> None:
        if self._fetch is not None:
            fetch, self._fetch = self._fetch, None
            fetch.close()
        iterator, self._iterator = self._iterator, None
        aclose = getattr(iterator, "aclose", None)
        if aclose is None:
            return
        # Finalization of an async generator is driven synchronously; if its
        # cleanup needs to suspend, the remaining cleanup is abandoned.
        closer = aclose()
        try:
            closer.send(None)
        except StopIteration:
            return
        closer.close()


async def _await(awaitable: Awaitable[T]) -> T:
    return await awaitable


def into_task(obj: Any) -> Any:
    """Accept a task, a coroutine or any awaitable as a task child."""
    if isinstance(obj, TaskPort):
        return obj
    if inspect.iscoroutine(obj):
        return CoroutineTask(obj)
    if inspect.isawaitable(obj):
        return CoroutineTask(_await(obj))
    raise TypeError(f"cannot use {type(obj).__name__!r} as a task")


def into_stream(obj: Any) -> Any:
    """Accept a stream, an async iterable or an iterable as a stream child."""
    if isinstance(obj, StreamPort):
        return obj
    if hasattr(obj, "__aiter__"):
        return AsyncIteratorStream(obj.__aiter__())
    if hasattr(obj, "__iter__"):
        return IteratorStream(iter(obj))
    raise TypeError(f"cannot use {type(obj).__name__!r} as a stream")


def ready(value: T) -> ReadyTask[T]:
    """Task that completes immediately with `value`."""
    return ReadyTask(value)


def pending() -> PendingTask:
    """Task that never completes."""
    return PendingTask()


def poll_fn(fn: Callable[[Waker], Poll[T]]) -> PollFnTask[T]:
    """Build a task from a function called with the waker on every poll."""
    return PollFnTask(fn)
