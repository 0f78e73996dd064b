"""Chain - drain streams one after another."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from typing import Any

from braid.kernel.adapters import into_stream
from braid.kernel.poll import EXHAUSTED, Poll
from braid.kernel.ports import release
from braid.kernel.task import Stream
from braid.kernel.waker import Waker


class Chain(Stream[Any]):
    """Yield every item of the first stream, then the second, and so on."""

    def __init__(self, streams: Iterable[Any]) -> None:
        self._streams = deque(into_stream(s) for s in streams)

    def poll_next(self, waker: Waker) -> Poll[Any]:
        while self._streams:
            try:
                polled = self._streams[0].poll_next(waker)
            except Exception:
                self._streams.popleft()
                raise
            if not polled.is_exhausted:
                return polled
            self._streams.popleft()
        return EXHAUSTED

    def close(self) -> None:
        while self._streams:
            release(self._streams.popleft())
