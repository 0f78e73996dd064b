"""Resume notifications between children, combinators and hosts."""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any


class Waker:
    """Handle a suspended child fires to ask its owner to drive it again.

    Firing is cheap and may happen any number of times, from inside or
    outside a poll call.
    """

    __slots__ = ("_callback",)

    def __init__(self, callback: Callable[[], None]) -> None:
        self._callback = callback

    def fire(self) -> None:
        self._callback()

    def __repr__(self) -> str:
        return f"Waker({self._callback!r})"


def _noop() -> None:
    return None


def noop_waker() -> Waker:
    """Waker that ignores every fire, for polling children by hand."""
    return Waker(_noop)


class Signal:
    """
    Leaf notification primitive.

    Children call register_interest() before returning pending; fire()
    wakes every waker registered since the previous fire, exactly once.
    Awaiting a signal from a braid-driven coroutine suspends until the
    next fire.
    """

    def __init__(self) -> None:
        self._wakers: list[Waker] = []
        self._generation = 0

    def register_interest(self, waker: Waker) -> None:
        self._wakers.append(waker)

    def fire(self) -> None:
        self._generation += 1
        wakers, self._wakers = self._wakers, []
        for waker in wakers:
            waker.fire()

    @property
    def waiting(self) -> int:
        """Number of wakers registered and not yet fired."""
        return len(self._wakers)

    def __await__(self) -> Generator[Any, None, None]:
        generation = self._generation
        # Spurious resumes re-park until the generation moves on.
        while self._generation == generation:
            yield self


class Event(Signal):
    """Latching signal: once fired it stays set until clear() is called."""

    def __init__(self) -> None:
        super().__init__()
        self._set = False

    def is_set(self) -> bool:
        return self._set

    def fire(self) -> None:
        self._set = True
        super().fire()

    def clear(self) -> None:
        self._set = False

    def register_interest(self, waker: Waker) -> None:
        if self._set:
            waker.fire()
            return
        super().register_interest(waker)

    def __await__(self) -> Generator[Any, None, None]:
        while not self._set:
            yield self
