"""Base classes for every task and stream braid builds."""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Generic, Self, TypeVar

from braid.kernel.poll import Poll
from braid.kernel.waker import Waker

T = TypeVar("T")


class Task(ABC, Generic[T]):
    """
    Suspended computation producing one outcome.

    Combinators own their children: closing a task releases every child it
    still holds. Driving a task after its outcome was returned is misuse.
    """

    @abstractmethod
    def poll(self, waker: Waker) -> Poll[T]:
        """Advance by one step."""
        pass

    def close(self) -> None:
        """Release in-flight work. Idempotent."""
        return None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class Stream(ABC, Generic[T]):
    """Suspended computation producing items until exhausted."""

    @abstractmethod
    def poll_next(self, waker: Waker) -> Poll[T]:
        """Advance by one step, producing at most one item."""
        pass

    def close(self) -> None:
        """Release in-flight work. Idempotent."""
        return None

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
