"""Poll results - the single-step advance contract shared by tasks and streams."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Literal, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Poll(Generic[T]):
    """
    Outcome of advancing a task or stream by one step.

    Kinds:
    - pending: The child suspended and registered its waker
    - ready: A task completed with `value`, or a stream produced the item `value`
    - exhausted: A stream has no more items (never returned by tasks)
    """

    kind: Literal["pending", "ready", "exhausted"]
    value: T | None = None

    @staticmethod
    def Pending() -> Poll[Any]:
        return PENDING

    @staticmethod
    def Ready(value: T) -> Poll[T]:
        return Poll(kind="ready", value=value)

    @staticmethod
    def Exhausted() -> Poll[Any]:
        return EXHAUSTED

    @property
    def is_pending(self) -> bool:
        return self.kind == "pending"

    @property
    def is_ready(self) -> bool:
        return self.kind == "ready"

    @property
    def is_exhausted(self) -> bool:
        return self.kind == "exhausted"


PENDING: Poll[Any] = Poll(kind="pending")
EXHAUSTED: Poll[Any] = Poll(kind="exhausted")
