"""Error types raised by combinators and hosts."""

from __future__ import annotations

from collections.abc import Iterable, Iterator


class BraidError(Exception):
    """Base class for errors raised by braid itself (never by children)."""


class AggregateError(BraidError):
    """Every child failure of a RaceOk, in original index order.

    The collection may be empty when the race had no children.
    """

    def __init__(self, errors: Iterable[BaseException]) -> None:
        self.errors: tuple[BaseException, ...] = tuple(errors)
        super().__init__(f"{len(self.errors)} errors occurred")

    def __len__(self) -> int:
        return len(self.errors)

    def __iter__(self) -> Iterator[BaseException]:
        return iter(self.errors)

    def __getitem__(self, index: int) -> BaseException:
        return self.errors[index]

    def __repr__(self) -> str:
        return f"AggregateError({list(self.errors)!r})"


class InvalidStateError(BraidError, RuntimeError):
    """A task was driven after it already produced its outcome."""


class ConfigurationError(BraidError, ValueError):
    """A combinator was constructed with an invalid configuration."""


class DeadlockError(BraidError, RuntimeError):
    """A host found its task pending with nothing left that could wake it."""
