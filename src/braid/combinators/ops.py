"""Combinator entry points: join, try_join, race, race_ok, merge, zip, chain, buffered_map, for_each.

Variadic forms accept a fixed heterogeneous group of children and, where
the result is an aggregate, return a tuple. The `*_all` forms accept any
iterable of children and return a list. Both forms build the same
combinator and honour the same contract; there is no arity limit.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any

from .buffered import BufferedMap
from .chain import Chain
from .for_each import ForEach, TryForEach
from .join import Join, TryJoin
from .merge import Merge
from .race import Race, RaceOk
from .wait_until import StreamWaitUntil, WaitUntil
from .zip import Zip


def join(*tasks: Any) -> Join:
    """Wait for every task; outcomes come back as a tuple in argument order.

    Semantics:
        - Never short-circuits
        - A task that raises has its exception placed in its position

    Args:
        *tasks: Tasks, coroutines or awaitables.

    Returns:
        Join: A task completing with a tuple of outcomes.
    """
    return Join(tasks, as_tuple=True)


def join_all(tasks: Iterable[Any]) -> Join:
    """Wait for every task in a collection; outcomes come back as a list."""
    return Join(tasks)


def try_join(*tasks: Any) -> TryJoin:
    """Wait for every task, aborting on the first one that raises.

    Semantics:
        - On success, a tuple of outcomes in argument order
        - On failure, every other pending task is released and the lowest
          index failure of that step is re-raised

    Args:
        *tasks: Tasks, coroutines or awaitables.

    Returns:
        TryJoin: A task completing with a tuple of outcomes.
    """
    return TryJoin(tasks, as_tuple=True)


def try_join_all(tasks: Iterable[Any]) -> TryJoin:
    """try_join over a collection; outcomes come back as a list."""
    return TryJoin(tasks)


def race(*tasks: Any) -> Race:
    """Complete with whichever task finishes first; ties go to the lowest index.

    Raises:
        ConfigurationError: If no tasks are given.
    """
    return Race(tasks)


def race_all(tasks: Iterable[Any]) -> Race:
    """race over a collection."""
    return Race(tasks)


def race_ok(*tasks: Any) -> RaceOk:
    """Complete with the first task that finishes without raising.

    Raises (when driven):
        AggregateError: Every task raised; failures in argument order.
    """
    return RaceOk(tasks)


def race_ok_all(tasks: Iterable[Any]) -> RaceOk:
    """race_ok over a collection."""
    return RaceOk(tasks)


def merge(*streams: Any) -> Merge:
    """Fairly interleave items from several streams."""
    return Merge(streams)


def merge_all(streams: Iterable[Any]) -> Merge:
    """merge over a collection."""
    return Merge(streams)


def zip_streams(*streams: Any) -> Zip:
    """Yield tuples holding one item from each stream."""
    return Zip(streams, as_tuple=True)


def zip_all(streams: Iterable[Any]) -> Zip:
    """zip over a collection; each yielded group is a list."""
    return Zip(streams, as_tuple=False)


def chain_streams(*streams: Any) -> Chain:
    """Yield the items of each stream in turn."""
    return Chain(streams)


def buffered_map(source: Any, transform: Callable[[Any], Any], limit: int) -> BufferedMap:
    """Map `transform` over `source` with up to `limit` transformations in flight.

    Output order always matches source order.

    Raises:
        ConfigurationError: If limit < 1.
    """
    return BufferedMap(source, transform, limit)


def wait_until(task: Any, deadline: Any) -> WaitUntil:
    """Start driving `task` only once `deadline` has completed."""
    return WaitUntil(task, deadline)


def wait_until_stream(stream: Any, deadline: Any) -> StreamWaitUntil:
    """Start pulling from `stream` only once `deadline` has completed."""
    return StreamWaitUntil(stream, deadline)


def for_each(source: Any, action: Callable[[Any], Any], limit: int) -> ForEach:
    """Run `action` on every item of `source` with up to `limit` actions in flight.

    Semantics:
        - Completes with the number of items processed
        - Never short-circuits; failed actions are raised together as
          AggregateError, in source order, once every action has finished

    Raises:
        ConfigurationError: If limit < 1.
    """
    return ForEach(source, action, limit)


def try_for_each(source: Any, action: Callable[[Any], Any], limit: int) -> TryForEach:
    """for_each that stops at the first action to raise.

    Semantics:
        - The source and every action in flight are released
        - The failure is re-raised

    Raises:
        ConfigurationError: If limit < 1.
    """
    return TryForEach(source, action, limit)
