"""Combinators - join, race, merge and bounded concurrent map over tasks and streams.

Combinators satisfy the following laws:

1. Join order: join(a, b) completes with (outcome(a), outcome(b)) whatever
   order a and b finish in.
2. Race determinism: when several children finish in the same step, the
   lowest index wins, every time.
3. Merge fairness: while several streams are ready, none is skipped twice
   in a row.
4. Buffered order: buffered_map(s, f, k) yields f(x) in the order x
   appears in s, for every k >= 1.
5. Composition: every combinator is itself a task or stream, so
   race(join(a, b), c) is well formed.
"""

from .buffered import BufferedMap, Cell
from .chain import Chain
from .for_each import ForEach, TryForEach
from .group import FutureGroup, StreamGroup
from .join import Join, TryJoin
from .merge import Merge
from .ops import (
    buffered_map,
    chain_streams,
    for_each,
    join,
    join_all,
    merge,
    merge_all,
    race,
    race_all,
    race_ok,
    race_ok_all,
    try_join,
    try_for_each,
    try_join_all,
    wait_until,
    wait_until_stream,
    zip_all,
    zip_streams,
)
from .race import Race, RaceOk, Winner
from .wait_until import StreamWaitUntil, WaitUntil
from .zip import Zip

__all__ = [
    # Tasks
    "Join",
    "TryJoin",
    "Race",
    "RaceOk",
    "Winner",
    "WaitUntil",
    "ForEach",
    "TryForEach",
    # Streams
    "Merge",
    "Zip",
    "Chain",
    "BufferedMap",
    "Cell",
    "FutureGroup",
    "StreamGroup",
    "StreamWaitUntil",
    # Entry points
    "join",
    "join_all",
    "try_join",
    "try_join_all",
    "race",
    "race_all",
    "race_ok",
    "race_ok_all",
    "merge",
    "merge_all",
    "zip_streams",
    "zip_all",
    "chain_streams",
    "buffered_map",
    "for_each",
    "try_for_each",
    "wait_until",
    "wait_until_stream",
]
