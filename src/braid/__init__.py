from .combinators import (
    BufferedMap,
    Chain,
    ForEach,
    FutureGroup,
    Join,
    Merge,
    Race,
    RaceOk,
    StreamGroup,
    StreamWaitUntil,
    TryForEach,
    TryJoin,
    WaitUntil,
    Winner,
    Zip,
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
    try_for_each,
    try_join,
    try_join_all,
    wait_until,
    wait_until_stream,
    zip_all,
    zip_streams,
)
from .config import BufferedConfig, RuntimeSettings
from .engine import Driver
from .kernel import (
    EXHAUSTED,
    PENDING,
    AggregateError,
    BraidError,
    ConfigurationError,
    DeadlockError,
    Event,
    InvalidStateError,
    Poll,
    Signal,
    Stream,
    Task,
    Trace,
    Waker,
    into_stream,
    into_task,
    noop_waker,
    pending,
    poll_fn,
    ready,
)
from .runtime import aio, block_on, collect, iterate

__all__ = [
    # Core
    "Poll",
    "PENDING",
    "EXHAUSTED",
    "Task",
    "Stream",
    "Waker",
    "Signal",
    "Event",
    "noop_waker",
    "into_task",
    "into_stream",
    "ready",
    "pending",
    "poll_fn",
    "Driver",
    # Combinators
    "Join",
    "TryJoin",
    "Race",
    "RaceOk",
    "Winner",
    "WaitUntil",
    "ForEach",
    "TryForEach",
    "Merge",
    "Zip",
    "Chain",
    "BufferedMap",
    "FutureGroup",
    "StreamGroup",
    "StreamWaitUntil",
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
    # Config
    "BufferedConfig",
    "RuntimeSettings",
    # Errors
    "BraidError",
    "AggregateError",
    "InvalidStateError",
    "ConfigurationError",
    "DeadlockError",
    # Tracing
    "Trace",
    # Runtime
    "aio",
    "block_on",
    "collect",
    "iterate",
]
