"""Runtime layer - reference hosts that drive combinators."""

from braid.runtime import aio
from braid.runtime.executor import block_on, collect, iterate

__all__ = [
    "aio",
    "block_on",
    "collect",
    "iterate",
]
