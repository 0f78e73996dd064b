"""Runtime trace infrastructure - separate from combinator state.

A Driver given a Trace records one evidence event per slot transition
(done, failed, exhausted, released). Tracing never changes what a
combinator does; it only makes the transitions observable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True)
class Evidence:
    """A single recorded slot transition."""

    action: str = ""
    id: int = field(default=0)
    timestamp: datetime = field(default_factory=lambda: datetime.now(UTC))
    info: dict[str, Any] = field(default_factory=dict)

    @property
    def index(self) -> int | None:
        """Slot index the event refers to, when there is one."""
        return self.info.get("index")


class Trace:
    """Runtime trace context for capturing slot transitions.

    Performance guarantees:
    - Trace disabled → single None check overhead
    - Evidence append is O(1)
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._events: list[Evidence] = []
        self._next_id: int = 0

    def record(
        self,
        action: str,
        info: dict[str, Any] | None = None,
    ) -> int | None:
        """Record an evidence event.

        Args:
            action: What happened (e.g., "slot_done", "slot_released")
            info: Additional context, usually the slot index

        Returns:
            Event ID, or None if tracing disabled
        """
        if not self.enabled:
            return None

        event_id = self._next_id
        self._next_id += 1
        self._events.append(
            Evidence(
                action=action,
                id=event_id,
                timestamp=datetime.now(UTC),
                info=info or {},
            )
        )
        return event_id

    def get_events(self) -> list[Evidence]:
        """Get all recorded events."""
        return list(self._events)

    def find_all(self, **kwargs: Any) -> list[Evidence]:
        """Find events whose attributes or info match every given criterion."""
        return [
            e
            for e in self._events
            if all(getattr(e, k, None) == v or e.info.get(k) == v for k, v in kwargs.items())
        ]

    def __len__(self) -> int:
        return len(self._events)

    def clear(self) -> None:
        """Clear all events (for reuse)."""
        self._events.clear()
        self._next_id = 0
