"""Combinator engine - Task Slots and the Readiness-Tracking Driver."""

from braid.engine.driver import Driver
from braid.engine.readiness import Readiness
from braid.engine.slot import Slot, SlotState

__all__ = [
    "Driver",
    "Readiness",
    "Slot",
    "SlotState",
]
