"""Readiness tracking: only woken slots become step candidates."""

from braid.engine import Readiness
from braid.kernel import Waker

from fakes import RecordingWaker


def test_new_slots_start_ready_in_index_order() -> None:
    readiness = Readiness(3)
    assert readiness.any_ready()
    assert readiness.take() == [0, 1, 2]
    assert not readiness.any_ready()
    assert readiness.take() == []


def test_wake_flags_only_that_slot_and_fires_parent_once() -> None:
    parent = RecordingWaker()
    readiness = Readiness(4)
    readiness.set_parent(parent.waker)
    readiness.take()

    readiness.wake(2, readiness.epoch(2))
    readiness.wake(2, readiness.epoch(2))
    readiness.wake(0, readiness.epoch(0))

    assert parent.fired == 2
    assert readiness.take() == [0, 2]


def test_retired_slot_is_never_requeued() -> None:
    parent = RecordingWaker()
    readiness = Readiness(2)
    readiness.set_parent(parent.waker)
    readiness.take()

    readiness.retire(1)
    readiness.wake(1, readiness.epoch(1))

    assert parent.fired == 0
    assert not readiness.any_ready()


def test_retire_removes_a_queued_slot() -> None:
    readiness = Readiness(3)
    readiness.retire(1)
    assert readiness.take() == [0, 2]


def test_take_rotated_starts_nearest_to_start() -> None:
    readiness = Readiness(4)
    assert readiness.take_rotated(2) == [2, 3, 0, 1]
    assert readiness.take_rotated(0) == []

    readiness.set_ready(0)
    readiness.set_ready(3)
    assert readiness.take_rotated(1) == [3, 0]
    assert not readiness.any_ready()


def test_revive_ignores_wakes_from_previous_occupant() -> None:
    parent = RecordingWaker()
    readiness = Readiness(1)
    readiness.set_parent(parent.waker)
    old_epoch = readiness.epoch(0)
    readiness.take()
    readiness.retire(0)

    new_epoch = readiness.revive(0)
    assert new_epoch != old_epoch
    assert readiness.take() == [0]

    readiness.wake(0, old_epoch)
    assert not readiness.any_ready()
    readiness.wake(0, new_epoch)
    assert readiness.take() == [0]


def test_grow_appends_a_ready_slot() -> None:
    readiness = Readiness()
    assert len(readiness) == 0
    assert readiness.grow() == 0
    assert readiness.grow() == 1
    assert readiness.take() == [0, 1]


def test_wake_before_parent_is_set_only_flags() -> None:
    readiness = Readiness(1)
    readiness.take()
    waker = Waker(lambda: readiness.wake(0, 0))
    waker.fire()
    assert readiness.is_ready(0)
