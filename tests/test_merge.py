"""Merge fairness, exhaustion and release."""

import asyncio

import pytest

from braid import EXHAUSTED, Merge, collect, merge, merge_all

from fakes import ManualStream, ReadyStream, RecordingWaker, drain


def test_merge_round_robins_ready_streams() -> None:
    a = ReadyStream(["a1", "a2", "a3"])
    b = ReadyStream(["b1", "b2"])
    assert drain(merge(a, b)) == ["a1", "b1", "a2", "b2", "a3"]


def test_merge_never_skips_a_ready_stream_twice() -> None:
    streams = [ReadyStream([f"{name}{i}" for i in range(4)]) for name in "xyz"]
    items = drain(merge_all(streams))

    assert len(items) == 12
    for window in range(0, 12, 3):
        assert sorted(s[0] for s in items[window : window + 3]) == ["x", "y", "z"]


def test_merge_picks_up_wherever_items_arrive() -> None:
    left, right = ManualStream(name="left"), ManualStream(name="right")
    task = merge(left, right)
    waker = RecordingWaker()

    assert task.poll_next(waker.waker).is_pending
    right.push("r1")
    assert waker.fired == 1
    assert task.poll_next(waker.waker).value == "r1"

    left.push("l1")
    right.push("r2")
    assert task.poll_next(waker.waker).value == "l1"
    assert task.poll_next(waker.waker).value == "r2"
    assert task.poll_next(waker.waker).is_pending


def test_merge_only_polls_woken_streams() -> None:
    quiet, busy = ManualStream(name="quiet"), ManualStream(name="busy")
    task = merge(quiet, busy)
    waker = RecordingWaker()
    task.poll_next(waker.waker)

    busy.push(1, 2, 3)
    for _ in range(3):
        task.poll_next(waker.waker)

    assert quiet.polls == 1


def test_merge_exhaustion_is_idempotent() -> None:
    task = merge(ReadyStream([1]), ReadyStream([]))
    waker = RecordingWaker()

    assert drain(task, waker) == [1]
    for _ in range(3):
        assert task.poll_next(waker.waker) is EXHAUSTED


def test_merge_of_nothing_is_exhausted() -> None:
    assert merge().poll_next(RecordingWaker().waker).is_exhausted


def test_merge_exhausted_stream_leaves_rotation() -> None:
    short, long = ReadyStream([1]), ReadyStream([10, 20, 30])
    assert drain(merge(short, long)) == [1, 10, 20, 30]
    assert short.polls == 2


def test_merge_propagates_stream_errors_and_keeps_others() -> None:
    async def broken():
        yield "first"
        raise ConnectionError("lost")

    task = Merge([broken(), ReadyStream(["ok1", "ok2"])])
    waker = RecordingWaker()

    assert task.poll_next(waker.waker).value == "first"
    assert task.poll_next(waker.waker).value == "ok1"
    with pytest.raises(ConnectionError):
        task.poll_next(waker.waker)
    assert task.live == 1
    assert drain(task, waker) == ["ok2"]


def test_merge_close_releases_live_streams() -> None:
    live, done = ManualStream(name="live"), ReadyStream([])
    task = merge(live, done)
    task.poll_next(RecordingWaker().waker)

    task.close()

    assert live.released
    assert not done.released
    assert task.poll_next(RecordingWaker().waker).is_exhausted


def test_merge_with_block_on_host() -> None:
    assert sorted(collect(merge([1, 2], iter([3]), range(4, 6)))) == [1, 2, 3, 4, 5]


def test_self_waking_stream_does_not_starve_its_sibling() -> None:
    released: list[bool] = []

    async def spinner():
        spins = 0
        while not released:
            spins += 1
            if spins > 1000:
                raise RuntimeError("sibling starved")
            await asyncio.sleep(0)
        yield "spun"

    async def setter():
        released.append(True)
        yield "set"

    stream = merge(spinner(), setter())
    waker = RecordingWaker()

    assert stream.poll_next(waker.waker).value == "set"
    assert waker.fired == 1
    assert drain(stream, waker) == ["spun"]
