"""Bounded Concurrent Map: order preservation and the in-flight bound."""

import asyncio
from dataclasses import dataclass

import pytest

from braid import BufferedMap, ConfigurationError, aio, buffered_map, collect
from braid.kernel import Trace

from fakes import ManualStream, ManualTask, ReadyStream, RecordingWaker, drain


def test_output_follows_source_order_when_completion_is_reversed() -> None:
    tasks: dict[int, ManualTask] = {}

    def transform(item: int) -> ManualTask:
        tasks[item] = ManualTask(name=str(item))
        return tasks[item]

    stream = buffered_map(ReadyStream([1, 2, 3]), transform, limit=2)
    waker = RecordingWaker()

    assert stream.poll_next(waker.waker).is_pending
    assert sorted(tasks) == [1, 2]

    tasks[2].complete("r2")
    assert stream.poll_next(waker.waker).is_pending

    tasks[1].complete("r1")
    assert stream.poll_next(waker.waker).value == "r1"
    assert stream.poll_next(waker.waker).value == "r2"
    tasks[3].complete("r3")
    assert stream.poll_next(waker.waker).value == "r3"
    assert stream.poll_next(waker.waker).is_exhausted
    assert stream.poll_next(waker.waker).is_exhausted


def test_never_more_than_limit_in_flight() -> None:
    tasks: list[ManualTask] = []
    peak = 0

    def transform(item: int) -> ManualTask:
        tasks.append(ManualTask(name=str(item)))
        return tasks[-1]

    stream = BufferedMap(ReadyStream(list(range(10))), transform, limit=3)
    waker = RecordingWaker()
    results = []
    while True:
        polled = stream.poll_next(waker.waker)
        peak = max(peak, stream.in_flight)
        if polled.is_exhausted:
            break
        if polled.is_ready:
            results.append(polled.value)
            continue
        for task in tasks:
            if task.polls and not task.released and task._outcome is None:
                task.complete(int(task.name) * 10)

    assert results == [i * 10 for i in range(10)]
    assert peak <= 3


def test_zero_limit_fails_at_construction() -> None:
    with pytest.raises(ConfigurationError):
        buffered_map([1, 2], lambda x: x, limit=0)
    with pytest.raises(ValueError):
        BufferedMap([1], lambda x: x, limit=-4)


def test_plain_functions_and_coroutines_are_accepted() -> None:
    async def double(x: int) -> int:
        return x * 2

    assert collect(buffered_map(range(5), lambda x: x + 1, limit=2)) == [1, 2, 3, 4, 5]
    assert collect(buffered_map(range(5), double, limit=4)) == [0, 2, 4, 6, 8]


def test_failed_transformation_raises_in_its_turn() -> None:
    def transform(item: int) -> int:
        if item == 1:
            raise ArithmeticError("bad item")
        return item

    stream = buffered_map([0, 1, 2], transform, limit=3)
    waker = RecordingWaker()

    assert stream.poll_next(waker.waker).value == 0
    with pytest.raises(ArithmeticError):
        stream.poll_next(waker.waker)
    assert drain(stream, waker) == [2]


def test_source_is_only_polled_when_it_woke() -> None:
    source = ManualStream()
    stream = buffered_map(source, lambda x: x, limit=2)
    waker = RecordingWaker()

    for _ in range(3):
        assert stream.poll_next(waker.waker).is_pending
    assert source.polls == 1

    source.push("a")
    assert waker.fired == 1
    assert stream.poll_next(waker.waker).value == "a"

    source.finish()
    assert drain(stream, waker) == []


def test_close_releases_source_and_in_flight_transformations() -> None:
    source = ManualStream()
    source.push(1, 2)
    tasks: list[ManualTask] = []

    def transform(item: int) -> ManualTask:
        tasks.append(ManualTask(name=str(item)))
        return tasks[-1]

    stream = buffered_map(source, transform, limit=2)
    stream.poll_next(RecordingWaker().waker)

    stream.close()

    assert source.released
    assert all(task.released for task in tasks) and len(tasks) == 2


def test_trace_shows_slot_reuse() -> None:
    trace = Trace()
    stream = BufferedMap(range(4), lambda x: x, limit=1, trace=trace)
    assert drain(stream) == [0, 1, 2, 3]
    assert [e.index for e in trace.find_all(action="slot_done")] == [0, 0, 0, 0]


def test_buffered_map_over_asyncio_sleeps() -> None:
    async def delayed(x: int) -> int:
        await asyncio.sleep(0.01 * (5 - x))
        return x

    async def run() -> list[int]:
        return [x async for x in aio.iterate(buffered_map(range(5), delayed, limit=5))]

    assert asyncio.run(run()) == [0, 1, 2, 3, 4]


@dataclass
class Reading:
    poll: int


def test_values_with_a_poll_attribute_are_emitted_as_values() -> None:
    readings = collect(buffered_map([1, 2], lambda x: Reading(poll=x), limit=2))
    assert readings == [Reading(poll=1), Reading(poll=2)]
