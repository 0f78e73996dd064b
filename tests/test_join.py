"""Join and TryJoin."""

import asyncio

import pytest

from braid import InvalidStateError, Join, TryJoin, block_on, join, join_all, ready, try_join, try_join_all
from braid.kernel import Signal

from fakes import CountdownTask, FailingTask, ManualTask, RecordingWaker, drive


def test_join_heterogeneous_returns_tuple_in_order() -> None:
    async def greeting() -> str:
        return "hello"

    assert block_on(join(ready(1), greeting(), CountdownTask(2, value=3))) == (1, "hello", 3)


def test_join_order_ignores_completion_order() -> None:
    children = [ManualTask(name=str(i)) for i in range(4)]
    task = join_all(children)
    waker = RecordingWaker()
    assert task.poll(waker.waker).is_pending

    for i in (2, 0, 3, 1):
        children[i].complete(f"v{i}")
        polled = task.poll(waker.waker)

    assert polled.is_ready
    assert polled.value == ["v0", "v1", "v2", "v3"]


def test_join_of_nothing_completes_immediately() -> None:
    assert drive(join()) == ()
    assert drive(join_all([])) == []


def test_join_records_failures_without_short_circuit() -> None:
    error = KeyError("missing")
    slow = CountdownTask(3, value="slow")

    outcomes = drive(join(FailingTask(error), slow))

    assert outcomes == (error, "slow")
    assert slow.polls == 4


def test_join_only_repolls_woken_children() -> None:
    children = [ManualTask(name=str(i)) for i in range(3)]
    task = Join(children)
    waker = RecordingWaker()
    task.poll(waker.waker)

    children[1].complete("b")
    task.poll(waker.waker)

    assert [c.polls for c in children] == [1, 2, 1]
    assert task.outstanding == 2


def test_join_polled_after_completion_is_misuse() -> None:
    task = join(ready(1))
    drive(task)
    with pytest.raises(InvalidStateError):
        drive(task)


def test_closing_join_releases_pending_children() -> None:
    left, right = ManualTask(name="left"), ManualTask(name="right")
    task = join(left, right)
    waker = RecordingWaker()
    task.poll(waker.waker)

    task.close()
    left.complete("late")

    assert left.released and right.released
    assert waker.fired == 0
    assert left.polls == 1 and right.polls == 1


def test_join_as_context_manager_releases_on_exit() -> None:
    child = ManualTask()
    with join(child) as task:
        task.poll(RecordingWaker().waker)
    assert child.released


def test_join_closes_abandoned_coroutines() -> None:
    cleaned: list[str] = []
    signal = Signal()

    async def waits_forever() -> None:
        try:
            await signal
        finally:
            cleaned.append("done")

    task = join(waits_forever(), waits_forever())
    task.poll(RecordingWaker().waker)
    assert signal.waiting == 2

    task.close()
    assert cleaned == ["done", "done"]


def test_try_join_unwraps_successes() -> None:
    assert drive(try_join(ready("a"), CountdownTask(1, value="b"))) == ("a", "b")
    assert drive(try_join_all([ready(1), ready(2)])) == [1, 2]


def test_try_join_short_circuits_and_releases_siblings() -> None:
    first, last = ManualTask(name="first"), ManualTask(name="last")
    error = ValueError("middle failed")
    task = TryJoin([first, FailingTask(error), last])

    with pytest.raises(ValueError) as info:
        task.poll(RecordingWaker().waker)

    assert info.value is error
    assert first.released and last.released
    with pytest.raises(InvalidStateError):
        task.poll(RecordingWaker().waker)


def test_try_join_simultaneous_failures_report_lowest_index() -> None:
    children = [ManualTask(name=str(i)) for i in range(3)]
    task = try_join_all(children)
    waker = RecordingWaker()
    task.poll(waker.waker)

    children[2].fail(RuntimeError("two"))
    children[1].fail(RuntimeError("one"))

    with pytest.raises(RuntimeError, match="one"):
        task.poll(waker.waker)
    assert children[0].released


def test_try_join_with_asyncio_children() -> None:
    from braid import aio

    async def value_after(delay: float, value: int) -> int:
        await asyncio.sleep(delay)
        return value

    result = asyncio.run(aio.drive(try_join(value_after(0.02, 1), value_after(0.01, 2))))
    assert result == (1, 2)
