import pytest

from shopmaze.core.scheduler import Scheduler


def test_call_later_fires_once_when_due(scheduler):
    calls = []
    scheduler.call_later(100, lambda: calls.append(scheduler.now))

    assert scheduler.advance(99) == 0
    assert scheduler.advance(1) == 1
    assert scheduler.advance(1000) == 0
    assert calls == [100]


def test_call_every_catches_up_once_per_interval(scheduler):
    calls = []
    scheduler.call_every(100, lambda: calls.append(scheduler.now))

    assert scheduler.advance(350) == 3
    assert calls == [100, 200, 300]
    assert scheduler.now == 350


def test_call_every_rejects_non_positive_interval(scheduler):
    with pytest.raises(ValueError):
        scheduler.call_every(0, lambda: None)


def test_cancelled_handle_never_fires(scheduler):
    calls = []
    handle = scheduler.call_later(50, lambda: calls.append("late"))
    repeating = scheduler.call_every(10, lambda: calls.append("tick"))

    handle.cancel()
    repeating.cancel()
    scheduler.advance(500)

    assert calls == []
    assert scheduler.pending == 0


def test_cancel_group_leaves_other_groups(scheduler):
    calls = []
    scheduler.call_later(10, lambda: calls.append("a"), group="ghosts")
    scheduler.call_every(10, lambda: calls.append("b"), group="ghosts")
    scheduler.call_later(10, lambda: calls.append("c"), group="player")

    assert scheduler.cancel_group("ghosts") == 2
    scheduler.advance(10)

    assert calls == ["c"]


def test_cancel_all(scheduler):
    calls = []
    for group in ("ghosts", "player", "input"):
        scheduler.call_every(10, lambda: calls.append(1), group=group)

    scheduler.cancel_all()
    scheduler.advance(100)

    assert calls == []
    assert scheduler.pending == 0


def test_timer_cancelled_by_earlier_callback_is_skipped(scheduler):
    calls = []
    second = scheduler.call_later(20, lambda: calls.append("second"))
    scheduler.call_later(10, second.cancel)

    scheduler.advance(30)

    assert calls == []


def test_failing_callback_does_not_stop_others(scheduler):
    calls = []

    def boom():
        raise RuntimeError("boom")

    scheduler.call_later(10, boom)
    scheduler.call_later(20, lambda: calls.append("ok"))

    assert scheduler.advance(30) == 2
    assert calls == ["ok"]


def test_callbacks_fire_in_due_order(scheduler):
    calls = []
    scheduler.call_later(30, lambda: calls.append(30))
    scheduler.call_later(10, lambda: calls.append(10))
    scheduler.call_every(15, lambda: calls.append(15))

    scheduler.advance(31)

    assert calls == [10, 15, 30, 15]


def test_clock_only_moves_on_advance():
    scheduler = Scheduler()
    scheduler.call_later(10, lambda: None)

    assert scheduler.now == 0
    assert scheduler.pending == 1
