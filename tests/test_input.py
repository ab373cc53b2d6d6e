import pytest

from shopmaze.game.input import MovementInput
from shopmaze.game.player import Player
from shopmaze.game.world import Direction


@pytest.fixture
def active():
    return {"value": True}


@pytest.fixture
def player(open_room, scheduler, settings):
    return Player(open_room, scheduler, settings)


@pytest.fixture
def movement(player, scheduler, settings, active):
    return MovementInput(player, scheduler, settings, lambda: active["value"])


def test_continuous_first_step_is_immediate(movement, player):
    movement.start_continuous(Direction.RIGHT)

    assert player.tile == (2, 1)
    assert movement.continuous


def test_continuous_repeats_after_animation(movement, player, scheduler, settings, settle):
    movement.start_continuous(Direction.RIGHT)

    # Still animating: the repetition is skipped
    scheduler.advance(settings.continuous_move_interval_ms)
    assert player.tile == (2, 1)

    settle(player)
    scheduler.advance(settings.continuous_move_interval_ms)
    assert player.tile == (3, 1)


def test_continuous_stops_at_wall(movement, player, scheduler, settings, settle):
    movement.start_continuous(Direction.RIGHT)
    for _ in range(10):
        settle(player)
        scheduler.advance(settings.continuous_move_interval_ms)

    assert player.tile == (5, 1)
    assert not movement.continuous


def test_blocked_intent_does_not_start(movement, player):
    movement.start_continuous(Direction.LEFT)

    assert player.tile == (1, 1)
    assert not movement.continuous


def test_stop_continuous(movement, player, scheduler, settings, settle):
    movement.start_continuous(Direction.DOWN)
    movement.stop_continuous()
    settle(player)

    scheduler.advance(settings.continuous_move_interval_ms * 3)

    assert player.tile == (1, 2)


@pytest.mark.parametrize(
    "dx, dy, expected",
    [
        (40, 10, (2, 1)),
        (5, 35, (1, 2)),
        (-10, 80, (1, 2)),
    ],
)
def test_swipe_direction(movement, player, dx, dy, expected):
    movement.handle_swipe(dx, dy)

    assert player.tile == expected


def test_tap_stops_and_clears_queue(movement, player):
    movement.handle_swipe(0, -50)  # into the wall, queued
    assert movement.pending_direction is Direction.UP

    movement.handle_swipe(3, 4)

    assert movement.pending_direction is None
    assert not movement.continuous


def test_queued_swipe_runs_when_possible(movement, player, scheduler, settings, settle):
    player.move(Direction.RIGHT)
    movement.handle_gesture(Direction.DOWN)
    assert movement.pending_direction is Direction.DOWN

    settle(player)
    scheduler.advance(settings.gesture_check_interval_ms)

    assert player.tile == (2, 2)
    assert movement.pending_direction is None
    assert movement.continuous


def test_queued_swipe_times_out(movement, scheduler, settings):
    movement.handle_gesture(Direction.UP)

    scheduler.advance(settings.gesture_timeout_ms + settings.gesture_check_interval_ms)

    assert movement.pending_direction is None
    assert scheduler.pending == 0


def test_inactive_game_ignores_intents(movement, player, active):
    active["value"] = False

    movement.handle_swipe(40, 0)

    assert player.tile == (1, 1)


def test_cleanup_cancels_timers(movement, scheduler):
    movement.start_continuous(Direction.RIGHT)
    movement.handle_gesture(Direction.UP)

    movement.cleanup()

    assert scheduler.pending == 0
