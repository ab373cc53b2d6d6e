import pytest

from shopmaze.core.events import EventType
from shopmaze.game.ghosts import Difficulty, Ghost, GhostManager, difficulty_for_level
from shopmaze.game.maze import Maze
from shopmaze.game.world import WorldView

EASY = Difficulty(speed=5, pixel_step=5, chase_interval_ms=1000)

# Wall at (2, 1) right next to spawn
BLOCKED = [
    [1, 1, 1, 1, 1, 1, 1],
    [1, 0, 1, 0, 0, 0, 1],
    [1, 0, 0, 0, 0, 0, 1],
    [1, 0, 0, 0, 0, 0, 1],
    [1, 1, 1, 1, 1, 1, 1],
]


@pytest.mark.parametrize(
    "level, expected",
    [
        (0, Difficulty(5, 5, 1000)),
        (1, Difficulty(55, 25, 750)),
        (2, Difficulty(105, 45, 500)),
        (3, Difficulty(155, 65, 500)),
    ],
)
def test_difficulty_curve(settings, level, expected):
    assert difficulty_for_level(level, settings) == expected


def test_chase_prefers_larger_axis(open_room):
    ghost = Ghost((1, 1), EASY, 32)

    assert ghost.chase((4, 2), open_room)
    assert ghost.tile == (2, 1)


def test_chase_prefers_rows_on_tie(open_room):
    ghost = Ghost((1, 1), EASY, 32)

    assert ghost.chase((3, 3), open_room)
    assert ghost.tile == (1, 2)


def test_chase_falls_back_to_other_axis():
    maze = Maze("blocked", BLOCKED)
    ghost = Ghost((1, 1), EASY, 32)

    assert ghost.chase((5, 2), maze)
    assert ghost.tile == (1, 2)


def test_chase_holds_when_blocked():
    maze = Maze("blocked", BLOCKED)
    ghost = Ghost((1, 1), EASY, 32)

    assert not ghost.chase((5, 1), maze)
    assert ghost.tile == (1, 1)


def test_chase_waits_for_animation(open_room):
    ghost = Ghost((1, 1), EASY, 32)
    ghost.chase((5, 1), open_room)

    assert not ghost.chase((5, 1), open_room)
    assert ghost.tile == (2, 1)


@pytest.fixture
def view(open_room):
    return {"value": WorldView(maze=open_room, player_tile=(1, 1))}


@pytest.fixture
def manager(scheduler, view, settings, event_bus, rng):
    return GhostManager(scheduler, lambda: view["value"], settings, event_bus, rng)


def test_spawn_respects_cap(manager, settings):
    for _ in range(settings.max_ghosts + 3):
        manager.spawn()

    assert len(manager.ghosts) == settings.max_ghosts
    assert manager.at_capacity
    assert len(manager.tiles) == settings.max_ghosts


def test_spawn_avoids_player_and_walls(manager, open_room):
    for _ in range(4):
        ghost = manager.spawn()
        assert ghost.tile != (1, 1)
        assert open_room.is_open(*ghost.tile)


def test_spawn_emits_event(manager, event_bus):
    manager.spawn()

    events = event_bus.get_history(EventType.GHOST_SPAWNED)
    assert len(events) == 1
    assert events[0].data["active"] == 1


def test_start_level_spawn_cadence(manager, scheduler, settings):
    manager.start_level(0)

    scheduler.advance(settings.ghost_spawn_delay_s * 1000 - 1)
    assert len(manager.ghosts) == 0

    scheduler.advance(1)
    assert len(manager.ghosts) == 1

    scheduler.advance(settings.ghost_recurring_spawn_s * 1000 - settings.ghost_spawn_delay_s * 1000)
    assert len(manager.ghosts) == 2


def test_population_capped_across_overlapping_timers(manager, scheduler, settings):
    manager.start_level(3)
    for _ in range(10):
        manager.spawn()

    scheduler.advance(120_000)

    assert len(manager.ghosts) <= settings.max_ghosts


def test_first_spawn_retries_until_a_tile_frees_up(manager, scheduler, view, corridor, settings, event_bus):
    # Only (2, 1) is free of the player, and a coin sits on it
    view["value"] = WorldView(maze=corridor, player_tile=(1, 1), coin_tiles=frozenset({(2, 1)}))
    manager.start_level(0)

    scheduler.advance(settings.ghost_spawn_delay_s * 1000)
    assert len(manager.ghosts) == 0

    scheduler.advance(settings.ghost_spawn_retry_ms * 3)
    assert len(manager.ghosts) == 0

    view["value"] = WorldView(maze=corridor, player_tile=(1, 1))
    scheduler.advance(settings.ghost_spawn_retry_ms)
    assert len(manager.ghosts) == 1
    # The chase cadence may already have stepped the ghost onto the player
    spawned = event_bus.get_history(EventType.GHOST_SPAWNED)
    assert [e.data["tile"] for e in spawned] == [(2, 1)]


def test_chase_all_moves_idle_ghosts(manager, scheduler):
    manager.start_level(0)
    manager.spawn()
    before = manager.ghosts[0].tile

    manager.chase_all()

    assert manager.ghosts[0].tile != before


def test_collision_removes_first_matching_ghost(manager):
    manager._ghosts.extend([Ghost((2, 2), EASY, 32), Ghost((2, 2), EASY, 32)])

    assert manager.check_player_collision((2, 2), invincible=False)
    assert len(manager.ghosts) == 1
    assert not manager.check_player_collision((3, 3), invincible=False)


def test_no_collision_while_invincible(manager):
    manager._ghosts.append(Ghost((2, 2), EASY, 32))

    assert not manager.check_player_collision((2, 2), invincible=True)
    assert len(manager.ghosts) == 1


def test_cleanup_cancels_spawning(manager, scheduler):
    manager.start_level(0)
    manager.spawn()

    manager.cleanup()
    scheduler.advance(60_000)

    assert manager.ghosts == ()
    assert scheduler.pending == 0
