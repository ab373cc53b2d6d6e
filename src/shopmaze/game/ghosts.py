"""Ghost population: spawn scheduling, greedy chase and player contact."""

from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple
import logging
import random

from shopmaze.config.settings import GameSettings
from shopmaze.core.events import Event, EventBus, EventType
from shopmaze.core.scheduler import Scheduler
from shopmaze.game.maze import Maze, Tile
from shopmaze.game.motion import MovableEntity
from shopmaze.game.world import WorldView

logger = logging.getLogger(__name__)

TIMER_GROUP = "ghosts"


@dataclass(frozen=True)
class Difficulty:
    """Ghost tuning for one level."""

    speed: float
    pixel_step: float
    chase_interval_ms: float


def difficulty_for_level(level_index: int, settings: GameSettings) -> Difficulty:
    """Ghosts get faster and re-target more often each level (0-based)."""
    return Difficulty(
        speed=settings.ghost_base_speed + level_index * settings.ghost_speed_per_level,
        pixel_step=settings.ghost_base_pixel_step + level_index * settings.ghost_pixel_step_per_level,
        chase_interval_ms=max(
            settings.ghost_min_chase_interval_ms,
            settings.ghost_base_chase_interval_ms
            - level_index * settings.ghost_chase_reduction_per_level,
        ),
    )


class Ghost(MovableEntity):
    """A single adversary. No identity beyond membership in the active set."""

    def __init__(self, tile: Tile, difficulty: Difficulty, tile_size: int):
        super().__init__(tile, difficulty.pixel_step, tile_size)
        self.speed = difficulty.speed

    def chase(self, player_tile: Tile, maze: Maze) -> bool:
        """Take one greedy step toward the player.

        Steps along the axis with the larger distance (rows on a tie);
        if that tile is blocked, tries the other axis once. Holds
        position when both are blocked.

        Returns:
            True if a step was started
        """
        if self.moving:
            return False

        col, row = self.tile
        dcol = player_tile[0] - col
        drow = player_tile[1] - row
        step_col = (col + _sign(dcol), row)
        step_row = (col, row + _sign(drow))

        if abs(dcol) > abs(drow):
            first, second = step_col, step_row
        else:
            first, second = step_row, step_col

        for candidate in (first, second):
            if candidate != self.tile and maze.is_open(*candidate):
                return self.begin_move(candidate)
        return False


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


class GhostManager:
    """Owns the active ghost set and every ghost timer.

    Args:
        scheduler: Shared game-clock scheduler
        world: Returns a fresh read-only WorldView
        settings: Game settings
        event_bus: Optional bus for GHOST_SPAWNED notifications
        rng: Random source (injectable for tests)
    """

    def __init__(
        self,
        scheduler: Scheduler,
        world: Callable[[], WorldView],
        settings: GameSettings,
        event_bus: Optional[EventBus] = None,
        rng: Optional[random.Random] = None,
    ):
        self._scheduler = scheduler
        self._world = world
        self.settings = settings
        self._event_bus = event_bus
        self._rng = rng or random.Random()
        self._ghosts: List[Ghost] = []
        self._pending_spawn = False
        self.difficulty = difficulty_for_level(0, settings)

    @property
    def ghosts(self) -> Tuple[Ghost, ...]:
        return tuple(self._ghosts)

    @property
    def tiles(self) -> frozenset:
        return frozenset(g.tile for g in self._ghosts)

    @property
    def at_capacity(self) -> bool:
        return len(self._ghosts) >= self.settings.max_ghosts

    def start_level(self, level_index: int) -> None:
        """Discard everything and restart spawning with this level's tuning."""
        self.cleanup()
        self.difficulty = difficulty_for_level(level_index, self.settings)
        logger.info(
            f"Ghosts for level {level_index + 1}: step={self.difficulty.pixel_step}, "
            f"chase every {self.difficulty.chase_interval_ms:.0f}ms"
        )

        self._scheduler.call_later(
            self.settings.ghost_spawn_delay_s * 1000,
            self._initial_spawn,
            group=TIMER_GROUP,
        )
        self._scheduler.call_every(
            self.difficulty.chase_interval_ms,
            self.chase_all,
            group=TIMER_GROUP,
        )
        self._scheduler.call_every(
            self.settings.ghost_recurring_spawn_s * 1000,
            self._recurring_spawn,
            group=TIMER_GROUP,
        )

    def cleanup(self) -> None:
        """Remove all ghosts and cancel all ghost timers."""
        self._ghosts.clear()
        self._pending_spawn = False
        self._scheduler.cancel_group(TIMER_GROUP)

    def spawn(self) -> Optional[Ghost]:
        """Place one ghost on a random free tile, if under the cap."""
        if self.at_capacity:
            return None

        tile = self._find_spawn_tile()
        if tile is None:
            return None

        ghost = Ghost(tile, self.difficulty, self.settings.tile_size)
        self._ghosts.append(ghost)
        logger.debug(f"Ghost spawned at {tile} ({len(self._ghosts)} active)")
        if self._event_bus:
            self._event_bus.emit(Event(
                EventType.GHOST_SPAWNED,
                data={"tile": tile, "active": len(self._ghosts)},
                source="ghosts",
            ))
        return ghost

    def chase_all(self) -> None:
        """Re-target every idle ghost at the player's current tile."""
        view = self._world()
        for ghost in self._ghosts:
            ghost.chase(view.player_tile, view.maze)

    def animate(self) -> None:
        for ghost in self._ghosts:
            ghost.advance()

    def check_player_collision(self, player_tile: Tile, invincible: bool) -> bool:
        """Remove the first ghost sharing the player's tile.

        At most one collision is reported per call.
        """
        if invincible:
            return False
        for i, ghost in enumerate(self._ghosts):
            if ghost.tile == player_tile:
                del self._ghosts[i]
                return True
        return False

    def _initial_spawn(self) -> None:
        """First spawn of a level keeps retrying until it lands or the cap is hit."""
        if self.at_capacity:
            self._pending_spawn = False
            return

        if self.spawn() is not None:
            self._pending_spawn = False
            return

        logger.info("No free tile for first ghost, retrying")
        self._pending_spawn = True
        self._scheduler.call_later(
            self.settings.ghost_spawn_retry_ms,
            self._initial_spawn,
            group=TIMER_GROUP,
        )

    def _recurring_spawn(self) -> None:
        if self.at_capacity or self._pending_spawn:
            return
        if self.spawn() is None:
            logger.debug("Recurring ghost spawn found no free tile")

    def _find_spawn_tile(self) -> Optional[Tile]:
        view = self._world()
        width, height = view.maze.dimensions()
        # Ghost tiles are read live so several spawns in one tick never stack
        occupied = self.tiles
        for _ in range(self.settings.ghost_spawn_attempts):
            tile = (self._rng.randrange(width), self._rng.randrange(height))
            if tile not in occupied and view.is_free(tile):
                return tile
        return None
