"""Player state: position, lives ("red hats") and invincibility."""

from typing import Optional
import logging

from shopmaze.config.settings import GameSettings
from shopmaze.core.scheduler import Scheduler, TimerHandle
from shopmaze.game.maze import SPAWN_TILE, Maze
from shopmaze.game.motion import MovableEntity
from shopmaze.game.world import Direction

logger = logging.getLogger(__name__)

TIMER_GROUP = "player"


class Player(MovableEntity):
    """The player entity.

    Invincibility is orthogonal to moving/idle: it only gates adversary
    collisions. Its window and blink sub-timer live on the shared
    scheduler and are cancelled together.
    """

    def __init__(self, maze: Maze, scheduler: Scheduler, settings: GameSettings):
        super().__init__(SPAWN_TILE, settings.player_pixel_step, settings.tile_size)
        self.maze = maze
        self.settings = settings
        self._scheduler = scheduler
        self.lives = settings.start_lives
        self.invincible = False
        self.blink = False
        self._invincibility_timer: Optional[TimerHandle] = None
        self._blink_timer: Optional[TimerHandle] = None

    @property
    def invincibility_remaining_ms(self) -> float:
        if not self.invincible or self._invincibility_timer is None:
            return 0.0
        return max(0.0, self._invincibility_timer.due - self._scheduler.now)

    def initialize_for_level(self, maze: Maze) -> None:
        """Back to spawn on a new maze. Invincibility carries over."""
        self.maze = maze
        self.place(SPAWN_TILE)

    def reset(self) -> None:
        """Fresh player for a new game."""
        self.place(SPAWN_TILE)
        self.lives = self.settings.start_lives
        self.clear_invincibility()

    def can_move(self, direction: Direction) -> bool:
        if self.moving:
            return False
        return self.maze.is_open(*direction.apply(self.tile))

    def move(self, direction: Direction) -> bool:
        if not self.can_move(direction):
            return False
        return self.begin_move(direction.apply(self.tile))

    def on_adversary_collision(self) -> bool:
        """Lose a life unless invincible.

        Returns:
            True if this hit ended the game
        """
        if self.invincible:
            return False

        self.lives = max(0, self.lives - 1)
        logger.info(f"Player hit, {self.lives} red hat(s) left")
        self.start_invincibility()
        return self.lives == 0

    def start_invincibility(self) -> None:
        """Open (or restart) the invincibility window."""
        self.clear_invincibility()
        self.invincible = True
        self.blink = False
        self._blink_timer = self._scheduler.call_every(
            self.settings.blink_interval_ms, self._toggle_blink, group=TIMER_GROUP
        )
        self._invincibility_timer = self._scheduler.call_later(
            self.settings.invincibility_ms, self.clear_invincibility, group=TIMER_GROUP
        )

    def clear_invincibility(self) -> None:
        self.invincible = False
        self.blink = False
        if self._invincibility_timer:
            self._invincibility_timer.cancel()
            self._invincibility_timer = None
        if self._blink_timer:
            self._blink_timer.cancel()
            self._blink_timer = None

    def cleanup(self) -> None:
        self.clear_invincibility()

    def _toggle_blink(self) -> None:
        self.blink = not self.blink
