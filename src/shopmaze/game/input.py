"""Movement intent handling: continuous movement and the swipe queue.

A direction intent keeps the player walking one tile per repetition
until a move is refused. A swipe that cannot be honoured right away is
queued and retried for a short while.
"""

from typing import Callable, Optional
import logging

from shopmaze.config.settings import GameSettings
from shopmaze.core.scheduler import Scheduler, TimerHandle
from shopmaze.game.player import Player
from shopmaze.game.world import Direction

logger = logging.getLogger(__name__)

TIMER_GROUP = "input"
QUEUE_RECHECK_MS = 50


class MovementInput:
    """Turns direction intents into player moves.

    Args:
        player: Player to drive
        scheduler: Shared game-clock scheduler
        settings: Game settings
        is_active: Returns True while the game accepts input
    """

    def __init__(
        self,
        player: Player,
        scheduler: Scheduler,
        settings: GameSettings,
        is_active: Callable[[], bool],
    ):
        self.player = player
        self.settings = settings
        self._scheduler = scheduler
        self._is_active = is_active

        self.direction: Optional[Direction] = None
        self._repeat: Optional[TimerHandle] = None

        self.pending_direction: Optional[Direction] = None
        self._pending_since = 0.0
        self._queue_check: Optional[TimerHandle] = None

    @property
    def continuous(self) -> bool:
        return self._repeat is not None

    # Continuous movement

    def start_continuous(self, direction: Direction) -> None:
        """Walk in direction, first step immediately."""
        self.stop_continuous()
        self.direction = direction
        self._repeat = self._scheduler.call_every(
            self.settings.continuous_move_interval_ms,
            self._repeat_step,
            group=TIMER_GROUP,
        )
        self._step()

    def stop_continuous(self) -> None:
        if self._repeat:
            self._repeat.cancel()
            self._repeat = None
        self.direction = None

    def _repeat_step(self) -> None:
        if self._is_active():
            self._step()
        else:
            self.stop_continuous()

    def _step(self) -> None:
        if self.direction is None or self.player.moving:
            return
        if not self._is_active() or not self.player.move(self.direction):
            self.stop_continuous()
            # A queued swipe may fit now that we stopped
            self._scheduler.call_later(QUEUE_RECHECK_MS, self.check_queued, group=TIMER_GROUP)

    # Swipes

    def handle_swipe(self, dx: float, dy: float) -> None:
        """Interpret a touch swipe by its screen-space delta."""
        minimum = self.settings.min_swipe_distance
        if abs(dx) < minimum and abs(dy) < minimum:
            # Tap
            self.stop_continuous()
            self.clear_queue()
            return

        if abs(dx) > abs(dy):
            direction = Direction.RIGHT if dx > 0 else Direction.LEFT
        else:
            direction = Direction.DOWN if dy > 0 else Direction.UP
        self.handle_gesture(direction)

    def handle_gesture(self, direction: Direction) -> None:
        self.clear_queue()
        if self._can_move_now(direction):
            self.start_continuous(direction)
        else:
            self._queue(direction)

    def _can_move_now(self, direction: Direction) -> bool:
        return self._is_active() and self.player.can_move(direction)

    def _queue(self, direction: Direction) -> None:
        self.pending_direction = direction
        self._pending_since = self._scheduler.now
        self._stop_queue_check()
        self._queue_check = self._scheduler.call_every(
            self.settings.gesture_check_interval_ms,
            self.check_queued,
            group=TIMER_GROUP,
        )
        logger.debug(f"Queued swipe {direction.name}")

    def check_queued(self) -> None:
        direction = self.pending_direction
        if direction is None:
            return

        if self._scheduler.now - self._pending_since > self.settings.gesture_timeout_ms:
            self.clear_queue()
            return

        if self._can_move_now(direction):
            self.start_continuous(direction)
            self.clear_queue()

    def clear_queue(self) -> None:
        self.pending_direction = None
        self._pending_since = 0.0
        self._stop_queue_check()

    def _stop_queue_check(self) -> None:
        if self._queue_check:
            self._queue_check.cancel()
            self._queue_check = None

    def cleanup(self) -> None:
        """Cancel every input timer."""
        self.stop_continuous()
        self.clear_queue()
        self._scheduler.cancel_group(TIMER_GROUP)
