"""Game loop and level controller.

Owns one game session: the level/maze selection, the session state
machine and the per-tick rule evaluation. Every other component is
driven from here and sees shared state only through WorldView
snapshots.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Deque, Dict, Optional, Sequence, Tuple
from collections import deque
import logging
import random

from shopmaze.config.settings import GameSettings
from shopmaze.core.events import Event, EventBus, EventType
from shopmaze.core.scheduler import Scheduler
from shopmaze.core.state import GameState, StateMachine
from shopmaze.game.collectibles import BasketEntry, CollectibleManager, PurchaseOutcome
from shopmaze.game.ghosts import GhostManager
from shopmaze.game.input import MovementInput
from shopmaze.game.maze import SPAWN_TILE, Maze, build_levels, level_at
from shopmaze.game.player import Player
from shopmaze.game.world import Direction, WorldView

logger = logging.getLogger(__name__)


class Command(Enum):
    """Session commands accepted from local input or the remote channel."""

    START = "start"
    PAUSE = "pause"
    NEW_GAME = "new"


@dataclass(frozen=True)
class SessionSnapshot:
    """Outcome data reported through telemetry."""

    coins: int
    basket: Tuple[BasketEntry, ...]
    level: int  # 1-based
    lives: int
    started_at: str
    captured_at: str = field(default_factory=lambda: iso_now())


def iso_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class GameController:
    """Drives one game session, one tick at a time.

    Lifecycle:
        1. start() - IDLE -> RUNNING, level 0
        2. tick(delta_ms) - called at a fixed rate by the host loop
        3. pause()/resume() - RUNNING <-> PAUSED
        4. restart() - back to level 0 with fresh lives and basket

    Commands submitted with submit() are applied at the start of the
    next tick, so all mutation happens between ticks on one thread.
    """

    def __init__(
        self,
        settings: GameSettings,
        event_bus: Optional[EventBus] = None,
        levels: Optional[Sequence[Maze]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings
        self.event_bus = event_bus or EventBus()
        self.levels = tuple(levels) if levels else build_levels()
        self.scheduler = Scheduler()
        self.state_machine = StateMachine()

        rng = rng or random.Random()
        self.level_index = 0
        self.maze = level_at(self.levels, 0)

        self.player = Player(self.maze, self.scheduler, settings)
        self.ghosts = GhostManager(self.scheduler, self.world, settings, self.event_bus, rng)
        self.collectibles = CollectibleManager(self.scheduler, self.world, settings, self.event_bus, rng)
        self.input = MovementInput(self.player, self.scheduler, settings, self._accepts_input)

        self._commands: Deque[Command] = deque()
        self._started_at = iso_now()
        self.frame = 0

    # -- state ---------------------------------------------------------

    @property
    def state(self) -> GameState:
        return self.state_machine.state

    @property
    def running(self) -> bool:
        return self.state == GameState.RUNNING

    @property
    def game_over(self) -> bool:
        return self.state == GameState.GAME_OVER

    @property
    def level(self) -> int:
        """1-based level number."""
        return self.level_index + 1

    @property
    def started_at(self) -> str:
        return self._started_at

    def world(self) -> WorldView:
        """Fresh read-only snapshot of the current level."""
        item = self.collectibles.item
        bonus = self.collectibles.bonus
        return WorldView(
            maze=self.maze,
            player_tile=self.player.tile,
            ghost_tiles=self.ghosts.tiles,
            coin_tiles=self.collectibles.coin_tiles,
            item_tile=item.tile if item else None,
            bonus_tile=bonus.tile if bonus else None,
        )

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            coins=self.collectibles.balance,
            basket=tuple(self.collectibles.basket),
            level=self.level,
            lives=self.player.lives,
            started_at=self._started_at,
        )

    def status(self) -> Dict[str, object]:
        return {
            "state": self.state.name.lower(),
            "level": self.level,
            "lives": self.player.lives,
            "coins": self.collectibles.balance,
            "basket_items": len(self.collectibles.basket),
        }

    # -- lifecycle -----------------------------------------------------

    def start(self) -> bool:
        """Begin the session from IDLE."""
        if not self.state_machine.transition(GameState.RUNNING):
            return False
        self._begin_session()
        return True

    def pause(self) -> bool:
        if not self.state_machine.transition(GameState.PAUSED):
            return False
        self.input.stop_continuous()
        self._emit(EventType.GAME_PAUSED, {"snapshot": self.snapshot()})
        return True

    def resume(self) -> bool:
        if not self.state_machine.transition(GameState.RUNNING):
            return False
        self._emit(EventType.GAME_RESUMED)
        return True

    def restart(self) -> None:
        """Full restart: level 0, initial lives, empty basket."""
        logger.info("Restarting game")
        self._teardown()
        self.player.reset()
        self.collectibles.reset_for_new_game()
        self.state_machine.reset(GameState.RUNNING)
        self._begin_session()

    def submit(self, command: Command) -> None:
        """Queue a command for the next tick."""
        self._commands.append(command)

    def apply(self, command: Command) -> bool:
        """Apply a command immediately."""
        if command is Command.START:
            if self.state == GameState.IDLE:
                return self.start()
            return self.resume()
        if command is Command.PAUSE:
            return self.pause()
        if command is Command.NEW_GAME:
            self.restart()
            return True
        return False

    # -- movement intents ----------------------------------------------

    def move(self, direction: Direction) -> None:
        """Keyboard-style intent: walk in direction until blocked."""
        if self._accepts_input():
            self.input.start_continuous(direction)

    def stop(self) -> None:
        self.input.stop_continuous()

    def swipe(self, dx: float, dy: float) -> None:
        if self._accepts_input():
            self.input.handle_swipe(dx, dy)

    # -- tick ----------------------------------------------------------

    def tick(self, delta_ms: float) -> bool:
        """Advance the simulation by one frame.

        Returns:
            True if the frame advanced and should be rendered
        """
        self._drain_commands()
        if not self.running:
            return False

        self.frame += 1
        self.scheduler.advance(delta_ms)

        # 1. animations
        player_arrived = self.player.advance()
        self.ghosts.animate()

        # 2. pickups, only once the player settles on a tile
        if player_arrived:
            self._check_collectibles()

        # 3. ghosts
        self._check_ghost_collisions()
        if not self.running:
            return True

        # 4. level complete
        if self.collectibles.all_coins_collected():
            self._next_level()

        # 5. purchasable item
        if self.collectibles.should_spawn_item():
            self.collectibles.spawn_item()

        # 6. render signal
        self.event_bus.emit(Event(
            EventType.TICK,
            data={"delta": delta_ms, "frame": self.frame},
            source="controller",
        ))
        return True

    def _drain_commands(self) -> None:
        while self._commands:
            command = self._commands.popleft()
            if not self.apply(command):
                logger.debug(f"Command {command.value} ignored in state {self.state.name}")

    def _check_collectibles(self) -> None:
        report = self.collectibles.collect_at(self.player.tile)

        if report.bonus:
            self.player.lives += 1
            logger.info(f"Bonus red hat collected, {self.player.lives} red hat(s)")
            self._emit(EventType.BONUS_COLLECTED, {
                "lives": self.player.lives,
                "duration_ms": self.settings.notification_ms,
            })

        if report.purchase is PurchaseOutcome.UNAFFORDABLE:
            logger.debug("Item left in place, balance too low")

    def _check_ghost_collisions(self) -> None:
        if not self.ghosts.check_player_collision(self.player.tile, self.player.invincible):
            return

        game_over = self.player.on_adversary_collision()
        self._emit(EventType.PLAYER_HIT, {"lives": self.player.lives})
        if game_over:
            self._end_game()

    def _next_level(self) -> None:
        self.input.stop_continuous()
        finished = self.level
        self.level_index = (self.level_index + 1) % len(self.levels)
        self.maze = level_at(self.levels, self.level_index)
        logger.info(f"Level {finished} complete, entering {self.maze.name}")

        self._setup_level()
        self._emit(EventType.LEVEL_COMPLETE, {"completed": finished, "level": self.level})

    def _end_game(self) -> None:
        if not self.state_machine.transition(GameState.GAME_OVER):
            return
        logger.info("Game over: the ghosts collected all red hats")
        self._teardown()
        self._emit(EventType.GAME_OVER, {"snapshot": self.snapshot()})

    # -- setup/teardown ------------------------------------------------

    def _begin_session(self) -> None:
        self.level_index = 0
        self.maze = level_at(self.levels, 0)
        self._started_at = iso_now()
        self.frame = 0
        self._setup_level()
        self.collectibles.start_bonus_spawning()
        self._emit(EventType.GAME_STARTED, {"snapshot": self.snapshot()})

    def _setup_level(self) -> None:
        self.player.initialize_for_level(self.maze)
        self.collectibles.reset_for_level()
        self.collectibles.seed_coins(self.maze, SPAWN_TILE)
        self.ghosts.start_level(self.level_index)

    def _teardown(self) -> None:
        """Cancel every outstanding timer before any state is replaced."""
        self.input.cleanup()
        self.ghosts.cleanup()
        self.player.cleanup()
        self.collectibles.stop()
        self.scheduler.cancel_all()

    def _accepts_input(self) -> bool:
        return self.running

    def _emit(self, event_type: EventType, data: Optional[dict] = None) -> None:
        self.event_bus.emit(Event(event_type, data=data or {}, source="controller"))
