"""
State machine for a ShopMaze game session.

States:
    IDLE: Session created, waiting for the player to start
    RUNNING: Ticks advance the simulation
    PAUSED: Ticks are suspended until resumed
    GAME_OVER: Player ran out of lives (terminal until restart)
"""

from enum import Enum, auto
from typing import Callable
import logging

logger = logging.getLogger(__name__)


class GameState(Enum):
    """Session states."""
    IDLE = auto()
    RUNNING = auto()
    PAUSED = auto()
    GAME_OVER = auto()


StateListener = Callable[[GameState, GameState], None]


class StateMachine:
    """
    Manages session state and transitions.

    Only the transitions listed in VALID_TRANSITIONS are accepted;
    a full restart goes through reset(), which is valid from any state.
    """

    VALID_TRANSITIONS: list[tuple[GameState, GameState]] = [
        (GameState.IDLE, GameState.RUNNING),
        (GameState.RUNNING, GameState.PAUSED),
        (GameState.RUNNING, GameState.GAME_OVER),
        (GameState.PAUSED, GameState.RUNNING),
    ]

    def __init__(self, initial_state: GameState = GameState.IDLE) -> None:
        self._state = initial_state
        self._listeners: list[StateListener] = []
        self._valid_transitions = set(self.VALID_TRANSITIONS)
        logger.info(f"StateMachine initialized with state: {initial_state.name}")

    @property
    def state(self) -> GameState:
        """Get current state."""
        return self._state

    def can_transition(self, to_state: GameState) -> bool:
        """Check if transition to given state is valid."""
        return (self._state, to_state) in self._valid_transitions

    def transition(self, to_state: GameState) -> bool:
        """
        Attempt to transition to a new state.

        Args:
            to_state: Target state

        Returns:
            True if transition successful, False otherwise
        """
        if not self.can_transition(to_state):
            logger.debug(
                f"Rejected transition: {self._state.name} -> {to_state.name}"
            )
            return False

        old_state = self._state
        self._state = to_state
        logger.info(f"State transition: {old_state.name} -> {to_state.name}")
        self._notify(old_state, to_state)
        return True

    def reset(self, to_state: GameState = GameState.RUNNING) -> None:
        """Force the machine into to_state (full restart)."""
        old_state = self._state
        self._state = to_state
        logger.info(f"StateMachine reset: {old_state.name} -> {to_state.name}")
        self._notify(old_state, to_state)

    def add_listener(self, callback: StateListener) -> None:
        """Add a state change listener."""
        self._listeners.append(callback)

    def remove_listener(self, callback: StateListener) -> None:
        """Remove a state change listener."""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _notify(self, old_state: GameState, new_state: GameState) -> None:
        for listener in self._listeners:
            try:
                listener(old_state, new_state)
            except Exception as e:
                logger.error(f"Error in state listener: {e}")
