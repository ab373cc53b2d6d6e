"""Core framework components for ShopMaze."""

from .state import GameState, StateMachine
from .events import EventBus, Event, EventType
from .scheduler import Scheduler, TimerHandle

__all__ = [
    "GameState",
    "StateMachine",
    "EventBus",
    "Event",
    "EventType",
    "Scheduler",
    "TimerHandle",
]
