"""
Event bus for ShopMaze.

The simulation emits events from inside ``GameController.tick()``, so
dispatch is synchronous: every plain handler has run by the time
``emit()`` returns. Coroutine handlers are scheduled on the running loop
instead of being awaited, which keeps a slow network consumer from
stalling a tick.
"""

from collections import defaultdict, deque
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Awaitable, Callable
import asyncio
import inspect
import logging
import time

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Events published by the game and its collaborators."""
    # Session
    GAME_STARTED = auto()
    GAME_PAUSED = auto()
    GAME_RESUMED = auto()
    GAME_OVER = auto()
    LEVEL_COMPLETE = auto()

    # Gameplay
    COIN_COLLECTED = auto()
    ITEM_SPAWNED = auto()
    ITEM_EXPIRED = auto()
    ITEM_PURCHASED = auto()
    ITEM_UNAFFORDABLE = auto()
    BONUS_SPAWNED = auto()
    BONUS_COLLECTED = auto()
    GHOST_SPAWNED = auto()
    PLAYER_HIT = auto()

    # Remote channel
    REMOTE_CONNECTED = auto()
    REMOTE_DISABLED = auto()

    # Render signal, once per running tick
    TICK = auto()
    SHUTDOWN = auto()


@dataclass
class Event:
    """
    A published event.

    Attributes:
        type: Event type
        data: Payload, plain values only
        source: Component that emitted the event
        timestamp: Wall-clock creation time (epoch seconds)
    """
    type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    source: str = "game"
    timestamp: float = field(default_factory=time.time)


Handler = Callable[[Event], None] | Callable[[Event], Awaitable[None]]


class EventBus:
    """Synchronous pub/sub with a bounded history of recent events."""

    def __init__(self, history_limit: int = 200) -> None:
        self._handlers: dict[EventType, list[Handler]] = defaultdict(list)
        self._history: deque[Event] = deque(maxlen=history_limit)
        self._pending: set[asyncio.Task] = set()

    def subscribe(self, event_type: EventType, handler: Handler) -> Callable[[], None]:
        """
        Register a handler for one event type.

        Returns:
            A callable that removes the handler again
        """
        self._handlers[event_type].append(handler)

        def unsubscribe() -> None:
            handlers = self._handlers[event_type]
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def emit(self, event: Event) -> None:
        """Record the event and hand it to every subscriber."""
        # Render signals would crowd everything else out of the history
        if event.type is not EventType.TICK:
            self._history.append(event)

        # Copy so handlers may unsubscribe while being called
        for handler in list(self._handlers.get(event.type, ())):
            if inspect.iscoroutinefunction(handler):
                self._schedule(handler, event)
                continue
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in {event.type.name} handler: {e}")

    def _schedule(self, handler: Handler, event: Event) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(f"No running loop, async handler skipped for {event.type.name}")
            return

        task = loop.create_task(handler(event))
        self._pending.add(task)
        task.add_done_callback(self._task_done)

    def _task_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error(f"Error in async event handler: {task.exception()}")

    def get_history(self, event_type: EventType | None = None, limit: int | None = None) -> list[Event]:
        """Recent events, oldest first, optionally filtered by type."""
        events = [e for e in self._history if event_type is None or e.type == event_type]
        if limit is not None:
            events = events[-limit:]
        return events

    def clear_history(self) -> None:
        self._history.clear()
