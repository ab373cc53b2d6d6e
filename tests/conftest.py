import random

import pytest

from shopmaze.config.settings import GameSettings
from shopmaze.core.events import EventBus
from shopmaze.core.scheduler import Scheduler
from shopmaze.game.controller import GameController
from shopmaze.game.maze import Maze

# 7x7, 5x5 open interior
OPEN_ROOM = [
    [1, 1, 1, 1, 1, 1, 1],
    [1, 0, 0, 0, 0, 0, 1],
    [1, 0, 0, 0, 0, 0, 1],
    [1, 0, 0, 0, 0, 0, 1],
    [1, 0, 0, 0, 0, 0, 1],
    [1, 0, 0, 0, 0, 0, 1],
    [1, 1, 1, 1, 1, 1, 1],
]

# Spawn (1, 1) plus exactly one reachable tile to its right
CORRIDOR = [
    [1, 1, 1, 1],
    [1, 0, 0, 1],
    [1, 1, 1, 1],
]


@pytest.fixture
def settings() -> GameSettings:
    return GameSettings()


@pytest.fixture
def scheduler() -> Scheduler:
    return Scheduler()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def open_room() -> Maze:
    return Maze("room", OPEN_ROOM)


@pytest.fixture
def corridor() -> Maze:
    return Maze("corridor", CORRIDOR)


@pytest.fixture
def make_controller(settings, event_bus, rng):
    """Factory for controllers over custom levels."""

    def factory(levels=None, **overrides) -> GameController:
        game_settings = settings.model_copy(update=overrides) if overrides else settings
        return GameController(game_settings, event_bus=event_bus, levels=levels, rng=rng)

    return factory


@pytest.fixture
def settle():
    """Advance an entity's animation until it reaches its target tile."""

    def run(entity, limit: int = 100) -> None:
        for _ in range(limit):
            if not entity.moving:
                return
            entity.advance()
        raise AssertionError("entity never settled")

    return run


@pytest.fixture
def game_over():
    """Builder for game_over telemetry frames."""

    def build(user: str, shirts: int, coins: int, count: int = 1, level: int = 1) -> dict:
        return {
            "type": "game_event",
            "event": "game_over",
            "timestamp": "2024-05-01T10:05:00.000Z",
            "player": {"userId": user, "email": f"{user}@example.com", "username": user.title()},
            "gameData": {
                "coinsRemaining": coins,
                "tShirtsCollected": {"items": [], "totalValue": shirts, "totalCount": count},
                "currentLevel": level,
                "gameSession": {
                    "startTime": "2024-05-01T10:00:00.000Z",
                    "eventTime": "2024-05-01T10:05:00.000Z",
                },
            },
        }

    return build
