"""Game simulation for ShopMaze."""

from shopmaze.game.maze import Maze, MazeError, build_levels, level_at
from shopmaze.game.motion import MovableEntity
from shopmaze.game.world import Direction, WorldView
from shopmaze.game.player import Player
from shopmaze.game.ghosts import Ghost, GhostManager, Difficulty, difficulty_for_level
from shopmaze.game.collectibles import (
    BasketEntry,
    CollectibleManager,
    Coin,
    ItemKind,
    PurchaseOutcome,
    TimedItem,
)
from shopmaze.game.input import MovementInput
from shopmaze.game.controller import Command, GameController, SessionSnapshot
from shopmaze.game.loop import GameLoop

__all__ = [
    "Maze",
    "MazeError",
    "build_levels",
    "level_at",
    "MovableEntity",
    "Direction",
    "WorldView",
    "Player",
    "Ghost",
    "GhostManager",
    "Difficulty",
    "difficulty_for_level",
    "BasketEntry",
    "CollectibleManager",
    "Coin",
    "ItemKind",
    "PurchaseOutcome",
    "TimedItem",
    "MovementInput",
    "Command",
    "GameController",
    "SessionSnapshot",
    "GameLoop",
]
