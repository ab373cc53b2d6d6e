"""Desktop front-end for ShopMaze."""

from shopmaze.simulator.window import GameWindow, WindowConfig

__all__ = ["GameWindow", "WindowConfig"]
