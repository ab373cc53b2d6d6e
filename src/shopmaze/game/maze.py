"""Maze grids and the predefined level set."""

from typing import Dict, List, Sequence, Tuple
import logging

import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)

Tile = Tuple[int, int]  # (col, row)

WALL = 1
OPEN = 0
SPAWN_TILE: Tile = (1, 1)


class MazeError(ValueError):
    """Raised when a layout violates the maze invariants."""


class Maze:
    """Immutable wall/open grid.

    The outer border is always wall and the player spawn tile is always
    open; layouts breaking either rule are rejected at construction.
    """

    def __init__(self, name: str, layout: Sequence[Sequence[int]]):
        rows = [list(row) for row in layout]
        if not rows or not rows[0]:
            raise MazeError(f"{name}: empty layout")
        if any(len(row) != len(rows[0]) for row in rows):
            raise MazeError(f"{name}: rows have different lengths")

        grid = np.array(rows, dtype=np.uint8)
        if not np.isin(grid, (WALL, OPEN)).all():
            raise MazeError(f"{name}: cells must be 0 (open) or 1 (wall)")

        border = np.concatenate([grid[0], grid[-1], grid[:, 0], grid[:, -1]])
        if not (border == WALL).all():
            raise MazeError(f"{name}: outer border must be wall")

        col, row = SPAWN_TILE
        if grid.shape[0] <= row or grid.shape[1] <= col or grid[row, col] != OPEN:
            raise MazeError(f"{name}: spawn tile {SPAWN_TILE} must be open")

        grid.flags.writeable = False
        self.name = name
        self._grid: NDArray[np.uint8] = grid

    @property
    def width(self) -> int:
        return int(self._grid.shape[1])

    @property
    def height(self) -> int:
        return int(self._grid.shape[0])

    @property
    def grid(self) -> NDArray[np.uint8]:
        """Read-only view of the grid, indexed [row, col]."""
        return self._grid

    def dimensions(self) -> Tuple[int, int]:
        return self.width, self.height

    def is_open(self, col: int, row: int) -> bool:
        """False for walls and anything out of bounds."""
        if col < 0 or row < 0 or col >= self.width or row >= self.height:
            return False
        return bool(self._grid[row, col] == OPEN)

    def open_tiles(self) -> List[Tile]:
        """All open tiles in row-major order."""
        return [(int(c), int(r)) for r, c in np.argwhere(self._grid == OPEN)]

    def __repr__(self) -> str:
        return f"Maze({self.name!r}, {self.width}x{self.height})"


# 13x15 layouts: 1 = wall, 0 = open
LEVEL_LAYOUTS: Dict[str, List[List[int]]] = {
    "level1": [
        [1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1],
        [1, 0, 0, 0, 0, 0, 1, 0, 0, 0, 0, 0, 1],
        [1, 0, 1, 1, 1, 0, 1, 0, 1, 1, 1, 0, 1],
        [1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1],
        [1, 0, 1, 0, 1, 1, 1, 1, 1, 0, 1, 0, 1],
        [1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1],
        [1, 1, 1, 0, 1, 0, 1, 0, 1, 0, 1, 1, 1],
        [1, 0, 0, 0, 0, 0, 1, 0, 0, 0, 0, 0, 1],
        [1, 1, 1, 0, 1, 0, 1, 0, 1, 0, 1, 1, 1],
        [1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1],
        [1, 0, 1, 0, 1, 1, 1, 1, 1, 0, 1, 0, 1],
        [1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1],
        [1, 0, 1, 1, 1, 0, 1, 0, 1, 1, 1, 0, 1],
        [1, 0, 0, 0, 0, 0, 1, 0, 0, 0, 0, 0, 1],
        [1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1],
    ],
    "level2": [
        [1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1],
        [1, 0, 0, 0, 1, 0, 0, 0, 1, 0, 0, 0, 1],
        [1, 0, 1, 0, 1, 0, 1, 0, 1, 0, 1, 0, 1],
        [1, 0, 1, 0, 0, 0, 1, 0, 0, 0, 1, 0, 1],
        [1, 0, 1, 1, 1, 0, 1, 0, 1, 1, 1, 0, 1],
        [1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1],
        [1, 1, 1, 0, 1, 1, 1, 1, 1, 0, 1, 1, 1],
        [1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1],
        [1, 1, 1, 0, 1, 1, 1, 1, 1, 0, 1, 1, 1],
        [1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1],
        [1, 0, 1, 1, 1, 0, 1, 0, 1, 1, 1, 0, 1],
        [1, 0, 1, 0, 0, 0, 1, 0, 0, 0, 1, 0, 1],
        [1, 0, 1, 0, 1, 0, 1, 0, 1, 0, 1, 0, 1],
        [1, 0, 0, 0, 1, 0, 0, 0, 1, 0, 0, 0, 1],
        [1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1],
    ],
    "level3": [
        [1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1],
        [1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1],
        [1, 0, 1, 0, 1, 0, 1, 0, 1, 0, 1, 0, 1],
        [1, 0, 0, 0, 1, 0, 0, 0, 1, 0, 0, 0, 1],
        [1, 1, 1, 0, 1, 0, 1, 0, 1, 0, 1, 1, 1],
        [1, 0, 0, 0, 0, 0, 1, 0, 0, 0, 0, 0, 1],
        [1, 0, 1, 1, 1, 1, 1, 1, 1, 1, 1, 0, 1],
        [1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1],
        [1, 0, 1, 1, 1, 1, 1, 1, 1, 1, 1, 0, 1],
        [1, 0, 0, 0, 0, 0, 1, 0, 0, 0, 0, 0, 1],
        [1, 1, 1, 0, 1, 0, 1, 0, 1, 0, 1, 1, 1],
        [1, 0, 0, 0, 1, 0, 0, 0, 1, 0, 0, 0, 1],
        [1, 0, 1, 0, 1, 0, 1, 0, 1, 0, 1, 0, 1],
        [1, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 1],
        [1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1, 1],
    ],
}


def build_levels(layouts: Dict[str, List[List[int]]] = LEVEL_LAYOUTS) -> Tuple[Maze, ...]:
    """Build the ordered level list from named layouts."""
    levels = tuple(Maze(name, layout) for name, layout in layouts.items())
    if not levels:
        raise MazeError("at least one level is required")
    logger.debug(f"Built {len(levels)} levels")
    return levels


def level_at(levels: Sequence[Maze], index: int) -> Maze:
    """Select a level by ordinal, wrapping past the last one."""
    return levels[index % len(levels)]
