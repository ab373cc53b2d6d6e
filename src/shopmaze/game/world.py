"""Read-only snapshots handed between simulation components."""

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional

from shopmaze.game.maze import Maze, Tile


class Direction(Enum):
    """Movement intent, as a (col, row) delta."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    def apply(self, tile: Tile) -> Tile:
        dc, dr = self.value
        return tile[0] + dc, tile[1] + dr

    @classmethod
    def parse(cls, name: str) -> Optional["Direction"]:
        """Direction from 'up'/'down'/'left'/'right' (any case), else None."""
        try:
            return cls[name.strip().upper()]
        except KeyError:
            return None


@dataclass(frozen=True)
class WorldView:
    """Occupancy of the current level at one instant.

    Built fresh by the controller whenever a component needs to look at
    state it does not own; nothing in it aliases live game objects.
    """

    maze: Maze
    player_tile: Tile
    ghost_tiles: FrozenSet[Tile] = frozenset()
    coin_tiles: FrozenSet[Tile] = frozenset()  # uncollected only
    item_tile: Optional[Tile] = None
    bonus_tile: Optional[Tile] = None

    def is_free(self, tile: Tile, *, ignore_item: bool = False, ignore_bonus: bool = False) -> bool:
        """Open and not occupied by the player, a ghost, a coin or a live item."""
        if not self.maze.is_open(*tile):
            return False
        if tile == self.player_tile or tile in self.ghost_tiles or tile in self.coin_tiles:
            return False
        if not ignore_item and tile == self.item_tile:
            return False
        if not ignore_bonus and tile == self.bonus_tile:
            return False
        return True

    def free_tiles(self, **kwargs) -> list[Tile]:
        return [t for t in self.maze.open_tiles() if self.is_free(t, **kwargs)]
