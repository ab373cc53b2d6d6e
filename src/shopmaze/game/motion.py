"""Tile-to-tile animated movement shared by the player and ghosts."""

import math
from typing import Tuple

from shopmaze.game.maze import Tile

Pixel = Tuple[float, float]


def tile_to_pixel(tile: Tile, tile_size: int) -> Pixel:
    return float(tile[0] * tile_size), float(tile[1] * tile_size)


class MovableEntity:
    """Discrete tile position plus a pixel position that eases toward it.

    The tile changes the moment a move is accepted and is the only
    position game logic looks at. The pixel position trails behind at
    `step` pixels per tick along each axis independently.
    """

    def __init__(self, tile: Tile, step: float, tile_size: int):
        self.tile_size = tile_size
        self.step = step
        self.place(tile)

    @property
    def moving(self) -> bool:
        return self.pixel != self.target

    def place(self, tile: Tile) -> None:
        """Teleport to tile with no animation."""
        self.tile: Tile = tile
        self.pixel: Pixel = tile_to_pixel(tile, self.tile_size)
        self.target: Pixel = self.pixel

    def begin_move(self, tile: Tile) -> bool:
        """Start animating toward tile. Refused while a move is in flight."""
        if self.moving:
            return False
        self.tile = tile
        self.target = tile_to_pixel(tile, self.tile_size)
        return True

    def advance(self, step: float | None = None) -> bool:
        """Move the pixel position one tick toward the target.

        Returns:
            True on the tick the animation completes
        """
        if not self.moving:
            return False

        step = self.step if step is None else step
        px, py = self.pixel
        tx, ty = self.target
        dx, dy = tx - px, ty - py

        # Inclusive: a full step that lands exactly on the target completes
        # now, since moving is derived from pixel != target
        if math.hypot(dx, dy) <= step:
            self.pixel = self.target
            return True

        # Axis-independent, not normalized
        if dx:
            px += math.copysign(step, dx)
        if dy:
            py += math.copysign(step, dy)
        self.pixel = (px, py)
        return False
