"""Fixed-rate asyncio driver for hosts without a display."""

import asyncio
import logging
import time

from shopmaze.game.controller import GameController

logger = logging.getLogger(__name__)


class GameLoop:
    """Calls controller.tick() at a fixed rate on the running event loop.

    Remote commands arrive on the same loop between ticks, so the
    controller never needs locking.
    """

    def __init__(self, controller: GameController, fps: int = 60):
        self.controller = controller
        self.fps = fps
        self._running = False

    @property
    def frame_ms(self) -> float:
        return 1000.0 / self.fps

    async def run(self) -> None:
        self._running = True
        logger.info(f"Game loop started at {self.fps} ticks/s")
        last = time.perf_counter()

        while self._running:
            now = time.perf_counter()
            delta_ms = (now - last) * 1000.0
            last = now

            self.controller.tick(delta_ms)

            elapsed = time.perf_counter() - now
            await asyncio.sleep(max(0.0, self.frame_ms / 1000.0 - elapsed))

        logger.info("Game loop stopped")

    def stop(self) -> None:
        self._running = False
