"""
Main entry point for ShopMaze.

Runs the game either in a pygame window or headless, optionally
connected to a relay for remote control.
"""

import asyncio
import contextlib
import logging
import sys

from shopmaze.config.settings import Settings
from shopmaze.core.events import EventBus
from shopmaze.game.controller import GameController
from shopmaze.remote.protocol import PlayerProfile


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


def player_profile(settings: Settings) -> PlayerProfile:
    """Identity reported with telemetry, normally filled in by registration."""
    return PlayerProfile(
        user_id=settings.player.user_id,
        email=settings.player.email,
        username=settings.player.username,
    )


async def run(settings: Settings) -> None:
    """Run one game session until the window closes or the task is cancelled."""
    logger = logging.getLogger(__name__)

    event_bus = EventBus()
    controller = GameController(settings.game, event_bus=event_bus)

    remote_task = None
    remote = None
    if settings.remote.enabled:
        from shopmaze.remote.client import RemoteController

        remote = RemoteController(controller, settings.remote, player_profile(settings), event_bus)
        remote_task = asyncio.create_task(remote.run())
    else:
        logger.info("Remote control disabled by configuration")

    controller.start()

    try:
        if settings.is_headless:
            from shopmaze.game.loop import GameLoop

            await GameLoop(controller, fps=settings.game.fps).run()
        else:
            from shopmaze.simulator.window import GameWindow, WindowConfig

            config = WindowConfig(
                title=settings.window_title,
                scale=settings.window_scale,
                fps=settings.game.fps,
            )
            await GameWindow(controller, config, event_bus).run()
    finally:
        if remote is not None:
            await remote.stop()
        if remote_task is not None:
            remote_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await remote_task


def main() -> None:
    """Main entry point."""
    from dotenv import load_dotenv

    from shopmaze.config.settings import get_settings

    # Load environment variables
    load_dotenv()

    settings = get_settings()
    setup_logging(settings.debug)

    logger = logging.getLogger(__name__)
    logger.info("ShopMaze starting...")
    logger.info(f"Running in {settings.env} mode")

    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)

    logger.info("ShopMaze stopped")


if __name__ == "__main__":
    main()
