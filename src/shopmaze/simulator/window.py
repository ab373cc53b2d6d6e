"""
Desktop front-end using pygame.

Draws the maze and entities from the controller's read-only state and
turns keyboard and mouse input into movement intents and commands.
The controller never calls back into this module.
"""

import pygame
import asyncio
import logging
from dataclasses import dataclass

from ..core.events import Event, EventBus, EventType
from ..core.state import GameState
from ..game.collectibles import ItemKind
from ..game.controller import Command, GameController
from ..game.world import Direction

logger = logging.getLogger(__name__)

HUD_HEIGHT = 40


@dataclass
class WindowConfig:
    """Front-end window configuration."""
    title: str = "ShopMaze"
    scale: int = 2
    fps: int = 60

    # Colors
    bg_color: tuple[int, int, int] = (12, 12, 20)
    wall_color: tuple[int, int, int] = (40, 60, 140)
    floor_color: tuple[int, int, int] = (20, 20, 30)
    text_color: tuple[int, int, int] = (230, 230, 240)
    player_color: tuple[int, int, int] = (238, 0, 0)
    ghost_color: tuple[int, int, int] = (180, 180, 255)
    coin_color: tuple[int, int, int] = (255, 200, 40)
    item_color: tuple[int, int, int] = (60, 200, 120)
    bonus_color: tuple[int, int, int] = (255, 60, 60)


KEY_DIRECTIONS = {
    pygame.K_UP: Direction.UP,
    pygame.K_w: Direction.UP,
    pygame.K_DOWN: Direction.DOWN,
    pygame.K_s: Direction.DOWN,
    pygame.K_LEFT: Direction.LEFT,
    pygame.K_a: Direction.LEFT,
    pygame.K_RIGHT: Direction.RIGHT,
    pygame.K_d: Direction.RIGHT,
}


class GameWindow:
    """
    Render sink and local input for one GameController.

    Keyboard Mapping:
        ARROWS / WASD: Walk in a direction until blocked
        SPACE: Stop walking
        P: Pause / resume
        N: New game
        ESC: Exit

    Mouse drags are treated as swipes; a click without a drag is a tap.
    """

    def __init__(
        self,
        controller: GameController,
        config: WindowConfig | None = None,
        event_bus: EventBus | None = None,
    ) -> None:
        self.controller = controller
        self.config = config or WindowConfig()
        self.event_bus = event_bus or controller.event_bus

        self._screen: pygame.Surface | None = None
        self._canvas: pygame.Surface | None = None
        self._clock: pygame.time.Clock | None = None
        self._font: pygame.font.Font | None = None
        self._big_font: pygame.font.Font | None = None
        self._running = False
        self._drag_start: tuple[int, int] | None = None

        self._notification = ""
        self._notification_until = 0

        self.event_bus.subscribe(EventType.BONUS_COLLECTED, self._on_bonus_collected)
        self.event_bus.subscribe(EventType.ITEM_UNAFFORDABLE, self._on_item_unaffordable)

    @property
    def tile_size(self) -> int:
        return self.controller.settings.tile_size

    def _canvas_size(self) -> tuple[int, int]:
        width, height = self.controller.maze.dimensions()
        return width * self.tile_size, height * self.tile_size + HUD_HEIGHT

    def _init_pygame(self) -> None:
        """Initialize pygame and create window."""
        pygame.init()
        pygame.display.set_caption(self.config.title)

        width, height = self._canvas_size()
        self._canvas = pygame.Surface((width, height))
        self._screen = pygame.display.set_mode(
            (width * self.config.scale, height * self.config.scale),
            pygame.DOUBLEBUF,
        )
        self._clock = pygame.time.Clock()

        pygame.font.init()
        self._font = pygame.font.SysFont(None, 22)
        self._big_font = pygame.font.SysFont(None, 48)

        logger.info(f"Pygame initialized: {width}x{height} x{self.config.scale}")

    # -- notifications -------------------------------------------------

    def _notify(self, text: str, duration_ms: float) -> None:
        self._notification = text
        self._notification_until = pygame.time.get_ticks() + int(duration_ms)

    def _on_bonus_collected(self, event: Event) -> None:
        self._notify("+1 Red Hat!", event.data.get("duration_ms", 2000))

    def _on_item_unaffordable(self, event: Event) -> None:
        self._notify(f"Need {event.data.get('cost')} coins", self.controller.settings.notification_ms)

    # -- input ---------------------------------------------------------

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                self._handle_keydown(event)

            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self._drag_start = event.pos

            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                if self._drag_start is not None:
                    dx = (event.pos[0] - self._drag_start[0]) / self.config.scale
                    dy = (event.pos[1] - self._drag_start[1]) / self.config.scale
                    self._drag_start = None
                    self.controller.swipe(dx, dy)

    def _handle_keydown(self, event: pygame.event.Event) -> None:
        """Handle key press."""
        key = event.key

        if key == pygame.K_ESCAPE:
            self._running = False
        elif key in KEY_DIRECTIONS:
            self.controller.move(KEY_DIRECTIONS[key])
        elif key == pygame.K_SPACE:
            self.controller.stop()
        elif key == pygame.K_p:
            state = self.controller.state
            if state == GameState.RUNNING:
                self.controller.submit(Command.PAUSE)
            elif state in (GameState.PAUSED, GameState.IDLE):
                self.controller.submit(Command.START)
        elif key == pygame.K_n:
            self.controller.submit(Command.NEW_GAME)

    # -- rendering -----------------------------------------------------

    def _render(self) -> None:
        """Render the current frame."""
        if not self._screen or not self._canvas:
            return

        canvas = self._canvas
        canvas.fill(self.config.bg_color)

        self._render_maze()
        self._render_collectibles()
        self._render_ghosts()
        self._render_player()
        self._render_hud()
        self._render_overlay()

        pygame.transform.scale(canvas, self._screen.get_size(), self._screen)
        pygame.display.flip()

    def _tile_rect(self, tile: tuple[int, int]) -> pygame.Rect:
        size = self.tile_size
        return pygame.Rect(tile[0] * size, tile[1] * size + HUD_HEIGHT, size, size)

    def _render_maze(self) -> None:
        maze = self.controller.maze
        for row in range(maze.height):
            for col in range(maze.width):
                color = self.config.floor_color if maze.is_open(col, row) else self.config.wall_color
                pygame.draw.rect(self._canvas, color, self._tile_rect((col, row)))

    def _render_collectibles(self) -> None:
        collectibles = self.controller.collectibles
        quarter = self.tile_size // 4

        for coin in collectibles.coins:
            if not coin.collected:
                pygame.draw.circle(self._canvas, self.config.coin_color, self._tile_rect(coin.tile).center, quarter)

        for timed in (collectibles.item, collectibles.bonus):
            if timed is None:
                continue
            rect = self._tile_rect(timed.tile).inflate(-quarter, -quarter)
            if timed.kind is ItemKind.PURCHASABLE:
                pygame.draw.rect(self._canvas, self.config.item_color, rect, border_radius=4)
                label = f"{timed.spec.price}" if timed.spec else "?"
            else:
                pygame.draw.ellipse(self._canvas, self.config.bonus_color, rect)
                label = ""
            if label:
                self._blit_text(label, rect.center, self._font, center=True)
            self._blit_text(str(timed.lifetime), (rect.right, rect.top - 6), self._font, center=True)

    def _render_ghosts(self) -> None:
        half = self.tile_size // 2
        for ghost in self.controller.ghosts.ghosts:
            x, y = ghost.pixel
            center = (int(x) + half, int(y) + half + HUD_HEIGHT)
            pygame.draw.circle(self._canvas, self.config.ghost_color, center, half - 3)

    def _render_player(self) -> None:
        player = self.controller.player
        if player.invincible and player.blink:
            return
        x, y = player.pixel
        size = self.tile_size
        rect = pygame.Rect(int(x) + 4, int(y) + 4 + HUD_HEIGHT, size - 8, size - 8)
        pygame.draw.rect(self._canvas, self.config.player_color, rect, border_radius=6)

    def _render_hud(self) -> None:
        status = self.controller.status()
        text = (
            f"Level {status['level']}   Red Hats {status['lives']}   "
            f"Coins {status['coins']}   Basket {status['basket_items']}"
        )
        self._blit_text(text, (8, 12), self._font)

        if self._notification and pygame.time.get_ticks() < self._notification_until:
            width = self._canvas.get_width()
            self._blit_text(self._notification, (width // 2, HUD_HEIGHT + 20), self._font, center=True)

    def _render_overlay(self) -> None:
        state = self.controller.state
        if state == GameState.RUNNING:
            return

        titles = {
            GameState.IDLE: ("ShopMaze", "Press P to start"),
            GameState.PAUSED: ("Paused", "Press P to resume"),
            GameState.GAME_OVER: ("Game Over", "Press N for a new game"),
        }
        title, hint = titles[state]

        shade = pygame.Surface(self._canvas.get_size(), pygame.SRCALPHA)
        shade.fill((0, 0, 0, 160))
        self._canvas.blit(shade, (0, 0))

        cx = self._canvas.get_width() // 2
        cy = self._canvas.get_height() // 2
        self._blit_text(title, (cx, cy - 20), self._big_font, center=True)
        self._blit_text(hint, (cx, cy + 20), self._font, center=True)

    def _blit_text(self, text: str, pos: tuple[int, int], font: pygame.font.Font | None, center: bool = False) -> None:
        if font is None:
            return
        surface = font.render(text, True, self.config.text_color)
        rect = surface.get_rect(center=pos) if center else surface.get_rect(topleft=pos)
        self._canvas.blit(surface, rect)

    # -- loop ----------------------------------------------------------

    async def run(self) -> None:
        """Main window loop. Drives controller ticks from the frame clock."""
        self._init_pygame()
        self._running = True

        logger.info("Window started")

        while self._running:
            self._handle_events()

            if self._clock:
                self.controller.tick(float(self._clock.get_time()))

            self._render()

            if self._clock:
                self._clock.tick(self.config.fps)

            # Yield to the remote client
            await asyncio.sleep(0)

        self._cleanup()

    def _cleanup(self) -> None:
        pygame.quit()
        logger.info("Window stopped")

    def stop(self) -> None:
        self._running = False
