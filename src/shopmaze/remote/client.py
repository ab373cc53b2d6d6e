"""Host side of the remote control channel.

Keeps a websocket open to the relay, feeds operator commands into the
game controller and reports session telemetry. When the relay goes
away the client retries on a fixed delay a bounded number of times,
then gives up for the rest of the session; the game itself never
notices.
"""

import asyncio
import contextlib
import logging
from typing import Any, Dict, Optional

import aiohttp

from shopmaze.config.settings import RemoteSettings
from shopmaze.core.events import Event, EventBus, EventType
from shopmaze.core.state import GameState
from shopmaze.game.controller import GameController
from shopmaze.remote import protocol
from shopmaze.remote.protocol import PlayerProfile

logger = logging.getLogger(__name__)


class RemoteController:
    """Websocket client bridging a relay and a GameController.

    Args:
        controller: Game session to drive
        settings: Remote channel settings (url, reconnect policy)
        player: Identity reported in telemetry
        event_bus: Bus to listen on; defaults to the controller's
        session: Optional aiohttp session (one is created if omitted)
    """

    def __init__(
        self,
        controller: GameController,
        settings: RemoteSettings,
        player: PlayerProfile,
        event_bus: Optional[EventBus] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.controller = controller
        self.settings = settings
        self.player = player
        self.event_bus = event_bus or controller.event_bus
        self._session = session

        self.connected = False
        self.disabled = False
        self.reconnect_attempts = 0
        self.connect_count = 0

        self._running = False
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._outbox: asyncio.Queue[Dict[str, Any]] = asyncio.Queue()

        self.event_bus.subscribe(EventType.GAME_STARTED, self._on_game_started)
        self.event_bus.subscribe(EventType.GAME_PAUSED, self._on_game_paused)
        self.event_bus.subscribe(EventType.GAME_OVER, self._on_game_over)

    # -- connection ----------------------------------------------------

    async def run(self) -> None:
        """Connect and keep reconnecting until stopped or disabled."""
        self._running = True
        own_session = self._session is None
        session = self._session or aiohttp.ClientSession()

        try:
            while self._running:
                await self._connect_once(session)
                if not self._running:
                    break

                if self.reconnect_attempts >= self.settings.max_reconnect_attempts:
                    self.disabled = True
                    logger.error("Max reconnection attempts reached. Remote control disabled.")
                    self.event_bus.emit(Event(
                        EventType.REMOTE_DISABLED,
                        data={"attempts": self.reconnect_attempts},
                        source="remote",
                    ))
                    break

                self.reconnect_attempts += 1
                logger.info(
                    f"Reconnecting in {self.settings.reconnect_delay_s}s "
                    f"(attempt {self.reconnect_attempts}/{self.settings.max_reconnect_attempts})"
                )
                await asyncio.sleep(self.settings.reconnect_delay_s)
        finally:
            self._running = False
            if own_session:
                await session.close()

    async def stop(self) -> None:
        self._running = False
        if self._ws is not None and not self._ws.closed:
            await self._ws.close()

    async def _connect_once(self, session: aiohttp.ClientSession) -> None:
        self.connect_count += 1
        try:
            async with session.ws_connect(self.settings.url) as ws:
                self._ws = ws
                self.connected = True
                self.reconnect_attempts = 0
                logger.info(f"Remote control connected to {self.settings.url}")

                await ws.send_json(protocol.hello(self.settings.game_name))
                self.event_bus.emit(Event(EventType.REMOTE_CONNECTED, source="remote"))
                if self.controller.state != GameState.IDLE:
                    self._send_event(protocol.TEST_CONNECTION)

                sender = asyncio.create_task(self._drain_outbox(ws))
                try:
                    await self._receive(ws)
                finally:
                    sender.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await sender
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as e:
            logger.warning(f"Remote control connection failed: {e}")
        finally:
            if self.connected:
                logger.info("Remote control disconnected")
            self.connected = False
            self._ws = None
            self._clear_outbox()

    async def _receive(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        async for msg in ws:
            if msg.type in (aiohttp.WSMsgType.TEXT, aiohttp.WSMsgType.BINARY):
                self.handle_message(msg.data)
            elif msg.type == aiohttp.WSMsgType.ERROR:
                logger.warning(f"Remote control socket error: {ws.exception()}")
                break

    async def _drain_outbox(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        while True:
            message = await self._outbox.get()
            try:
                await ws.send_json(message)
            except (aiohttp.ClientError, ConnectionResetError) as e:
                logger.warning(f"Error sending remote message: {e}")
            finally:
                self._outbox.task_done()

    def _clear_outbox(self) -> None:
        while not self._outbox.empty():
            self._outbox.get_nowait()
            self._outbox.task_done()

    # -- inbound -------------------------------------------------------

    def handle_message(self, raw: str | bytes) -> None:
        """Queue a recognised command on the controller. Never replies."""
        command = protocol.parse_command(raw)
        if command is None:
            return
        logger.info(f"Remote command: {command.value}")
        self.controller.submit(command)

    # -- outbound ------------------------------------------------------

    def send(self, message: Dict[str, Any]) -> bool:
        """Queue a frame for the relay; dropped unless connected."""
        if not self.connected or self.disabled:
            return False
        self._outbox.put_nowait(message)
        return True

    def _send_event(self, kind: str) -> bool:
        return self.send(protocol.game_event(kind, self.player, self.controller.snapshot()))

    def _on_game_started(self, event: Event) -> None:
        self._send_event(protocol.TEST_CONNECTION)

    def _on_game_paused(self, event: Event) -> None:
        snapshot = event.data.get("snapshot") or self.controller.snapshot()
        self.send(protocol.game_event(protocol.GAME_PAUSED, self.player, snapshot))

    def _on_game_over(self, event: Event) -> None:
        snapshot = event.data.get("snapshot") or self.controller.snapshot()
        self.send(protocol.game_event(protocol.GAME_OVER, self.player, snapshot))

    def status(self) -> Dict[str, Any]:
        return {
            "connected": self.connected,
            "disabled": self.disabled,
            "url": self.settings.url,
            "reconnect_attempts": self.reconnect_attempts,
        }
