"""Relay process for the remote control channel.

Two aiohttp applications share one RelayServer:

- control app: websocket endpoint game hosts and the admin panel connect to
- API app: read-only leaderboard and health endpoints

Operators can also type commands on stdin.
"""

import asyncio
import logging
import sys
import time
from typing import Any, Dict, Optional, Set

from aiohttp import web, WSMsgType

from shopmaze.config.settings import RelaySettings
from shopmaze.game.controller import iso_now
from shopmaze.remote import protocol
from shopmaze.remote.leaderboard import Leaderboard

logger = logging.getLogger(__name__)

CONSOLE_COMMANDS = ["start", "pause", "new", "status", "quit"]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


@web.middleware
async def cors_middleware(request: web.Request, handler) -> web.StreamResponse:
    """CORS headers on every API response, JSON body for unknown paths."""
    if request.method == "OPTIONS":
        response = web.Response(status=200)
    else:
        try:
            response = await handler(request)
        except web.HTTPNotFound:
            response = web.json_response({"error": "Not found"}, status=404)
    response.headers.update(CORS_HEADERS)
    return response


class RelayServer:
    """Fans operator commands out to game hosts and ranks finished games."""

    def __init__(self, settings: RelaySettings, leaderboard: Optional[Leaderboard] = None):
        self.settings = settings
        self.leaderboard = leaderboard or Leaderboard(settings.leaderboard_limit)
        self.clients: Set[web.WebSocketResponse] = set()
        self._started = time.monotonic()
        self._runners: list[web.AppRunner] = []
        self._stop_event = asyncio.Event()

        self.control_app = web.Application()
        self.control_app.router.add_get(settings.path, self._handle_socket)

        self.api_app = web.Application(middlewares=[cors_middleware])
        self.api_app.router.add_get("/leaderboard", self._handle_leaderboard)
        self.api_app.router.add_get("/health", self._handle_health)

    @property
    def uptime(self) -> float:
        return time.monotonic() - self._started

    # -- websocket -----------------------------------------------------

    async def _handle_socket(self, request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse()
        await ws.prepare(request)

        self.clients.add(ws)
        logger.info(f"Client connected from {request.remote} ({len(self.clients)} connected)")

        await ws.send_json(protocol.welcome("Connected to Red Hat Quest Control Server"))

        try:
            async for msg in ws:
                if msg.type in (WSMsgType.TEXT, WSMsgType.BINARY):
                    await self.handle_frame(msg.data)
                elif msg.type == WSMsgType.ERROR:
                    logger.warning(f"WebSocket error: {ws.exception()}")
        finally:
            self.clients.discard(ws)
            logger.info(f"Client disconnected ({len(self.clients)} connected)")

        return ws

    async def handle_frame(self, raw: str | bytes) -> None:
        """Process one inbound frame. Nothing is ever echoed back."""
        data = protocol.decode(raw)
        if not isinstance(data, dict):
            text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
            data = {"type": "raw", "data": text}
        logger.debug(f"Received from client: {data}")

        if data.get("type") == "game_event" and data.get("event") == protocol.GAME_OVER:
            self.leaderboard.record(data)

        command = data.get("command")
        if command and data.get("source") == self.settings.admin_source:
            logger.info(f"Received command: {command} from {data['source']}")
            await self.handle_command(str(command).strip().lower())

    async def broadcast(self, command: str) -> int:
        """Send a command frame to every open client."""
        frame = protocol.command_frame(command, "server")
        sent = 0
        for ws in list(self.clients):
            if ws.closed:
                continue
            try:
                await ws.send_json(frame)
                sent += 1
            except ConnectionResetError as e:
                logger.warning(f"Dropping client after send failure: {e}")
                self.clients.discard(ws)
        logger.info(f"Sent \"{command}\" command to {sent} client(s)")
        return sent

    async def handle_command(self, command: str) -> Optional[Dict[str, Any]]:
        """Operator command from the console or the admin panel.

        Returns:
            Status dict for "status", otherwise None
        """
        if command in ("quit", "exit"):
            logger.info("Shutting down relay")
            self._stop_event.set()
            return None

        if command == "status":
            status = self.status()
            logger.info(
                f"Relay status: ws port {self.settings.ws_port}, "
                f"{status['connectedClients']} client(s), uptime {status['uptime']:.2f}s"
            )
            return status

        if command in protocol.AVAILABLE_COMMANDS:
            await self.broadcast(command)
        elif command:
            logger.warning(
                f"Unknown command: {command!r}. Available: {', '.join(CONSOLE_COMMANDS)}"
            )
        return None

    # -- HTTP API ------------------------------------------------------

    async def _handle_leaderboard(self, request: web.Request) -> web.Response:
        logger.info(f"Leaderboard API called, {len(self.leaderboard)} entries")
        return web.json_response(self.leaderboard.to_response())

    async def _handle_health(self, request: web.Request) -> web.Response:
        return web.json_response(self.status())

    def status(self) -> Dict[str, Any]:
        return {
            "status": "healthy",
            "service": "shopmaze-relay",
            "timestamp": iso_now(),
            "uptime": self.uptime,
            "connectedClients": len(self.clients),
            "leaderboardEntries": len(self.leaderboard),
        }

    # -- lifecycle -----------------------------------------------------

    async def start(self) -> None:
        for app, port in ((self.control_app, self.settings.ws_port), (self.api_app, self.settings.http_port)):
            runner = web.AppRunner(app)
            await runner.setup()
            site = web.TCPSite(runner, self.settings.host, port)
            await site.start()
            self._runners.append(runner)

        logger.info(
            f"Control server on ws://{self.settings.host}:{self.settings.ws_port}{self.settings.path}"
        )
        logger.info(f"Leaderboard API on http://{self.settings.host}:{self.settings.http_port}/leaderboard")

    async def stop(self) -> None:
        for ws in list(self.clients):
            await ws.close()
        self.clients.clear()
        for runner in self._runners:
            await runner.cleanup()
        self._runners.clear()
        logger.info("Relay stopped")

    async def run_console(self) -> None:
        """Read operator commands from stdin until quit or EOF."""
        loop = asyncio.get_running_loop()
        logger.info(f"Type commands ({', '.join(CONSOLE_COMMANDS)})")
        while not self._stop_event.is_set():
            line = await loop.run_in_executor(None, sys.stdin.readline)
            if not line:
                break
            await self.handle_command(line.strip().lower())

    async def serve(self) -> None:
        """Run until a quit command or cancellation."""
        await self.start()
        console: Optional[asyncio.Task] = None
        if self.settings.console and sys.stdin.isatty():
            console = asyncio.create_task(self.run_console())
        try:
            await self._stop_event.wait()
        finally:
            if console:
                console.cancel()
            await self.stop()


def main() -> None:
    """Entry point for the shopmaze-relay script."""
    from dotenv import load_dotenv

    from shopmaze.config.settings import get_settings
    from shopmaze.main import setup_logging

    load_dotenv()
    settings = get_settings()
    setup_logging(settings.debug)

    relay = RelayServer(settings.relay)
    try:
        asyncio.run(relay.serve())
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
