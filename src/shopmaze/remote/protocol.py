"""Wire format of the remote control channel.

Frames are JSON objects, except that operators may also send a bare
text command. Hosts never answer an unrecognised frame, so two
misbehaving peers cannot ping-pong errors forever.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
import json
import logging

from shopmaze.game.controller import Command, SessionSnapshot, iso_now

logger = logging.getLogger(__name__)

# Relay acknowledgements, never commands
STATUS_TYPES = frozenset({"welcome", "received", "response", "error", "status"})

COMMAND_ALIASES: Dict[str, Command] = {
    "start": Command.START,
    "pause": Command.PAUSE,
    "new": Command.NEW_GAME,
    "newgame": Command.NEW_GAME,
    "new_game": Command.NEW_GAME,
}

AVAILABLE_COMMANDS = ["start", "pause", "new"]

# Game event kinds
GAME_OVER = "game_over"
GAME_PAUSED = "game_paused"
TEST_CONNECTION = "test_connection"


@dataclass(frozen=True)
class PlayerProfile:
    """Opaque identity supplied by the registration step."""

    user_id: str = ""
    email: str = ""
    username: str = ""

    def to_wire(self) -> Dict[str, str]:
        return {
            "userId": self.user_id or "Unknown",
            "email": self.email or "unknown@example.com",
            "username": self.username or "Unknown Player",
        }


def decode(raw: str | bytes) -> Any:
    """JSON payload of a frame, or the stripped text if it is not JSON."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, ValueError):
        return raw.strip()


def parse_command(raw: str | bytes) -> Optional[Command]:
    """Extract a session command from an inbound frame.

    Returns:
        The command, or None for acknowledgements and anything unknown
    """
    data = decode(raw)

    if isinstance(data, dict):
        msg_type = data.get("type")
        if isinstance(msg_type, str) and msg_type in STATUS_TYPES:
            return None
        name = data.get("command") or msg_type
        if not isinstance(name, str):
            if name:
                logger.warning(f"Ignoring non-text remote command: {name!r}")
            return None
    else:
        name = data

    normalized = str(name).strip().lower()
    command = COMMAND_ALIASES.get(normalized)
    if command is None and 0 < len(normalized) < 20:
        logger.warning(f"Unknown remote command: {name!r}")
    return command


def hello(game: str) -> Dict[str, Any]:
    return {"type": "client_connected", "game": game}


def welcome(message: str) -> Dict[str, Any]:
    return {
        "type": "welcome",
        "message": message,
        "availableCommands": list(AVAILABLE_COMMANDS),
    }


def command_frame(command: str, source: str) -> Dict[str, Any]:
    return {"command": command, "timestamp": iso_now(), "source": source}


def game_event(event: str, player: PlayerProfile, snapshot: SessionSnapshot) -> Dict[str, Any]:
    """Telemetry frame for a session event."""
    items = [
        {
            "id": entry.item_id,
            "name": entry.item_id.capitalize(),
            "cost": entry.cost,
            "collected": True,
        }
        for entry in snapshot.basket
    ]
    return {
        "type": "game_event",
        "event": event,
        "timestamp": snapshot.captured_at,
        "player": player.to_wire(),
        "gameData": {
            "coinsRemaining": snapshot.coins,
            "tShirtsCollected": {
                "items": items,
                "totalValue": sum(item["cost"] for item in items),
                "totalCount": len(items),
            },
            "currentLevel": snapshot.level or 1,
            "gameSession": {
                "startTime": snapshot.started_at,
                "eventTime": snapshot.captured_at,
            },
        },
    }
