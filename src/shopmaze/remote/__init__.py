"""Remote control channel: wire protocol, host client and relay."""

from shopmaze.remote.protocol import PlayerProfile, parse_command
from shopmaze.remote.leaderboard import Leaderboard, LeaderboardEntry
from shopmaze.remote.client import RemoteController
from shopmaze.remote.relay import RelayServer

__all__ = [
    "PlayerProfile",
    "parse_command",
    "Leaderboard",
    "LeaderboardEntry",
    "RemoteController",
    "RelayServer",
]
