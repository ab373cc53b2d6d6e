"""Ranked leaderboard built from game-over telemetry."""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional
import logging

from shopmaze.game.controller import iso_now

logger = logging.getLogger(__name__)


@dataclass
class LeaderboardEntry:
    userId: str
    email: str
    username: str
    score: int
    tShirtValue: int
    coinsRemaining: int
    tShirtsCount: int
    level: int
    timestamp: Optional[str]
    gameSession: Dict[str, Any] = field(default_factory=dict)


class Leaderboard:
    """Top scores, highest first. Score = item value + remaining coins."""

    def __init__(self, limit: int = 100):
        self.limit = limit
        self._entries: List[LeaderboardEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[LeaderboardEntry]:
        return list(self._entries)

    def record(self, event: Dict[str, Any]) -> Optional[LeaderboardEntry]:
        """Add a game_over event. Malformed events are logged and skipped."""
        try:
            player = event["player"]
            data = event["gameData"]
            shirts = data.get("tShirtsCollected") or {}
            shirt_value = int(shirts.get("totalValue") or 0)
            coins = int(data.get("coinsRemaining") or 0)

            entry = LeaderboardEntry(
                userId=player.get("userId"),
                email=player.get("email"),
                username=player.get("username"),
                score=shirt_value + coins,
                tShirtValue=shirt_value,
                coinsRemaining=coins,
                tShirtsCount=int(shirts.get("totalCount") or 0),
                level=int(data.get("currentLevel") or 1),
                timestamp=event.get("timestamp"),
                gameSession=data.get("gameSession") or {},
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"Bad game_over event for leaderboard: {e}")
            return None

        self._entries.append(entry)
        # Stable sort keeps earlier entries ahead on ties
        self._entries.sort(key=lambda e: e.score, reverse=True)
        del self._entries[self.limit:]

        logger.info(
            f"New leaderboard entry: {entry.userId} scored {entry.score} "
            f"(t-shirts: {entry.tShirtValue}, coins: {entry.coinsRemaining})"
        )
        return entry

    def to_response(self) -> Dict[str, Any]:
        """Body of GET /leaderboard."""
        return {
            "success": True,
            "count": len(self._entries),
            "data": [asdict(e) for e in self._entries],
            "lastUpdated": iso_now(),
        }
