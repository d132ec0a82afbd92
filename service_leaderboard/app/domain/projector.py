"""
Per-player projection of cached leaderboard data.
"""

from dataclasses import dataclass
from typing import Any, Dict

from .models import PlayerEntry


@dataclass(frozen=True)
class PlayerStatsProjection:
    """Rank, games played and wins for a single player."""
    player_id: str
    rank: int
    games_played: int
    wins: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "rank": self.rank,
            "games_played": self.games_played,
            "wins": self.wins,
        }


def project_player_stats(entry: PlayerEntry) -> PlayerStatsProjection:
    """Extract the rank/games/wins projection from a leaderboard entry."""
    return PlayerStatsProjection(
        player_id=entry.player_id,
        rank=entry.rank,
        games_played=entry.stats.games,
        wins=entry.stats.wins,
    )
