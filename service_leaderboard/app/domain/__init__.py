"""
Domain layer for the leaderboard service: records, errors and the read path.
"""

from .errors import (
    CacheFailure,
    CurrentSeasonNotFound,
    ErrorKind,
    LeaderboardError,
    OriginFailure,
    PlayerNotFound,
)
from .coordinator import LeaderboardCoordinator
from .models import Leaderboard, PlayerEntry, PlayerStats, Season
from .projector import PlayerStatsProjection, project_player_stats

__all__ = [
    "CacheFailure",
    "CurrentSeasonNotFound",
    "ErrorKind",
    "Leaderboard",
    "LeaderboardCoordinator",
    "LeaderboardError",
    "OriginFailure",
    "PlayerEntry",
    "PlayerNotFound",
    "PlayerStats",
    "PlayerStatsProjection",
    "Season",
    "project_player_stats",
]
