"""
Tagged error kinds raised by the leaderboard core.
"""

from enum import Enum
from typing import Any, Dict, Optional

from shared.errors import ServiceException


class ErrorKind(str, Enum):
    """Failure categories the read path and refresh loops branch on."""
    MISS = "miss"
    CACHE_FAILURE = "cache_failure"
    ORIGIN_FAILURE = "origin_failure"
    NOT_FOUND = "not_found"


class LeaderboardError(ServiceException):
    """Base error carrying an ErrorKind tag."""

    kind: ErrorKind = ErrorKind.ORIGIN_FAILURE


class CacheFailure(LeaderboardError):
    """The cache backend failed or returned an unreadable payload."""

    kind = ErrorKind.CACHE_FAILURE

    def __init__(self, message: str = "Cache error", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_FAILURE", message, details)


class OriginFailure(LeaderboardError):
    """The origin API call failed (network, auth, status or parse error)."""

    kind = ErrorKind.ORIGIN_FAILURE

    def __init__(self, message: str = "Origin API error", details: Optional[Dict[str, Any]] = None,
                 code: str = "ORIGIN_FAILURE"):
        super().__init__(code, message, details)


class CurrentSeasonNotFound(OriginFailure):
    """The origin lists no season that is current and outside offseason."""

    def __init__(self, message: str = "current season not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details, code="SEASON_NOT_FOUND")


class PlayerNotFound(LeaderboardError):
    """The requested player is not present in the warmed cache."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, player_id: str):
        super().__init__("PLAYER_NOT_FOUND", "Player stats not found", {"player_id": player_id})
