"""
Season and leaderboard records served by the leaderboard service.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class Season:
    """A ranked season as reported by the origin API."""

    season_id: str
    is_current: bool = False
    is_offseason: bool = False

    @property
    def is_active(self) -> bool:
        """True for the season that is current and not in offseason."""
        return self.is_current and not self.is_offseason

    def to_dict(self) -> Dict[str, Any]:
        return {
            "season_id": self.season_id,
            "is_current": self.is_current,
            "is_offseason": self.is_offseason,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Season":
        """Rehydrate a season from cached JSON state."""
        return cls(
            season_id=str(payload["season_id"]),
            is_current=bool(payload.get("is_current", False)),
            is_offseason=bool(payload.get("is_offseason", False)),
        )

    @classmethod
    def from_api(cls, resource: Dict[str, Any]) -> "Season":
        """Build a season from a JSON:API ``season`` resource object."""
        attributes = resource.get("attributes") or {}
        return cls(
            season_id=str(resource["id"]),
            is_current=bool(attributes.get("isCurrentSeason", False)),
            is_offseason=bool(attributes.get("isOffseason", False)),
        )


@dataclass(frozen=True)
class PlayerStats:
    """Snapshot of a player's ranked stats for one refresh cycle."""

    rank_points: float = 0.0
    wins: int = 0
    games: int = 0
    win_ratio: float = 0.0
    average_damage: float = 0.0
    kills: int = 0
    kill_death_ratio: float = 0.0
    kda: float = 0.0
    average_rank: float = 0.0
    tier: str = ""
    sub_tier: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rank_points": self.rank_points,
            "wins": self.wins,
            "games": self.games,
            "win_ratio": self.win_ratio,
            "average_damage": self.average_damage,
            "kills": self.kills,
            "kill_death_ratio": self.kill_death_ratio,
            "kda": self.kda,
            "average_rank": self.average_rank,
            "tier": self.tier,
            "sub_tier": self.sub_tier,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "PlayerStats":
        return cls(
            rank_points=float(payload.get("rank_points", 0.0)),
            wins=int(payload.get("wins", 0)),
            games=int(payload.get("games", 0)),
            win_ratio=float(payload.get("win_ratio", 0.0)),
            average_damage=float(payload.get("average_damage", 0.0)),
            kills=int(payload.get("kills", 0)),
            kill_death_ratio=float(payload.get("kill_death_ratio", 0.0)),
            kda=float(payload.get("kda", 0.0)),
            average_rank=float(payload.get("average_rank", 0.0)),
            tier=str(payload.get("tier", "")),
            sub_tier=str(payload.get("sub_tier", "")),
        )

    @classmethod
    def from_api(cls, stats: Dict[str, Any]) -> "PlayerStats":
        """Build stats from the camelCase ``stats`` object of the origin API."""
        return cls(
            rank_points=float(stats.get("rankPoints", 0.0)),
            wins=int(stats.get("wins", 0)),
            games=int(stats.get("games", 0)),
            win_ratio=float(stats.get("winRatio", 0.0)),
            average_damage=float(stats.get("averageDamage", 0.0)),
            kills=int(stats.get("kills", 0)),
            kill_death_ratio=float(stats.get("killDeathRatio", 0.0)),
            kda=float(stats.get("kda", 0.0)),
            average_rank=float(stats.get("averageRank", 0.0)),
            tier=str(stats.get("tier", "")),
            sub_tier=str(stats.get("subTier", "")),
        )


@dataclass(frozen=True)
class PlayerEntry:
    """A single ranked player within a leaderboard."""

    player_id: str
    rank: int
    stats: PlayerStats = field(default_factory=PlayerStats)
    name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "rank": self.rank,
            "stats": self.stats.to_dict(),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "PlayerEntry":
        return cls(
            player_id=str(payload["player_id"]),
            name=str(payload.get("name", "")),
            rank=int(payload["rank"]),
            stats=PlayerStats.from_dict(payload.get("stats") or {}),
        )

    @classmethod
    def from_api(cls, resource: Dict[str, Any]) -> "PlayerEntry":
        """Build an entry from a JSON:API ``player`` resource in ``included``."""
        attributes = resource.get("attributes") or {}
        return cls(
            player_id=str(resource["id"]),
            name=str(attributes.get("name", "")),
            rank=int(attributes["rank"]),
            stats=PlayerStats.from_api(attributes.get("stats") or {}),
        )


@dataclass(frozen=True)
class Leaderboard:
    """Ranked leaderboard for one (season, game mode) pair."""

    season_id: str
    game_mode: str
    players: Tuple[PlayerEntry, ...] = ()
    leaderboard_id: Optional[str] = None
    shard_id: Optional[str] = None

    def __post_init__(self) -> None:
        # Keep players ordered by rank regardless of how the origin sent them
        ordered = tuple(sorted(self.players, key=lambda entry: entry.rank))
        object.__setattr__(self, "players", ordered)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "leaderboard_id": self.leaderboard_id,
            "season_id": self.season_id,
            "game_mode": self.game_mode,
            "shard_id": self.shard_id,
            "players": [entry.to_dict() for entry in self.players],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Leaderboard":
        """Rehydrate a leaderboard from cached JSON state."""
        return cls(
            leaderboard_id=payload.get("leaderboard_id"),
            season_id=str(payload["season_id"]),
            game_mode=str(payload["game_mode"]),
            shard_id=payload.get("shard_id"),
            players=tuple(PlayerEntry.from_dict(item) for item in payload.get("players", [])),
        )

    @classmethod
    def from_api(cls, document: Dict[str, Any]) -> "Leaderboard":
        """Build a leaderboard from a JSON:API leaderboard document.

        Player resources are read from ``included``; resources of other types
        are ignored.
        """
        data = document["data"]
        attributes = data.get("attributes") or {}
        players = [
            PlayerEntry.from_api(resource)
            for resource in document.get("included") or []
            if resource.get("type", "player") == "player"
        ]
        return cls(
            leaderboard_id=data.get("id"),
            season_id=str(attributes["seasonId"]),
            game_mode=str(attributes["gameMode"]),
            shard_id=attributes.get("shardId"),
            players=tuple(players),
        )
