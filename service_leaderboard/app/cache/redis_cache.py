"""
Redis caching layer for season and leaderboard data.
"""

import json
from typing import Any, Dict, Optional, TYPE_CHECKING

import redis.asyncio as redis
from redis.exceptions import RedisError

from shared.logging import get_logger
from ..domain.errors import CacheFailure
from ..domain.models import Leaderboard, PlayerEntry, Season

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_SEASON_TTL = 24 * 60 * 60
DEFAULT_LEADERBOARD_TTL = 10 * 60


class LeaderboardCache:
    """Redis-backed cache for the current season, leaderboard and players.

    A miss is reported as ``None``; backend errors and unreadable payloads
    raise ``CacheFailure``. Every write resets the key's TTL.
    """

    SEASON_KEY = "current_season"
    LEADERBOARD_KEY = "leaderboard"
    PLAYER_PREFIX = "player:"

    def __init__(
        self,
        redis_url: str,
        *,
        season_ttl: int = DEFAULT_SEASON_TTL,
        leaderboard_ttl: int = DEFAULT_LEADERBOARD_TTL,
        metrics: Optional["MetricsCollector"] = None,
        logger=None,
        client: Optional[redis.Redis] = None,
    ) -> None:
        self.redis_url = redis_url
        self.season_ttl = season_ttl
        self.leaderboard_ttl = leaderboard_ttl
        self.metrics = metrics
        self.logger = logger or get_logger("leaderboard.cache.redis")
        self._redis = client or redis.from_url(
            redis_url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30
        )

    async def close(self) -> None:
        """Close Redis connections."""
        await self._redis.aclose()
        self.logger.info("Redis cache stopped")

    async def ping(self) -> bool:
        """Return True when Redis responds to a ping."""
        try:
            return bool(await self._redis.ping())
        except (RedisError, OSError) as exc:
            self.logger.error("Redis health check failed", error=str(exc))
            return False

    async def get_season(self) -> Optional[Season]:
        """Get the cached current season."""
        payload = await self._read("season", self.SEASON_KEY)
        if payload is None:
            return None
        return self._decode("season", self.SEASON_KEY, payload, Season.from_dict)

    async def put_season(self, season: Season) -> None:
        """Cache the current season, overwriting any previous value."""
        try:
            await self._redis.set(self.SEASON_KEY, json.dumps(season.to_dict()), ex=self.season_ttl)
        except (RedisError, OSError) as exc:
            self.logger.error("Redis season write failed", error=str(exc))
            raise CacheFailure(f"failed to update season in cache: {exc}") from exc

        self.logger.debug("Cached current season", season_id=season.season_id, ttl=self.season_ttl)

    async def get_leaderboard(self) -> Optional[Leaderboard]:
        """Get the cached leaderboard."""
        payload = await self._read("leaderboard", self.LEADERBOARD_KEY)
        if payload is None:
            return None
        return self._decode("leaderboard", self.LEADERBOARD_KEY, payload, Leaderboard.from_dict)

    async def put_leaderboard(self, leaderboard: Leaderboard) -> None:
        """Cache the leaderboard and each player entry in one transaction."""
        pipe = self._redis.pipeline(transaction=True)
        pipe.set(self.LEADERBOARD_KEY, json.dumps(leaderboard.to_dict()), ex=self.leaderboard_ttl)
        for entry in leaderboard.players:
            pipe.set(self._player_key(entry.player_id), json.dumps(entry.to_dict()), ex=self.leaderboard_ttl)

        try:
            await pipe.execute()
        except (RedisError, OSError) as exc:
            self.logger.error(
                "Redis leaderboard transaction failed",
                season_id=leaderboard.season_id,
                players=len(leaderboard.players),
                error=str(exc)
            )
            raise CacheFailure(f"failed to update leaderboard in cache: {exc}") from exc

        self.logger.debug(
            "Cached leaderboard",
            season_id=leaderboard.season_id,
            players=len(leaderboard.players),
            ttl=self.leaderboard_ttl
        )

    async def get_player(self, player_id: str) -> Optional[PlayerEntry]:
        """Get a cached player entry."""
        key = self._player_key(player_id)
        payload = await self._read("player", key)
        if payload is None:
            return None
        return self._decode("player", key, payload, PlayerEntry.from_dict)

    async def _read(self, entity: str, key: str) -> Optional[Dict[str, Any]]:
        """Read and JSON-decode a key; None when absent."""
        try:
            value = await self._redis.get(key)
        except (RedisError, OSError, UnicodeDecodeError) as exc:
            self.logger.error("Redis read failed", key=key, error=str(exc))
            self._record(entity, "error")
            raise CacheFailure(f"failed to read {entity} from cache: {exc}", {"key": key}) from exc

        if value is None:
            self._record(entity, "miss")
            return None

        try:
            payload = json.loads(value)
        except json.JSONDecodeError as exc:
            self.logger.warning("Malformed cache payload", key=key)
            self._record(entity, "error")
            raise CacheFailure(f"malformed {entity} payload in cache", {"key": key}) from exc

        self._record(entity, "hit")
        return payload

    def _decode(self, entity: str, key: str, payload: Dict[str, Any], factory):
        try:
            return factory(payload)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            self.logger.warning("Unreadable cache payload", key=key, error=str(exc))
            raise CacheFailure(f"unreadable {entity} payload in cache", {"key": key}) from exc

    def _player_key(self, player_id: str) -> str:
        return f"{self.PLAYER_PREFIX}{player_id}"

    def _record(self, entity: str, result: str) -> None:
        if self.metrics:
            self.metrics.record_cache_lookup(entity, result)
