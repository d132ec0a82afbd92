"""
Cache-aside read path for season, leaderboard and player lookups.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from shared.logging import get_logger

from .errors import CacheFailure, LeaderboardError, OriginFailure, PlayerNotFound
from .models import Leaderboard, Season
from .projector import PlayerStatsProjection, project_player_stats

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from ..adapters.pubg_client import PUBGClient
    from ..cache.redis_cache import LeaderboardCache


CACHE_ERROR_REFETCH = "refetch"
CACHE_ERROR_FAIL = "fail"


class LeaderboardCoordinator:
    """Composes the cache and the origin client for on-demand reads.

    Reads consult the cache first and only call the origin on a miss. Values
    fetched from the origin are written back best-effort: a failed cache
    write is logged and the fresh value is still returned.

    The coordinator keeps no mutable state, so one instance is shared by
    request handlers and the background refresher.
    """

    def __init__(
        self,
        cache: "LeaderboardCache",
        origin: "PUBGClient",
        *,
        game_mode: str = "squad-fpp",
        leaderboard_cache_error_policy: str = CACHE_ERROR_REFETCH,
        logger=None,
    ) -> None:
        if leaderboard_cache_error_policy not in (CACHE_ERROR_REFETCH, CACHE_ERROR_FAIL):
            raise ValueError(
                f"leaderboard_cache_error_policy must be '{CACHE_ERROR_REFETCH}' or '{CACHE_ERROR_FAIL}'"
            )
        self.cache = cache
        self.origin = origin
        self.game_mode = game_mode
        self.leaderboard_cache_error_policy = leaderboard_cache_error_policy
        self.logger = logger or get_logger("leaderboard.coordinator")

    async def get_current_season(self) -> Season:
        """Return the current season from cache, falling back to the origin."""
        try:
            season = await self.cache.get_season()
        except CacheFailure as exc:
            # A broken cache read is treated like a miss on the season path
            self.logger.warning("Season cache read failed, fetching from origin", error=exc.message)
            season = None

        if season is not None:
            self.logger.debug("Current season served from cache", season_id=season.season_id)
            return season

        self.logger.info("Season cache miss, fetching from origin")
        try:
            season = await self.origin.fetch_current_season()
        except LeaderboardError as exc:
            self.logger.error("Failed to fetch current season from origin", code=exc.code, error=exc.message)
            raise OriginFailure(f"season lookup failed: {exc.message}", exc.details, code=exc.code) from exc

        try:
            await self.cache.put_season(season)
        except CacheFailure as exc:
            self.logger.warning(
                "Failed to cache current season, returning origin value",
                season_id=season.season_id,
                error=exc.message
            )
        else:
            self.logger.info("Cached current season", season_id=season.season_id)

        return season

    async def get_current_leaderboard(self) -> Leaderboard:
        """Return the current leaderboard from cache, falling back to the origin."""
        season = await self.get_current_season()

        try:
            leaderboard = await self.cache.get_leaderboard()
        except CacheFailure as exc:
            if self.leaderboard_cache_error_policy == CACHE_ERROR_FAIL:
                self.logger.error("Leaderboard cache read failed", error=exc.message)
                raise
            self.logger.warning("Leaderboard cache read failed, fetching from origin", error=exc.message)
            leaderboard = None

        if leaderboard is not None:
            self.logger.debug("Leaderboard served from cache", season_id=leaderboard.season_id)
            return leaderboard

        self.logger.info("Leaderboard cache miss, fetching from origin", season_id=season.season_id)
        leaderboard = await self._fetch_leaderboard(season)

        try:
            await self.cache.put_leaderboard(leaderboard)
        except CacheFailure as exc:
            self.logger.warning(
                "Failed to cache leaderboard, returning origin value",
                season_id=season.season_id,
                error=exc.message
            )
        else:
            self.logger.info("Cached leaderboard", season_id=season.season_id, players=len(leaderboard.players))

        return leaderboard

    async def get_player_stats(self, player_id: str) -> PlayerStatsProjection:
        """Project a player's rank, games and wins from the warmed cache.

        A player missing from the cache raises ``PlayerNotFound``; the origin
        is never consulted for single-player lookups.
        """
        entry = await self.cache.get_player(player_id)
        if entry is None:
            self.logger.info("Player stats not found in cache", player_id=player_id)
            raise PlayerNotFound(player_id)

        projection = project_player_stats(entry)
        self.logger.info(
            "Retrieved player stats",
            player_id=player_id,
            rank=projection.rank,
            games_played=projection.games_played,
            wins=projection.wins
        )
        return projection

    async def refresh_current_season(self) -> Season:
        """Fetch the current season from the origin and overwrite the cache."""
        season = await self.origin.fetch_current_season()
        await self.cache.put_season(season)
        self.logger.info("Refreshed current season", season_id=season.season_id)
        return season

    async def refresh_leaderboard(self) -> Leaderboard:
        """Fetch the current leaderboard from the origin and overwrite the cache."""
        season = await self.get_current_season()
        leaderboard = await self._fetch_leaderboard(season)
        await self.cache.put_leaderboard(leaderboard)
        self.logger.info("Refreshed leaderboard", season_id=season.season_id, players=len(leaderboard.players))
        return leaderboard

    async def _fetch_leaderboard(self, season: Season) -> Leaderboard:
        try:
            return await self.origin.fetch_leaderboard(season.season_id, self.game_mode)
        except LeaderboardError as exc:
            self.logger.error(
                "Failed to fetch leaderboard from origin",
                season_id=season.season_id,
                game_mode=self.game_mode,
                error=exc.message
            )
            raise OriginFailure(f"leaderboard lookup failed: {exc.message}", exc.details, code=exc.code) from exc
