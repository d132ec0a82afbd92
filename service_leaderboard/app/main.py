"""
PUBG leaderboard service.
"""

import asyncio
from typing import Any, Awaitable, Dict, Optional, TypeVar

from fastapi import Request
from fastapi.responses import JSONResponse

from shared.base_service import BaseService
from shared.config import ServiceConfig
from shared.errors import RequestTimeoutError
from shared.logging import request_id_var

from .adapters.pubg_client import PUBGClient
from .cache.redis_cache import LeaderboardCache
from .domain.coordinator import LeaderboardCoordinator
from .domain.errors import ErrorKind, LeaderboardError
from .scheduling.refresher import RefreshScheduler


T = TypeVar("T")

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: 404,
}


class LeaderboardService(BaseService):
    """Leaderboard service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        *,
        cache: Optional[LeaderboardCache] = None,
        origin: Optional[PUBGClient] = None,
    ):
        super().__init__("leaderboard", 8080, config)

        self.cache = cache or LeaderboardCache(
            self.config.redis_url,
            season_ttl=self.config.season_ttl_seconds,
            leaderboard_ttl=self.config.leaderboard_ttl_seconds,
            metrics=self.metrics,
        )
        self.origin = origin or PUBGClient(
            self.config.pubg_api_endpoint,
            self.config.pubg_api_key,
            timeout=self.config.origin_timeout_seconds,
            metrics=self.metrics,
        )
        self.coordinator = LeaderboardCoordinator(
            self.cache,
            self.origin,
            game_mode=self.config.game_mode,
            leaderboard_cache_error_policy=self.config.leaderboard_cache_error_policy,
        )
        self.refresher = RefreshScheduler(
            self.coordinator,
            season_interval=self.config.season_refresh_interval_seconds,
            leaderboard_interval=self.config.leaderboard_refresh_interval_seconds,
            metrics=self.metrics,
        )

        self._setup_leaderboard_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.leaderboard_service = self

    async def on_startup(self) -> None:
        self.logger.info(
            "Starting PUBG leaderboard service",
            redis_url=self.config.redis_url,
            origin=self.config.pubg_api_endpoint,
            game_mode=self.config.game_mode
        )
        if not await self.cache.ping():
            self.logger.warning("Redis unavailable at startup; reads will fall back to the origin")
        await self.refresher.start()

    async def on_shutdown(self) -> None:
        await self.refresher.stop()
        await self.cache.close()
        await self.origin.close()

    async def _check_dependencies(self) -> Dict[str, str]:
        return {"redis": "ok" if await self.cache.ping() else "error"}

    def _health_details(self) -> Dict[str, Any]:
        return {"refresher": self.refresher.status()}

    async def _with_deadline(self, operation: str, awaitable: Awaitable[T]) -> T:
        """Await a read with the configured request deadline."""
        timeout = self.config.request_timeout_seconds
        try:
            return await asyncio.wait_for(awaitable, timeout=timeout)
        except asyncio.TimeoutError as exc:
            self.logger.error("Request deadline exceeded", operation=operation, timeout=timeout)
            raise RequestTimeoutError(operation, timeout) from exc

    def _setup_leaderboard_routes(self):
        """Set up leaderboard-specific routes."""

        @self.app.exception_handler(LeaderboardError)
        async def leaderboard_error_handler(request: Request, exc: LeaderboardError):
            """Translate tagged errors to status codes."""
            status_code = STATUS_BY_KIND.get(exc.kind, 500)
            if status_code >= 500:
                self.logger.error("Leaderboard request failed", kind=exc.kind.value, code=exc.code, error=exc.message)
                self.metrics.record_error(exc.code)
            return JSONResponse(
                status_code=status_code,
                content=exc.to_response(request_id_var.get()).model_dump()
            )

        @self.app.get("/ping")
        async def ping():
            """API liveness check."""
            return {"message": "pong"}

        @self.app.get("/redis-ping")
        async def redis_ping():
            """Redis connectivity check."""
            if not await self.cache.ping():
                return JSONResponse(status_code=500, content={"error": "Failed to ping Redis"})
            return {"message": "pong"}

        @self.app.get("/current-season")
        async def current_season():
            """Current PUBG season."""
            season = await self._with_deadline("current_season", self.coordinator.get_current_season())
            return {"season": season.to_dict()}

        @self.app.get("/current-leaderboard")
        async def current_leaderboard():
            """Current leaderboard for the configured game mode."""
            leaderboard = await self._with_deadline(
                "current_leaderboard", self.coordinator.get_current_leaderboard()
            )
            return leaderboard.to_dict()

        @self.app.get("/player-stats/{player_id}")
        async def player_stats(player_id: str):
            """Rank, games played and wins for a single player."""
            projection = await self._with_deadline(
                "player_stats", self.coordinator.get_player_stats(player_id)
            )
            return projection.to_dict()


def create_app():
    """Create FastAPI application."""
    service = LeaderboardService()
    return service.app


if __name__ == "__main__":
    service = LeaderboardService()
    service.run()
