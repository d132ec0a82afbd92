"""
Background refresh loops that keep the season and leaderboard cache warm.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional, TYPE_CHECKING

from shared.logging import get_logger, set_refresh_loop
from ..domain.errors import LeaderboardError

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector
    from ..domain.coordinator import LeaderboardCoordinator


SEASON_LOOP = "season"
LEADERBOARD_LOOP = "leaderboard"

DEFAULT_SEASON_INTERVAL = 24 * 60 * 60
DEFAULT_LEADERBOARD_INTERVAL = 10 * 60


class RefreshState(str, Enum):
    """Refresh loop states."""
    IDLE = "idle"
    REFRESHING = "refreshing"


@dataclass
class RefreshLoopStatus:
    """Observable state of one refresh loop."""
    name: str
    interval_seconds: float
    state: RefreshState = RefreshState.IDLE
    runs: int = 0
    failures: int = 0
    last_started_at: Optional[str] = None
    last_success_at: Optional[str] = None
    last_error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "interval_seconds": self.interval_seconds,
            "state": self.state.value,
            "runs": self.runs,
            "failures": self.failures,
            "last_started_at": self.last_started_at,
            "last_success_at": self.last_success_at,
            "last_error": self.last_error,
        }


class RefreshScheduler:
    """Runs the season and leaderboard refresh loops.

    ``start`` refreshes the season once, then launches two independent
    tasks. Each loop wakes on a fixed schedule, refreshes, and goes back to
    idle whatever the outcome; failures are logged and never stop the loop.
    The loops share nothing but the cache behind the coordinator.
    """

    def __init__(
        self,
        coordinator: "LeaderboardCoordinator",
        *,
        season_interval: float = DEFAULT_SEASON_INTERVAL,
        leaderboard_interval: float = DEFAULT_LEADERBOARD_INTERVAL,
        metrics: Optional["MetricsCollector"] = None,
        logger=None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.coordinator = coordinator
        self.metrics = metrics
        self.logger = logger or get_logger("leaderboard.refresher")
        self._sleep = sleep
        self._clock = clock

        self.season_status = RefreshLoopStatus(SEASON_LOOP, season_interval)
        self.leaderboard_status = RefreshLoopStatus(LEADERBOARD_LOOP, leaderboard_interval)

        self._tasks: List[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    async def start(self) -> None:
        """Refresh the season once and start both loops."""
        if self.running:
            return

        await self.refresh_season()

        self._tasks = [
            asyncio.create_task(self._loop(self.season_status, self.coordinator.refresh_current_season)),
            asyncio.create_task(self._loop(self.leaderboard_status, self.coordinator.refresh_leaderboard)),
        ]
        self.logger.info(
            "Refresh loops started",
            season_interval=self.season_status.interval_seconds,
            leaderboard_interval=self.leaderboard_status.interval_seconds
        )

    async def stop(self) -> None:
        """Cancel both loops; an in-flight refresh is abandoned."""
        for task in self._tasks:
            task.cancel()
        for task in self._tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._tasks = []
        self.logger.info("Refresh loops stopped")

    async def refresh_season(self) -> bool:
        """Run one season refresh; returns True on success."""
        return await self._run(self.season_status, self.coordinator.refresh_current_season)

    async def refresh_leaderboard(self) -> bool:
        """Run one leaderboard refresh; returns True on success."""
        return await self._run(self.leaderboard_status, self.coordinator.refresh_leaderboard)

    def status(self) -> Dict[str, Any]:
        """Return the state of both loops."""
        return {
            "running": self.running,
            SEASON_LOOP: self.season_status.to_dict(),
            LEADERBOARD_LOOP: self.leaderboard_status.to_dict(),
        }

    async def _loop(self, status: RefreshLoopStatus, refresh: Callable[[], Awaitable[Any]]) -> None:
        """Wake every interval and refresh, keeping a fixed schedule."""
        set_refresh_loop(status.name)
        next_run = self._clock() + status.interval_seconds

        while True:
            await self._sleep(max(0.0, next_run - self._clock()))
            await self._run(status, refresh)

            # Ticks that elapsed during a slow refresh are dropped
            now = self._clock()
            next_run += status.interval_seconds
            while next_run <= now:
                next_run += status.interval_seconds

    async def _run(self, status: RefreshLoopStatus, refresh: Callable[[], Awaitable[Any]]) -> bool:
        status.state = RefreshState.REFRESHING
        status.runs += 1
        status.last_started_at = _utc_now()
        started = self._clock()
        outcome = "cancelled"

        try:
            await refresh()
        except LeaderboardError as exc:
            outcome = "failure"
            status.failures += 1
            status.last_error = exc.message
            self.logger.error("Refresh failed", loop=status.name, code=exc.code, error=exc.message)
        except Exception as exc:
            outcome = "failure"
            status.failures += 1
            status.last_error = str(exc)
            self.logger.error("Unexpected refresh error", loop=status.name, error=str(exc), exc_info=True)
        else:
            outcome = "success"
            status.last_success_at = _utc_now()
            status.last_error = None
            self.logger.info("Refresh succeeded", loop=status.name)
        finally:
            status.state = RefreshState.IDLE
            if self.metrics:
                self.metrics.record_refresh(status.name, outcome, self._clock() - started)

        return outcome == "success"


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()
