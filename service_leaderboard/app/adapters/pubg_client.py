"""
Async client for the PUBG API season and leaderboard endpoints.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, TYPE_CHECKING

import httpx

from shared.logging import get_logger

from ..domain.errors import CurrentSeasonNotFound, OriginFailure
from ..domain.models import Leaderboard, Season

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


JSON_API_MEDIA_TYPE = "application/vnd.api+json"


class PUBGClient:
    """Fetches season metadata and leaderboards from the PUBG API.

    Each method issues a single request. Retries, if any, belong to the
    transport passed in by the caller.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 10.0,
        metrics: Optional["MetricsCollector"] = None,
        logger=None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.metrics = metrics
        self.logger = logger or get_logger("leaderboard.pubg_client")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Accept": JSON_API_MEDIA_TYPE,
                "Authorization": f"Bearer {api_key}",
            },
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def fetch_current_season(self) -> Season:
        """Return the season that is current and not in offseason."""
        self.logger.info("Fetching current PUBG season")
        document = await self._get_json("seasons", "/seasons")

        try:
            seasons = [Season.from_api(resource) for resource in document["data"]]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            self._record("seasons", "invalid")
            raise OriginFailure(f"malformed seasons document: {exc}") from exc

        for season in seasons:
            if season.is_active:
                self.logger.info("Resolved current season", season_id=season.season_id)
                return season

        self.logger.warning("No current season in origin response", seasons=len(seasons))
        raise CurrentSeasonNotFound(details={"seasons": [season.season_id for season in seasons]})

    async def fetch_leaderboard(self, season_id: str, game_mode: str) -> Leaderboard:
        """Return the leaderboard for a season and game mode."""
        self.logger.info("Fetching leaderboard from PUBG API", season_id=season_id, game_mode=game_mode)
        document = await self._get_json("leaderboard", f"/leaderboards/{season_id}/{game_mode}")

        try:
            leaderboard = Leaderboard.from_api(document)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            self._record("leaderboard", "invalid")
            raise OriginFailure(
                f"malformed leaderboard document: {exc}",
                {"season_id": season_id, "game_mode": game_mode}
            ) from exc

        self.logger.info(
            "Fetched leaderboard",
            season_id=season_id,
            game_mode=game_mode,
            players=len(leaderboard.players)
        )
        return leaderboard

    async def _get_json(self, operation: str, path: str) -> Dict[str, Any]:
        """Issue a GET and return the decoded JSON body."""
        try:
            response = await self._client.get(path)
        except httpx.HTTPError as exc:
            self.logger.error("PUBG API request failed", path=path, error=str(exc))
            self._record(operation, "error")
            raise OriginFailure(f"request to {path} failed: {exc}", {"path": path}) from exc

        if response.status_code != 200:
            self.logger.error(
                "PUBG API returned unexpected status",
                path=path,
                status_code=response.status_code,
                response=response.text
            )
            self._record(operation, str(response.status_code))
            raise OriginFailure(
                f"unexpected status {response.status_code} from {path}",
                {"path": path, "status_code": response.status_code}
            )

        try:
            document = response.json()
        except ValueError as exc:
            self._record(operation, "invalid")
            raise OriginFailure(f"invalid JSON from {path}", {"path": path}) from exc

        if not isinstance(document, dict):
            self._record(operation, "invalid")
            raise OriginFailure(f"unexpected document from {path}", {"path": path})

        self._record(operation, "ok")
        return document

    def _record(self, operation: str, status: str) -> None:
        if self.metrics:
            self.metrics.record_origin_request(operation, status)
