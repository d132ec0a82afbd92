"""
Unit tests for the cache-aside read path.
"""

import pytest

from service_leaderboard.app.domain.coordinator import LeaderboardCoordinator
from service_leaderboard.app.domain.errors import (
    CacheFailure,
    CurrentSeasonNotFound,
    ErrorKind,
    OriginFailure,
    PlayerNotFound,
)
from service_leaderboard.app.domain.models import Leaderboard, PlayerEntry, PlayerStats, Season


class FakeCache:
    """In-memory cache with switchable failures."""

    def __init__(self):
        self.season = None
        self.leaderboard = None
        self.players = {}
        self.fail_reads = False
        self.fail_leaderboard_reads = False
        self.fail_writes = False
        self.writes = 0

    async def get_season(self):
        if self.fail_reads:
            raise CacheFailure("read failed")
        return self.season

    async def put_season(self, season):
        if self.fail_writes:
            raise CacheFailure("write failed")
        self.writes += 1
        self.season = season

    async def get_leaderboard(self):
        if self.fail_reads or self.fail_leaderboard_reads:
            raise CacheFailure("read failed")
        return self.leaderboard

    async def put_leaderboard(self, leaderboard):
        if self.fail_writes:
            raise CacheFailure("write failed")
        self.writes += 1
        self.leaderboard = leaderboard
        self.players = {entry.player_id: entry for entry in leaderboard.players}

    async def get_player(self, player_id):
        if self.fail_reads:
            raise CacheFailure("read failed")
        return self.players.get(player_id)


class FakeOrigin:
    """Origin stub counting calls per operation."""

    def __init__(self, season=None, leaderboard=None):
        self.season = season
        self.leaderboard = leaderboard
        self.season_error = None
        self.leaderboard_error = None
        self.season_calls = 0
        self.leaderboard_calls = []

    async def fetch_current_season(self):
        self.season_calls += 1
        if self.season_error:
            raise self.season_error
        return self.season

    async def fetch_leaderboard(self, season_id, game_mode):
        self.leaderboard_calls.append((season_id, game_mode))
        if self.leaderboard_error:
            raise self.leaderboard_error
        return self.leaderboard


@pytest.fixture
def season():
    return Season("s2", is_current=True)


@pytest.fixture
def leaderboard():
    return Leaderboard(
        season_id="s2",
        game_mode="squad-fpp",
        players=(
            PlayerEntry("p1", rank=1, stats=PlayerStats(games=10, wins=2)),
            PlayerEntry("p2", rank=2, stats=PlayerStats(games=8, wins=1)),
        ),
    )


@pytest.fixture
def cache():
    return FakeCache()


@pytest.fixture
def origin(season, leaderboard):
    return FakeOrigin(season=season, leaderboard=leaderboard)


@pytest.fixture
def coordinator(cache, origin):
    return LeaderboardCoordinator(cache, origin, game_mode="squad-fpp")


class TestCurrentSeason:
    """Test cases for season reads."""

    @pytest.mark.asyncio
    async def test_warm_cache_skips_origin(self, coordinator, cache, origin, season):
        cache.season = season

        result = await coordinator.get_current_season()

        assert result == season
        assert origin.season_calls == 0

    @pytest.mark.asyncio
    async def test_miss_fetches_and_populates_cache(self, coordinator, cache, origin, season):
        first = await coordinator.get_current_season()
        second = await coordinator.get_current_season()

        assert first == second == season
        assert cache.season == season
        assert origin.season_calls == 1

    @pytest.mark.asyncio
    async def test_cache_read_error_falls_back_to_origin(self, coordinator, cache, origin, season):
        cache.fail_reads = True

        result = await coordinator.get_current_season()

        assert result == season
        assert origin.season_calls == 1

    @pytest.mark.asyncio
    async def test_cache_write_failure_still_returns_season(self, coordinator, cache, season):
        cache.fail_writes = True

        result = await coordinator.get_current_season()

        assert result == season
        assert cache.season is None

    @pytest.mark.asyncio
    async def test_origin_failure_propagates_without_writes(self, coordinator, cache, origin):
        origin.season_error = OriginFailure("origin down", {"status_code": 503})

        with pytest.raises(OriginFailure) as exc_info:
            await coordinator.get_current_season()

        assert exc_info.value.kind is ErrorKind.ORIGIN_FAILURE
        assert "season lookup failed" in exc_info.value.message
        assert exc_info.value.details == {"status_code": 503}
        assert cache.writes == 0

    @pytest.mark.asyncio
    async def test_missing_current_season_keeps_code(self, coordinator, origin):
        origin.season_error = CurrentSeasonNotFound()

        with pytest.raises(OriginFailure) as exc_info:
            await coordinator.get_current_season()

        assert exc_info.value.code == "SEASON_NOT_FOUND"
        assert isinstance(exc_info.value.__cause__, CurrentSeasonNotFound)


class TestCurrentLeaderboard:
    """Test cases for leaderboard reads."""

    @pytest.mark.asyncio
    async def test_cold_cache_warms_season_and_leaderboard(self, coordinator, cache, origin, leaderboard):
        result = await coordinator.get_current_leaderboard()

        assert result == leaderboard
        assert origin.season_calls == 1
        assert origin.leaderboard_calls == [("s2", "squad-fpp")]
        assert cache.leaderboard == leaderboard
        assert set(cache.players) == {"p1", "p2"}

    @pytest.mark.asyncio
    async def test_warm_cache_makes_no_origin_calls(self, coordinator, cache, origin, season, leaderboard):
        cache.season = season
        cache.leaderboard = leaderboard

        result = await coordinator.get_current_leaderboard()

        assert result == leaderboard
        assert origin.season_calls == 0
        assert origin.leaderboard_calls == []

    @pytest.mark.asyncio
    async def test_season_failure_skips_leaderboard_fetch(self, coordinator, origin):
        origin.season_error = OriginFailure("origin down")

        with pytest.raises(OriginFailure):
            await coordinator.get_current_leaderboard()

        assert origin.leaderboard_calls == []

    @pytest.mark.asyncio
    async def test_leaderboard_origin_failure_leaves_cache_untouched(self, coordinator, cache, origin, season):
        cache.season = season
        origin.leaderboard_error = OriginFailure("status 500", {"status_code": 500})

        with pytest.raises(OriginFailure) as exc_info:
            await coordinator.get_current_leaderboard()

        assert "leaderboard lookup failed" in exc_info.value.message
        assert cache.leaderboard is None
        assert cache.players == {}

    @pytest.mark.asyncio
    async def test_cache_read_error_refetches_by_default(self, coordinator, cache, origin, season, leaderboard):
        cache.season = season
        cache.fail_leaderboard_reads = True

        result = await coordinator.get_current_leaderboard()

        assert result == leaderboard
        assert len(origin.leaderboard_calls) == 1

    @pytest.mark.asyncio
    async def test_cache_read_error_fails_when_configured(self, cache, origin, season):
        coordinator = LeaderboardCoordinator(cache, origin, leaderboard_cache_error_policy="fail")
        cache.season = season
        cache.fail_leaderboard_reads = True

        with pytest.raises(CacheFailure):
            await coordinator.get_current_leaderboard()

        assert origin.leaderboard_calls == []

    @pytest.mark.asyncio
    async def test_cache_write_failure_still_returns_leaderboard(self, coordinator, cache, leaderboard):
        cache.fail_writes = True

        result = await coordinator.get_current_leaderboard()

        assert result == leaderboard

    def test_rejects_unknown_cache_error_policy(self, cache, origin):
        with pytest.raises(ValueError):
            LeaderboardCoordinator(cache, origin, leaderboard_cache_error_policy="ignore")


class TestPlayerStats:
    """Test cases for player projections."""

    @pytest.mark.asyncio
    async def test_projects_cached_player(self, coordinator, cache, leaderboard):
        await cache.put_leaderboard(leaderboard)

        projection = await coordinator.get_player_stats("p1")

        assert projection.to_dict() == {"player_id": "p1", "rank": 1, "games_played": 10, "wins": 2}

    @pytest.mark.asyncio
    async def test_missing_player_never_calls_origin(self, coordinator, origin):
        with pytest.raises(PlayerNotFound) as exc_info:
            await coordinator.get_player_stats("p404")

        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        assert exc_info.value.details == {"player_id": "p404"}
        assert origin.season_calls == 0
        assert origin.leaderboard_calls == []

    @pytest.mark.asyncio
    async def test_cache_error_propagates(self, coordinator, cache):
        cache.fail_reads = True

        with pytest.raises(CacheFailure):
            await coordinator.get_player_stats("p1")


class TestRefresh:
    """Test cases for the refresh operations."""

    @pytest.mark.asyncio
    async def test_refresh_season_overwrites_cache(self, coordinator, cache, origin):
        cache.season = Season("s1", is_current=True)
        origin.season = Season("s3", is_current=True)

        await coordinator.refresh_current_season()

        assert cache.season.season_id == "s3"
        assert origin.season_calls == 1

    @pytest.mark.asyncio
    async def test_refresh_season_propagates_write_failure(self, coordinator, cache):
        cache.fail_writes = True

        with pytest.raises(CacheFailure):
            await coordinator.refresh_current_season()

    @pytest.mark.asyncio
    async def test_refresh_leaderboard_uses_cached_season(self, coordinator, cache, origin, season, leaderboard):
        cache.season = season
        cache.leaderboard = Leaderboard(season_id="s2", game_mode="squad-fpp")

        await coordinator.refresh_leaderboard()

        assert origin.season_calls == 0
        assert cache.leaderboard == leaderboard

    @pytest.mark.asyncio
    async def test_refresh_leaderboard_origin_failure_keeps_old_value(self, coordinator, cache, origin, season):
        stale = Leaderboard(season_id="s2", game_mode="squad-fpp")
        cache.season = season
        cache.leaderboard = stale
        origin.leaderboard_error = OriginFailure("timeout")

        with pytest.raises(OriginFailure):
            await coordinator.refresh_leaderboard()

        assert cache.leaderboard is stale
