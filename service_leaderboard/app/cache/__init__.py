from .redis_cache import LeaderboardCache

__all__ = ["LeaderboardCache"]
