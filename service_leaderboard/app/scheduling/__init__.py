from .refresher import RefreshScheduler, RefreshState

__all__ = ["RefreshScheduler", "RefreshState"]
