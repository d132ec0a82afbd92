from .pubg_client import PUBGClient

__all__ = ["PUBGClient"]
