"""
Store implementations for the boundlru cache_store module.
"""

from .in_memory import CacheMetrics, LRUCacheStore

__all__ = [
    "CacheMetrics",
    "LRUCacheStore",
]
