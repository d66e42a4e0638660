"""
boundlru - Bounded LRU Caching
==============================

A thread-safe, in-process LRU cache bounded by entry count and by aggregate
payload size.
"""

__version__ = "0.1.0"

from .cache_store import (
    BaseCacheStore,
    CacheEntry,
    CacheMetrics,
    CapacityPolicy,
    LRUCacheStore,
    RecencyList,
)
from .config import CacheConfig, load_config, config_from_environment
from .exceptions import (
    BoundLRUError,
    ConfigurationError,
    CacheStoreError,
    InvariantViolationError,
    ValidationError,
    OperationError,
)
from .utils.sizing import Sizeable, size_of

__all__ = [
    "BaseCacheStore",
    "CacheEntry",
    "CacheMetrics",
    "CapacityPolicy",
    "LRUCacheStore",
    "RecencyList",
    "CacheConfig",
    "load_config",
    "config_from_environment",
    "BoundLRUError",
    "ConfigurationError",
    "CacheStoreError",
    "InvariantViolationError",
    "ValidationError",
    "OperationError",
    "Sizeable",
    "size_of",
]
