"""
Cache store package for boundlru.

This package contains the cache store base class, the recency list and
capacity policy it is built from, the admission/eviction engine, and the
store implementations.
"""

# Base classes
from .base import BaseCacheStore

# Building blocks
from .entry import CacheEntry
from .recency import RecencyList, RecencyNode
from .policy import CapacityPolicy, UNBOUNDED

# Admission and eviction
from .eviction import (
    can_admit,
    prune_by_count,
    prune_by_size,
    prune_count,
    eviction_candidates,
    overflow_candidates,
)

# Store Implementations (from stores subpackage)
from .stores import CacheMetrics, LRUCacheStore

__all__ = [
    # Base classes
    "BaseCacheStore",
    # Building blocks
    "CacheEntry",
    "RecencyList",
    "RecencyNode",
    "CapacityPolicy",
    "UNBOUNDED",
    # Admission and eviction
    "can_admit",
    "prune_by_count",
    "prune_by_size",
    "prune_count",
    "eviction_candidates",
    "overflow_candidates",
    # Stores
    "CacheMetrics",
    "LRUCacheStore",
]
