"""
In-memory LRU cache store for boundlru.

Keeps entries in a doubly-linked recency list indexed by a dict of list
handles, so lookup, insertion, bumping and each eviction are O(1). Two
independent limits bound the store: the number of entries and the aggregate
payload size. When an insert would break either limit the least recently
used entries are evicted first; a payload larger than the size limit on its
own is refused outright.

All state sits behind one re-entrant lock. No background threads are used;
eviction happens synchronously inside ``set`` and ``set_limits``.
"""

import dataclasses
import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from boundlru.cache_store.base import BaseCacheStore
from boundlru.cache_store.entry import CacheEntry
from boundlru.cache_store.eviction import (
    can_admit,
    eviction_candidates,
    overflow_candidates,
    prune_count,
)
from boundlru.cache_store.policy import CapacityPolicy
from boundlru.cache_store.recency import RecencyList, RecencyNode
from boundlru.config import CacheConfig, load_config
from boundlru.exceptions import InvariantViolationError
from boundlru.utils.logging import MetricsLogger
from boundlru.utils.sizing import size_of
from boundlru.utils.timeout import acquire_lock
from boundlru.utils.validation import (
    validate_cache_key,
    validate_keys,
    validate_lock_timeout,
)

logger = logging.getLogger(__name__)


@dataclass
class CacheMetrics:
    """
    Counters describing a store's activity.

    Attributes:
        hits: Number of ``get`` calls that found their key
        misses: Number of ``get`` calls that did not
        sets: Number of accepted ``set`` calls
        rejections: Number of ``set`` calls refused for exceeding the size limit
        replacements: Number of accepted ``set`` calls that replaced a present key
        evictions: Number of entries evicted to satisfy the limits
        drops: Number of entries removed through ``drop``/``drop_all``
        current_count: Entries held when the snapshot was taken
        current_size: Aggregate payload bytes held when the snapshot was taken
        size_limit: Size limit in force (0 = unbounded)
        count_limit: Count limit in force (0 = unbounded)
    """
    hits: int = 0
    misses: int = 0
    sets: int = 0
    rejections: int = 0
    replacements: int = 0
    evictions: int = 0
    drops: int = 0

    current_count: int = 0
    current_size: int = 0
    size_limit: int = 0
    count_limit: int = 0

    @property
    def hit_rate(self) -> float:
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups > 0 else 0.0

    def to_dict(self) -> dict:
        """Convert metrics to a dictionary for easy serialization."""
        data = dataclasses.asdict(self)
        data['hit_rate'] = self.hit_rate
        return data

    def __str__(self) -> str:
        return (
            f"CacheMetrics(hits={self.hits}, misses={self.misses}, "
            f"hit_rate={self.hit_rate:.1%}, count={self.current_count}/{self.count_limit or 'inf'}, "
            f"size={self.current_size}/{self.size_limit or 'inf'}, "
            f"evictions={self.evictions}, rejections={self.rejections})"
        )


class LRUCacheStore(BaseCacheStore):
    """
    Thread-safe bounded LRU cache.

    Args:
        size_limit: Maximum aggregate payload size in bytes (0 = unbounded)
        count_limit: Maximum number of entries (0 = unbounded)
        check_invariants: Verify list/index/counter consistency after every
            mutation and raise ``InvariantViolationError`` on mismatch
        lock_timeout: Seconds to wait for the store lock before raising
            ``boundlru.utils.timeout.TimeoutError`` (None waits forever)
        name: Name used in logs and stats

    Payloads are stored as given and ``get`` returns the same object; callers
    must not mutate a mutable payload (e.g. ``bytearray``) after handing it
    to the store.
    """

    def __init__(
        self,
        size_limit: int = 0,
        count_limit: int = 0,
        *,
        check_invariants: bool = False,
        lock_timeout: Optional[float] = None,
        name: str = "default",
    ):
        validate_lock_timeout(lock_timeout)
        self._policy = CapacityPolicy(size_limit=size_limit, count_limit=count_limit)
        self.check_invariants = check_invariants
        self.lock_timeout = lock_timeout
        self.name = name

        self._index: Dict[str, RecencyNode] = {}
        self._recency = RecencyList()
        self._count = 0
        self._size = 0
        self._lock = threading.RLock()

        self._metrics = CacheMetrics(size_limit=size_limit, count_limit=count_limit)
        self._events = MetricsLogger(logger)

    @classmethod
    def from_config(cls, config: Union[CacheConfig, Mapping[str, Any], None] = None) -> "LRUCacheStore":
        """
        Create a store from a ``CacheConfig`` or a configuration mapping.

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        cfg = load_config(config)
        return cls(
            size_limit=cfg.total_size_limit,
            count_limit=cfg.total_count_limit,
            check_invariants=cfg.check_invariants,
            lock_timeout=cfg.lock_timeout,
            name=cfg.name,
        )

    def _locked(self):
        return acquire_lock(
            self._lock,
            self.lock_timeout,
            f"Cache '{self.name}' lock not acquired within {self.lock_timeout}s",
        )

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def set(self, key: str, payload: Any) -> bool:
        validate_cache_key(key)
        # Sizing may serialize the payload; keep it outside the lock.
        new_size = size_of(payload)

        with self._locked():
            policy = self._policy
            if not can_admit(policy, new_size):
                self._metrics.rejections += 1
                self._events.log_rejection(self.name, key, new_size, policy.size_limit)
                return False

            existing = self._index.get(key)
            num = prune_count(policy, self._count, self._size, new_size, self._recency, existing)
            for node in eviction_candidates(self._recency, num, existing):
                self._evict(node)

            if existing is not None:
                self._unlink(existing)
                self._metrics.replacements += 1

            entry = CacheEntry(key, payload, new_size)
            self._index[key] = self._recency.push_front(entry)
            self._count += 1
            self._size += new_size
            self._metrics.sets += 1

            self._after_mutation()
            return True

    def get(self, key: str, default: Optional[Any] = None) -> Optional[Any]:
        with self._locked():
            node = self._index.get(key)
            if node is None:
                self._metrics.misses += 1
                self._events.log_cache_miss(self.name, key)
                return default

            self._recency.move_to_front(node)
            self._metrics.hits += 1
            self._events.log_cache_hit(self.name, key)
            return node.entry.payload

    def has(self, key: str) -> bool:
        with self._locked():
            return key in self._index

    def drop(self, key: str) -> bool:
        with self._locked():
            return self._drop(key)

    def count(self) -> int:
        with self._locked():
            return self._count

    def size(self) -> int:
        with self._locked():
            return self._size

    def set_limits(self, size_limit: int = 0, count_limit: int = 0) -> int:
        """
        Replace the capacity policy and evict down to it immediately.

        Entries are evicted least recently used first until both new limits
        hold, so the limits are never exceeded between operations.

        Returns:
            int: Number of entries evicted
        """
        policy = CapacityPolicy(size_limit=size_limit, count_limit=count_limit)

        with self._locked():
            self._policy = policy
            self._metrics.size_limit = policy.size_limit
            self._metrics.count_limit = policy.count_limit

            candidates = overflow_candidates(policy, self._count, self._size, self._recency)
            for node in candidates:
                self._evict(node)

            logger.info(
                "Cache '%s' limits set to size=%d count=%d; evicted %d entries",
                self.name, policy.size_limit, policy.count_limit, len(candidates),
            )
            self._after_mutation()
            return len(candidates)

    def get_limits(self) -> CapacityPolicy:
        with self._locked():
            return self._policy

    def configure(self, config: Union[CacheConfig, Mapping[str, Any]]) -> int:
        """
        Apply configuration values to a live store.

        Only the values present in ``config`` change; limits not mentioned
        keep their current setting.

        Returns:
            int: Number of entries evicted to satisfy the resulting limits

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        cfg = load_config(config)
        provided = cfg.model_fields_set

        with self._locked():
            size_limit = cfg.total_size_limit if "total_size_limit" in provided else self._policy.size_limit
            count_limit = cfg.total_count_limit if "total_count_limit" in provided else self._policy.count_limit
            if "check_invariants" in provided:
                self.check_invariants = cfg.check_invariants
            if "lock_timeout" in provided:
                self.lock_timeout = cfg.lock_timeout
            if "name" in provided:
                self.name = cfg.name
            return self.set_limits(size_limit=size_limit, count_limit=count_limit)

    def flush(self) -> None:
        with self._locked():
            dropped = self._count
            self._recency.clear()
            self._index.clear()
            self._count = 0
            self._size = 0
            logger.info("Cache '%s' flushed %d entries", self.name, dropped)
            self._after_mutation()

    def has_all(self, keys: Iterable[str]) -> bool:
        key_list = validate_keys(keys)
        with self._locked():
            return all(key in self._index for key in key_list)

    def drop_all(self, keys: Iterable[str]) -> int:
        key_list = validate_keys(keys)
        with self._locked():
            return sum(1 for key in key_list if self._drop(key))

    def keys(self) -> List[str]:
        with self._locked():
            return [entry.key for entry in self._recency]

    def get_metrics(self) -> CacheMetrics:
        """
        Get a snapshot of the current cache metrics.

        Returns:
            CacheMetrics: A copy; later activity does not change it
        """
        with self._locked():
            return dataclasses.replace(
                self._metrics,
                current_count=self._count,
                current_size=self._size,
            )

    def get_stats(self) -> dict:
        """Get cache statistics as a plain dictionary."""
        stats = self.get_metrics().to_dict()
        stats.update({
            'name': self.name,
            'store': type(self).__name__,
            'check_invariants': self.check_invariants,
            'lock_timeout': self.lock_timeout,
        })
        return stats

    def verify_invariants(self) -> None:
        """
        Check that the recency list, the index and the counters agree.

        Raises:
            InvariantViolationError: On the first inconsistency found
        """
        with self._locked():
            self._verify()

    def __repr__(self) -> str:
        return (
            f"LRUCacheStore(name={self.name!r}, count={self._count}, size={self._size}, "
            f"size_limit={self._policy.size_limit}, count_limit={self._policy.count_limit})"
        )

    # ------------------------------------------------------------------
    # Internals; callers hold the lock
    # ------------------------------------------------------------------

    def _drop(self, key: str) -> bool:
        node = self._index.get(key)
        if node is None:
            return False
        self._unlink(node)
        self._metrics.drops += 1
        self._after_mutation()
        return True

    def _unlink(self, node: RecencyNode) -> CacheEntry:
        entry = self._recency.remove(node)
        del self._index[entry.key]
        self._count -= 1
        self._size -= entry.size
        return entry

    def _evict(self, node: RecencyNode) -> None:
        entry = self._unlink(node)
        self._metrics.evictions += 1
        self._events.log_eviction(self.name, entry.key, entry.size)

    def _after_mutation(self) -> None:
        if self.check_invariants:
            self._verify()

    def _verify(self) -> None:
        def fail(message: str):
            logger.critical("Cache '%s' invariant violated: %s", self.name, message)
            raise InvariantViolationError(message, store_name=self.name)

        if len(self._recency) != self._count:
            fail(f"count {self._count} != list length {len(self._recency)}")
        if len(self._index) != self._count:
            fail(f"count {self._count} != index size {len(self._index)}")

        total = 0
        for node in self._recency.iter_nodes_from_back():
            entry = node.entry
            if self._index.get(entry.key) is not node:
                fail(f"list entry {entry.key!r} is not the node its index key maps to")
            total += entry.size
        if total != self._size:
            fail(f"size {self._size} != sum of entry sizes {total}")

        if not self._policy.within(self._count, self._size):
            fail(
                f"totals count={self._count} size={self._size} exceed limits "
                f"count={self._policy.count_limit} size={self._policy.size_limit}"
            )
