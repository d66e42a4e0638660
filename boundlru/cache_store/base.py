"""
Base class for bounded cache stores.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional

from .policy import CapacityPolicy


class BaseCacheStore(ABC):
    """Abstract base class for key/payload cache stores with capacity limits."""

    @abstractmethod
    def set(self, key: str, payload: Any) -> bool:
        """
        Store a payload under a key, making it the most recently used entry.

        Args:
            key: Non-empty cache key
            payload: Value to store

        Returns:
            bool: False if the payload alone exceeds the size limit and was
            refused (the cache is left unchanged), True otherwise.
        """
        pass

    @abstractmethod
    def get(self, key: str, default: Optional[Any] = None) -> Optional[Any]:
        """
        Get a payload and mark its entry most recently used.

        Args:
            key: Cache key to look up
            default: Returned when the key is absent

        Returns:
            The stored payload, or ``default`` when absent.
        """
        pass

    @abstractmethod
    def has(self, key: str) -> bool:
        """Check whether a key is present without touching its recency."""
        pass

    @abstractmethod
    def drop(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            bool: True if the key was present and removed, False otherwise
        """
        pass

    @abstractmethod
    def count(self) -> int:
        """Number of entries currently held."""
        pass

    @abstractmethod
    def size(self) -> int:
        """Aggregate byte size of all held payloads."""
        pass

    @abstractmethod
    def set_limits(self, size_limit: int = 0, count_limit: int = 0) -> int:
        """
        Replace the capacity policy.

        Args:
            size_limit: Maximum aggregate size in bytes (0 = unbounded)
            count_limit: Maximum number of entries (0 = unbounded)

        Returns:
            int: Number of entries evicted to satisfy the new limits
        """
        pass

    @abstractmethod
    def get_limits(self) -> CapacityPolicy:
        """Get the capacity policy in force."""
        pass

    @abstractmethod
    def flush(self) -> None:
        """Remove every entry."""
        pass

    def is_empty(self) -> bool:
        return self.count() == 0

    def has_all(self, keys: Iterable[str]) -> bool:
        """Check whether every key is present."""
        return all(self.has(key) for key in keys)

    def drop_all(self, keys: Iterable[str]) -> int:
        """
        Remove several keys.

        Returns:
            int: Number of keys that were present and removed
        """
        return sum(1 for key in keys if self.drop(key))

    @abstractmethod
    def keys(self) -> List[str]:
        """Snapshot of present keys, most recently used first."""
        pass

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and bool(key) and self.has(key)

    def __len__(self) -> int:
        return self.count()
