"""
Cache entry value object.
"""

from typing import Any


class CacheEntry:
    """
    One key/payload/size triple held by a cache store.

    Entries are immutable: replacing a key's payload creates a new entry.
    The size is the payload's byte size, computed once by the store.
    """

    __slots__ = ("key", "payload", "size")

    def __init__(self, key: str, payload: Any, size: int):
        object.__setattr__(self, "key", key)
        object.__setattr__(self, "payload", payload)
        object.__setattr__(self, "size", size)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"CacheEntry is immutable; cannot set '{name}'")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"CacheEntry is immutable; cannot delete '{name}'")

    def __repr__(self) -> str:
        return f"CacheEntry(key={self.key!r}, size={self.size})"
