"""
Recency list for LRU cache stores.

A doubly-linked list ordered by recency of access: the most recently used
entry sits at the front, the least recently used at the back. Callers hold
on to the ``RecencyNode`` handles returned by ``push_front`` so that moving
or removing an entry never requires a scan.
"""

from typing import Iterator, Optional

from .entry import CacheEntry


class RecencyNode:
    """Opaque handle to one position in a ``RecencyList``."""

    __slots__ = ("entry", "prev", "next", "_owner")

    def __init__(self, entry: Optional[CacheEntry]):
        self.entry = entry
        self.prev: Optional["RecencyNode"] = None
        self.next: Optional["RecencyNode"] = None
        self._owner: Optional["RecencyList"] = None

    @property
    def linked(self) -> bool:
        """Whether the node currently belongs to a list."""
        return self._owner is not None

    def __repr__(self) -> str:
        return f"RecencyNode({self.entry!r})"


class RecencyList:
    """
    Doubly-linked list with O(1) push-front, move-to-front, remove and pop-back.

    A sentinel node closes the ring so that no operation has to special-case
    the head or the tail. Not thread-safe; the owning store serializes access.
    """

    def __init__(self):
        self._root = RecencyNode(None)
        self._root.prev = self._root
        self._root.next = self._root
        self._len = 0

    def __len__(self) -> int:
        return self._len

    def __bool__(self) -> bool:
        return self._len > 0

    def __iter__(self) -> Iterator[CacheEntry]:
        """Iterate entries from most to least recently used."""
        node = self._root.next
        while node is not self._root:
            yield node.entry
            node = node.next

    def __reversed__(self) -> Iterator[CacheEntry]:
        """Iterate entries from least to most recently used."""
        for node in self.iter_nodes_from_back():
            yield node.entry

    def iter_nodes_from_back(self) -> Iterator[RecencyNode]:
        """Iterate node handles starting at the LRU end."""
        node = self._root.prev
        while node is not self._root:
            # Capture before yielding; the caller may unlink the node.
            prev = node.prev
            yield node
            node = prev

    def front(self) -> Optional[RecencyNode]:
        if self._len == 0:
            return None
        return self._root.next

    def back(self) -> Optional[RecencyNode]:
        if self._len == 0:
            return None
        return self._root.prev

    def push_front(self, entry: CacheEntry) -> RecencyNode:
        """Insert an entry at the MRU position and return its handle."""
        node = RecencyNode(entry)
        self._link_after(self._root, node)
        self._len += 1
        return node

    def move_to_front(self, node: RecencyNode) -> None:
        self._check_owner(node)
        if self._root.next is node:
            return
        self._unlink(node)
        self._link_after(self._root, node)

    def remove(self, node: RecencyNode) -> CacheEntry:
        """Unlink a node and return the entry it held."""
        self._check_owner(node)
        self._unlink(node)
        node._owner = None
        self._len -= 1
        return node.entry

    def pop_back(self) -> Optional[CacheEntry]:
        """Remove and return the LRU entry, or None when the list is empty."""
        node = self.back()
        if node is None:
            return None
        return self.remove(node)

    def clear(self) -> None:
        node = self._root.next
        while node is not self._root:
            following = node.next
            node.prev = node.next = None
            node._owner = None
            node = following
        self._root.prev = self._root
        self._root.next = self._root
        self._len = 0

    def _link_after(self, anchor: RecencyNode, node: RecencyNode) -> None:
        node.prev = anchor
        node.next = anchor.next
        anchor.next.prev = node
        anchor.next = node
        node._owner = self

    @staticmethod
    def _unlink(node: RecencyNode) -> None:
        node.prev.next = node.next
        node.next.prev = node.prev
        node.prev = None
        node.next = None

    def _check_owner(self, node: RecencyNode) -> None:
        if node._owner is not self:
            raise ValueError("node does not belong to this list")
