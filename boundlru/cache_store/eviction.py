"""
Admission and eviction decisions for bounded LRU stores.

Everything here is pure: functions inspect a policy, the current totals and
the recency list, and report what must happen. The store applies the result.
Admission (can this item ever fit?) is decided separately from eviction
(which existing items must go?).
"""

from typing import List, Optional

from .policy import CapacityPolicy
from .recency import RecencyList, RecencyNode


def can_admit(policy: CapacityPolicy, new_size: int) -> bool:
    """
    Decide whether a payload may enter the cache at all.

    Args:
        policy: The capacity policy in force
        new_size: Byte size of the prospective payload

    Returns:
        bool: False when the payload alone exceeds the size limit
    """
    return policy.admits(new_size)


def prune_by_count(policy: CapacityPolicy, count: int, replace_count: int = 0) -> int:
    """Number of LRU entries to evict so one more entry fits the count limit."""
    if not policy.count_bounded:
        return 0
    future_count = count + 1 - replace_count
    return max(0, future_count - policy.count_limit)


def prune_by_size(
    policy: CapacityPolicy,
    size: int,
    new_size: int,
    recency: RecencyList,
    replacing: Optional[RecencyNode] = None,
) -> int:
    """
    Number of LRU entries to evict so ``new_size`` more bytes fit the size limit.

    Walks the recency list from the back summing entry sizes until the
    overflow is covered. The entry being replaced is skipped; its size is
    already credited back.

    Args:
        policy: The capacity policy in force
        size: Current aggregate size
        new_size: Byte size of the payload being inserted
        recency: The store's recency list
        replacing: Handle of the same-key entry, if the insert is a replacement

    Returns:
        int: Entries to evict from the back (0 when the payload already fits)
    """
    if not policy.size_bounded:
        return 0
    replace_size = replacing.entry.size if replacing is not None else 0
    overflow = size + new_size - replace_size - policy.size_limit
    if overflow <= 0:
        return 0

    num = 0
    for node in recency.iter_nodes_from_back():
        if overflow <= 0:
            break
        if node is replacing:
            continue
        overflow -= node.entry.size
        num += 1
    return num


def prune_count(
    policy: CapacityPolicy,
    count: int,
    size: int,
    new_size: int,
    recency: RecencyList,
    replacing: Optional[RecencyNode] = None,
) -> int:
    """The larger of the count-driven and size-driven prune counts."""
    replace_count = 1 if replacing is not None else 0
    by_count = prune_by_count(policy, count, replace_count)
    by_size = prune_by_size(policy, size, new_size, recency, replacing)
    return max(by_count, by_size)


def eviction_candidates(
    recency: RecencyList,
    num: int,
    replacing: Optional[RecencyNode] = None,
) -> List[RecencyNode]:
    """
    Handles of the ``num`` least recently used entries, LRU first.

    The entry being replaced is never a candidate.
    """
    candidates: List[RecencyNode] = []
    if num <= 0:
        return candidates
    for node in recency.iter_nodes_from_back():
        if len(candidates) >= num:
            break
        if node is replacing:
            continue
        candidates.append(node)
    return candidates


def overflow_candidates(
    policy: CapacityPolicy,
    count: int,
    size: int,
    recency: RecencyList,
) -> List[RecencyNode]:
    """
    Handles to evict, LRU first, until existing totals satisfy ``policy``.

    Used when limits shrink underneath a populated store.
    """
    candidates: List[RecencyNode] = []
    for node in recency.iter_nodes_from_back():
        if policy.within(count, size):
            break
        candidates.append(node)
        count -= 1
        size -= node.entry.size
    return candidates
