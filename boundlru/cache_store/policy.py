"""
Capacity policy for bounded cache stores.
"""

from dataclasses import dataclass

from boundlru.utils.validation import validate_limit

UNBOUNDED = 0


@dataclass(frozen=True)
class CapacityPolicy:
    """
    Pair of capacity limits.

    Attributes:
        size_limit: Maximum aggregate payload size in bytes (0 = unbounded)
        count_limit: Maximum number of entries (0 = unbounded)
    """
    size_limit: int = UNBOUNDED
    count_limit: int = UNBOUNDED

    def __post_init__(self):
        validate_limit(self.size_limit, "size_limit")
        validate_limit(self.count_limit, "count_limit")

    @property
    def size_bounded(self) -> bool:
        return self.size_limit > UNBOUNDED

    @property
    def count_bounded(self) -> bool:
        return self.count_limit > UNBOUNDED

    @property
    def is_bounded(self) -> bool:
        """True when at least one dimension is limited."""
        return self.size_bounded or self.count_bounded

    def admits(self, size: int) -> bool:
        """Whether a single payload of ``size`` bytes could ever fit."""
        return not self.size_bounded or size <= self.size_limit

    def within(self, count: int, size: int) -> bool:
        """Whether the given totals satisfy both limits."""
        if self.count_bounded and count > self.count_limit:
            return False
        if self.size_bounded and size > self.size_limit:
            return False
        return True

    def to_dict(self) -> dict:
        return {"size_limit": self.size_limit, "count_limit": self.count_limit}
