"""
Bounded history of notified listing descriptions.

Keeps the last `capacity` descriptions in insertion order. Once full,
the oldest entry is evicted first; a repeated match does not refresh an
entry's position. The cache lives for the process lifetime only, so a
restart may re-notify recent listings.
"""

from collections import deque

DEFAULT_CAPACITY = 100


class DedupCache:
    """
    FIFO-capped set of previously seen descriptions.

    Owned by the collector task; not shared across tasks.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._entries: deque[str] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, description: object) -> bool:
        return description in self._entries

    def admit(self, description: str) -> bool:
        """
        Check a description and record it if unseen.

        Returns:
            True if the description was not in the cache (and is now),
            False if it was already present.
        """
        if description in self._entries:
            return False
        self._entries.append(description)
        return True

    def record(self, description: str) -> None:
        """Record a description without testing it (first-cycle seeding)."""
        if description not in self._entries:
            self._entries.append(description)

    def snapshot(self) -> list[str]:
        """Entries from oldest to newest."""
        return list(self._entries)
