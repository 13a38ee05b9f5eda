"""
Segment store backing the timeshift buffer.

Holds livestream segments as opaque byte blocks, oldest first:
- append() at the back for every arrival
- trim() evicts at most one segment from the front per call
- drain() concatenates everything and empties the store
- tail() returns the most recent segments for timeshift reads
"""

from __future__ import annotations

import logging
from collections import deque

logger = logging.getLogger(__name__)


class SegmentStore:
    """Ordered sequence of livestream segments.

    Segments are never modified after they are appended; they only leave the
    store through front eviction, a drain, or clear().

    Attributes:
        total_appended: Segments appended since creation (for metrics)
        total_evicted: Segments evicted by trim() since creation
    """

    # The store always retains at least one segment
    MIN_CAPACITY = 1

    def __init__(self) -> None:
        """Initialize an empty store."""
        self._segments: deque[bytes] = deque()
        self._total_bytes = 0
        self.total_appended = 0
        self.total_evicted = 0

    def append(self, segment: bytes) -> None:
        """Add a segment to the back of the store.

        Args:
            segment: Livestream segment bytes
        """
        self._segments.append(segment)
        self._total_bytes += len(segment)
        self.total_appended += 1

    def prepend(self, segment: bytes) -> None:
        """Add a segment to the front of the store (initialization segment).

        Args:
            segment: Segment bytes to place before everything buffered
        """
        self._segments.appendleft(segment)
        self._total_bytes += len(segment)

    @classmethod
    def effective_capacity(cls, capacity: int) -> int:
        """Clamp a retention capacity to the store minimum."""
        return max(cls.MIN_CAPACITY, capacity)

    def trim(self, capacity: int) -> bytes | None:
        """Evict the oldest segment if the store exceeds capacity.

        Removes at most one segment. Arrivals are handled one at a time, so a
        single eviction per arrival keeps the store at capacity.

        Args:
            capacity: Retention capacity in segments (values below 1 act as 1)

        Returns:
            The evicted segment, or None if nothing was evicted
        """
        if len(self._segments) <= self.effective_capacity(capacity):
            return None

        evicted = self._segments.popleft()
        self._total_bytes -= len(evicted)
        self.total_evicted += 1
        return evicted

    def tail(self, count: int) -> list[bytes]:
        """Return the most recent ``count`` segments, oldest first.

        Args:
            count: Number of segments wanted

        Returns:
            Up to ``count`` segments; empty when count <= 0
        """
        if count <= 0:
            return []

        start = max(0, len(self._segments) - count)
        return [self._segments[i] for i in range(start, len(self._segments))]

    def snapshot(self) -> list[bytes]:
        """Return every buffered segment, oldest first."""
        return list(self._segments)

    def drain(self) -> bytes:
        """Concatenate all segments and empty the store.

        Returns:
            All buffered bytes in order (empty bytes if nothing buffered)
        """
        data = b"".join(self._segments)
        self.clear()
        return data

    def clear(self) -> None:
        """Remove all segments."""
        self._segments.clear()
        self._total_bytes = 0

    def __len__(self) -> int:
        return len(self._segments)

    def __bool__(self) -> bool:
        return bool(self._segments)

    @property
    def total_bytes(self) -> int:
        """Total bytes currently buffered."""
        return self._total_bytes
