"""
Buffer module for timeshift segment storage.

Components:
- SegmentStore: Ordered livestream segments with front eviction and drain
"""

from __future__ import annotations

from timeshift_service.buffer.segment_store import SegmentStore

__all__ = [
    "SegmentStore",
]
