"""
Livestream source integration module.

Components:
- SourceAdapter: Attaches/detaches livestream listeners for the buffer

Interfaces:
- LivestreamHandle: Acquired livestream emitting "segment" and "close"
- LivestreamSource: Acquires, starts and stops livestreams
- RecordingConfiguration: Downstream recording fragment length
- ConnectionRecovery: Controller connection reset
"""

from __future__ import annotations

from timeshift_service.source.adapter import SourceAdapter
from timeshift_service.source.interface import (
    CLOSE_EVENT,
    SEGMENT_EVENT,
    ConnectionRecovery,
    LivestreamHandle,
    LivestreamSource,
    RecordingConfiguration,
)

__all__ = [
    "SourceAdapter",
    "ConnectionRecovery",
    "LivestreamHandle",
    "LivestreamSource",
    "RecordingConfiguration",
    "SEGMENT_EVENT",
    "CLOSE_EVENT",
]
