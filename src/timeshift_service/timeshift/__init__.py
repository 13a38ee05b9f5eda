"""
Timeshift module.

Components:
- TimeshiftBuffer: Rolling livestream window with buffering/transmitting modes
- InitSegmentResolver: Bounded wait for the initialization segment
"""

from __future__ import annotations

from timeshift_service.timeshift.buffer import TimeshiftBuffer
from timeshift_service.timeshift.init_segment import InitSegmentResolver

__all__ = [
    "TimeshiftBuffer",
    "InitSegmentResolver",
]
