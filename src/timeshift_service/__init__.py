"""
Timeshift service.

Livestream timeshift buffer: a bounded, continuously refreshed window over a
live media segment stream that can switch to draining everything downstream,
always prefixed with the stream's initialization segment.
"""

from __future__ import annotations

from timeshift_service.config import TimeshiftConfig
from timeshift_service.models import SessionState
from timeshift_service.timeshift import TimeshiftBuffer

__version__ = "0.1.0"

__all__ = [
    "TimeshiftBuffer",
    "TimeshiftConfig",
    "SessionState",
]
