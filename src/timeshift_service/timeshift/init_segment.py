"""
Initialization segment resolver.

The fMP4 initialization segment is delivered by the livestream at some point
after it starts. Recording consumers need it in front of every emitted slice,
but they are time sensitive, so we only wait a bounded interval for it:
- return immediately when the livestream already has it
- otherwise wait once (cancellable) and re-check exactly once
"""

from __future__ import annotations

import asyncio
import logging
import time

from timeshift_service.source.interface import LivestreamHandle

logger = logging.getLogger(__name__)


class InitSegmentResolver:
    """Retrieves the initialization segment from a livestream handle.

    Attributes:
        wait_s: Seconds to wait before the single re-check
        last_wait_s: Time spent waiting during the most recent resolve()
    """

    DEFAULT_WAIT_S = 2.0

    def __init__(self, wait_s: float = DEFAULT_WAIT_S) -> None:
        """Initialize resolver.

        Args:
            wait_s: Seconds to wait for the initialization segment
        """
        self.wait_s = wait_s
        self.last_wait_s = 0.0
        self._cancel_event = asyncio.Event()

    async def resolve(self, handle: LivestreamHandle | None) -> bytes | None:
        """Return the initialization segment, waiting briefly if needed.

        Args:
            handle: Livestream handle to read from

        Returns:
            Initialization segment bytes, or None if still unavailable
        """
        self.last_wait_s = 0.0

        if handle is None:
            return None

        if handle.init_segment:
            return handle.init_segment

        logger.debug(f"Initialization segment not yet available, waiting {self.wait_s:.1f}s")

        self._cancel_event.clear()
        started = time.monotonic()

        try:
            await asyncio.wait_for(self._cancel_event.wait(), timeout=self.wait_s)
            logger.debug("Initialization segment wait cancelled")
        except asyncio.TimeoutError:
            # Wait elapsed, fall through to the single re-check
            pass

        self.last_wait_s = time.monotonic() - started

        return handle.init_segment or None

    def cancel(self) -> None:
        """End a pending wait early. The re-check still happens."""
        self._cancel_event.set()

    @staticmethod
    def is_init_segment(handle: LivestreamHandle | None, segment: bytes) -> bool:
        """Check whether a segment is the livestream's initialization segment.

        Args:
            handle: Livestream handle holding the known initialization segment
            segment: Segment to compare

        Returns:
            True on exact byte equality
        """
        if handle is None or not handle.init_segment:
            return False

        return handle.init_segment == segment
