"""
Source adapter wiring a livestream handle to the timeshift buffer.

Owns the listener lifecycle for one livestream handle:
- attach() registers the "segment" and "close" listeners
- detach() removes every listener it registered, exactly once
- Each registration is tracked as a Subscription, so detach() is exhaustive
  and idempotent even when the livestream closes repeatedly
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from timeshift_service.events import Subscription
from timeshift_service.source.interface import CLOSE_EVENT, SEGMENT_EVENT, LivestreamHandle

logger = logging.getLogger(__name__)

# Type aliases for adapter callbacks
SegmentCallback = Callable[[bytes], None]
CloseCallback = Callable[[], None]


class SourceAdapter:
    """Forwards livestream events into the timeshift buffer.

    Attributes:
        camera_id: Identifier used in log messages
        handle: Livestream handle currently attached, if any
    """

    CLOSE_MESSAGE = (
        "The livestream API connection was unexpectedly closed by the controller: "
        "this is typically due to device restarts or issues with controller firmware "
        "versions, and can be safely ignored. Will retry again shortly."
    )

    def __init__(
        self,
        on_segment: SegmentCallback,
        on_close: CloseCallback,
        camera_id: str = "unknown",
    ) -> None:
        """Initialize source adapter.

        Args:
            on_segment: Called with each segment delivered by the livestream
            on_close: Called after the livestream closes unexpectedly
            camera_id: Identifier used in log messages
        """
        self.camera_id = camera_id
        self.handle: LivestreamHandle | None = None

        self._on_segment = on_segment
        self._on_close = on_close
        self._subscriptions: list[Subscription] = []

    def attach(self, handle: LivestreamHandle) -> None:
        """Register segment and close listeners on a livestream handle.

        Any listeners from a previous attach are removed first, so a handle
        never carries two copies of our segment listener.

        Args:
            handle: Livestream handle to listen to
        """
        if self._subscriptions:
            self.detach()

        self.handle = handle
        self._subscribe(handle, CLOSE_EVENT, self._handle_close)
        self._subscribe(handle, SEGMENT_EVENT, self._handle_segment)

        logger.debug(f"Source adapter attached: camera={self.camera_id}")

    def _subscribe(
        self,
        handle: LivestreamHandle,
        event: str,
        callback: Callable[..., None],
    ) -> None:
        handle.on(event, callback)
        self._subscriptions.append(
            Subscription(
                event=event,
                callback=callback,
                _remove=lambda: handle.off(event, callback),
            )
        )

    def detach(self) -> int:
        """Remove every listener registered by attach().

        Safe to call repeatedly; later calls are no-ops.

        Returns:
            Number of listeners removed by this call
        """
        removed = 0

        while self._subscriptions:
            subscription = self._subscriptions.pop()
            try:
                if subscription.cancel():
                    removed += 1
            except Exception as e:
                logger.warning(
                    f"Failed to remove {subscription.event} listener "
                    f"(camera={self.camera_id}): {e}"
                )

        if removed:
            logger.debug(f"Source adapter detached {removed} listeners: camera={self.camera_id}")

        self.handle = None
        return removed

    def _handle_segment(self, segment: bytes) -> None:
        self._on_segment(segment)

    def _handle_close(self) -> None:
        logger.error(f"[{self.camera_id}] {self.CLOSE_MESSAGE}")
        self._on_close()

    @property
    def is_attached(self) -> bool:
        """Whether listeners are currently registered."""
        return bool(self._subscriptions)

    @property
    def listener_count(self) -> int:
        """Number of listeners currently registered."""
        return len(self._subscriptions)
