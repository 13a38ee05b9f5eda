"""
Observer primitives with explicit subscription handles.

Every registration returns a Subscription that knows how to undo itself, so
owners can keep an enumerable set of handles and tear all of them down
deterministically instead of relying on detach-by-name.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

# Type alias for "segment ready" subscribers
SegmentReadyCallback = Callable[[bytes], None]


@dataclass(eq=False)
class Subscription:
    """Handle for one registered callback.

    Attributes:
        event: Event name the callback is registered for
        callback: The registered callable
        active: False once the subscription has been cancelled
    """

    event: str
    callback: Callable[..., Any]
    _remove: Callable[[], None] | None = field(default=None, repr=False)
    active: bool = True

    def cancel(self) -> bool:
        """Remove the callback from its source.

        Safe to call any number of times.

        Returns:
            True if this call removed the callback, False if already cancelled
        """
        if not self.active:
            return False

        self.active = False
        if self._remove is not None:
            self._remove()
            self._remove = None

        return True


class SegmentPublisher:
    """Fan-out of emitted timeshift data to "segment ready" subscribers.

    Delivery is synchronous and in subscription order. A failing subscriber is
    logged and skipped; remaining subscribers still receive the data.
    """

    EVENT = "segment"

    def __init__(self) -> None:
        """Initialize publisher with no subscribers."""
        self._subscriptions: list[Subscription] = []

    def subscribe(self, callback: SegmentReadyCallback) -> Subscription:
        """Register a callback for emitted data.

        Args:
            callback: Called with one concatenated bytes block per emission

        Returns:
            Subscription handle; cancel() unregisters the callback
        """
        subscription = Subscription(event=self.EVENT, callback=callback)
        subscription._remove = lambda: self._discard(subscription)
        self._subscriptions.append(subscription)
        return subscription

    def _discard(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def publish(self, data: bytes) -> int:
        """Deliver data to every active subscriber.

        Args:
            data: Concatenated segment bytes

        Returns:
            Number of subscribers that received the data without raising
        """
        delivered = 0

        # Copy so subscribers may cancel themselves during delivery
        for subscription in list(self._subscriptions):
            try:
                subscription.callback(data)
                delivered += 1
            except Exception as e:
                logger.error(f"Segment subscriber {subscription.callback!r} failed: {e}")

        return delivered

    @property
    def subscriber_count(self) -> int:
        """Number of active subscribers."""
        return len(self._subscriptions)
