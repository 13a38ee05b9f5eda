"""
Interfaces of the collaborators the timeshift buffer depends on.

The livestream itself (connecting to the controller, codec negotiation,
reconnects) lives outside this package. The buffer only needs the narrow
surface described here.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

# Livestream event names
SEGMENT_EVENT = "segment"
CLOSE_EVENT = "close"


@runtime_checkable
class LivestreamHandle(Protocol):
    """An acquired livestream for one channel/lens.

    Emits:
        "segment": one bytes argument per delivered media segment
        "close": no arguments, when the upstream connection closes
    """

    @property
    def init_segment(self) -> bytes | None:
        """Initialization segment, once the livestream has received it."""
        ...

    def on(self, event: str, callback: Callable[..., Any]) -> None:
        """Register a listener for an event."""
        ...

    def off(self, event: str, callback: Callable[..., Any]) -> None:
        """Remove a previously registered listener."""
        ...


@runtime_checkable
class LivestreamSource(Protocol):
    """Owner of the livestream API for a camera."""

    def acquire(self, channel: int, lens: int | None) -> LivestreamHandle | None:
        """Return a livestream handle, or None if one can't be acquired."""
        ...

    async def start(self, channel: int, lens: int | None, segment_length_ms: int) -> bool:
        """Start delivering segments of the given length. True on success."""
        ...

    def stop(self, channel: int, lens: int | None) -> None:
        """Stop delivering segments."""
        ...


@runtime_checkable
class RecordingConfiguration(Protocol):
    """Read-only view of the downstream recording configuration."""

    @property
    def fragment_length_ms(self) -> int | None:
        """Recording fragment length in milliseconds, if negotiated."""
        ...


@runtime_checkable
class ConnectionRecovery(Protocol):
    """Process-wide controller connection reset."""

    async def reset_connection(self) -> None:
        """Reset the connection to the controller."""
        ...
