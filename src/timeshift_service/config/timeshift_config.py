"""
Timeshift buffer configuration from environment variables.

- Environment variables use TIMESHIFT_ prefix
- Defaults tuned for HomeKit Secure Video style event recording
- Validation via Pydantic Field constraints
- Segment duration sanity check is a pure function so it can be exercised
  without a running buffer
"""

from __future__ import annotations

import logging

from pydantic import Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

# Default segment resolution. Small segments give a finer timeshift window at
# a very small CPU cost.
DEFAULT_SEGMENT_DURATION_MS = 100
MIN_SEGMENT_DURATION_MS = 100
MAX_SEGMENT_DURATION_MS = 1500


class TimeshiftConfig(BaseSettings):
    """Timeshift buffer configuration from environment variables.

    Attributes:
        segment_duration_ms: Nominal duration of one livestream segment.
            Default 100ms gives a fine-grained timeshift window.
        buffer_length_ms: Initial length of the rolling window. Converted to a
            segment count (never below one segment).
        init_segment_wait_s: Bounded wait for the initialization segment when
            the livestream has not delivered it yet. Recording consumers are
            latency sensitive, so this stays short.
        default_channel: Channel used when start() is called without one.
    """

    segment_duration_ms: int = Field(
        default=DEFAULT_SEGMENT_DURATION_MS,
        ge=MIN_SEGMENT_DURATION_MS,
        le=MAX_SEGMENT_DURATION_MS,
        description="Nominal duration of a single livestream segment in milliseconds",
    )
    buffer_length_ms: int = Field(
        default=DEFAULT_SEGMENT_DURATION_MS,
        ge=0,
        description="Initial timeshift window length in milliseconds",
    )
    init_segment_wait_s: float = Field(
        default=2.0,
        ge=0.0,
        le=10.0,
        description="Seconds to wait for the initialization segment before giving up",
    )
    default_channel: int = Field(
        default=0,
        ge=0,
        description="Livestream channel used when none is requested",
    )

    model_config = {
        "env_prefix": "TIMESHIFT_",
        "case_sensitive": False,
    }

    @property
    def min_segment_duration_ms(self) -> int:
        """Smallest accepted segment duration in milliseconds."""
        return MIN_SEGMENT_DURATION_MS

    @property
    def max_segment_duration_ms(self) -> int:
        """Largest accepted segment duration in milliseconds."""
        return MAX_SEGMENT_DURATION_MS


def validate_segment_duration(
    requested_ms: int,
    fragment_length_ms: int | None,
    default_ms: int = DEFAULT_SEGMENT_DURATION_MS,
) -> int:
    """Return a sane segment duration for the recording configuration.

    A requested duration is kept when it lies within
    [MIN_SEGMENT_DURATION_MS, MAX_SEGMENT_DURATION_MS] and, when the consumer's
    recording fragment length is known, does not exceed half of it. Anything
    else falls back to ``default_ms``.

    Args:
        requested_ms: Segment duration currently configured
        fragment_length_ms: Recording fragment length of the downstream
            consumer, or None when no recording configuration is available
        default_ms: Value to reset to when the requested duration is invalid

    Returns:
        The validated segment duration in milliseconds
    """
    if requested_ms < MIN_SEGMENT_DURATION_MS or requested_ms > MAX_SEGMENT_DURATION_MS:
        logger.warning(
            f"Segment duration {requested_ms}ms outside "
            f"[{MIN_SEGMENT_DURATION_MS}, {MAX_SEGMENT_DURATION_MS}]ms, "
            f"resetting to {default_ms}ms"
        )
        return default_ms

    if fragment_length_ms and requested_ms > fragment_length_ms / 2:
        logger.warning(
            f"Segment duration {requested_ms}ms exceeds half of the recording "
            f"fragment length ({fragment_length_ms}ms), resetting to {default_ms}ms"
        )
        return default_ms

    return requested_ms
