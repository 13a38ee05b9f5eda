"""
Configuration module for the timeshift service.

This module provides Pydantic-based configuration models
loaded from environment variables.

Exports:
    TimeshiftConfig: Timeshift buffer configuration (TIMESHIFT_ prefix)
    validate_segment_duration: Segment duration sanity check
"""

from timeshift_service.config.timeshift_config import (
    DEFAULT_SEGMENT_DURATION_MS,
    MAX_SEGMENT_DURATION_MS,
    MIN_SEGMENT_DURATION_MS,
    TimeshiftConfig,
    validate_segment_duration,
)

__all__ = [
    "DEFAULT_SEGMENT_DURATION_MS",
    "MAX_SEGMENT_DURATION_MS",
    "MIN_SEGMENT_DURATION_MS",
    "TimeshiftConfig",
    "validate_segment_duration",
]
