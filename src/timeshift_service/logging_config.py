"""
Logging configuration for the timeshift service.

Usage:
  LOG_LEVEL sets the level for every module (default INFO).
  Set LOG_FOCUS=1 to only show the timeshift lifecycle at LOG_LEVEL; other
  modules drop to WARNING to reduce noise.

Modules included in focused logging:
  - timeshift_service.timeshift.buffer (start/stop/transmit lifecycle)
  - timeshift_service.timeshift.init_segment (initialization segment wait)
  - timeshift_service.source.adapter (livestream listeners, closures)

Example:
  LOG_LEVEL=DEBUG LOG_FOCUS=1 uvicorn timeshift_service.main:app
"""

import logging
import os

FOCUSED_MODULES = [
    "timeshift_service.timeshift.buffer",
    "timeshift_service.timeshift.init_segment",
    "timeshift_service.source.adapter",
]


def configure_logging() -> None:
    """Configure logging from LOG_LEVEL and LOG_FOCUS.

    When LOG_FOCUS=1 is set:
    - Focused modules log at LOG_LEVEL (default INFO)
    - Other modules log at WARNING only
    """
    log_level = os.getenv("LOG_LEVEL", "INFO").upper()
    log_focus = os.getenv("LOG_FOCUS", "0") == "1"

    # Millisecond timestamps for correlating segment arrivals
    log_format = "%(asctime)s.%(msecs)03d | %(name)s | %(levelname)s | %(message)s"
    date_format = "%H:%M:%S"

    logging.basicConfig(
        level=log_level if not log_focus else logging.WARNING,
        format=log_format,
        datefmt=date_format,
        force=True,  # Override any existing config
    )

    if not log_focus:
        return

    for module in FOCUSED_MODULES:
        logging.getLogger(module).setLevel(log_level)

    logging.getLogger().warning(
        f"Focused logging enabled: {', '.join(FOCUSED_MODULES)} at {log_level}"
    )


# Log filter patterns for grep
LOG_PATTERNS = {
    "lifecycle": [
        "Timeshift buffer started",
        "Timeshift buffer stopped",
        "Timeshift buffer transmitting",
        "transmission stopped",
    ],
    "failures": [
        "Unable to acquire livestream",
        "Unable to start livestream",
        "Unable to access the livestream API",
        "Unable to begin transmitting",
        "unexpectedly closed",
    ],
    "data": [
        "Emitted",
        "Initialization segment",
        "Source adapter",
    ],
}


def get_grep_pattern(focus: str) -> str:
    """Get grep pattern for filtering logs.

    Args:
        focus: One of 'lifecycle', 'failures', 'data', or 'all'

    Returns:
        Grep-compatible regex pattern
    """
    if focus == "all":
        all_patterns = []
        for patterns in LOG_PATTERNS.values():
            all_patterns.extend(patterns)
        return "|".join(all_patterns)

    return "|".join(LOG_PATTERNS.get(focus, []))
