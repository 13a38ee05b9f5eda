"""
Metrics module for Prometheus observability.

Components:
- TimeshiftMetrics: Prometheus metric definitions and helpers
"""

from __future__ import annotations

from timeshift_service.metrics.prometheus import TimeshiftMetrics

__all__ = [
    "TimeshiftMetrics",
]
