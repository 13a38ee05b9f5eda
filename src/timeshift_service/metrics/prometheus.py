"""
Prometheus metrics for the timeshift buffer.

- Segment arrival and eviction counters
- Emission counters (events and bytes)
- Buffered segment gauge and session state gauge
- Livestream closure and connection recovery counters
- Initialization segment wait histogram
"""

from __future__ import annotations

import logging
from typing import ClassVar

from prometheus_client import Counter, Gauge, Histogram

logger = logging.getLogger(__name__)


class TimeshiftMetrics:
    """Prometheus metrics for one timeshift buffer.

    All metrics use the 'timeshift_service_buffer_' prefix and carry a
    camera_id label.

    Note: Collectors are class-level singletons to avoid Prometheus
    "Duplicated timeseries" errors when creating multiple instances.
    """

    NAMESPACE = "timeshift_service"
    SUBSYSTEM = "buffer"

    _segments_received: ClassVar[Counter | None] = None
    _segments_evicted: ClassVar[Counter | None] = None
    _emissions: ClassVar[Counter | None] = None
    _emitted_bytes: ClassVar[Counter | None] = None
    _buffered_segments: ClassVar[Gauge | None] = None
    _session_state: ClassVar[Gauge | None] = None
    _source_closures: ClassVar[Counter | None] = None
    _connection_recoveries: ClassVar[Counter | None] = None
    _init_segment_wait: ClassVar[Histogram | None] = None
    _metrics_initialized: ClassVar[bool] = False

    def __init__(self, camera_id: str | None = None) -> None:
        """Initialize timeshift metrics.

        Args:
            camera_id: Camera identifier for labels (optional)
        """
        self.camera_id = camera_id or "unknown"
        self._ensure_metrics_initialized()

    @classmethod
    def _ensure_metrics_initialized(cls) -> None:
        """Initialize all Prometheus metrics (once per class)."""
        if cls._metrics_initialized:
            return

        prefix = f"{cls.NAMESPACE}_{cls.SUBSYSTEM}"

        cls._segments_received = Counter(
            f"{prefix}_segments_received_total",
            "Total livestream segments received",
            ["camera_id"],
        )

        cls._segments_evicted = Counter(
            f"{prefix}_segments_evicted_total",
            "Total segments evicted from the rolling window",
            ["camera_id"],
        )

        cls._emissions = Counter(
            f"{prefix}_emissions_total",
            "Total segment ready events emitted downstream",
            ["camera_id"],
        )

        cls._emitted_bytes = Counter(
            f"{prefix}_emitted_bytes_total",
            "Total bytes emitted downstream",
            ["camera_id"],
        )

        cls._buffered_segments = Gauge(
            f"{prefix}_buffered_segments",
            "Segments currently held in the timeshift buffer",
            ["camera_id"],
        )

        cls._session_state = Gauge(
            f"{prefix}_session_state",
            "Session state (0=not_started, 1=buffering, 2=transmitting)",
            ["camera_id"],
        )

        cls._source_closures = Counter(
            f"{prefix}_source_closures_total",
            "Total unexpected livestream closures",
            ["camera_id"],
        )

        cls._connection_recoveries = Counter(
            f"{prefix}_connection_recoveries_total",
            "Total controller connection resets requested",
            ["camera_id", "reason"],  # reason: start_failed|init_segment_unavailable|source_closed
        )

        cls._init_segment_wait = Histogram(
            f"{prefix}_init_segment_wait_seconds",
            "Time spent waiting for the initialization segment",
            ["camera_id"],
            buckets=[0.0, 0.1, 0.25, 0.5, 1.0, 2.0, 3.0, 5.0, 10.0],
        )

        cls._metrics_initialized = True

    @property
    def segments_received(self) -> Counter:
        return self._segments_received

    @property
    def segments_evicted(self) -> Counter:
        return self._segments_evicted

    @property
    def emissions(self) -> Counter:
        return self._emissions

    @property
    def emitted_bytes(self) -> Counter:
        return self._emitted_bytes

    @property
    def buffered_segments(self) -> Gauge:
        return self._buffered_segments

    @property
    def session_state(self) -> Gauge:
        return self._session_state

    @property
    def source_closures(self) -> Counter:
        return self._source_closures

    @property
    def connection_recoveries(self) -> Counter:
        return self._connection_recoveries

    @property
    def init_segment_wait(self) -> Histogram:
        return self._init_segment_wait

    def record_segment_received(self, buffered: int) -> None:
        """Record a livestream segment arrival.

        Args:
            buffered: Segments held after handling the arrival
        """
        self.segments_received.labels(camera_id=self.camera_id).inc()
        self.buffered_segments.labels(camera_id=self.camera_id).set(buffered)

    def record_segment_evicted(self) -> None:
        """Record one segment evicted from the rolling window."""
        self.segments_evicted.labels(camera_id=self.camera_id).inc()

    def record_emission(self, size_bytes: int) -> None:
        """Record a segment ready emission.

        Args:
            size_bytes: Size of the emitted block
        """
        self.emissions.labels(camera_id=self.camera_id).inc()
        self.emitted_bytes.labels(camera_id=self.camera_id).inc(size_bytes)
        self.buffered_segments.labels(camera_id=self.camera_id).set(0)

    def set_session_state(self, state: int) -> None:
        """Set session state gauge.

        Args:
            state: 0=not_started, 1=buffering, 2=transmitting
        """
        self.session_state.labels(camera_id=self.camera_id).set(state)

    def set_buffered_segments(self, count: int) -> None:
        """Set buffered segment gauge.

        Args:
            count: Segments currently buffered
        """
        self.buffered_segments.labels(camera_id=self.camera_id).set(count)

    def record_source_closure(self) -> None:
        """Record an unexpected livestream closure."""
        self.source_closures.labels(camera_id=self.camera_id).inc()

    def record_connection_recovery(self, reason: str) -> None:
        """Record a connection reset request.

        Args:
            reason: "start_failed", "init_segment_unavailable" or "source_closed"
        """
        self.connection_recoveries.labels(
            camera_id=self.camera_id,
            reason=reason,
        ).inc()

    def observe_init_segment_wait(self, wait_s: float) -> None:
        """Record time spent waiting for the initialization segment.

        Args:
            wait_s: Wait in seconds (0 when it was already available)
        """
        self.init_segment_wait.labels(camera_id=self.camera_id).observe(wait_s)
