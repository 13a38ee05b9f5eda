"""
Livestream timeshift buffer.

Maintains a rolling window of livestream segments so that an event recording
can begin with footage from before the event was detected.

Lifecycle:
- start(): acquire and start the livestream, begin buffering
- transmit_start(): prefix the initialization segment, flush the window
  downstream and forward every following segment as it arrives
- transmit_stop(): resume maintaining the rolling window
- stop(): stop the livestream, remove listeners and discard the window

Reads:
- get_last(duration_ms): initialization segment + the most recent segments
- buffer: initialization segment + everything buffered
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from timeshift_service.buffer.segment_store import SegmentStore
from timeshift_service.config.timeshift_config import (
    DEFAULT_SEGMENT_DURATION_MS,
    TimeshiftConfig,
    validate_segment_duration,
)
from timeshift_service.events import SegmentPublisher, SegmentReadyCallback, Subscription
from timeshift_service.metrics.prometheus import TimeshiftMetrics
from timeshift_service.models.state import SessionState, SessionStateMachine
from timeshift_service.source.adapter import SourceAdapter
from timeshift_service.source.interface import (
    ConnectionRecovery,
    LivestreamHandle,
    LivestreamSource,
    RecordingConfiguration,
)
from timeshift_service.timeshift.init_segment import InitSegmentResolver

logger = logging.getLogger(__name__)


class TimeshiftBuffer:
    """Rolling livestream buffer that can switch to draining downstream.

    One instance owns one livestream handle and one segment store for a
    camera channel/lens. All segment handling happens on the event loop, in
    arrival order.

    Attributes:
        camera_id: Camera identifier for logs and metric labels
        config: Timeshift configuration
        metrics: Prometheus metrics for this buffer
    """

    def __init__(
        self,
        livestream: LivestreamSource,
        config: TimeshiftConfig | None = None,
        recording_config: RecordingConfiguration | None = None,
        recovery: ConnectionRecovery | None = None,
        lens: int | None = None,
        camera_id: str = "unknown",
        metrics: TimeshiftMetrics | None = None,
    ) -> None:
        """Initialize timeshift buffer.

        Args:
            livestream: Livestream API for the camera
            config: Timeshift configuration (default loaded from environment)
            recording_config: Downstream recording configuration, used to
                sanity check the segment duration when available
            recovery: Controller connection reset, invoked when the livestream
                or its initialization segment can't be obtained
            lens: Default lens for multi-lens cameras (None for single lens)
            camera_id: Camera identifier for logs and metric labels
            metrics: Metrics instance (default creates one for camera_id)
        """
        self.camera_id = camera_id
        self.config = config or TimeshiftConfig()
        self.metrics = metrics or TimeshiftMetrics(camera_id=camera_id)

        self._livestream_source = livestream
        self._recording_config = recording_config
        self._recovery = recovery

        self._livestream: LivestreamHandle | None = None
        self._channel = self.config.default_channel
        self._lens = lens
        self._segment_length = self.config.segment_duration_ms
        self._buffer_size = SegmentStore.MIN_CAPACITY
        self._source_closed = False

        self._store = SegmentStore()
        self._session = SessionStateMachine()
        self._publisher = SegmentPublisher()
        self._resolver = InitSegmentResolver(wait_s=self.config.init_segment_wait_s)
        self._adapter = SourceAdapter(
            on_segment=self._handle_segment,
            on_close=self._handle_close,
            camera_id=camera_id,
        )
        self._lifecycle_lock = asyncio.Lock()

        self.length = self.config.buffer_length_ms
        self.metrics.set_session_state(self._session.state.metric_value())

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self, channel: int | None = None, lens: int | None = None) -> bool:
        """Start the livestream and begin maintaining the timeshift buffer.

        If already started, the buffer is stopped and restarted.

        Args:
            channel: Livestream channel (default: last used channel)
            lens: Secondary lens (default: last used lens). Any lens forces
                channel 0.

        Returns:
            True if the livestream was acquired and started
        """
        async with self._lifecycle_lock:
            return await self._start(channel, lens)

    async def _start(self, channel: int | None, lens: int | None) -> bool:
        channel = self._channel if channel is None else channel
        lens = self._lens if lens is None else lens

        # Secondary lenses are always addressed through channel 0
        if lens is not None:
            channel = 0

        if self.is_started:
            self.stop()

        # The recording configuration may not exist until a consumer has
        # negotiated one, so the segment duration is checked here rather than
        # at construction.
        fragment_length_ms = (
            self._recording_config.fragment_length_ms if self._recording_config else None
        )
        self._segment_length = validate_segment_duration(
            self._segment_length,
            fragment_length_ms,
            DEFAULT_SEGMENT_DURATION_MS,
        )

        self._store.clear()
        self._source_closed = False

        handle = self._livestream_source.acquire(channel, lens)

        if handle is None:
            logger.warning(
                f"[{self.camera_id}] Unable to acquire livestream: channel={channel}, lens={lens}"
            )
            return False

        self._livestream = handle
        self._adapter.attach(handle)

        try:
            started = await self._livestream_source.start(channel, lens, self._segment_length)
        except Exception as e:
            logger.error(
                f"[{self.camera_id}] Error starting livestream: channel={channel}, lens={lens}: {e}"
            )
            self._adapter.detach()
            return False

        if not started:
            logger.warning(
                f"[{self.camera_id}] Unable to start livestream: channel={channel}, lens={lens}"
            )
            self._adapter.detach()
            return False

        # The livestream closed while we were waiting for it to start
        if not self._adapter.is_attached:
            logger.warning(f"[{self.camera_id}] Livestream closed during startup")
            self._stop_livestream(channel, lens)
            return False

        self._channel = channel
        self._lens = lens
        self._transition(SessionState.BUFFERING)

        logger.info(
            f"[{self.camera_id}] Timeshift buffer started: channel={channel}, lens={lens}, "
            f"segment_length={self._segment_length}ms, length={self.length}ms"
        )
        return True

    def stop(self) -> bool:
        """Stop timeshifting the livestream.

        Stops the livestream, removes every listener and discards the buffer.
        Safe to call at any time, including repeatedly.

        Returns:
            Always True
        """
        if self.is_started:
            self._stop_livestream(self._channel, self._lens)
            self._adapter.detach()
            self._resolver.cancel()

            logger.info(f"[{self.camera_id}] Timeshift buffer stopped")

        self._store.clear()
        self._transition(SessionState.NOT_STARTED)
        self.metrics.set_buffered_segments(0)

        return True

    def _stop_livestream(self, channel: int, lens: int | None) -> None:
        try:
            self._livestream_source.stop(channel, lens)
        except Exception as e:
            logger.error(f"[{self.camera_id}] Error stopping livestream: {e}")

    async def transmit_start(self) -> bool:
        """Start transmitting the timeshift buffer downstream.

        Starts the livestream first if needed. The initialization segment is
        placed in front of everything buffered, all of it is emitted at once,
        and every subsequent segment is emitted as soon as it arrives.

        Returns:
            True if transmitting, False if the livestream or its
            initialization segment was unavailable
        """
        async with self._lifecycle_lock:
            # The livestream was never started, or it was closed. Start it now.
            if not self.is_started and not await self._start(None, None):
                logger.error(
                    f"[{self.camera_id}] Unable to access the livestream API: this is typically "
                    "due to the controller or camera rebooting. Will retry again."
                )
                await self._reset_connection("start_failed")
                return False

            init_segment = await self.get_init_segment()

            if not self.is_started:
                if self._source_closed:
                    logger.error(
                        f"[{self.camera_id}] Unable to begin transmitting the stream: the "
                        "livestream closed while waiting for the initialization segment. "
                        "Will retry again."
                    )
                    await self._reset_connection("source_closed")
                else:
                    logger.warning(
                        f"[{self.camera_id}] Timeshift buffer stopped while waiting "
                        "for the initialization segment"
                    )
                return False

            if init_segment is None:
                logger.error(
                    f"[{self.camera_id}] Unable to begin transmitting the stream: unable to "
                    "retrieve initialization data from the controller. This error is typically "
                    "due to either an issue connecting to the controller, or a problem on the "
                    "controller."
                )
                await self._reset_connection("init_segment_unavailable")
                return False

            self._store.prepend(init_segment)

            # Send everything queued up so the consumer can start as quickly as possible
            self._transmit()
            self._transition(SessionState.TRANSMITTING)

            logger.info(f"[{self.camera_id}] Timeshift buffer transmitting")
            return True

    def transmit_stop(self) -> bool:
        """Stop transmitting and resume maintaining the rolling window.

        Returns:
            Always True
        """
        if self._session.is_transmitting:
            self._transition(SessionState.BUFFERING)
            logger.info(f"[{self.camera_id}] Timeshift buffer transmission stopped")

        return True

    async def _reset_connection(self, reason: str) -> None:
        self.metrics.record_connection_recovery(reason)

        if self._recovery is None:
            logger.debug(f"[{self.camera_id}] No connection recovery configured")
            return

        try:
            await self._recovery.reset_connection()
        except Exception as e:
            logger.error(f"[{self.camera_id}] Connection reset failed: {e}")

    def _transition(self, state: SessionState) -> None:
        self._session.transition_to(state)
        self.metrics.set_session_state(state.metric_value())

    # -------------------------------------------------------------------------
    # Livestream events
    # -------------------------------------------------------------------------

    def _handle_segment(self, segment: bytes) -> None:
        self._store.append(segment)

        # Trim the front of the buffer unless we are transmitting, in which
        # case everything is queued up for the consumer.
        if not self.is_transmitting and self._store.trim(self._buffer_size) is not None:
            self.metrics.record_segment_evicted()

        self.metrics.record_segment_received(len(self._store))

        if self.is_transmitting:
            self._transmit()

    def _handle_close(self) -> None:
        self.metrics.record_source_closure()

        if not self.is_started:
            # Closed while starting up: only our listeners need to go
            self._adapter.detach()
            return

        self._source_closed = True
        self.stop()

    def _transmit(self) -> None:
        data = self._store.drain()
        delivered = self._publisher.publish(data)
        self.metrics.record_emission(len(data))

        logger.debug(
            f"[{self.camera_id}] Emitted {len(data)} bytes to {delivered} subscribers"
        )

    # -------------------------------------------------------------------------
    # Initialization segment
    # -------------------------------------------------------------------------

    async def get_init_segment(self) -> bytes | None:
        """Get the initialization segment from the livestream.

        Waits a bounded interval when the livestream hasn't delivered it yet.

        Returns:
            Initialization segment bytes, or None if unavailable
        """
        init_segment = await self._resolver.resolve(self._livestream)
        self.metrics.observe_init_segment_wait(self._resolver.last_wait_s)
        return init_segment

    def is_init_segment(self, segment: bytes) -> bool:
        """Check whether a segment is the initialization segment."""
        return self._resolver.is_init_segment(self._livestream, segment)

    def _known_init_segment(self) -> bytes | None:
        if self._livestream is None:
            return None

        return self._livestream.init_segment or None

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def get_last(self, duration_ms: int) -> bytes | None:
        """Return the last ``duration_ms`` of the buffer with the initialization segment.

        Args:
            duration_ms: Amount of history wanted in milliseconds

        Returns:
            Initialization segment followed by the most recent segments
            covering the duration, or None when the initialization segment is
            unknown or nothing is buffered
        """
        count = int(duration_ms // self._segment_length)

        # Asking for at least everything we have
        if count >= len(self._store):
            return self.buffer

        init_segment = self._known_init_segment()

        if not init_segment or not self._store:
            return None

        return b"".join([init_segment, *self._store.tail(count)])

    @property
    def buffer(self) -> bytes | None:
        """The full timeshift buffer, prefixed with the initialization segment.

        None when the initialization segment is unknown or nothing is buffered.
        """
        init_segment = self._known_init_segment()

        if not init_segment or not self._store:
            return None

        return b"".join([init_segment, *self._store.snapshot()])

    def subscribe(self, callback: SegmentReadyCallback) -> Subscription:
        """Register for data emitted while transmitting.

        Args:
            callback: Called with one concatenated bytes block per emission

        Returns:
            Subscription handle; cancel() unregisters the callback
        """
        return self._publisher.subscribe(callback)

    def status(self) -> dict[str, Any]:
        """Snapshot of the buffer state for diagnostics."""
        return {
            "camera_id": self.camera_id,
            "state": self.state.value,
            "channel": self._channel,
            "lens": self._lens,
            "segment_length_ms": self._segment_length,
            "length_ms": self.length,
            "capacity": self.capacity,
            "buffered_segments": len(self._store),
            "buffered_bytes": self._store.total_bytes,
            "subscribers": self._publisher.subscriber_count,
        }

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def channel(self) -> int:
        """Livestream channel of the current (or last) session."""
        return self._channel

    @property
    def lens(self) -> int | None:
        """Livestream lens of the current (or last) session."""
        return self._lens

    @property
    def state(self) -> SessionState:
        """Current session state."""
        return self._session.state

    @property
    def is_started(self) -> bool:
        """Whether the timeshift buffer has been started."""
        return self._session.is_started

    @property
    def is_transmitting(self) -> bool:
        """Whether the timeshift buffer is transmitting downstream."""
        return self._session.is_transmitting

    @property
    def length(self) -> int:
        """Size of the timeshift buffer, in milliseconds."""
        return self._buffer_size * self._segment_length

    @length.setter
    def length(self, buffer_ms: int) -> None:
        # Number of segments needed to hold buffer_ms, never fewer than one
        self._buffer_size = SegmentStore.effective_capacity(int(buffer_ms // self._segment_length))

        # A smaller window applies right away unless everything is queued for the consumer
        if self.is_transmitting:
            return

        while self._store.trim(self._buffer_size) is not None:
            self.metrics.record_segment_evicted()

        self.metrics.set_buffered_segments(len(self._store))

    @property
    def capacity(self) -> int:
        """Retention capacity in segments while buffering."""
        return SegmentStore.effective_capacity(self._buffer_size)

    @property
    def segment_length(self) -> int:
        """Recording length, in milliseconds, of an individual segment."""
        return self._segment_length

    @property
    def segment_count(self) -> int:
        """Segments currently buffered."""
        return len(self._store)
