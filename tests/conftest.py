"""
Pytest fixtures for timeshift service tests.

Includes fixtures for:
- Fake livestream handle and livestream source (in-memory, event driven)
- Recording configuration and connection recovery stand-ins
- Timeshift configuration with short waits
- A TimeshiftBuffer wired to the fakes
- FastAPI test client
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from timeshift_service.config.timeshift_config import TimeshiftConfig
from timeshift_service.timeshift.buffer import TimeshiftBuffer

INIT_SEGMENT = b"\x00\x00\x00\x18ftypiso5-init"


# =============================================================================
# Livestream fakes
# =============================================================================


class FakeLivestreamHandle:
    """In-memory livestream handle that records listeners and emits on demand."""

    def __init__(self, init_segment: bytes | None = None) -> None:
        self.init_segment = init_segment
        self.listeners: dict[str, list[Callable[..., Any]]] = defaultdict(list)

    def on(self, event: str, callback: Callable[..., Any]) -> None:
        self.listeners[event].append(callback)

    def off(self, event: str, callback: Callable[..., Any]) -> None:
        if callback in self.listeners[event]:
            self.listeners[event].remove(callback)

    def emit(self, event: str, *args: Any) -> None:
        for callback in list(self.listeners[event]):
            callback(*args)

    def emit_segment(self, segment: bytes) -> None:
        self.emit("segment", segment)

    def emit_close(self) -> None:
        self.emit("close")

    def listener_count(self, event: str | None = None) -> int:
        if event is not None:
            return len(self.listeners[event])
        return sum(len(callbacks) for callbacks in self.listeners.values())


class FakeLivestreamSource:
    """Livestream API stand-in with configurable acquire/start outcomes."""

    def __init__(
        self,
        handle: FakeLivestreamHandle | None = None,
        start_result: bool = True,
    ) -> None:
        self.handle = handle or FakeLivestreamHandle()
        self.start_result = start_result
        self.acquirable = True
        self.acquire_calls: list[tuple[int, int | None]] = []
        self.start_calls: list[tuple[int, int | None, int]] = []
        self.stop_calls: list[tuple[int, int | None]] = []

    def acquire(self, channel: int, lens: int | None) -> FakeLivestreamHandle | None:
        self.acquire_calls.append((channel, lens))
        return self.handle if self.acquirable else None

    async def start(self, channel: int, lens: int | None, segment_length_ms: int) -> bool:
        self.start_calls.append((channel, lens, segment_length_ms))
        return self.start_result

    def stop(self, channel: int, lens: int | None) -> None:
        self.stop_calls.append((channel, lens))


@dataclass
class FakeRecordingConfiguration:
    """Recording configuration with a settable fragment length."""

    fragment_length_ms: int | None = None


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def init_segment() -> bytes:
    """Initialization segment bytes."""
    return INIT_SEGMENT


@pytest.fixture
def make_livestream_handle() -> Callable[..., FakeLivestreamHandle]:
    """Factory for additional livestream handles."""
    return FakeLivestreamHandle


@pytest.fixture
def make_livestream_source() -> Callable[..., FakeLivestreamSource]:
    """Factory for additional livestream sources."""
    return FakeLivestreamSource


@pytest.fixture
def livestream_handle(init_segment: bytes) -> FakeLivestreamHandle:
    """Livestream handle that already has its initialization segment."""
    return FakeLivestreamHandle(init_segment=init_segment)


@pytest.fixture
def livestream_source(livestream_handle: FakeLivestreamHandle) -> FakeLivestreamSource:
    """Livestream source returning the shared handle."""
    return FakeLivestreamSource(handle=livestream_handle)


@pytest.fixture
def recording_config() -> FakeRecordingConfiguration:
    """Recording configuration with no negotiated fragment length."""
    return FakeRecordingConfiguration()


@pytest.fixture
def recovery() -> MagicMock:
    """Connection recovery mock with async reset_connection()."""
    mock = MagicMock()
    mock.reset_connection = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def timeshift_config() -> TimeshiftConfig:
    """100ms segments, 500ms window, very short initialization wait."""
    return TimeshiftConfig(
        segment_duration_ms=100,
        buffer_length_ms=500,
        init_segment_wait_s=0.01,
    )


@pytest.fixture
def timeshift_buffer(
    livestream_source: FakeLivestreamSource,
    timeshift_config: TimeshiftConfig,
    recording_config: FakeRecordingConfiguration,
    recovery: MagicMock,
) -> TimeshiftBuffer:
    """TimeshiftBuffer wired to the fakes."""
    return TimeshiftBuffer(
        livestream=livestream_source,
        config=timeshift_config,
        recording_config=recording_config,
        recovery=recovery,
        camera_id="test-camera",
    )


@pytest.fixture
def segments() -> list[bytes]:
    """Seven distinct segments S1..S7."""
    return [f"S{i}".encode() for i in range(1, 8)]


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client fixture."""
    from timeshift_service.main import app

    return TestClient(app)
