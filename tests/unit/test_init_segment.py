"""
Unit tests for InitSegmentResolver.

Validates immediate return, the bounded wait with a single re-check,
cancellation, and byte equality checks.
"""

from __future__ import annotations

import asyncio

import pytest

from timeshift_service.timeshift.init_segment import InitSegmentResolver


class TestInitSegmentResolverResolve:
    """Tests for resolve()."""

    @pytest.mark.asyncio
    async def test_returns_immediately_when_available(self, make_livestream_handle) -> None:
        resolver = InitSegmentResolver(wait_s=5.0)
        handle = make_livestream_handle(init_segment=b"init")

        result = await asyncio.wait_for(resolver.resolve(handle), timeout=1.0)

        assert result == b"init"
        assert resolver.last_wait_s == 0.0

    @pytest.mark.asyncio
    async def test_returns_none_after_wait(self, make_livestream_handle) -> None:
        resolver = InitSegmentResolver(wait_s=0.02)
        handle = make_livestream_handle()

        result = await resolver.resolve(handle)

        assert result is None
        assert resolver.last_wait_s >= 0.01

    @pytest.mark.asyncio
    async def test_rechecks_after_wait(self, make_livestream_handle) -> None:
        resolver = InitSegmentResolver(wait_s=0.05)
        handle = make_livestream_handle()

        async def deliver_later() -> None:
            await asyncio.sleep(0.01)
            handle.init_segment = b"late-init"

        task = asyncio.create_task(deliver_later())
        result = await resolver.resolve(handle)
        await task

        assert result == b"late-init"

    @pytest.mark.asyncio
    async def test_none_handle(self) -> None:
        assert await InitSegmentResolver(wait_s=1.0).resolve(None) is None

    @pytest.mark.asyncio
    async def test_cancel_ends_wait_early(self, make_livestream_handle) -> None:
        resolver = InitSegmentResolver(wait_s=10.0)
        handle = make_livestream_handle()

        async def cancel_soon() -> None:
            await asyncio.sleep(0.01)
            resolver.cancel()

        task = asyncio.create_task(cancel_soon())
        result = await asyncio.wait_for(resolver.resolve(handle), timeout=1.0)
        await task

        assert result is None
        assert resolver.last_wait_s < 1.0

    @pytest.mark.asyncio
    async def test_previous_cancel_does_not_skip_next_wait(self, make_livestream_handle) -> None:
        resolver = InitSegmentResolver(wait_s=0.05)
        resolver.cancel()

        await resolver.resolve(make_livestream_handle())

        assert resolver.last_wait_s >= 0.04

    @pytest.mark.asyncio
    async def test_empty_init_segment_treated_as_missing(self, make_livestream_handle) -> None:
        resolver = InitSegmentResolver(wait_s=0.01)

        assert await resolver.resolve(make_livestream_handle(init_segment=b"")) is None


class TestInitSegmentResolverEquality:
    """Tests for is_init_segment()."""

    def test_exact_match(self, make_livestream_handle) -> None:
        handle = make_livestream_handle(init_segment=b"\x00init")

        assert InitSegmentResolver.is_init_segment(handle, b"\x00init") is True

    def test_different_bytes(self, make_livestream_handle) -> None:
        handle = make_livestream_handle(init_segment=b"\x00init")

        assert InitSegmentResolver.is_init_segment(handle, b"\x00init\x00") is False

    def test_unknown_init_segment(self, make_livestream_handle) -> None:
        handle = make_livestream_handle()

        assert InitSegmentResolver.is_init_segment(handle, b"anything") is False
        assert InitSegmentResolver.is_init_segment(None, b"anything") is False
