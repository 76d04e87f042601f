"""
Pytest tests for the inactivity tracker: first sighting, elapsed seconds, eviction, per-key serialization.
"""

from __future__ import annotations

import asyncio

import pytest

from cartwatch.inactivity.tracker import InactivityTracker


@pytest.mark.asyncio
async def test_first_sighting_reports_zero_and_tracks(tracker, clock):
    """A never-seen user reports 0 seconds and gets an entry at now."""
    assert "u1" not in tracker
    assert await tracker.record_cart_active("u1") == 0
    assert "u1" in tracker
    assert tracker.last_seen("u1") == clock.now_ms


@pytest.mark.asyncio
async def test_elapsed_is_floored_seconds_and_entry_moves(tracker):
    """Entry at T, call at T+61.999s -> 61, entry now T+61.999s."""
    t0 = 1_000_000
    await tracker.record_cart_active("u1", now=t0)
    assert await tracker.record_cart_active("u1", now=t0 + 61_999) == 61
    assert tracker.last_seen("u1") == t0 + 61_999
    # Measured from the previous observation, not the first one
    assert await tracker.record_cart_active("u1", now=t0 + 62_500) == 0


@pytest.mark.asyncio
async def test_uses_injected_clock(tracker, clock):
    await tracker.record_cart_active("u1")
    clock.advance(90)
    assert await tracker.record_cart_active("u1") == 90


@pytest.mark.asyncio
async def test_empty_cart_evicts_and_resets(tracker, clock):
    """record_cart_empty removes the entry; the next active observation reports 0 again."""
    await tracker.record_cart_active("u1")
    clock.advance(120)
    await tracker.record_cart_empty("u1")
    assert "u1" not in tracker
    assert tracker.last_seen("u1") is None
    clock.advance(120)
    assert await tracker.record_cart_active("u1") == 0


@pytest.mark.asyncio
async def test_empty_is_idempotent(tracker):
    await tracker.record_cart_empty("ghost")
    await tracker.record_cart_empty("ghost")
    assert len(tracker) == 0


@pytest.mark.asyncio
async def test_clock_going_backwards_never_negative(tracker):
    await tracker.record_cart_active("u1", now=10_000)
    assert await tracker.record_cart_active("u1", now=5_000) == 0


@pytest.mark.asyncio
async def test_users_are_independent(tracker, clock):
    await tracker.record_cart_active("a")
    clock.advance(30)
    await tracker.record_cart_active("b")
    clock.advance(45)
    assert await tracker.record_cart_active("a") == 75
    assert await tracker.record_cart_active("b") == 45
    assert tracker.tracked_users() == ["a", "b"]


@pytest.mark.asyncio
async def test_concurrent_same_user_calls_are_serialized():
    """Overlapping observations of one user: exactly one sees a first sighting, each later one sees the gap."""
    ticks = iter(range(0, 100_000, 1_000))
    tracker = InactivityTracker(clock=lambda: next(ticks))
    results = await asyncio.gather(*(tracker.record_cart_active("u1") for _ in range(10)))
    assert sorted(results) == [0] + [1] * 9
    assert tracker.last_seen("u1") == 9_000
