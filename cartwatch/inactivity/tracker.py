"""
Inactivity tracker: per-user "last seen with a non-empty cart" timestamps.

An explicit, owned store passed into the scheduler (one per process, a fresh
one per test). One entry per user currently holding a non-empty cart; the
entry is dropped as soon as an empty cart is observed.

Inactivity is measured from the previous observation of a non-empty cart,
not from the last cart modification, and every observation moves the entry
forward. That conflates "still has items" with "actively shopping": a known
approximation, kept as is.

Concurrency: ticks may overlap, so calls for the same user are serialized
with a per-user asyncio.Lock. Different users never contend.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable

from cartwatch.cartwatch_logging import get_logger

logger = get_logger(__name__)

MS_PER_SECOND = 1000


def wall_clock_ms() -> int:
    """Current wall-clock time in integer milliseconds."""
    return int(time.time() * MS_PER_SECOND)


class InactivityTracker:
    """
    Maps user id -> last-active timestamp (ms).

    clock: zero-arg callable returning "now" in ms; injectable for tests.
    """

    def __init__(self, clock: Callable[[], int] = wall_clock_ms) -> None:
        self._clock = clock
        self._last_active: dict[str, int] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, user_id: str) -> asyncio.Lock:
        # Locks are kept for the process lifetime; the candidate set is fixed
        # so this stays bounded.
        lock = self._locks.get(user_id)
        if lock is None:
            lock = self._locks[user_id] = asyncio.Lock()
        return lock

    async def record_cart_empty(self, user_id: str) -> None:
        """Forget the user's entry if present. Idempotent."""
        async with self._lock_for(user_id):
            if self._last_active.pop(user_id, None) is not None:
                logger.debug("inactivity_entry_cleared", user_id=user_id)

    async def record_cart_active(self, user_id: str, now: int | None = None) -> int:
        """
        Record a non-empty cart observation and return inactivity in whole seconds.

        Returns floor((now - previous) / 1000) when an entry exists, else 0.
        Either way the entry is overwritten with now before returning, so the
        first observation of a cart always reports 0. A clock that goes
        backwards yields 0, never a negative duration.
        """
        async with self._lock_for(user_id):
            now_ms = self._clock() if now is None else int(now)
            previous = self._last_active.get(user_id)
            self._last_active[user_id] = now_ms
        if previous is None:
            logger.debug("inactivity_entry_created", user_id=user_id, last_active_ms=now_ms)
            return 0
        return max(0, now_ms - previous) // MS_PER_SECOND

    def last_seen(self, user_id: str) -> int | None:
        """Last-active timestamp (ms) for the user, or None when untracked."""
        return self._last_active.get(user_id)

    def tracked_users(self) -> list[str]:
        return sorted(self._last_active)

    def __contains__(self, user_id: object) -> bool:
        return user_id in self._last_active

    def __len__(self) -> int:
        return len(self._last_active)
