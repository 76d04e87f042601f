"""
Cart-abandonment scheduler: the periodic polling loop.

Every interval_sec a new tick is dispatched as its own asyncio task; the
timer never waits for the previous tick, so ticks may overlap. Within a
tick every candidate user runs concurrently through:

    cart source -> inactivity tracker -> cart enricher
        -> (inactivity > threshold) decision engine -> notifier

Failures are isolated per user: anything raised while processing one user
is logged and recorded as a "failed" outcome; other users in the same tick,
and later ticks, are unaffected. There is no retry beyond the next tick.
"""

from __future__ import annotations

import asyncio
import time
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

from cartwatch.agent_worker.candidates import CandidateSource
from cartwatch.cartwatch_logging import get_logger
from cartwatch.clients.cart_source import CartSource
from cartwatch.core.exceptions import EnrichmentError
from cartwatch.decision.engine import DecisionEngine
from cartwatch.enrichment.enricher import CartEnricher
from cartwatch.inactivity.tracker import InactivityTracker
from cartwatch.notify.notifier import DEFAULT_RECIPIENT_TEMPLATE, DiscountNotifier, derive_recipient

logger = get_logger(__name__)

DEFAULT_INTERVAL_SEC = 30.0
DEFAULT_INACTIVITY_THRESHOLD_SEC = 60
SHUTDOWN_JOIN_TIMEOUT_SEC = 15.0


class SchedulerState(str, Enum):
    IDLE = "idle"
    TICKING = "ticking"


class UserOutcome(str, Enum):
    """What happened to one user on one tick."""

    EMPTY = "empty"
    BELOW_THRESHOLD = "below_threshold"
    DECLINED = "declined"
    NOTIFIED = "notified"
    FAILED = "failed"


@dataclass
class SchedulerConfig:
    """
    interval_sec: seconds between tick starts (fixed rate).
    inactivity_threshold_sec: decision engine runs only when inactivity is strictly greater.
    recipient_template: format string with {user_id} for the offer's recipient address.
    shutdown_join_timeout_sec: how long run() waits for in-flight ticks on stop.
    """

    interval_sec: float = DEFAULT_INTERVAL_SEC
    inactivity_threshold_sec: int = DEFAULT_INACTIVITY_THRESHOLD_SEC
    recipient_template: str = DEFAULT_RECIPIENT_TEMPLATE
    shutdown_join_timeout_sec: float = SHUTDOWN_JOIN_TIMEOUT_SEC

    def __post_init__(self) -> None:
        if self.interval_sec <= 0:
            raise ValueError("interval_sec must be positive")
        if self.inactivity_threshold_sec < 0:
            raise ValueError("inactivity_threshold_sec must be >= 0")


@dataclass
class TickReport:
    """Summary of one tick: outcome counts per user and wall duration."""

    tick: int
    users: int
    outcomes: dict[str, int]
    duration_sec: float
    finished_at: float

    def count(self, outcome: UserOutcome) -> int:
        return self.outcomes.get(outcome.value, 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tick": self.tick,
            "users": self.users,
            "outcomes": dict(self.outcomes),
            "duration_sec": self.duration_sec,
            "finished_at": self.finished_at,
        }


@dataclass
class WorkerState:
    """Mutable counters for heartbeat and the status API."""

    tick_count: int = 0
    completed_ticks: int = 0
    processed_count: int = 0
    error_count: int = 0
    notified_count: int = 0
    last_error: str | None = None
    last_tick: TickReport | None = field(default=None)


class CartAbandonmentScheduler:
    """
    Drives the per-user pipeline on a fixed interval.

    All collaborators are injected; the tracker is the only state that
    survives between ticks.
    """

    def __init__(
        self,
        *,
        candidates: CandidateSource,
        carts: CartSource,
        tracker: InactivityTracker,
        enricher: CartEnricher,
        decisions: DecisionEngine,
        notifier: DiscountNotifier,
        config: SchedulerConfig | None = None,
    ) -> None:
        self._candidates = candidates
        self._carts = carts
        self._tracker = tracker
        self._enricher = enricher
        self._decisions = decisions
        self._notifier = notifier
        self._config = config or SchedulerConfig()
        self._state = WorkerState()
        self._active_ticks = 0
        self._tasks: set[asyncio.Task[TickReport | None]] = set()

    @property
    def config(self) -> SchedulerConfig:
        return self._config

    @property
    def tracker(self) -> InactivityTracker:
        return self._tracker

    @property
    def worker_state(self) -> WorkerState:
        return self._state

    @property
    def state(self) -> SchedulerState:
        return SchedulerState.TICKING if self._active_ticks > 0 else SchedulerState.IDLE

    def snapshot(self) -> dict[str, Any]:
        """Point-in-time view for heartbeat logs and the status API."""
        s = self._state
        return {
            "state": self.state.value,
            "tick_count": s.tick_count,
            "completed_ticks": s.completed_ticks,
            "in_flight_ticks": self._active_ticks,
            "tracked_users": len(self._tracker),
            "processed_count": s.processed_count,
            "error_count": s.error_count,
            "notified_count": s.notified_count,
            "last_error": s.last_error,
            "last_tick": s.last_tick.to_dict() if s.last_tick else None,
        }

    def _record_failure(self, error: BaseException) -> None:
        self._state.error_count += 1
        self._state.last_error = f"{type(error).__name__}: {error}"

    async def _run_pipeline(self, user_id: str) -> UserOutcome:
        cart = await self._carts.get_cart(user_id)
        if cart.is_empty:
            await self._tracker.record_cart_empty(user_id)
            return UserOutcome.EMPTY

        inactivity = await self._tracker.record_cart_active(user_id)

        try:
            summary = await self._enricher.enrich(cart)
        except EnrichmentError as e:
            self._record_failure(e)
            logger.warning(
                "enrichment_failed",
                product_id=e.product_id,
                error=str(e.cause),
            )
            return UserOutcome.FAILED

        threshold = self._config.inactivity_threshold_sec
        if inactivity <= threshold:
            logger.debug(
                "decision_skipped_below_threshold",
                inactivity_seconds=inactivity,
                threshold_sec=threshold,
                cart_value=str(summary.total_value),
            )
            return UserOutcome.BELOW_THRESHOLD

        decision = await self._decisions.decide(summary.with_inactivity(inactivity))
        if not decision.should_send:
            return UserOutcome.DECLINED

        recipient = derive_recipient(user_id, self._config.recipient_template)
        await self._notifier.notify(recipient, decision)
        self._state.notified_count += 1
        return UserOutcome.NOTIFIED

    async def process_user(self, tick: int, user_id: str) -> UserOutcome:
        """Run the pipeline for one user. Never raises (except on cancellation)."""
        with structlog.contextvars.bound_contextvars(tick=tick, user_id=user_id):
            try:
                return await self._run_pipeline(user_id)
            except Exception as e:
                self._record_failure(e)
                logger.warning(
                    "user_processing_failed",
                    error=str(e),
                    error_type=type(e).__name__,
                    exc_info=True,
                )
                return UserOutcome.FAILED

    async def run_tick(self, tick: int | None = None) -> TickReport:
        """
        Poll every candidate once. Returns the tick's report.

        Raises only if the candidate source itself fails; per-user errors
        are folded into the "failed" outcome count.
        """
        if tick is None:
            self._state.tick_count += 1
            tick = self._state.tick_count
        started = time.monotonic()
        self._active_ticks += 1
        try:
            users = list(dict.fromkeys(await self._candidates.get_candidates()))
            outcomes = await asyncio.gather(*(self.process_user(tick, u) for u in users))
        finally:
            self._active_ticks -= 1

        counts = Counter(o.value for o in outcomes)
        report = TickReport(
            tick=tick,
            users=len(users),
            outcomes=dict(counts),
            duration_sec=round(time.monotonic() - started, 3),
            finished_at=time.time(),
        )
        self._state.completed_ticks += 1
        self._state.processed_count += len(users) - report.count(UserOutcome.FAILED)
        self._state.last_tick = report
        logger.info("scheduler_tick_done", **report.to_dict())
        return report

    async def _guarded_tick(self, tick: int) -> TickReport | None:
        try:
            return await self.run_tick(tick)
        except asyncio.CancelledError:
            logger.info("scheduler_tick_cancelled", tick=tick)
            raise
        except Exception as e:
            self._record_failure(e)
            logger.exception("scheduler_tick_failed", tick=tick, error=str(e))
            return None

    def spawn_tick(self) -> asyncio.Task[TickReport | None]:
        """Start the next tick in the background and return its task."""
        self._state.tick_count += 1
        tick = self._state.tick_count
        task = asyncio.create_task(self._guarded_tick(tick), name=f"cartwatch-tick-{tick}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _log_heartbeat(self) -> None:
        snap = self.snapshot()
        snap.pop("last_tick", None)
        logger.info("scheduler_heartbeat", **snap)

    async def drain(self, timeout_sec: float | None = None) -> None:
        """Wait for in-flight ticks; cancel whatever is still running after the timeout."""
        if not self._tasks:
            return
        timeout = self._config.shutdown_join_timeout_sec if timeout_sec is None else timeout_sec
        _, pending = await asyncio.wait(set(self._tasks), timeout=timeout)
        if pending:
            logger.warning(
                "scheduler_shutdown_timeout",
                timeout_sec=timeout,
                cancelled_ticks=len(pending),
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

    async def run(self, stop_event: asyncio.Event) -> None:
        """
        Tick at a fixed rate until stop_event is set, then drain in-flight ticks.

        The first tick starts immediately. If the loop falls behind (e.g. the
        event loop was blocked) the schedule resyncs to now rather than
        firing a burst of catch-up ticks.
        """
        loop = asyncio.get_running_loop()
        interval = self._config.interval_sec
        logger.info(
            "scheduler_started",
            interval_sec=interval,
            inactivity_threshold_sec=self._config.inactivity_threshold_sec,
        )
        next_at = loop.time()
        while not stop_event.is_set():
            self.spawn_tick()
            self._log_heartbeat()
            next_at += interval
            delay = next_at - loop.time()
            if delay < 0:
                next_at = loop.time()
                delay = 0.0
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass
        await self.drain()
        logger.info("scheduler_stopped", tick_count=self._state.tick_count)
