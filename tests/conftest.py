"""
Pytest fixtures for cartwatch tests.

In-memory fakes for every external collaborator (cart source, product
catalog, delivery channel, discount strategy) plus a controllable clock, so
scheduler scenarios run deterministically without network access.
"""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from cartwatch.agent_worker.candidates import StaticCandidateSource
from cartwatch.agent_worker.runner import CartAbandonmentScheduler, SchedulerConfig
from cartwatch.clients.models import CartItem, CartSnapshot, DeliveryAck, Money, ProductRecord
from cartwatch.core.exceptions import CartFetchError, DeliveryError, ProductFetchError
from cartwatch.decision.engine import DecisionEngine
from cartwatch.decision.models import DiscountDecision
from cartwatch.enrichment.enricher import CartEnricher
from cartwatch.inactivity.tracker import InactivityTracker
from cartwatch.notify.notifier import DiscountNotifier


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, seconds: float) -> None:
        self.now_ms += int(seconds * 1000)


class FakeCartSource:
    """Carts keyed by user id: list of (product_id, quantity), or an exception to raise."""

    def __init__(self) -> None:
        self.carts: dict[str, Any] = {}
        self.calls: list[str] = []
        self.delay_sec = 0.0
        self.in_flight = 0
        self.max_in_flight = 0

    def set_cart(self, user_id: str, *lines: tuple[str, int]) -> None:
        self.carts[user_id] = list(lines)

    def fail(self, user_id: str, error: Exception | None = None) -> None:
        self.carts[user_id] = error or CartFetchError(f"cart service down for {user_id}")

    async def get_cart(self, user_id: str) -> CartSnapshot:
        self.calls.append(user_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay_sec:
                await asyncio.sleep(self.delay_sec)
            entry = self.carts.get(user_id)
            if isinstance(entry, Exception):
                raise entry
            if not entry:
                return CartSnapshot.empty(user_id)
            return CartSnapshot(
                user_id=user_id,
                items=tuple(CartItem(product_id=p, quantity=q) for p, q in entry),
            )
        finally:
            self.in_flight -= 1


class FakeProductSource:
    """Catalog keyed by product id; ids in `failing` raise ProductFetchError."""

    def __init__(self) -> None:
        self.products: dict[str, ProductRecord] = {}
        self.failing: set[str] = set()
        self.delays: dict[str, float] = {}
        self.calls: list[str] = []
        self.cancelled: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def add(self, product_id: str, units: int, nanos: int = 0, categories: tuple[str, ...] = ()) -> None:
        self.products[product_id] = ProductRecord(
            product_id=product_id,
            price=Money(units=units, nanos=nanos),
            categories=categories,
        )

    async def get_product(self, product_id: str) -> ProductRecord:
        self.calls.append(product_id)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(product_id, 0.01))
            if product_id in self.failing or product_id not in self.products:
                raise ProductFetchError(product_id, "catalog returned 503", status_code=503)
            return self.products[product_id]
        except asyncio.CancelledError:
            self.cancelled.append(product_id)
            raise
        finally:
            self.in_flight -= 1


class RecordingChannel:
    """Delivery channel that records payloads; set fail=True to raise DeliveryError."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self.attempts = 0
        self.fail = False

    async def send(self, payload: dict[str, Any]) -> DeliveryAck:
        self.attempts += 1
        if self.fail:
            raise DeliveryError(f"email service returned 503 for {payload.get('email')}", status_code=503)
        self.sent.append(payload)
        return DeliveryAck(accepted=True, message_id=f"msg-{len(self.sent)}")


class StubStrategy:
    """Discount strategy returning a fixed decision and recording profiles."""

    name = "stub"

    def __init__(self, decision: DiscountDecision | None = None) -> None:
        self.decision = decision or DiscountDecision(should_send=True, percentage=15, reason="price_sensitive_user")
        self.profiles: list[Any] = []
        self.delay_sec = 0.0
        self.error: Exception | None = None

    async def decide(self, profile):
        self.profiles.append(profile)
        if self.delay_sec:
            await asyncio.sleep(self.delay_sec)
        if self.error is not None:
            raise self.error
        return self.decision


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tracker(clock) -> InactivityTracker:
    """Fresh tracker per test, driven by the fake clock."""
    return InactivityTracker(clock=clock)


@pytest.fixture
def carts() -> FakeCartSource:
    return FakeCartSource()


@pytest.fixture
def products() -> FakeProductSource:
    return FakeProductSource()


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def strategy() -> StubStrategy:
    return StubStrategy()


@pytest.fixture
def make_scheduler(carts, products, channel, strategy, tracker):
    """Factory: scheduler over the fakes for the given candidate ids."""

    def _make(
        *user_ids: str,
        decision_timeout_sec: float = 1.0,
        config: SchedulerConfig | None = None,
    ) -> CartAbandonmentScheduler:
        return CartAbandonmentScheduler(
            candidates=StaticCandidateSource(user_ids or ("42",)),
            carts=carts,
            tracker=tracker,
            enricher=CartEnricher(products),
            decisions=DecisionEngine(strategy, timeout_sec=decision_timeout_sec),
            notifier=DiscountNotifier(channel),
            config=config or SchedulerConfig(),
        )

    return _make
