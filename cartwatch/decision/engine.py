"""
Decision engine: pluggable discount strategy behind a failure-safe call.

decide(profile) never raises for strategy failures: a timeout yields
decline("analysis_timeout"), any other error decline("analysis_failed").
The inactivity gate (inactivity > threshold) is the scheduler's job; the
engine assumes its input already passed it.
"""

from __future__ import annotations

import asyncio
from typing import Protocol

import httpx

from cartwatch.cartwatch_logging import get_logger
from cartwatch.decision.models import DiscountDecision
from cartwatch.enrichment.models import EnrichedProfile

logger = get_logger(__name__)

DEFAULT_DECISION_TIMEOUT_SEC = 10.0
REASON_TIMEOUT = "analysis_timeout"
REASON_FAILED = "analysis_failed"


class DiscountStrategy(Protocol):
    name: str

    async def decide(self, profile: EnrichedProfile) -> DiscountDecision: ...


class DecisionEngine:
    """Runs a DiscountStrategy with a timeout and maps failures to "do not send"."""

    def __init__(
        self,
        strategy: DiscountStrategy,
        *,
        timeout_sec: float = DEFAULT_DECISION_TIMEOUT_SEC,
    ) -> None:
        if timeout_sec <= 0:
            raise ValueError("timeout_sec must be positive")
        self._strategy = strategy
        self._timeout_sec = timeout_sec

    @property
    def strategy_name(self) -> str:
        return getattr(self._strategy, "name", type(self._strategy).__name__)

    async def decide(self, profile: EnrichedProfile) -> DiscountDecision:
        try:
            decision = await asyncio.wait_for(
                self._strategy.decide(profile), timeout=self._timeout_sec
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.warning(
                "decision_timeout",
                user_id=profile.user_id,
                strategy=self.strategy_name,
                timeout_sec=self._timeout_sec,
            )
            return DiscountDecision.decline(REASON_TIMEOUT)
        except Exception as e:
            logger.warning(
                "decision_failed",
                user_id=profile.user_id,
                strategy=self.strategy_name,
                error=str(e),
            )
            return DiscountDecision.decline(REASON_FAILED)

        logger.info(
            "decision_made",
            user_id=profile.user_id,
            strategy=self.strategy_name,
            **decision.to_dict(),
            inactivity_seconds=profile.inactivity_seconds,
            cart_value=str(profile.total_value),
        )
        return decision
