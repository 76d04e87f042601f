"""
Rule-based discount strategy: deterministic, explainable, no external calls.

Rules (in order):
1. Cart value below min_cart_value -> decline (cart_value_too_low).
2. Cart value at or above high_value_threshold -> high_value_percentage
   (high_value_cart); otherwise base_percentage (price_sensitive_user).
3. Inactivity at or above long_inactivity_sec -> add long_inactivity_bonus
   (long_inactivity).
4. Cap at max_percentage.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from cartwatch.decision.models import DiscountDecision
from cartwatch.enrichment.models import EnrichedProfile

DEFAULT_BASE_PERCENTAGE = 15
DEFAULT_MIN_CART_VALUE = Decimal("1.00")
DEFAULT_HIGH_VALUE_THRESHOLD = Decimal("200.00")
DEFAULT_HIGH_VALUE_PERCENTAGE = 10
DEFAULT_LONG_INACTIVITY_SEC = 600
DEFAULT_LONG_INACTIVITY_BONUS = 5
DEFAULT_MAX_PERCENTAGE = 30

REASON_PRICE_SENSITIVE = "price_sensitive_user"
REASON_HIGH_VALUE = "high_value_cart"
REASON_LONG_INACTIVITY = "long_inactivity"
REASON_LOW_VALUE = "cart_value_too_low"


@dataclass(frozen=True)
class RuleConfig:
    """Thresholds for the rule-based strategy."""

    base_percentage: int = DEFAULT_BASE_PERCENTAGE
    min_cart_value: Decimal = DEFAULT_MIN_CART_VALUE
    high_value_threshold: Decimal = DEFAULT_HIGH_VALUE_THRESHOLD
    high_value_percentage: int = DEFAULT_HIGH_VALUE_PERCENTAGE
    long_inactivity_sec: int = DEFAULT_LONG_INACTIVITY_SEC
    long_inactivity_bonus: int = DEFAULT_LONG_INACTIVITY_BONUS
    max_percentage: int = DEFAULT_MAX_PERCENTAGE


class RuleBasedStrategy:
    """Deterministic discount policy over the enriched profile."""

    name = "rules"

    def __init__(self, config: RuleConfig | None = None) -> None:
        self._config = config or RuleConfig()

    async def decide(self, profile: EnrichedProfile) -> DiscountDecision:
        return self.evaluate(profile)

    def evaluate(self, profile: EnrichedProfile) -> DiscountDecision:
        cfg = self._config
        if profile.total_value < cfg.min_cart_value:
            return DiscountDecision.decline(REASON_LOW_VALUE)

        if profile.total_value >= cfg.high_value_threshold:
            percentage = cfg.high_value_percentage
            reasons = [REASON_HIGH_VALUE]
        else:
            percentage = cfg.base_percentage
            reasons = [REASON_PRICE_SENSITIVE]

        if profile.inactivity_seconds >= cfg.long_inactivity_sec:
            percentage += cfg.long_inactivity_bonus
            reasons.append(REASON_LONG_INACTIVITY)

        percentage = max(0, min(percentage, cfg.max_percentage))
        if percentage == 0:
            return DiscountDecision.decline("+".join(reasons))
        return DiscountDecision(should_send=True, percentage=percentage, reason="+".join(reasons))
