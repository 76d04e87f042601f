"""
Discount decision model.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

MIN_PERCENTAGE = 0
MAX_PERCENTAGE = 100


@dataclass(frozen=True)
class DiscountDecision:
    """
    Whether to send a discount, how much, and why.

    percentage: integer in [0, 100]; 0 whenever should_send is False.
    reason: short machine-friendly label (e.g. price_sensitive_user).
    """

    should_send: bool
    percentage: int
    reason: str

    def __post_init__(self) -> None:
        if isinstance(self.percentage, bool) or not isinstance(self.percentage, int):
            raise ValueError(f"percentage must be an int, got {self.percentage!r}")
        if not (MIN_PERCENTAGE <= self.percentage <= MAX_PERCENTAGE):
            raise ValueError(f"percentage out of range [0, 100]: {self.percentage}")
        if self.should_send and self.percentage == 0:
            raise ValueError("a discount to send needs a positive percentage")

    @classmethod
    def decline(cls, reason: str) -> "DiscountDecision":
        return cls(should_send=False, percentage=0, reason=reason)

    def to_dict(self) -> dict[str, Any]:
        return {
            "should_send": self.should_send,
            "percentage": self.percentage,
            "reason": self.reason,
        }
