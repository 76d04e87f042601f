"""
Data models for cart enrichment.

CartSummary is what the enricher produces (value + categories); the
scheduler merges in the inactivity duration to get the EnrichedProfile
handed to the decision engine. Both are transient: built per tick, consumed
immediately, then dropped.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from cartwatch.clients.models import CartItem


@dataclass(frozen=True)
class CartSummary:
    """Enriched cart without inactivity: total value (2 dp) and category set."""

    user_id: str
    total_value: Decimal
    categories: frozenset[str]
    items: tuple[CartItem, ...]

    def with_inactivity(self, inactivity_seconds: int) -> "EnrichedProfile":
        return EnrichedProfile(
            user_id=self.user_id,
            inactivity_seconds=inactivity_seconds,
            total_value=self.total_value,
            categories=self.categories,
            items=self.items,
        )


@dataclass(frozen=True)
class EnrichedProfile:
    """
    Snapshot handed to the decision engine.

    inactivity_seconds: >= 0, whole seconds since the cart was last seen non-empty.
    total_value: >= 0, rounded to 2 fractional digits.
    categories: deduplicated category labels; order irrelevant.
    items: raw cart lines as fetched.
    """

    user_id: str
    inactivity_seconds: int
    total_value: Decimal
    categories: frozenset[str]
    items: tuple[CartItem, ...]

    def __post_init__(self) -> None:
        if self.inactivity_seconds < 0:
            raise ValueError("inactivity_seconds must be >= 0")

    @property
    def item_count(self) -> int:
        return sum(i.quantity for i in self.items)

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe view (value as string to keep it exact); categories sorted for stable output."""
        return {
            "user_id": self.user_id,
            "inactivity_seconds": self.inactivity_seconds,
            "cart_value": str(self.total_value),
            "categories": sorted(self.categories),
            "items": [i.to_dict() for i in self.items],
        }
