"""
Data models for external service payloads.

Normalized, immutable views of what the cart source, product catalog and
delivery channel return. Each model has a from_json() constructor mirroring
the service's JSON fields, so the rest of the agent never touches raw dicts.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Money:
    """
    Fixed-point currency amount: whole units plus nanos (1e-9 units).

    Same shape as the catalog's price_usd field; currency is not tracked.
    """

    units: int = 0
    nanos: int = 0

    @classmethod
    def from_json(cls, raw: dict[str, Any] | None) -> "Money | None":
        """Build from {"units", "nanos"}; None stays None. Units may arrive as strings."""
        if raw is None:
            return None
        return cls(units=int(raw.get("units") or 0), nanos=int(raw.get("nanos") or 0))


@dataclass(frozen=True)
class CartItem:
    """One cart line: product id and quantity."""

    product_id: str
    quantity: int

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int):
            raise TypeError(f"quantity must be an int, got {self.quantity!r}")
        if self.quantity < 1:
            raise ValueError(f"quantity must be >= 1 for {self.product_id}, got {self.quantity}")

    @classmethod
    def from_json(cls, item: dict[str, Any]) -> "CartItem":
        return cls(product_id=str(item["product_id"]), quantity=int(item["quantity"]))

    def to_dict(self) -> dict[str, Any]:
        return {"product_id": self.product_id, "quantity": self.quantity}


@dataclass(frozen=True)
class CartSnapshot:
    """
    A user's cart as fetched on one tick. Transient; not owned by the agent.
    """

    user_id: str
    items: tuple[CartItem, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.items

    @classmethod
    def empty(cls, user_id: str) -> "CartSnapshot":
        return cls(user_id=user_id, items=())

    @classmethod
    def from_json(cls, user_id: str, data: dict[str, Any]) -> "CartSnapshot":
        """Build from {"user_id", "items": [...]}; the requested user_id wins over the payload's."""
        items = tuple(CartItem.from_json(i) for i in (data.get("items") or []))
        return cls(user_id=user_id, items=items)


@dataclass(frozen=True)
class ProductRecord:
    """Catalog entry: unit price and category labels."""

    product_id: str
    price: Money | None
    categories: tuple[str, ...] = field(default_factory=tuple)
    name: str | None = None

    @classmethod
    def from_json(cls, product_id: str, data: dict[str, Any]) -> "ProductRecord":
        price_raw = data.get("price_usd", data.get("price"))
        return cls(
            product_id=str(data.get("id") or product_id),
            price=Money.from_json(price_raw),
            categories=tuple(str(c) for c in (data.get("categories") or [])),
            name=data.get("name"),
        )


@dataclass(frozen=True)
class DeliveryAck:
    """Delivery channel acknowledgement."""

    accepted: bool
    message_id: str | None = None
