"""
External service clients.

Narrow request/response contracts for the cart source, product catalog and
delivery channel, plus the normalized payload models they return. HTTP
implementations share one httpx.AsyncClient owned by the runtime.
"""

from cartwatch.clients.cart_source import CartSource, HttpCartSource
from cartwatch.clients.delivery import DeliveryChannel, HttpEmailChannel
from cartwatch.clients.models import (
    CartItem,
    CartSnapshot,
    DeliveryAck,
    Money,
    ProductRecord,
)
from cartwatch.clients.product_catalog import HttpProductCatalog, ProductSource

__all__ = [
    "CartItem",
    "CartSnapshot",
    "CartSource",
    "DeliveryAck",
    "DeliveryChannel",
    "HttpCartSource",
    "HttpEmailChannel",
    "HttpProductCatalog",
    "Money",
    "ProductRecord",
    "ProductSource",
]
