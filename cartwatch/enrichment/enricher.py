"""
Cart enricher: price every cart line and collect its categories.

All product fetches for one cart run concurrently inside an asyncio.TaskGroup.
The first failure cancels the remaining fetches and the whole enrichment
fails with EnrichmentError; there is no partial result. Callers must skip
empty carts: enriching one raises InvariantViolation.
"""

from __future__ import annotations

import asyncio
from decimal import Decimal

from cartwatch.cartwatch_logging import get_logger
from cartwatch.clients.models import CartItem, CartSnapshot, ProductRecord
from cartwatch.clients.product_catalog import ProductSource
from cartwatch.core.exceptions import EnrichmentError, InvariantViolation
from cartwatch.enrichment.models import CartSummary
from cartwatch.enrichment.money import ZERO, round_money, to_decimal

logger = get_logger(__name__)


class CartEnricher:
    """Builds a CartSummary for a non-empty cart using the product source."""

    def __init__(self, products: ProductSource) -> None:
        self._products = products

    async def _fetch(self, user_id: str, item: CartItem) -> ProductRecord:
        try:
            return await self._products.get_product(item.product_id)
        except Exception as e:
            raise EnrichmentError(user_id, item.product_id, e) from e

    async def enrich(self, cart: CartSnapshot) -> CartSummary:
        if cart.is_empty:
            raise InvariantViolation(f"enrich() called with an empty cart for user {cart.user_id}")

        try:
            async with asyncio.TaskGroup() as tg:
                tasks = [tg.create_task(self._fetch(cart.user_id, item)) for item in cart.items]
        except BaseExceptionGroup as eg:
            failures = [e for e in eg.exceptions if isinstance(e, EnrichmentError)]
            if not failures:
                raise
            first = failures[0]
            logger.debug(
                "enrichment_fetch_failed",
                user_id=cart.user_id,
                product_id=first.product_id,
                failed_fetches=len(failures),
                error=str(first.cause),
            )
            raise first from first.cause

        products = [t.result() for t in tasks]
        total = ZERO
        categories: set[str] = set()
        for item, product in zip(cart.items, products):
            total += to_decimal(product.price) * Decimal(item.quantity)
            categories.update(product.categories)

        summary = CartSummary(
            user_id=cart.user_id,
            total_value=round_money(total),
            categories=frozenset(categories),
            items=cart.items,
        )
        logger.debug(
            "cart_enriched",
            user_id=cart.user_id,
            line_count=len(cart.items),
            cart_value=str(summary.total_value),
            categories=sorted(summary.categories),
        )
        return summary
