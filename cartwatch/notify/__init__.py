"""
Notifier: formats discount offers and dispatches them to the delivery channel.
"""

from cartwatch.notify.notifier import (
    DiscountNotifier,
    DiscountOffer,
    derive_recipient,
    discount_code_for,
)

__all__ = [
    "DiscountNotifier",
    "DiscountOffer",
    "derive_recipient",
    "discount_code_for",
]
