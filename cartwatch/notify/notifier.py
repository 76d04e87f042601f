"""
Discount notifier: turn a positive decision into an offer and dispatch it.

Builds the payload (recipient, discount code derived from the percentage,
percentage, fixed explanatory message, decision reason) and hands it to the
delivery channel. Delivery errors propagate to the caller unchanged; this
component never retries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from cartwatch.cartwatch_logging import get_logger
from cartwatch.clients.delivery import DeliveryChannel
from cartwatch.clients.models import DeliveryAck
from cartwatch.core.exceptions import InvariantViolation
from cartwatch.decision.models import DiscountDecision

logger = get_logger(__name__)

DISCOUNT_CODE_PREFIX = "COMEBACK"
DEFAULT_OFFER_MESSAGE = (
    "You left some items in your cart. Complete your order now and "
    "your discount is applied at checkout."
)
DEFAULT_RECIPIENT_TEMPLATE = "{user_id}@example.com"


def discount_code_for(percentage: int) -> str:
    """COMEBACK15 for 15%."""
    return f"{DISCOUNT_CODE_PREFIX}{percentage}"


def derive_recipient(user_id: str, template: str = DEFAULT_RECIPIENT_TEMPLATE) -> str:
    """Recipient address for a user id, e.g. "42" -> "42@example.com"."""
    if not user_id.strip():
        raise ValueError("user_id must be non-empty")
    return template.format(user_id=user_id.strip())


@dataclass(frozen=True)
class DiscountOffer:
    """Wire payload for the delivery channel."""

    email: str
    discount_code: str
    percentage: int
    message: str
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "email": self.email,
            "discount_code": self.discount_code,
            "discount_percentage": self.percentage,
            "message": self.message,
            "reason": self.reason,
        }


class DiscountNotifier:
    """Formats and sends discount offers through a DeliveryChannel."""

    def __init__(self, channel: DeliveryChannel, *, message: str = DEFAULT_OFFER_MESSAGE) -> None:
        self._channel = channel
        self._message = message

    def build_offer(self, email: str, decision: DiscountDecision) -> DiscountOffer:
        if not decision.should_send:
            raise InvariantViolation(f"refusing to build an offer for a declined decision ({decision.reason})")
        return DiscountOffer(
            email=email,
            discount_code=discount_code_for(decision.percentage),
            percentage=decision.percentage,
            message=self._message,
            reason=decision.reason,
        )

    async def notify(self, email: str, decision: DiscountDecision) -> DeliveryAck:
        offer = self.build_offer(email, decision)
        ack = await self._channel.send(offer.to_dict())
        logger.info(
            "discount_offer_sent",
            email=email,
            discount_code=offer.discount_code,
            percentage=offer.percentage,
            reason=offer.reason,
            message_id=ack.message_id,
        )
        return ack
