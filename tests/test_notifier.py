"""
Pytest tests for the discount notifier: payload shape, code derivation, recipient derivation, no retries.
"""

from __future__ import annotations

import pytest

from cartwatch.core.exceptions import DeliveryError, InvariantViolation
from cartwatch.decision.models import DiscountDecision
from cartwatch.notify.notifier import (
    DEFAULT_OFFER_MESSAGE,
    DiscountNotifier,
    derive_recipient,
    discount_code_for,
)

SEND_15 = DiscountDecision(should_send=True, percentage=15, reason="price_sensitive_user")


def test_discount_code_derived_from_percentage():
    assert discount_code_for(15) == "COMEBACK15"
    assert discount_code_for(5) == "COMEBACK5"


def test_derive_recipient():
    assert derive_recipient("42") == "42@example.com"
    assert derive_recipient(" 42 ", "shopper+{user_id}@shop.test") == "shopper+42@shop.test"
    with pytest.raises(ValueError):
        derive_recipient("  ")


@pytest.mark.asyncio
async def test_notify_sends_offer_payload(channel):
    ack = await DiscountNotifier(channel).notify("42@example.com", SEND_15)
    assert ack.accepted is True
    assert ack.message_id == "msg-1"
    assert channel.sent == [
        {
            "email": "42@example.com",
            "discount_code": "COMEBACK15",
            "discount_percentage": 15,
            "message": DEFAULT_OFFER_MESSAGE,
            "reason": "price_sensitive_user",
        }
    ]


@pytest.mark.asyncio
async def test_delivery_error_propagates_without_retry(channel):
    channel.fail = True
    with pytest.raises(DeliveryError):
        await DiscountNotifier(channel).notify("42@example.com", SEND_15)
    assert channel.attempts == 1


@pytest.mark.asyncio
async def test_declined_decision_is_refused(channel):
    with pytest.raises(InvariantViolation):
        await DiscountNotifier(channel).notify("42@example.com", DiscountDecision.decline("nope"))
    assert channel.attempts == 0


def test_custom_message():
    offer = DiscountNotifier(channel=None, message="Come back!").build_offer("a@b.c", SEND_15)
    assert offer.message == "Come back!"
    assert offer.to_dict()["discount_code"] == "COMEBACK15"
