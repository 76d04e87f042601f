"""
Pytest tests for the decision engine: failure-safe wrapper, rule-based and remote-model strategies.

Remote calls go through httpx.MockTransport; no network.
"""

from __future__ import annotations

import asyncio
import json
from decimal import Decimal

import httpx
import pytest

from cartwatch.clients.models import CartItem
from cartwatch.core.exceptions import DecisionServiceError
from cartwatch.decision.engine import DecisionEngine
from cartwatch.decision.models import DiscountDecision
from cartwatch.decision.remote import RemoteModelStrategy, parse_analysis_response
from cartwatch.decision.rules import RuleBasedStrategy, RuleConfig
from cartwatch.enrichment.models import EnrichedProfile

ANALYSIS_URL = "http://analysis.test/v1/decide"


def _profile(value: str = "50.00", inactivity: int = 61) -> EnrichedProfile:
    return EnrichedProfile(
        user_id="42",
        inactivity_seconds=inactivity,
        total_value=Decimal(value),
        categories=frozenset({"kitchen"}),
        items=(CartItem("MUG", 1),),
    )


# --- DecisionEngine ---


@pytest.mark.asyncio
async def test_engine_passes_decision_through(strategy):
    decision = await DecisionEngine(strategy).decide(_profile())
    assert decision == DiscountDecision(True, 15, "price_sensitive_user")
    assert strategy.profiles[0].user_id == "42"


@pytest.mark.asyncio
async def test_engine_timeout_means_do_not_send(strategy):
    """A slow analysis call yields should_send=False, never an exception."""
    strategy.delay_sec = 1.0
    decision = await DecisionEngine(strategy, timeout_sec=0.05).decide(_profile())
    assert decision.should_send is False
    assert decision.percentage == 0
    assert decision.reason == "analysis_timeout"


@pytest.mark.asyncio
async def test_engine_error_means_do_not_send(strategy):
    strategy.error = RuntimeError("model exploded")
    decision = await DecisionEngine(strategy).decide(_profile())
    assert decision.should_send is False
    assert decision.reason == "analysis_failed"


@pytest.mark.asyncio
async def test_engine_maps_http_timeout_to_timeout(strategy):
    strategy.error = httpx.ReadTimeout("read timed out")
    decision = await DecisionEngine(strategy).decide(_profile())
    assert decision.reason == "analysis_timeout"


def test_engine_rejects_non_positive_timeout(strategy):
    with pytest.raises(ValueError):
        DecisionEngine(strategy, timeout_sec=0)


# --- DiscountDecision ---


def test_decision_validation():
    with pytest.raises(ValueError):
        DiscountDecision(True, 101, "too_generous")
    with pytest.raises(ValueError):
        DiscountDecision(True, -1, "negative")
    with pytest.raises(ValueError):
        DiscountDecision(True, 0, "nothing_to_send")
    assert DiscountDecision.decline("nope").to_dict() == {
        "should_send": False,
        "percentage": 0,
        "reason": "nope",
    }


# --- RuleBasedStrategy ---


@pytest.mark.asyncio
async def test_rules_default_is_price_sensitive_15():
    decision = await RuleBasedStrategy().decide(_profile("50.00", 61))
    assert decision == DiscountDecision(True, 15, "price_sensitive_user")


def test_rules_high_value_and_long_inactivity():
    rules = RuleBasedStrategy()
    assert rules.evaluate(_profile("250.00", 61)) == DiscountDecision(True, 10, "high_value_cart")
    assert rules.evaluate(_profile("50.00", 900)) == DiscountDecision(
        True, 20, "price_sensitive_user+long_inactivity"
    )


def test_rules_decline_low_value_and_cap():
    assert RuleBasedStrategy().evaluate(_profile("0.50")).should_send is False
    capped = RuleBasedStrategy(RuleConfig(base_percentage=40, max_percentage=25))
    assert capped.evaluate(_profile("50.00")).percentage == 25


# --- RemoteModelStrategy ---


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_remote_posts_profile_and_parses_answer():
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={"should_send_discount": True, "discount_percentage": 12, "reason": "hesitant_buyer"},
        )

    async with _client(handler) as client:
        decision = await RemoteModelStrategy(ANALYSIS_URL, client).decide(_profile())

    assert decision == DiscountDecision(True, 12, "hesitant_buyer")
    assert seen[0]["task"] == "cart_abandonment_discount"
    assert seen[0]["profile"]["user_id"] == "42"
    assert seen[0]["profile"]["cart_value"] == "50.00"
    assert seen[0]["profile"]["inactivity_seconds"] == 61


@pytest.mark.asyncio
async def test_remote_server_error_raises_service_error():
    async with _client(lambda request: httpx.Response(500)) as client:
        with pytest.raises(DecisionServiceError):
            await RemoteModelStrategy(ANALYSIS_URL, client).decide(_profile())


@pytest.mark.asyncio
async def test_remote_failure_through_engine_is_do_not_send():
    async with _client(lambda request: httpx.Response(502)) as client:
        engine = DecisionEngine(RemoteModelStrategy(ANALYSIS_URL, client))
        decision = await engine.decide(_profile())
    assert decision.should_send is False
    assert decision.reason == "analysis_failed"


@pytest.mark.asyncio
async def test_remote_slow_model_times_out_to_do_not_send():
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(1.0)
        return httpx.Response(200, json={"should_send_discount": True, "discount_percentage": 10})

    async with _client(handler) as client:
        engine = DecisionEngine(RemoteModelStrategy(ANALYSIS_URL, client), timeout_sec=0.05)
        decision = await engine.decide(_profile())
    assert decision.should_send is False
    assert decision.reason == "analysis_timeout"


def test_parse_analysis_response_edge_cases():
    assert parse_analysis_response({"should_send_discount": False}).should_send is False
    with pytest.raises(DecisionServiceError):
        parse_analysis_response({"discount_percentage": 10})
    with pytest.raises(DecisionServiceError):
        parse_analysis_response({"should_send_discount": True, "discount_percentage": "lots"})
    with pytest.raises(DecisionServiceError):
        parse_analysis_response({"should_send_discount": True, "discount_percentage": 150})
    with pytest.raises(DecisionServiceError):
        parse_analysis_response(["not", "an", "object"])


@pytest.mark.parametrize("raw_pct", [15.7, True, "15", None])
def test_percentage_must_be_a_whole_int(raw_pct):
    with pytest.raises(DecisionServiceError):
        parse_analysis_response({"should_send_discount": True, "discount_percentage": raw_pct})
