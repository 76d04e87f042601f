"""
Discount decision engine.

DecisionEngine wraps an interchangeable DiscountStrategy: RuleBasedStrategy
(deterministic, default) or RemoteModelStrategy (external analysis model).
"""

from cartwatch.decision.engine import DecisionEngine, DiscountStrategy
from cartwatch.decision.models import DiscountDecision
from cartwatch.decision.remote import RemoteModelStrategy
from cartwatch.decision.rules import RuleBasedStrategy, RuleConfig

__all__ = [
    "DecisionEngine",
    "DiscountDecision",
    "DiscountStrategy",
    "RemoteModelStrategy",
    "RuleBasedStrategy",
    "RuleConfig",
]
