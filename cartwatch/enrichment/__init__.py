"""
Cart enrichment: money normalization, concurrent product lookups, and the
value/category aggregation the decision engine consumes.
"""

from cartwatch.enrichment.enricher import CartEnricher
from cartwatch.enrichment.models import CartSummary, EnrichedProfile
from cartwatch.enrichment.money import round_money, to_decimal

__all__ = [
    "CartEnricher",
    "CartSummary",
    "EnrichedProfile",
    "round_money",
    "to_decimal",
]
