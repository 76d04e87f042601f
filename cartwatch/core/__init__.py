"""
Core utilities: exceptions and cross-cutting concerns shared by the
service clients, enricher, decision engine, notifier and scheduler.
"""

from cartwatch.core.exceptions import (
    CartFetchError,
    CartwatchError,
    ConfigError,
    DecisionServiceError,
    DeliveryError,
    EnrichmentError,
    InvariantViolation,
    ProductFetchError,
    ServiceError,
)

__all__ = [
    "CartFetchError",
    "CartwatchError",
    "ConfigError",
    "DecisionServiceError",
    "DeliveryError",
    "EnrichmentError",
    "InvariantViolation",
    "ProductFetchError",
    "ServiceError",
]
