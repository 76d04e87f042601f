"""
Application-level exceptions.

Every error the agent raises on purpose derives from CartwatchError so the
scheduler can log it with a consistent shape. Service errors are transient
and only abort the current user's tick; InvariantViolation marks a broken
caller contract (e.g. enriching an empty cart).
"""

from __future__ import annotations


class CartwatchError(Exception):
    """Base class for all cartwatch errors."""


class ConfigError(CartwatchError):
    """Missing or invalid configuration. Fatal at startup."""


class InvariantViolation(CartwatchError):
    """A caller broke a documented precondition."""


class ServiceError(CartwatchError):
    """An external collaborator failed (transport error, bad status, bad payload)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CartFetchError(ServiceError):
    """Cart source failed for a reason other than not-found."""


class ProductFetchError(ServiceError):
    """Product catalog lookup failed."""

    def __init__(
        self,
        product_id: str,
        message: str,
        *,
        status_code: int | None = None,
    ) -> None:
        super().__init__(f"product {product_id}: {message}", status_code=status_code)
        self.product_id = product_id


class DeliveryError(ServiceError):
    """Delivery channel rejected or failed to accept an offer."""


class DecisionServiceError(ServiceError):
    """Analysis model call failed or returned an unusable answer."""


class EnrichmentError(CartwatchError):
    """At least one product fetch failed; the cart was not enriched."""

    def __init__(self, user_id: str, product_id: str, cause: BaseException) -> None:
        super().__init__(f"enrichment failed for user {user_id} at product {product_id}: {cause}")
        self.user_id = user_id
        self.product_id = product_id
        self.cause = cause
