"""
Cart source client.

GET {base_url}/carts/{user_id} -> {"user_id", "items": [{"product_id", "quantity"}]}.
A 404 means the user has no cart; it is normalized to an empty snapshot and
never surfaces as an error. Any other failure raises CartFetchError.
"""

from __future__ import annotations

from typing import Protocol
from urllib.parse import quote

import httpx

from cartwatch.cartwatch_logging import get_logger
from cartwatch.clients.models import CartSnapshot
from cartwatch.core.exceptions import CartFetchError

logger = get_logger(__name__)


class CartSource(Protocol):
    async def get_cart(self, user_id: str) -> CartSnapshot: ...


class HttpCartSource:
    """Cart service over HTTP/JSON, sharing the caller's httpx.AsyncClient."""

    def __init__(self, base_url: str, client: httpx.AsyncClient) -> None:
        if not base_url.strip():
            raise ValueError("base_url must be non-empty")
        self._base_url = base_url.rstrip("/")
        self._client = client

    async def get_cart(self, user_id: str) -> CartSnapshot:
        url = f"{self._base_url}/carts/{quote(user_id, safe='')}"
        try:
            resp = await self._client.get(url)
        except httpx.HTTPError as e:
            raise CartFetchError(f"cart request failed for user {user_id}: {e}") from e
        if resp.status_code == 404:
            logger.debug("cart_not_found", user_id=user_id)
            return CartSnapshot.empty(user_id)
        if resp.is_error:
            raise CartFetchError(
                f"cart service returned {resp.status_code} for user {user_id}",
                status_code=resp.status_code,
            )
        try:
            return CartSnapshot.from_json(user_id, resp.json())
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise CartFetchError(f"malformed cart payload for user {user_id}: {e}") from e
