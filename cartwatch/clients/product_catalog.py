"""
Product catalog client.

GET {base_url}/products/{product_id} -> {"id", "name", "price_usd": {"units", "nanos"}, "categories"}.
Every failure, including not-found, raises ProductFetchError: a cart line
that cannot be priced makes the whole enrichment fail.
"""

from __future__ import annotations

from typing import Protocol
from urllib.parse import quote

import httpx

from cartwatch.clients.models import ProductRecord
from cartwatch.core.exceptions import ProductFetchError


class ProductSource(Protocol):
    async def get_product(self, product_id: str) -> ProductRecord: ...


class HttpProductCatalog:
    """Product catalog over HTTP/JSON."""

    def __init__(self, base_url: str, client: httpx.AsyncClient) -> None:
        if not base_url.strip():
            raise ValueError("base_url must be non-empty")
        self._base_url = base_url.rstrip("/")
        self._client = client

    async def get_product(self, product_id: str) -> ProductRecord:
        url = f"{self._base_url}/products/{quote(product_id, safe='')}"
        try:
            resp = await self._client.get(url)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as e:
            raise ProductFetchError(
                product_id,
                f"catalog returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise ProductFetchError(product_id, f"request failed: {e}") from e
        except ValueError as e:
            raise ProductFetchError(product_id, f"malformed JSON: {e}") from e
        try:
            return ProductRecord.from_json(product_id, data)
        except (ValueError, TypeError, AttributeError) as e:
            raise ProductFetchError(product_id, f"malformed product payload: {e}") from e
