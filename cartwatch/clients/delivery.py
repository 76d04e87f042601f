"""
Delivery channel client (email service).

POST {base_url}/discount-offers with the offer payload -> {"message_id"?}.
Failures raise DeliveryError. No retries: a failed delivery is logged by the
scheduler and the user is picked up again on the next tick.
"""

from __future__ import annotations

from typing import Any, Protocol

import httpx

from cartwatch.clients.models import DeliveryAck
from cartwatch.core.exceptions import DeliveryError


class DeliveryChannel(Protocol):
    async def send(self, payload: dict[str, Any]) -> DeliveryAck: ...


class HttpEmailChannel:
    """Email service over HTTP/JSON."""

    def __init__(self, base_url: str, client: httpx.AsyncClient) -> None:
        if not base_url.strip():
            raise ValueError("base_url must be non-empty")
        self._url = base_url.rstrip("/") + "/discount-offers"
        self._client = client

    async def send(self, payload: dict[str, Any]) -> DeliveryAck:
        recipient = payload.get("email", "?")
        try:
            resp = await self._client.post(self._url, json=payload)
        except httpx.HTTPError as e:
            raise DeliveryError(f"delivery to {recipient} failed: {e}") from e
        if resp.is_error:
            raise DeliveryError(
                f"email service returned {resp.status_code} for {recipient}",
                status_code=resp.status_code,
            )
        message_id = None
        if resp.content:
            try:
                body = resp.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("message_id") is not None:
                message_id = str(body["message_id"])
        return DeliveryAck(accepted=True, message_id=message_id)
