"""
Remote-model discount strategy.

Serializes the enriched profile to JSON, POSTs it to the analysis service and
parses {"should_send_discount", "discount_percentage", "reason"}. Transport
errors, bad statuses and unusable answers raise DecisionServiceError; the
DecisionEngine turns those into "do not send".
"""

from __future__ import annotations

from typing import Any

import httpx

from cartwatch.core.exceptions import DecisionServiceError
from cartwatch.decision.models import DiscountDecision
from cartwatch.enrichment.models import EnrichedProfile

ANALYSIS_TASK = "cart_abandonment_discount"


def build_analysis_request(profile: EnrichedProfile) -> dict[str, Any]:
    """Request body: task label plus the profile as plain JSON."""
    return {"task": ANALYSIS_TASK, "profile": profile.to_dict()}


def parse_analysis_response(data: Any) -> DiscountDecision:
    if not isinstance(data, dict):
        raise DecisionServiceError(f"analysis response must be an object, got {type(data).__name__}")
    should_send = data.get("should_send_discount")
    if not isinstance(should_send, bool):
        raise DecisionServiceError("analysis response missing boolean should_send_discount")
    reason = str(data.get("reason") or "model_decision")
    if not should_send:
        return DiscountDecision.decline(reason)
    raw_pct = data.get("discount_percentage")
    # whole percent only: 15.7 and true are rejected
    if isinstance(raw_pct, bool) or not isinstance(raw_pct, int):
        raise DecisionServiceError(f"invalid discount_percentage: {raw_pct!r}")
    try:
        return DiscountDecision(should_send=True, percentage=raw_pct, reason=reason)
    except ValueError as e:
        raise DecisionServiceError(str(e)) from e


class RemoteModelStrategy:
    """Delegates the decision to an external analysis model over HTTP/JSON."""

    name = "remote_model"

    def __init__(
        self,
        url: str,
        client: httpx.AsyncClient,
        *,
        timeout_sec: float | None = None,
    ) -> None:
        if not url.strip():
            raise ValueError("url must be non-empty")
        self._url = url.strip()
        self._client = client
        # None keeps the shared client's default timeout
        self._request_kwargs: dict[str, Any] = {} if timeout_sec is None else {"timeout": timeout_sec}

    async def decide(self, profile: EnrichedProfile) -> DiscountDecision:
        try:
            resp = await self._client.post(
                self._url, json=build_analysis_request(profile), **self._request_kwargs
            )
            resp.raise_for_status()
            data = resp.json()
        except httpx.TimeoutException:
            # Let the engine classify timeouts separately from other failures.
            raise
        except httpx.HTTPStatusError as e:
            raise DecisionServiceError(
                f"analysis service returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise DecisionServiceError(f"analysis request failed: {e}") from e
        except ValueError as e:
            raise DecisionServiceError(f"analysis response is not JSON: {e}") from e
        return parse_analysis_response(data)
