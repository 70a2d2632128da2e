"""Google Places nearby-search client."""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from responder.errors import GatewayError
from responder.models import PlaceResult

logger = logging.getLogger(__name__)

# Places statuses that still carry a (possibly empty) result list
_OK_STATUSES = {"OK", "ZERO_RESULTS"}


class PlacesClient:
    """Ranked nearby-places lookup around a coordinate."""

    def __init__(self, api_key: str, base_url: str) -> None:
        self._api_key = api_key
        self._url = f"{base_url.rstrip('/')}/nearbysearch/json"

    async def nearby(
        self,
        latitude: float,
        longitude: float,
        radius: int = 1000,
        place_type: str = "hospital",
    ) -> list[PlaceResult]:
        params = {
            "location": f"{latitude},{longitude}",
            "radius": radius,
            "type": place_type,
            "key": self._api_key,
        }
        try:
            async with httpx.AsyncClient(verify=True) as client:
                resp = await client.get(self._url, params=params, timeout=10.0)
        except httpx.HTTPError as exc:
            raise GatewayError(f"Places API unreachable: {exc}") from exc

        if resp.status_code != 200:
            raise GatewayError("Places lookup failed", status_code=resp.status_code)
        try:
            body = resp.json()
        except ValueError as exc:
            raise GatewayError("Places API returned a non-JSON body", resp.status_code) from exc
        if not isinstance(body, dict):
            raise GatewayError("Places API returned an unexpected body", resp.status_code)

        status = body.get("status", "OK")
        if status not in _OK_STATUSES:
            raise GatewayError(
                f"Places lookup returned {status}: {body.get('error_message', '')}".strip(),
            )
        raw_results = body.get("results", [])
        if not isinstance(raw_results, list):
            raise GatewayError("Places API returned an unexpected body", resp.status_code)
        try:
            results = [
                PlaceResult.model_validate(r)
                for r in raw_results
                if isinstance(r, dict) and r.get("name")
            ]
        except ValidationError as exc:
            raise GatewayError("Places API returned an unexpected body", resp.status_code) from exc
        logger.debug("Places lookup at %s returned %d results", params["location"], len(results))
        return results
