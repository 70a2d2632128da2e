"""Graph API user profile lookup."""

from __future__ import annotations

import logging

import httpx
from pydantic import ValidationError

from responder.errors import GatewayError
from responder.models import UserProfile

logger = logging.getLogger(__name__)


class UserProfileClient:
    def __init__(self, page_access_token: str, graph_api_url: str) -> None:
        self._access_token = page_access_token
        self._base_url = graph_api_url.rstrip("/")

    async def fetch(self, user_id: str) -> UserProfile:
        """Fetch the user's display name. Raises GatewayError on any failure."""
        try:
            async with httpx.AsyncClient(verify=True) as client:
                resp = await client.get(
                    f"{self._base_url}/{user_id}",
                    params={"access_token": self._access_token},
                    timeout=10.0,
                )
        except httpx.HTTPError as exc:
            raise GatewayError(f"Profile API unreachable: {exc}") from exc

        if resp.status_code != 200:
            raise GatewayError("Invalid request", status_code=resp.status_code)
        try:
            body = resp.json()
        except ValueError as exc:
            raise GatewayError("Profile API returned a non-JSON body", resp.status_code) from exc
        if not isinstance(body, dict):
            raise GatewayError("Profile API returned an unexpected body", resp.status_code)
        try:
            profile = UserProfile.model_validate(body)
        except ValidationError as exc:
            raise GatewayError("Profile API returned an unexpected body", resp.status_code) from exc
        logger.debug("Fetched profile for user %s", user_id)
        return profile
