"""Nearest-hospital reply for shared locations."""

from __future__ import annotations

import logging

from responder.errors import GatewayError
from responder.gateway.messenger import OutboundMessenger
from responder.gateway.places import PlacesClient

logger = logging.getLogger(__name__)

SEARCH_RADIUS_METERS = 1000
PLACE_TYPE = "hospital"
REASSURANCE_TEXT = "This is the nearest hospital to you. You're going to be alright"
_DIRECTIONS_URL = "https://www.google.com/maps/dir/{lat},{lon}/{destination}"

# Directions point at the second-ranked result
_RESULT_RANK = 1


def directions_url(latitude: float, longitude: float, place_name: str) -> str:
    return _DIRECTIONS_URL.format(
        lat=latitude, lon=longitude, destination="+".join(place_name.split(" ")),
    )


class LocationHandler:
    def __init__(self, places: PlacesClient, messenger: OutboundMessenger) -> None:
        self._places = places
        self._messenger = messenger

    async def handle(self, recipient_id: str, latitude: float, longitude: float) -> None:
        """Look up nearby hospitals and send reassurance plus a directions link.

        Any lookup failure suppresses both replies.
        """
        try:
            results = await self._places.nearby(
                latitude, longitude, radius=SEARCH_RADIUS_METERS, place_type=PLACE_TYPE,
            )
        except GatewayError as exc:
            logger.error("Places lookup failed for %s: %s", recipient_id, exc)
            return

        if len(results) <= _RESULT_RANK:
            logger.warning(
                "Places lookup for %s returned %d results; not replying",
                recipient_id, len(results),
            )
            return

        place = results[_RESULT_RANK]
        await self._messenger.send_text(recipient_id, REASSURANCE_TEXT)
        await self._messenger.send_text(
            recipient_id, directions_url(latitude, longitude, place.name),
        )
