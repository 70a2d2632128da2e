"""Tests for the nearest-hospital location flow."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from responder.errors import GatewayError
from responder.models import PlaceResult
from responder.routing.location import REASSURANCE_TEXT, LocationHandler, directions_url


def _places(*names: str) -> AsyncMock:
    places = AsyncMock()
    places.nearby.return_value = [PlaceResult(name=n) for n in names]
    return places


class TestLocationHandler:
    @pytest.mark.asyncio
    async def test_sends_reassurance_then_map_link(self, messenger: AsyncMock) -> None:
        places = _places("Bandra West", "City Hospital")
        await LocationHandler(places, messenger).handle("U1", 19.07, 72.87)

        places.nearby.assert_awaited_once_with(19.07, 72.87, radius=1000, place_type="hospital")
        assert [c.args for c in messenger.send_text.await_args_list] == [
            ("U1", REASSURANCE_TEXT),
            ("U1", "https://www.google.com/maps/dir/19.07,72.87/City+Hospital"),
        ]

    @pytest.mark.asyncio
    async def test_lookup_failure_suppresses_replies(self, messenger: AsyncMock) -> None:
        places = AsyncMock()
        places.nearby.side_effect = GatewayError("REQUEST_DENIED")
        await LocationHandler(places, messenger).handle("U1", 19.07, 72.87)
        messenger.send_text.assert_not_called()

    @pytest.mark.asyncio
    async def test_too_few_results_suppresses_replies(self, messenger: AsyncMock) -> None:
        await LocationHandler(_places("Only One"), messenger).handle("U1", 1.0, 2.0)
        messenger.send_text.assert_not_called()

    @pytest.mark.asyncio
    async def test_second_send_not_gated_on_first(self, messenger: AsyncMock) -> None:
        messenger.send_text.side_effect = [None, None]
        await LocationHandler(_places("A", "B"), messenger).handle("U1", 1.0, 2.0)
        assert messenger.send_text.await_count == 2


def test_directions_url_joins_words_with_plus() -> None:
    url = directions_url(19.07, 72.87, "Holy Family Hospital")
    assert url == "https://www.google.com/maps/dir/19.07,72.87/Holy+Family+Hospital"
