"""Shared test fixtures for the Messenger responder."""

from __future__ import annotations

import hashlib
import hmac as hmac_mod
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from responder.audit.logger import AuditLogger
from responder.catalog.quick_replies import QuickReplyCatalog, parse_catalog
from responder.config import Settings
from responder.models import SendReceipt

APP_SECRET = "test_secret"
SERVER_URL = "https://example.org"

CATALOG_DATA: dict[str, Any] = {
    "getStarted": {
        "text": "What would you like to talk about?",
        "quick_replies": [
            {"content_type": "text", "title": "I was abused", "payload": "askAbusedTime",
             "image_url": "/img/a.png"},
        ],
    },
    "defaultMessage": {
        "text": "How can I help you?",
        "quick_replies": [
            {"content_type": "text", "title": "Find a counsellor", "payload": "findCounsellor"},
        ],
    },
    "askAbusedTime": {
        "text": "When did this happen?",
        "quick_replies": [
            {"content_type": "text", "title": "Just now", "payload": "abuseRecent"},
        ],
    },
    "findCounsellor": "Here is a list of counselling services in your area.",
    "abuseSexualHarassmentWork": {
        "text": "Would you like to talk to a counsellor?",
        "quick_replies": [
            {"content_type": "text", "title": "Yes", "payload": "findCounsellor"},
        ],
    },
    "suicidalThoughtsYes": "These people here will help you.",
    "panicButton": "You will get help here.",
}


def sign_body(body: bytes, secret: str = APP_SECRET, method: str = "sha1") -> str:
    digest = hmac_mod.new(secret.encode(), body, getattr(hashlib, method)).hexdigest()
    return f"{method}={digest}"


def make_settings(**kwargs: Any) -> Settings:
    """Factory for Settings with sensible defaults."""
    defaults: dict[str, Any] = {
        "app_secret": APP_SECRET,
        "validation_token": "test_verify",
        "page_access_token": "test_page_token",
        "server_url": SERVER_URL,
        "places_api_key": "test_places_key",
    }
    defaults.update(kwargs)
    return Settings(**defaults)


def make_messaging_event(
    sender: str = "U1",
    message: dict[str, Any] | None = None,
    postback: dict[str, Any] | None = None,
) -> dict[str, Any]:
    event: dict[str, Any] = {
        "sender": {"id": sender},
        "recipient": {"id": "PAGE_ID"},
        "timestamp": 1458692752478,
    }
    if message is not None:
        event["message"] = {"mid": "mid.1", **message}
    if postback is not None:
        event["postback"] = postback
    return event


def make_webhook_payload(*events: dict[str, Any], obj: str = "page") -> dict[str, Any]:
    return {
        "object": obj,
        "entry": [{"id": "PAGE_ID", "time": 1458692752478, "messaging": list(events)}],
    }


def mock_async_client(mock_client_cls: MagicMock) -> AsyncMock:
    """Wire a patched httpx.AsyncClient class to return an async context manager."""
    mock_client = AsyncMock()
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_client_cls.return_value = mock_client
    return mock_client


@pytest.fixture
def catalog() -> QuickReplyCatalog:
    return QuickReplyCatalog(parse_catalog(CATALOG_DATA))


@pytest.fixture
def messenger() -> AsyncMock:
    """OutboundMessenger double that records sends and always succeeds."""
    mock = AsyncMock()
    mock.send.return_value = SendReceipt(recipient_id="U1", message_id="m1")
    mock.send_text.return_value = SendReceipt(recipient_id="U1", message_id="m1")
    mock.send_typing.return_value = SendReceipt(recipient_id="U1")
    return mock


@pytest.fixture
def mock_audit_logger() -> MagicMock:
    return MagicMock(spec=AuditLogger)
