"""Raw Messenger webhook payload models and classification into InboundEvents."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from responder.errors import ValidationError
from responder.models import (
    AttachmentMessage,
    EchoMessage,
    InboundEvent,
    Postback,
    QuickReplyMessage,
    TextMessage,
)

logger = logging.getLogger(__name__)

PAGE_OBJECT = "page"


class _Raw(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Participant(_Raw):
    id: str


class Coordinates(_Raw):
    lat: float
    long: float


class AttachmentPayload(_Raw):
    coordinates: Coordinates | None = None
    url: str | None = None


class Attachment(_Raw):
    type: str
    payload: AttachmentPayload | None = None


class QuickReply(_Raw):
    payload: str


class RawMessage(_Raw):
    mid: str | None = None
    text: str | None = None
    is_echo: bool = False
    app_id: int | None = None
    metadata: str | None = None
    attachments: list[Attachment] | None = None
    quick_reply: QuickReply | None = None


class RawPostback(_Raw):
    payload: str
    title: str | None = None


class MessagingEvent(_Raw):
    sender: Participant
    recipient: Participant
    timestamp: int | None = None
    message: RawMessage | None = None
    postback: RawPostback | None = None


class Entry(_Raw):
    id: str | None = None
    time: int | None = None
    messaging: list[MessagingEvent] = []


class WebhookPayload(_Raw):
    object: str
    entry: list[Entry] = []


def classify(event: MessagingEvent) -> InboundEvent | None:
    """Turn one raw messaging event into a typed InboundEvent.

    Order: echo, attachment, quick reply, text; then postback. Anything else
    (delivery and read receipts, optins) yields None.
    """
    common: dict[str, Any] = {
        "sender_id": event.sender.id,
        "recipient_id": event.recipient.id,
        "timestamp": event.timestamp,
    }
    message = event.message
    if message is not None:
        if message.is_echo:
            return EchoMessage(
                mid=message.mid, app_id=message.app_id, metadata=message.metadata, **common,
            )
        if message.attachments:
            # Only the first attachment is considered
            attachment = message.attachments[0]
            payload = attachment.payload
            coords = payload.coordinates if payload else None
            return AttachmentMessage(
                mid=message.mid,
                attachment_type=attachment.type,
                latitude=coords.lat if coords else None,
                longitude=coords.long if coords else None,
                url=payload.url if payload else None,
                **common,
            )
        if message.quick_reply is not None:
            return QuickReplyMessage(
                mid=message.mid, payload=message.quick_reply.payload, text=message.text, **common,
            )
        if message.text:
            return TextMessage(mid=message.mid, text=message.text, **common)
        return None

    if event.postback is not None:
        return Postback(payload=event.postback.payload, title=event.postback.title, **common)
    return None


def parse_events(body: Any) -> list[InboundEvent]:
    """Validate a decoded webhook body and return its events in batch order.

    Raises ValidationError when the body is not a page subscription payload.
    """
    try:
        payload = WebhookPayload.model_validate(body)
    except PydanticValidationError as exc:
        raise ValidationError(f"Malformed webhook payload: {exc.error_count()} errors") from exc

    if payload.object != PAGE_OBJECT:
        raise ValidationError(f"Unexpected webhook object {payload.object!r}")

    events: list[InboundEvent] = []
    for entry in payload.entry:
        for raw in entry.messaging:
            event = classify(raw)
            if event is None:
                logger.debug("Skipping unsupported messaging event from %s", raw.sender.id)
                continue
            events.append(event)
    return events
