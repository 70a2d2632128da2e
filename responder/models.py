"""Shared Pydantic data models for the Messenger responder."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

TEXT_METADATA = "DEVELOPER_DEFINED_METADATA"

# --- Enums ---


class AuditEventType(str, Enum):
    SIGNATURE_MISSING = "signature_missing"
    SIGNATURE_INVALID = "signature_invalid"
    WEBHOOK_VERIFIED = "webhook_verified"
    WEBHOOK_VERIFY_FAILED = "webhook_verify_failed"
    PAYLOAD_REJECTED = "payload_rejected"
    SEND_FAILED = "send_failed"


class RiskLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


# --- Inbound events ---


class _Event(BaseModel):
    model_config = ConfigDict(frozen=True)

    sender_id: str
    recipient_id: str
    timestamp: int | None = None


class TextMessage(_Event):
    kind: Literal["text"] = "text"
    mid: str | None = None
    text: str


class AttachmentMessage(_Event):
    kind: Literal["attachment"] = "attachment"
    mid: str | None = None
    attachment_type: str
    latitude: float | None = None
    longitude: float | None = None
    url: str | None = None


class QuickReplyMessage(_Event):
    kind: Literal["quick_reply"] = "quick_reply"
    mid: str | None = None
    payload: str
    text: str | None = None


class EchoMessage(_Event):
    kind: Literal["echo"] = "echo"
    mid: str | None = None
    app_id: int | None = None
    metadata: str | None = None


class Postback(_Event):
    kind: Literal["postback"] = "postback"
    payload: str
    title: str | None = None


InboundEvent = Annotated[
    TextMessage | AttachmentMessage | QuickReplyMessage | EchoMessage | Postback,
    Field(discriminator="kind"),
]


# --- Quick-reply catalog ---


class QuickReplyOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    content_type: str = "text"
    title: str | None = None
    payload: str | None = None
    image_url: str | None = None


class QuickReplyDefinition(BaseModel):
    """One catalog entry: plain text, a quick-reply menu, or both.

    Unrecognised keys (e.g. an attachment) are kept and forwarded as-is.
    """

    model_config = ConfigDict(frozen=True, extra="allow")

    text: str | None = None
    quick_replies: tuple[QuickReplyOption, ...] | None = None

    def to_message(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True, mode="json")


# --- Outbound ---


class OutboundMessage(BaseModel):
    """A single Send API call: either a message or a sender action."""

    model_config = ConfigDict(frozen=True)

    recipient_id: str
    message: dict[str, Any] | None = None
    sender_action: str | None = None

    @classmethod
    def text(cls, recipient_id: str, text: str) -> OutboundMessage:
        return cls(
            recipient_id=recipient_id,
            message={"text": text, "metadata": TEXT_METADATA},
        )

    @classmethod
    def typing_on(cls, recipient_id: str) -> OutboundMessage:
        return cls(recipient_id=recipient_id, sender_action="typing_on")

    @classmethod
    def from_definition(
        cls, recipient_id: str, definition: QuickReplyDefinition,
    ) -> OutboundMessage:
        return cls(recipient_id=recipient_id, message=definition.to_message())

    @classmethod
    def button_template(
        cls, recipient_id: str, text: str, buttons: list[dict[str, str]],
    ) -> OutboundMessage:
        return cls(
            recipient_id=recipient_id,
            message={
                "attachment": {
                    "type": "template",
                    "payload": {
                        "template_type": "button",
                        "text": text,
                        "buttons": buttons,
                    },
                },
            },
        )

    def to_payload(self) -> dict[str, Any]:
        body: dict[str, Any] = {"recipient": {"id": self.recipient_id}}
        if self.sender_action is not None:
            body["sender_action"] = self.sender_action
        if self.message is not None:
            body["message"] = self.message
        return body


class SendReceipt(BaseModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    recipient_id: str | None = None
    message_id: str | None = None


# --- External lookups ---


class UserProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    first_name: str | None = None


class PlaceResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    vicinity: str | None = None


# --- Audit ---


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class AuditEvent(BaseModel):
    timestamp: str = Field(default_factory=_now_iso)
    event_type: AuditEventType
    source_ip: str | None = None
    user_id: str | None = None
    action: str
    result: str  # "success" | "failure" | "ignored"
    risk_level: RiskLevel
    details: dict[str, object] | None = None
