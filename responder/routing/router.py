"""Event router: classify one inbound event and hand it to the right flow."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from responder.flow.engine import ConversationFlowEngine
from responder.models import (
    AttachmentMessage,
    EchoMessage,
    InboundEvent,
    Postback,
    QuickReplyMessage,
    TextMessage,
)
from responder.routing.location import LocationHandler

logger = logging.getLogger(__name__)

ATTACHMENT_RECEIVED_TEXT = "Message with attachment received"
DEFAULT_USE_CASE = "defaultMessage"


class EventRouter:
    """Dispatches each event type to its handler; never sends on its own."""

    def __init__(self, engine: ConversationFlowEngine, location: LocationHandler) -> None:
        self._engine = engine
        self._location = location
        self._handlers: dict[type, Callable[[Any], Awaitable[None]]] = {
            EchoMessage: self._on_echo,
            AttachmentMessage: self._on_attachment,
            QuickReplyMessage: self._on_quick_reply,
            TextMessage: self._on_text,
            Postback: self._on_postback,
        }
        # Exact-match text commands
        self._commands: dict[str, Callable[[str], Awaitable[None]]] = {
            "I was abused": lambda sender: engine.handle(sender, "askAbusedTime"),
            "Panic Button": lambda sender: engine.escalate(sender, "panicButton"),
        }

    async def route(self, event: InboundEvent) -> None:
        await self._handlers[type(event)](event)

    async def dispatch(self, events: Sequence[InboundEvent]) -> None:
        """Handle every event independently; one failure does not stop the others."""
        results = await asyncio.gather(
            *(self.route(event) for event in events), return_exceptions=True,
        )
        for event, result in zip(events, results):
            if isinstance(result, Exception):
                logger.error(
                    "Unhandled error for %s event from %s: %s",
                    event.kind, event.sender_id, result, exc_info=result,
                )

    async def _on_echo(self, event: EchoMessage) -> None:
        logger.info(
            "Received echo for message %s and app %s with metadata %s",
            event.mid, event.app_id, event.metadata,
        )

    async def _on_attachment(self, event: AttachmentMessage) -> None:
        if (
            event.attachment_type == "location"
            and event.latitude is not None
            and event.longitude is not None
        ):
            await self._location.handle(event.sender_id, event.latitude, event.longitude)
            return
        await self._engine.reply_text(event.sender_id, ATTACHMENT_RECEIVED_TEXT)

    async def _on_quick_reply(self, event: QuickReplyMessage) -> None:
        logger.info("Quick reply for message %s with payload %s", event.mid, event.payload)
        await self._engine.handle(event.sender_id, event.payload)

    async def _on_text(self, event: TextMessage) -> None:
        command = self._commands.get(event.text)
        if command is None:
            await self._engine.handle(event.sender_id, DEFAULT_USE_CASE)
            return
        await command(event.sender_id)

    async def _on_postback(self, event: Postback) -> None:
        logger.info("Received postback for user %s with payload %s", event.sender_id, event.payload)
        await self._engine.typing(event.sender_id)
        await self._engine.handle(event.sender_id, event.payload)
