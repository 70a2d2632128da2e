"""Conversation flow engine: use-case key -> direct forward, escalation or script."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from responder.catalog.quick_replies import QuickReplyCatalog, resolve_images
from responder.errors import GatewayError
from responder.flow.scripts import (
    COUNSELLORS,
    ESCALATIONS,
    HARASSMENT_INFO,
    START,
    ConversationScript,
)
from responder.gateway.messenger import OutboundMessenger
from responder.gateway.profile import UserProfileClient
from responder.models import OutboundMessage, QuickReplyDefinition, UserProfile

logger = logging.getLogger(__name__)

Handler = Callable[[str, str, QuickReplyDefinition], Awaitable[None]]

# Use cases that run a script instead of forwarding the catalog entry
SCRIPTS: dict[str, ConversationScript] = {
    "getStarted": START,
    "findCounsellor": COUNSELLORS,
    "abuseSexualHarassmentWork": HARASSMENT_INFO,
}


class ConversationFlowEngine:
    """Decides what to send for a use case and sends it in order."""

    def __init__(
        self,
        catalog: QuickReplyCatalog,
        messenger: OutboundMessenger,
        profiles: UserProfileClient,
        server_url: str,
    ) -> None:
        self._catalog = catalog
        self._messenger = messenger
        self._profiles = profiles
        self._server_url = server_url
        self._handlers: dict[str, Handler] = {key: self._run_named_script for key in SCRIPTS}
        self._handlers.update({key: self._send_escalation for key in ESCALATIONS})

    async def handle(self, recipient_id: str, use_case: str) -> None:
        """Resolve ``use_case`` in the catalog and execute it. Unknown keys are a no-op."""
        definition = self._catalog.lookup(use_case)
        if definition is None:
            logger.info("No quick reply defined for use case %r; ignoring", use_case)
            return

        definition = resolve_images(definition, self._server_url)
        handler = self._handlers.get(use_case, self._forward)
        await handler(recipient_id, use_case, definition)

    async def escalate(self, recipient_id: str, use_case: str) -> None:
        """Send the fixed button template for an escalation key."""
        escalation = ESCALATIONS.get(use_case)
        if escalation is None:
            logger.warning("No escalation defined for use case %r", use_case)
            return
        await self._messenger.send(escalation.render(recipient_id))

    async def reply_text(self, recipient_id: str, text: str) -> None:
        await self._messenger.send_text(recipient_id, text)

    async def typing(self, recipient_id: str) -> None:
        await self._messenger.send_typing(recipient_id)

    async def run_script(
        self,
        recipient_id: str,
        script: ConversationScript,
        definition: QuickReplyDefinition,
    ) -> bool:
        """Send every step in order, each only after the previous one succeeded.

        Returns False if a send failed and the remaining steps were dropped.
        """
        profile = await self._fetch_profile(recipient_id) if script.needs_profile else None

        for index, step in enumerate(script.steps):
            receipt = await self._messenger.send(step.render(recipient_id, definition, profile))
            if receipt is None:
                logger.warning(
                    "Script %s for %s aborted at step %d of %d",
                    script.name, recipient_id, index + 1, len(script.steps),
                )
                return False
        return True

    async def _fetch_profile(self, recipient_id: str) -> UserProfile | None:
        try:
            return await self._profiles.fetch(recipient_id)
        except GatewayError as exc:
            logger.warning("Profile lookup failed for %s: %s", recipient_id, exc)
            return None

    async def _run_named_script(
        self, recipient_id: str, use_case: str, definition: QuickReplyDefinition,
    ) -> None:
        await self.run_script(recipient_id, SCRIPTS[use_case], definition)

    async def _send_escalation(
        self, recipient_id: str, use_case: str, definition: QuickReplyDefinition,
    ) -> None:
        await self.escalate(recipient_id, use_case)

    async def _forward(
        self, recipient_id: str, use_case: str, definition: QuickReplyDefinition,
    ) -> None:
        await self._messenger.send(OutboundMessage.from_definition(recipient_id, definition))
