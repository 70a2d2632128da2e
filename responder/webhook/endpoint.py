"""Messenger webhook boundary: challenge verification and batched ingestion."""

from __future__ import annotations

import hmac
import json
import logging
from typing import Any

from responder.audit.logger import AuditLogger
from responder.errors import ValidationError
from responder.models import AuditEvent, AuditEventType, InboundEvent, RiskLevel
from responder.webhook.events import parse_events
from responder.webhook.signature import SignatureVerifier

logger = logging.getLogger(__name__)


class MessengerWebhook:
    """Authenticates webhook calls and turns them into typed events.

    Sending replies is left to the caller so the platform gets its
    acknowledgement before any outbound call is made.
    """

    def __init__(
        self,
        validation_token: str,
        verifier: SignatureVerifier,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._validation_token = validation_token
        self._verifier = verifier
        self._audit = audit_logger

    def handle_verification(self, params: dict[str, str]) -> dict[str, Any]:
        """Answer the platform's subscribe challenge; 403 on any mismatch."""
        mode = params.get("hub.mode")
        token = params.get("hub.verify_token", "")
        if mode == "subscribe" and hmac.compare_digest(
            token.encode(), self._validation_token.encode(),
        ):
            logger.info("Validating webhook")
            self._record(AuditEventType.WEBHOOK_VERIFIED, "success", RiskLevel.INFO)
            return {"status_code": 200, "content": params.get("hub.challenge", "")}

        logger.error("Failed validation. Make sure the validation tokens match.")
        self._record(
            AuditEventType.WEBHOOK_VERIFY_FAILED, "failure", RiskLevel.MEDIUM, {"mode": mode},
        )
        return {"status_code": 403, "error": "Invalid verify token"}

    def ingest(self, body: bytes, signature: str | None) -> list[InboundEvent]:
        """Verify and parse one webhook delivery.

        Raises AuthError on a bad signature. A body that does not parse as a
        page subscription is logged and yields no events.
        """
        self._verifier.verify(body, signature)
        try:
            events = parse_events(json.loads(body))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            self._reject(f"invalid JSON: {exc}")
            return []
        except ValidationError as exc:
            self._reject(str(exc))
            return []

        logger.debug("Webhook delivery carried %d events", len(events))
        return events

    def _reject(self, reason: str) -> None:
        logger.warning("Ignoring webhook payload: %s", reason)
        self._record(
            AuditEventType.PAYLOAD_REJECTED, "ignored", RiskLevel.LOW, {"reason": reason},
        )

    def _record(
        self,
        event_type: AuditEventType,
        result: str,
        risk: RiskLevel,
        details: dict[str, object] | None = None,
    ) -> None:
        if self._audit:
            self._audit.log(AuditEvent(
                event_type=event_type,
                action="webhook",
                result=result,
                risk_level=risk,
                details=details,
            ))
