"""Outbound Messenger Send API client.

The only component allowed to call the Send endpoint. One attempt per
message, no retry; failures are logged and reported to the caller, never
raised.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx
from pydantic import ValidationError

from responder.audit.logger import AuditLogger
from responder.errors import GatewayError
from responder.models import AuditEvent, AuditEventType, OutboundMessage, RiskLevel, SendReceipt

logger = logging.getLogger(__name__)

_SEND_TIMEOUT_SECONDS = 15.0

OnDone = Callable[[GatewayError | None], None]


class OutboundMessenger:
    """Wraps the ``/me/messages`` call with a completion continuation."""

    def __init__(
        self,
        page_access_token: str,
        graph_api_url: str,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._access_token = page_access_token
        self._url = f"{graph_api_url.rstrip('/')}/me/messages"
        self._audit = audit_logger

    async def send(
        self, message: OutboundMessage, on_done: OnDone | None = None,
    ) -> SendReceipt | None:
        """Send one message. Returns the receipt, or None if the call failed."""
        try:
            receipt = await self._post(message.to_payload())
        except GatewayError as exc:
            logger.error(
                "Failed calling Send API for recipient %s: %s (status=%s)",
                message.recipient_id, exc, exc.status_code,
            )
            self._record_failure(message, exc)
            _notify(on_done, exc)
            return None

        logger.info(
            "Successfully called Send API for recipient %s, message %s",
            receipt.recipient_id, receipt.message_id,
        )
        _notify(on_done, None)
        return receipt

    async def send_text(self, recipient_id: str, text: str) -> SendReceipt | None:
        return await self.send(OutboundMessage.text(recipient_id, text))

    async def send_typing(self, recipient_id: str) -> SendReceipt | None:
        return await self.send(OutboundMessage.typing_on(recipient_id))

    async def _post(self, payload: dict[str, Any]) -> SendReceipt:
        try:
            async with httpx.AsyncClient(verify=True) as client:
                resp = await client.post(
                    self._url,
                    params={"access_token": self._access_token},
                    json=payload,
                    timeout=_SEND_TIMEOUT_SECONDS,
                )
        except httpx.HTTPError as exc:
            raise GatewayError(f"Send API unreachable: {exc}") from exc

        if resp.status_code != 200:
            raise GatewayError(_describe_error(resp), status_code=resp.status_code)
        try:
            body = resp.json()
        except ValueError as exc:
            raise GatewayError("Send API returned a non-JSON body", resp.status_code) from exc
        if not isinstance(body, dict):
            raise GatewayError("Send API returned an unexpected body", resp.status_code)
        try:
            return SendReceipt.model_validate(body)
        except ValidationError as exc:
            raise GatewayError("Send API returned an unexpected body", resp.status_code) from exc

    def _record_failure(self, message: OutboundMessage, exc: GatewayError) -> None:
        if self._audit:
            self._audit.log(AuditEvent(
                event_type=AuditEventType.SEND_FAILED,
                user_id=message.recipient_id,
                action="send_message",
                result="failure",
                risk_level=RiskLevel.LOW,
                details={"error": str(exc), "status_code": exc.status_code},
            ))


def _describe_error(resp: httpx.Response) -> str:
    """Pull the platform's error message out of a failed Graph API response."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return f"HTTP {resp.status_code}"


def _notify(on_done: OnDone | None, error: GatewayError | None) -> None:
    """Run the caller's continuation; its own failures are logged, not raised."""
    if on_done is None:
        return
    try:
        on_done(error)
    except Exception:
        logger.exception("Send continuation raised")
