"""Messenger request signature verification (``x-hub-signature``)."""

from __future__ import annotations

import hashlib
import hmac
import logging

from responder.audit.logger import AuditLogger
from responder.errors import AuthError
from responder.models import AuditEvent, AuditEventType, RiskLevel

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-hub-signature"

_ALGORITHMS = {"sha1": hashlib.sha1, "sha256": hashlib.sha256}


class SignatureVerifier:
    """Checks the HMAC of a raw request body against the app secret.

    A missing header is only logged; a present but wrong signature raises
    ``AuthError`` so the request is rejected before any event is parsed.
    """

    def __init__(self, app_secret: str, audit_logger: AuditLogger | None = None) -> None:
        self._secret = app_secret.encode()
        self._audit = audit_logger

    def verify(self, body: bytes, header: str | None) -> bool:
        """Return True if the signature matched, False if no header was sent."""
        if not header:
            logger.warning("Couldn't validate the signature: %s header missing", SIGNATURE_HEADER)
            self._record(AuditEventType.SIGNATURE_MISSING, "missing", RiskLevel.MEDIUM)
            return False

        method, _, digest = header.partition("=")
        algorithm = _ALGORITHMS.get(method.lower())
        if algorithm is None or not digest:
            self._record(AuditEventType.SIGNATURE_INVALID, "malformed", RiskLevel.HIGH)
            raise AuthError(f"Unsupported signature format: {method or header!r}")

        expected = hmac.new(self._secret, body, algorithm).hexdigest()
        if not hmac.compare_digest(digest.lower().encode(), expected.encode()):
            self._record(AuditEventType.SIGNATURE_INVALID, "mismatch", RiskLevel.HIGH)
            raise AuthError("Couldn't validate the request signature.")
        return True

    def _record(self, event_type: AuditEventType, reason: str, risk: RiskLevel) -> None:
        if self._audit:
            self._audit.log(AuditEvent(
                event_type=event_type,
                action="POST /webhook",
                result="failure",
                risk_level=risk,
                details={"reason": reason},
            ))
