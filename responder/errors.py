"""Error taxonomy for the responder."""

from __future__ import annotations


class ResponderError(Exception):
    """Base class for all responder errors."""


class AuthError(ResponderError):
    """Webhook signature did not match the request body."""


class ValidationError(ResponderError):
    """Webhook payload has an unexpected shape."""


class GatewayError(ResponderError):
    """A call to the Send, Profile or Places API failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CatalogMissError(ResponderError, KeyError):
    """Requested use-case key is not in the quick-reply catalog."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Unknown use case: {self.key}"


class CatalogError(ResponderError):
    """Quick-reply store could not be read or validated."""


class ConfigError(ResponderError):
    """Required configuration is missing or invalid."""
