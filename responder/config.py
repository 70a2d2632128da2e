"""Process configuration, built once at startup and passed explicitly."""

from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from responder.errors import ConfigError

DEFAULT_GRAPH_API_URL = "https://graph.facebook.com/v2.6"
DEFAULT_PLACES_API_URL = "https://maps.googleapis.com/maps/api/place"

# JSON config key -> (settings field, environment override)
_SOURCES: dict[str, tuple[str, str]] = {
    "appSecret": ("app_secret", "MESSENGER_APP_SECRET"),
    "validationToken": ("validation_token", "MESSENGER_VALIDATION_TOKEN"),
    "pageAccessToken": ("page_access_token", "MESSENGER_PAGE_ACCESS_TOKEN"),
    "serverURL": ("server_url", "SERVER_URL"),
    "googlePlacesApiKey": ("places_api_key", "GOOGLE_PLACES_API_KEY"),
    "quickRepliesPath": ("quick_replies_path", "QUICK_REPLIES_PATH"),
    "graphApiURL": ("graph_api_url", "GRAPH_API_URL"),
    "placesApiURL": ("places_api_url", "PLACES_API_URL"),
    "auditLogPath": ("audit_log_path", "AUDIT_LOG_PATH"),
    "logLevel": ("log_level", "LOG_LEVEL"),
    "port": ("port", "PORT"),
}

_REQUIRED = ("app_secret", "validation_token", "page_access_token", "server_url")


class Settings(BaseModel):
    """Immutable runtime configuration."""

    model_config = ConfigDict(frozen=True)

    app_secret: str = Field(min_length=1)
    validation_token: str = Field(min_length=1)
    page_access_token: str = Field(min_length=1)
    server_url: str = Field(min_length=1)
    places_api_key: str = ""
    quick_replies_path: str = "data/quick_replies.json"
    graph_api_url: str = DEFAULT_GRAPH_API_URL
    places_api_url: str = DEFAULT_PLACES_API_URL
    audit_log_path: str | None = None
    log_level: str = "INFO"
    port: int = 5000

    @classmethod
    def from_env(
        cls,
        config_path: str | None = None,
        environ: dict[str, str] | None = None,
    ) -> Settings:
        """Read an optional JSON config file, then apply environment overrides.

        Environment variables win over file values, mirroring how the
        platform credentials are usually injected at deploy time.
        """
        env = os.environ if environ is None else environ
        file_values: dict[str, object] = {}
        path = config_path or env.get("RESPONDER_CONFIG")
        if path:
            try:
                file_values = json.loads(Path(path).read_text())
            except (OSError, json.JSONDecodeError) as exc:
                raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
            if not isinstance(file_values, dict):
                raise ConfigError(f"Config file {path} must contain a JSON object")

        values: dict[str, object] = {}
        for key, (field_name, env_name) in _SOURCES.items():
            if env.get(env_name):
                values[field_name] = env[env_name]
            elif file_values.get(key) not in (None, ""):
                values[field_name] = file_values[key]

        missing = [name for name in _REQUIRED if not values.get(name)]
        if missing:
            raise ConfigError(f"Missing config values: {', '.join(missing)}")
        try:
            return cls(**values)  # type: ignore[arg-type]
        except ValidationError as exc:
            raise ConfigError(f"Invalid config values: {exc}") from exc
