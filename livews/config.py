from __future__ import annotations

import logging
import os
from typing import Any, Dict
from urllib.parse import urlsplit

from dotenv import load_dotenv

from liveproto.constants import DEFAULT_HEARTBEAT_INTERVAL_MS

DEFAULT_CONFIG: Dict[str, Any] = {
    "ws_url": "wss://webcast16-ws-useast1a.tiktok.com/webcast/im/ws_proxy/ws_reuse_supplement/",
    "web_host": "www.tiktok.com",
    "params_append": "&version_code=180800",
    "heartbeat_interval_ms": DEFAULT_HEARTBEAT_INTERVAL_MS,
    "open_timeout": 10.0,
    "room_id": "",
    "session_cookie": "",
    "log_level": "INFO",
}

CLIENT_CONFIG: Dict[str, Any] = DEFAULT_CONFIG.copy()


class ConfigError(Exception):
    """Raised when configuration values are invalid."""

    pass


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def load_config(env_path: str = ".env") -> Dict[str, Any]:
    """Load client configuration from env file/environment variables (``LIVEWS_<KEY>``)."""
    if os.path.exists(env_path):
        load_dotenv(env_path)

    for key, default_value in DEFAULT_CONFIG.items():
        raw = os.getenv(f"LIVEWS_{key.upper()}")
        CLIENT_CONFIG[key] = default_value if raw is None else _coerce(key, raw, type(default_value))

    CLIENT_CONFIG["log_level"] = str(CLIENT_CONFIG["log_level"]).upper()
    _validate_config()
    logging.getLogger().setLevel(CLIENT_CONFIG["log_level"])
    return CLIENT_CONFIG


def _coerce(key: str, raw: str, target_type: type) -> Any:
    try:
        return target_type(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"LIVEWS_{key.upper()}={raw!r} is not a valid {target_type.__name__}") from exc


def _validate_config() -> None:
    url = urlsplit(str(CLIENT_CONFIG["ws_url"]))
    if url.scheme not in ("ws", "wss") or not url.netloc:
        raise ConfigError("ws_url must be an absolute ws:// or wss:// URL")
    if url.query:
        raise ConfigError("ws_url must not carry a query string; room parameters are appended at connect time")
    append = CLIENT_CONFIG["params_append"]
    if append and not append.startswith("&"):
        raise ConfigError("params_append must be empty or start with '&'")
    if not CLIENT_CONFIG["web_host"] or "/" in CLIENT_CONFIG["web_host"]:
        raise ConfigError("web_host must be a bare host name")
    if CLIENT_CONFIG["room_id"] and not CLIENT_CONFIG["room_id"].isdigit():
        raise ConfigError("room_id must be numeric")
    if CLIENT_CONFIG["heartbeat_interval_ms"] <= 0:
        raise ConfigError("heartbeat_interval_ms must be positive")
    if CLIENT_CONFIG["open_timeout"] <= 0:
        raise ConfigError("open_timeout must be positive")
    if CLIENT_CONFIG["log_level"] not in LOG_LEVELS:
        raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}")


__all__ = ["CLIENT_CONFIG", "DEFAULT_CONFIG", "ConfigError", "load_config"]
