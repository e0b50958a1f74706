"""Configuration loader.

Reads environment variables and `.env` to configure the service.
"""

from __future__ import annotations

import os
from typing import List, Optional
from pathlib import Path

from dotenv import load_dotenv

# Load variables from a .env file if present (project root).
load_dotenv(dotenv_path=Path(__file__).resolve().parents[1] / ".env")


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


def _get_env(name: str, default: Optional[str] = None) -> Optional[str]:
    return os.environ.get(name, default)


def _parse_bool(value: Optional[str], default: bool = False) -> bool:
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes")


def _parse_int(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


def _parse_float(value: Optional[str], default: float) -> float:
    try:
        return float(value) if value is not None else default
    except ValueError:
        return default


def parse_id_list(raw: Optional[str]) -> List[str]:
    """Split a comma-separated id list, trimming whitespace and dropping blanks."""
    return [s.strip() for s in (raw or "").split(",") if s.strip()]


# ---- Discord -----------------------------------------------------------------

# Bot token used for the Discord REST API.
TOKEN: Optional[str] = _get_env("TOKEN")

# Channel that receives inventory change messages.
CHANNEL_ID: Optional[str] = _get_env("CHANNEL_ID")

DISCORD_API_BASE: str = _get_env("DISCORD_API_BASE", "https://discord.com/api/v10")

# Optional user id to @mention in change messages.
MENTION_USER_ID: Optional[str] = _get_env("MENTION_USER_ID") or None

# Post an "online" message once the baseline pass is done.
ANNOUNCE_STARTUP: bool = _parse_bool(_get_env("ANNOUNCE_STARTUP", "true"), True)

# ---- Steam inventory source --------------------------------------------------

# Tracked accounts, comma-separated SteamID64 values.
STEAM_IDS: List[str] = parse_id_list(_get_env("STEAM_IDS", ""))

# Defaults to CS2 (730) with the standard item context (2).
APPID: int = _parse_int(_get_env("APPID", "730"), 730)
CONTEXTID: int = _parse_int(_get_env("CONTEXTID", "2"), 2)

# Should not include a trailing slash.
INVENTORY_BASE_URL: str = _get_env("INVENTORY_BASE_URL", "https://steamcommunity.com/inventory")
INVENTORY_LANGUAGE: str = _get_env("INVENTORY_LANGUAGE", "english")
INVENTORY_COUNT: int = _parse_int(_get_env("INVENTORY_COUNT", "500"), 500)

USER_AGENT: str = _get_env("USER_AGENT", "Mozilla/5.0 (compatible; InventoryBot/1.0)")

# ---- Polling & retry ---------------------------------------------------------

# Seconds between sweeps. 600 is a sensible value with many accounts.
CHECK_INTERVAL_SECONDS: float = _parse_float(_get_env("CHECK_INTERVAL_SECONDS", "60"), 60.0)

# Attempts per fetch, first request included.
MAX_RETRIES: int = _parse_int(_get_env("MAX_RETRIES", "3"), 3)

# Rate-limit backoff unit: waits are BACKOFF_BASE_SECONDS * 2**(attempt-1).
BACKOFF_BASE_SECONDS: float = _parse_float(_get_env("BACKOFF_BASE_SECONDS", "60"), 60.0)

# Fixed wait before retrying after a connection error or timeout.
TRANSPORT_RETRY_DELAY_SECONDS: float = _parse_float(_get_env("TRANSPORT_RETRY_DELAY_SECONDS", "5"), 5.0)

REQUEST_TIMEOUT_SECONDS: float = _parse_float(_get_env("REQUEST_TIMEOUT_SECONDS", "30"), 30.0)

# ---- Liveness server ---------------------------------------------------------

HEALTH_SERVER_ENABLED: bool = _parse_bool(_get_env("HEALTH_SERVER_ENABLED", "true"), True)
PORT: int = _parse_int(_get_env("PORT", "3000"), 3000)

# Logging level: DEBUG, INFO, WARNING, ERROR.
LOG_LEVEL: str = _get_env("LOG_LEVEL", "INFO")

# ---- Validation --------------------------------------------------------------

def validate() -> None:
    """Validate required configuration parameters."""
    if not STEAM_IDS:
        raise ConfigError(
            "No Steam IDs found in the STEAM_IDS environment variable. Please set it."
        )
    if not TOKEN:
        raise ConfigError("TOKEN must be set. See .env.example for details.")
    if not CHANNEL_ID:
        raise ConfigError("CHANNEL_ID must be set. See .env.example for details.")
    if MAX_RETRIES < 1:
        raise ConfigError(f"MAX_RETRIES must be at least 1 (got {MAX_RETRIES}).")
    if CHECK_INTERVAL_SECONDS <= 0:
        raise ConfigError(
            f"CHECK_INTERVAL_SECONDS must be positive (got {CHECK_INTERVAL_SECONDS})."
        )


__all__ = [
    # Discord
    "TOKEN",
    "CHANNEL_ID",
    "DISCORD_API_BASE",
    "MENTION_USER_ID",
    "ANNOUNCE_STARTUP",
    # Steam
    "STEAM_IDS",
    "APPID",
    "CONTEXTID",
    "INVENTORY_BASE_URL",
    "INVENTORY_LANGUAGE",
    "INVENTORY_COUNT",
    "USER_AGENT",
    # Polling & retry
    "CHECK_INTERVAL_SECONDS",
    "MAX_RETRIES",
    "BACKOFF_BASE_SECONDS",
    "TRANSPORT_RETRY_DELAY_SECONDS",
    "REQUEST_TIMEOUT_SECONDS",
    # Liveness
    "HEALTH_SERVER_ENABLED",
    "PORT",
    "LOG_LEVEL",
    # Helpers
    "ConfigError",
    "parse_id_list",
    "validate",
]
