"""Runtime configuration read from environment variables."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

from chess_api import DEFAULT_BASE_URL, DEFAULT_TIMEOUT


logger = logging.getLogger(__name__)


def env_flag(name: str, *, default: bool = False) -> bool:
    """Return a boolean flag from environment variables.

    Common truthy values (``1``, ``true``, ``yes``, ``on``) give ``True`` and
    common falsy ones (``0``, ``false``, ``no``, ``off``) give ``False``.  An
    unset variable or an unrecognised value falls back to ``default``.
    """
    value = os.getenv(name)
    if value is None:
        return default

    normalised = value.strip().lower()
    if normalised in {"1", "true", "yes", "on"}:
        return True
    if normalised in {"0", "false", "no", "off"}:
        return False
    return default


def env_float(name: str, *, default: float) -> float:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value)
    except ValueError:
        logger.warning("Invalid %s=%r, using %s", name, value, default)
        return default


def env_int(name: str, *, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning("Invalid %s=%r, using %s", name, value, default)
        return default


@dataclass(frozen=True)
class Settings:
    bot_token: Optional[str]
    webhook_url: Optional[str]
    chess_api_url: str = DEFAULT_BASE_URL
    chess_api_timeout: float = DEFAULT_TIMEOUT
    session_ttl_hours: float = 24.0
    session_sweep_interval: int = 600
    session_sweep_enabled: bool = True
    log_level: str = "INFO"

    def require_token(self) -> str:
        if not self.bot_token:
            raise RuntimeError("BOT_TOKEN environment variable is not set")
        return self.bot_token

    def require_webhook_url(self) -> str:
        if not self.webhook_url:
            raise RuntimeError("WEBHOOK_URL environment variable is not set")
        return self.webhook_url


def load_settings() -> Settings:
    return Settings(
        bot_token=os.getenv("BOT_TOKEN") or None,
        webhook_url=os.getenv("WEBHOOK_URL") or None,
        chess_api_url=os.getenv("CHESS_API_URL") or DEFAULT_BASE_URL,
        chess_api_timeout=env_float("CHESS_API_TIMEOUT", default=DEFAULT_TIMEOUT),
        session_ttl_hours=env_float("SESSION_TTL_HOURS", default=24.0),
        session_sweep_interval=env_int("SESSION_SWEEP_INTERVAL", default=600),
        session_sweep_enabled=env_flag("SESSION_SWEEP_ENABLED", default=True),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )


__all__ = [
    "Settings",
    "env_flag",
    "env_float",
    "env_int",
    "load_settings",
]
