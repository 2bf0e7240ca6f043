"""Environment-driven settings for the feeds, CLI, and dashboard."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


DEFAULT_TIMEZONE = "Australia/Melbourne"
DEFAULT_HTTP_TIMEOUT_SEC = 20.0
DEFAULT_USER_AGENT = "bizdays/0.3 (+public holiday feed)"
DEFAULT_STORAGE_ROOT = Path(".local_store")

TIMEZONE_ENV_VAR = "BIZDAYS_TIMEZONE"
HTTP_TIMEOUT_ENV_VAR = "BIZDAYS_HTTP_TIMEOUT"
STORAGE_ENV_VAR = "BIZDAYS_STORAGE_ROOT"
USER_AGENT_ENV_VAR = "BIZDAYS_USER_AGENT"


@dataclass(frozen=True)
class Settings:
    timezone: str
    http_timeout_sec: float
    user_agent: str
    storage_root: Path


def expand_storage_root(path_value: str | Path | None) -> Path:
    if path_value is None:
        return DEFAULT_STORAGE_ROOT
    text = str(path_value).strip()
    if not text:
        return DEFAULT_STORAGE_ROOT
    expanded = os.path.expandvars(os.path.expanduser(text))
    return Path(expanded)


def is_known_timezone(name: str) -> bool:
    if not name:
        return False
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return False
    return True


def _timezone_from_text(text: str | None) -> str:
    name = str(text or "").strip()
    return name if name and is_known_timezone(name) else DEFAULT_TIMEZONE


def _timeout_from_text(text: str | None) -> float:
    if text is None or not str(text).strip():
        return DEFAULT_HTTP_TIMEOUT_SEC
    try:
        value = float(text)
    except (TypeError, ValueError):
        return DEFAULT_HTTP_TIMEOUT_SEC
    return value if value > 0 else DEFAULT_HTTP_TIMEOUT_SEC


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Read settings from ``environ`` (defaults to ``os.environ``)."""
    env = os.environ if environ is None else environ
    return Settings(
        timezone=_timezone_from_text(env.get(TIMEZONE_ENV_VAR)),
        http_timeout_sec=_timeout_from_text(env.get(HTTP_TIMEOUT_ENV_VAR)),
        user_agent=(env.get(USER_AGENT_ENV_VAR) or "").strip() or DEFAULT_USER_AGENT,
        storage_root=expand_storage_root(env.get(STORAGE_ENV_VAR, "")),
    )
