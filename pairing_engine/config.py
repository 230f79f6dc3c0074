"""Environment-driven defaults for the pairing engine."""

from __future__ import annotations

import os
from typing import Optional

WEEKDAY_MODE_ENUMERATE = "enumerate"
WEEKDAY_MODE_ENDPOINTS = "endpoints"
WEEKDAY_MODES = (WEEKDAY_MODE_ENUMERATE, WEEKDAY_MODE_ENDPOINTS)


def _env_minutes(name: str, default: int) -> int:
    """Read a non-negative minute count; anything else keeps ``default``."""

    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


def _env_optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value > 0 else None


BASE_TZ_NAME: Optional[str] = os.getenv("PAIRING_BASE_TZ") or None
WEEKDAY_RESTRICTION_MODE = os.getenv("PAIRING_WEEKDAY_RESTRICTION_MODE", WEEKDAY_MODE_ENUMERATE).strip().lower()
if WEEKDAY_RESTRICTION_MODE not in WEEKDAY_MODES:
    WEEKDAY_RESTRICTION_MODE = WEEKDAY_MODE_ENUMERATE
PARSE_MAX_WORKERS = _env_optional_int("PAIRING_PARSE_MAX_WORKERS")
REPORT_BUFFER_MINUTES = _env_minutes("PAIRING_REPORT_BUFFER_MIN", 60)
RELEASE_BUFFER_MINUTES = _env_minutes("PAIRING_RELEASE_BUFFER_MIN", 30)

__all__ = [
    "BASE_TZ_NAME",
    "PARSE_MAX_WORKERS",
    "RELEASE_BUFFER_MINUTES",
    "REPORT_BUFFER_MINUTES",
    "WEEKDAY_MODES",
    "WEEKDAY_MODE_ENDPOINTS",
    "WEEKDAY_MODE_ENUMERATE",
    "WEEKDAY_RESTRICTION_MODE",
]
