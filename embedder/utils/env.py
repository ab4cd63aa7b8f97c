"""Environment parsing helpers for consistent numeric and string handling."""
from __future__ import annotations

import logging
import os

logger = logging.getLogger(__name__)


def clean_env_value(value: str | None) -> str | None:
    """Strip inline `# comments` and surrounding whitespace from an env value."""
    if not value:
        return value
    return value.split("#")[0].strip()


def get_int(name: str, default: int) -> int:
    raw = clean_env_value(os.getenv(name))
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid {name} value '{raw}', using default {default}")
        return default


def get_float(name: str, default: float) -> float:
    raw = clean_env_value(os.getenv(name))
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid {name} value '{raw}', using default {default}")
        return default


def get_str(name: str, default: str) -> str:
    raw = clean_env_value(os.getenv(name))
    return raw if raw else default
