"""
Environment variable loading for cartwatch.

- CART_SERVICE_URL / PRODUCT_CATALOG_SERVICE_URL / EMAIL_SERVICE_URL: service endpoints
- ANALYSIS_SERVICE_URL: optional analysis model endpoint (unset = rule-based decisions)
- CANDIDATE_USER_IDS: comma-separated user ids polled every tick
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from cartwatch.core.exceptions import ConfigError

# Project root: config is cartwatch/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

_TRUTHY = ("1", "true", "yes", "on")


def load_cartwatch_env() -> None:
    """Load .env from project root. Safe to call multiple times; never overrides the process env."""
    load_dotenv(_ENV_PATH, override=False)


def env_str(name: str, default: str = "") -> str:
    """Return the stripped value of an env var, or default when unset/blank."""
    raw = (os.getenv(name) or "").strip()
    return raw or default


def env_float(name: str, default: float) -> float:
    raw = env_str(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


def env_int(name: str, default: int) -> int:
    raw = env_str(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def env_bool(name: str, default: bool = False) -> bool:
    raw = env_str(name).lower()
    if not raw:
        return default
    return raw in _TRUTHY


def env_list(name: str) -> list[str]:
    """Comma-separated list; blanks dropped, order kept, duplicates removed."""
    seen: set[str] = set()
    out: list[str] = []
    for part in env_str(name).split(","):
        item = part.strip()
        if item and item not in seen:
            seen.add(item)
            out.append(item)
    return out
