from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from bizsuite.app.core.config import settings
from bizsuite.app.core.paths import resolve_home_path

DEFAULT_BASE_URL = "http://localhost:5000"
DEFAULT_TIMEOUT_S = 30.0


def mask_token(token: str | None) -> str:
    v = (token or "").strip()
    if not v:
        return "(empty)"
    if len(v) <= 8:
        return "***"
    return f"{v[:6]}...{v[-4:]}"


def format_token_for_log(token: str | None) -> str:
    """
    Never print secrets by default.

    Set BIZSUITE_LOG_SECRETS=1 to see the full token while debugging locally.
    """
    if settings.LOG_SECRETS:
        return (token or "").strip() or "(empty)"
    return mask_token(token)


def default_config_path() -> Path:
    return resolve_home_path(settings.CONFIG_PATH)


def load_client_config(path: Path, *, logger: logging.Logger | None = None) -> dict[str, Any]:
    """
    Read the JSON client config (`base_url`, `timeout`, `credentials_path`).

    A missing file yields {}; an unreadable one is logged and also yields {}.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        if logger:
            logger.warning("Failed to load client config from %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def effective_base_url(config: dict[str, Any]) -> str:
    """BIZSUITE_BASE_URL overrides the file; the file overrides the default."""
    return (settings.BASE_URL or str(config.get("base_url") or "") or DEFAULT_BASE_URL).strip()


def effective_timeout(config: dict[str, Any]) -> float:
    if settings.TIMEOUT_S and settings.TIMEOUT_S > 0:
        return float(settings.TIMEOUT_S)
    try:
        value = float(config.get("timeout") or DEFAULT_TIMEOUT_S)
    except (TypeError, ValueError):
        return DEFAULT_TIMEOUT_S
    return value if value > 0 else DEFAULT_TIMEOUT_S


def effective_credentials_path(config: dict[str, Any]) -> Path:
    raw = str(config.get("credentials_path") or "") or settings.CREDENTIALS_PATH
    return resolve_home_path(raw)
