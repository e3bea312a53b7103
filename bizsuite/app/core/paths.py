from __future__ import annotations

from pathlib import Path

from bizsuite.app.core.config import settings


def package_root() -> Path:
    # bizsuite/app/core/paths.py -> bizsuite
    return Path(__file__).resolve().parents[2]


def home_dir() -> Path:
    """
    Per-user state directory (client config, persisted token, log file).

    Defaults to `~/.bizsuite`; override with BIZSUITE_HOME_DIR.
    """
    raw = (settings.HOME_DIR or "").strip()
    if raw:
        return Path(raw).expanduser()
    return Path.home() / ".bizsuite"


def resolve_home_path(path: str | Path) -> Path:
    """Resolve a path relative to `home_dir()`; absolute paths are returned unchanged."""
    p = Path(path).expanduser()
    if p.is_absolute():
        return p
    return home_dir() / p
