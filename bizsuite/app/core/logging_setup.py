from __future__ import annotations

import logging
import sys
from pathlib import Path

from bizsuite.app.core.config import settings
from bizsuite.services.registry import ensure_initialized

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    name: str = "bizsuite",
    *,
    level: str | None = None,
    log_file: str | Path | None = None,
) -> logging.Logger:
    """
    Attach console (and optional file) handlers to the `name` logger.

    Safe to call repeatedly: handlers are attached once per logger name per process.
    """
    logger = logging.getLogger(name)

    def _init() -> None:
        lvl = (level or settings.LOG_LEVEL or "INFO").upper()
        logger.setLevel(logging.DEBUG)

        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, lvl, logging.INFO))
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

        target = log_file if log_file is not None else (settings.LOG_FILE or None)
        if target:
            path = Path(target)
            path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(path, encoding="utf-8", mode="a")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        logger.propagate = False

    ensure_initialized(f"logging:{name}", _init)
    return logger
