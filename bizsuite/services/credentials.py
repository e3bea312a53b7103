from __future__ import annotations

import json
import logging
import os
import threading
import time
from pathlib import Path

logger = logging.getLogger(__name__)


class CredentialStore:
    """
    Bearer token persisted as JSON: {"access_token": "...", "saved_at_ms": 0}.

    Read on every request by the HTTP client; a missing or unreadable file means
    "not logged in" and requests go out without an Authorization header.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._lock = threading.Lock()

    def load_token(self) -> str | None:
        with self._lock:
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except FileNotFoundError:
                return None
            except (OSError, ValueError) as exc:
                logger.warning("Failed to read credentials from %s: %s", self.path, exc)
                return None
        if not isinstance(data, dict):
            return None
        token = str(data.get("access_token") or "").strip()
        return token or None

    def save_token(self, token: str) -> None:
        value = (token or "").strip()
        if not value:
            raise ValueError("token must not be empty")
        payload = {"access_token": value, "saved_at_ms": int(time.time() * 1000)}
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp = self.path.with_suffix(self.path.suffix + ".tmp")
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(payload, f)
            os.replace(tmp, self.path)

    def clear(self) -> bool:
        with self._lock:
            try:
                self.path.unlink()
            except FileNotFoundError:
                return False
            return True


class StaticTokenProvider:
    def __init__(self, token: str | None):
        self._token = token

    def load_token(self) -> str | None:
        return self._token
