from __future__ import annotations

import threading
from typing import Any, Callable, TypeVar

T = TypeVar("T")

_lock = threading.Lock()
_key_locks: dict[str, threading.RLock] = {}
_initialized: set[str] = set()
_instances: dict[str, Any] = {}


def _key_lock(key: str) -> threading.RLock:
    with _lock:
        lock = _key_locks.get(key)
        if lock is None:
            lock = threading.RLock()
            _key_locks[key] = lock
        return lock


def ensure_initialized(key: str, init: Callable[[], None]) -> bool:
    """
    Run `init` at most once per process for `key`.

    Returns True when this call ran the initializer, False when `key` was already
    initialized. If `init` raises, `key` stays uninitialized so a later call retries.
    Only callers of the same key wait while `init` runs.
    """
    with _key_lock(key):
        if is_initialized(key):
            return False
        init()
        with _lock:
            _initialized.add(key)
        return True


def is_initialized(key: str) -> bool:
    with _lock:
        return key in _initialized


def get_or_create(key: str, factory: Callable[[], T]) -> T:
    """Return the process-wide instance registered under `key`, building it on first use."""
    with _key_lock(key):
        with _lock:
            if key in _instances:
                return _instances[key]
        instance = factory()
        with _lock:
            _instances[key] = instance
            _initialized.add(key)
        return instance


def reset_registry() -> None:
    """Forget every registration. Intended for tests."""
    with _lock:
        _initialized.clear()
        _instances.clear()
