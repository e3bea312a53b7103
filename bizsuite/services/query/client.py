from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Executor, Future
from dataclasses import dataclass, replace
from typing import Any, Callable, Generic, Literal, TypeVar

from bizsuite.services.query.keys import QueryKey, is_prefix

T = TypeVar("T")
V = TypeVar("V")

logger = logging.getLogger(__name__)

QueryStatus = Literal["pending", "success", "error"]
QueryEvent = Literal["updated", "invalidated", "removed"]
QueryListener = Callable[[str, QueryKey], None]

DEFAULT_GC_TIME_S = 10 * 60


@dataclass(frozen=True)
class QueryState:
    data: Any = None
    error: BaseException | None = None
    data_updated_at: float | None = None
    error_updated_at: float | None = None
    is_invalidated: bool = False
    fetch_count: int = 0

    @property
    def has_data(self) -> bool:
        return self.data_updated_at is not None

    @property
    def status(self) -> QueryStatus:
        if self.error is not None:
            return "error"
        if self.has_data:
            return "success"
        return "pending"


class _Entry:
    __slots__ = ("state", "inflight", "generation", "observers", "last_used")

    def __init__(self, now: float):
        self.state = QueryState()
        self.inflight: Future | None = None
        self.generation = 0
        self.observers = 0
        self.last_used = now


class QueryClient:
    """
    Process-wide query cache.

    Entries are keyed by query-key tuples. At most one fetch per exact key is in flight;
    concurrent `fetch_query` calls for that key wait on the same future. Entries with no
    observers are dropped by `collect_garbage()` once unused for `gc_time_s`.
    """

    def __init__(
        self,
        *,
        gc_time_s: float = DEFAULT_GC_TIME_S,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.gc_time_s = gc_time_s
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[QueryKey, _Entry] = {}
        self._listeners: list[QueryListener] = []

    def _entry(self, key: QueryKey) -> _Entry:
        entry = self._entries.get(key)
        if entry is None:
            entry = _Entry(self._clock())
            self._entries[key] = entry
        return entry

    def _notify(self, event: str, keys: list[QueryKey]) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for key in keys:
            for listener in listeners:
                try:
                    listener(event, key)
                except Exception:
                    logger.exception("Query listener failed for %s %s", event, key)

    def _is_stale(self, state: QueryState, stale_time_s: float) -> bool:
        if not state.has_data or state.is_invalidated:
            return True
        return (self._clock() - (state.data_updated_at or 0.0)) >= stale_time_s

    def is_stale(self, key: QueryKey, stale_time_s: float = 0.0) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return True if entry is None else self._is_stale(entry.state, stale_time_s)

    def fetch_query(
        self,
        key: QueryKey,
        fn: Callable[[], T],
        *,
        stale_time_s: float = 0.0,
        force: bool = False,
    ) -> T:
        """
        Return fresh cached data for `key`, or run `fn` and cache its result.

        Errors raised by `fn` are recorded on the entry and re-raised to every caller
        waiting on that fetch. If the key is removed while `fn` runs, its result is
        returned to the waiting callers but not cached.
        """
        with self._lock:
            entry = self._entry(key)
            entry.last_used = self._clock()
            if not force and entry.inflight is None and not self._is_stale(entry.state, stale_time_s):
                return entry.state.data
            future = entry.inflight
            owner = future is None
            if owner:
                future = Future()
                future.set_running_or_notify_cancel()
                entry.inflight = future
                generation = entry.generation
            started = entry

        if not owner:
            return future.result()

        try:
            data = fn()
        except BaseException as exc:
            with self._lock:
                started.inflight = None
                if self._entries.get(key) is started:
                    started.state = replace(
                        started.state,
                        error=exc,
                        error_updated_at=self._clock(),
                        fetch_count=started.state.fetch_count + 1,
                    )
            future.set_exception(exc)
            self._notify("updated", [key])
            raise

        with self._lock:
            started.inflight = None
            stored = self._entries.get(key) is started
            if stored:
                started.state = QueryState(
                    data=data,
                    error=None,
                    data_updated_at=self._clock(),
                    is_invalidated=started.generation != generation,
                    fetch_count=started.state.fetch_count + 1,
                )
        future.set_result(data)
        if stored:
            self._notify("updated", [key])
        return data

    def get_query_state(self, key: QueryKey) -> QueryState | None:
        with self._lock:
            entry = self._entries.get(key)
            return entry.state if entry is not None else None

    def get_query_data(self, key: QueryKey) -> Any:
        state = self.get_query_state(key)
        return state.data if state is not None else None

    def set_query_data(self, key: QueryKey, data: Any) -> None:
        with self._lock:
            entry = self._entry(key)
            entry.state = replace(
                entry.state, data=data, error=None, data_updated_at=self._clock(), is_invalidated=False
            )
            entry.last_used = self._clock()
        self._notify("updated", [key])

    def keys(self, prefix: QueryKey = ()) -> list[QueryKey]:
        with self._lock:
            return [k for k in self._entries if is_prefix(prefix, k)]

    def invalidate_queries(self, prefix: QueryKey = ()) -> list[QueryKey]:
        """Mark every entry under `prefix` stale; the next read refetches it."""
        with self._lock:
            matched = []
            for key, entry in self._entries.items():
                if is_prefix(prefix, key):
                    entry.generation += 1
                    entry.state = replace(entry.state, is_invalidated=True)
                    matched.append(key)
        self._notify("invalidated", matched)
        return matched

    def remove_queries(self, prefix: QueryKey = ()) -> list[QueryKey]:
        with self._lock:
            matched = [k for k in self._entries if is_prefix(prefix, k)]
            for key in matched:
                del self._entries[key]
        self._notify("removed", matched)
        return matched

    def is_fetching(self, prefix: QueryKey = ()) -> int:
        with self._lock:
            return sum(1 for k, e in self._entries.items() if e.inflight is not None and is_prefix(prefix, k))

    def is_fetching_key(self, key: QueryKey) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and entry.inflight is not None

    def subscribe(self, listener: QueryListener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def retain(self, key: QueryKey) -> None:
        with self._lock:
            entry = self._entry(key)
            entry.observers += 1
            entry.last_used = self._clock()

    def release(self, key: QueryKey) -> None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                entry.observers = max(0, entry.observers - 1)
                entry.last_used = self._clock()

    def collect_garbage(self) -> list[QueryKey]:
        now = self._clock()
        with self._lock:
            expired = [
                k
                for k, e in self._entries.items()
                if e.observers == 0 and e.inflight is None and (now - e.last_used) >= self.gc_time_s
            ]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Query cache collected %s entries", len(expired))
            self._notify("removed", expired)
        return expired

    def clear(self) -> None:
        with self._lock:
            keys = list(self._entries)
            self._entries.clear()
        self._notify("removed", keys)


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    data: T | None
    error: BaseException | None
    status: QueryStatus
    is_fetching: bool = False
    is_placeholder_data: bool = False
    is_stale: bool = True

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def is_error(self) -> bool:
        return self.status == "error"

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"


class QueryObserver(Generic[T]):
    """
    One consumer's view of a cached query.

    Fetch errors land in `QueryResult.error` instead of being raised. After `destroy()`
    a fetch still completes into the cache but listeners are no longer called.
    """

    def __init__(
        self,
        client: QueryClient,
        key: QueryKey,
        fn: Callable[[], T],
        *,
        stale_time_s: float = 0.0,
        keep_previous_data: bool = False,
        enabled: bool = True,
    ):
        self._client = client
        self._key = key
        self._fn = fn
        self.stale_time_s = stale_time_s
        self.keep_previous_data = keep_previous_data
        self.enabled = enabled
        self._previous_data: Any = None
        self._has_previous = False
        self._listeners: list[Callable[[QueryResult[T]], None]] = []
        self._destroyed = False
        self._lock = threading.Lock()
        client.retain(key)

    @property
    def key(self) -> QueryKey:
        return self._key

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def set_options(
        self,
        *,
        key: QueryKey | None = None,
        fn: Callable[[], T] | None = None,
        enabled: bool | None = None,
        stale_time_s: float | None = None,
        keep_previous_data: bool | None = None,
    ) -> None:
        if fn is not None:
            self._fn = fn
        if enabled is not None:
            self.enabled = enabled
        if stale_time_s is not None:
            self.stale_time_s = stale_time_s
        if keep_previous_data is not None:
            self.keep_previous_data = keep_previous_data
        if key is not None and key != self._key:
            state = self._client.get_query_state(self._key)
            with self._lock:
                if state is not None and state.has_data:
                    self._previous_data = state.data
                    self._has_previous = True
                old, self._key = self._key, key
            self._client.release(old)
            self._client.retain(key)

    def get_result(self) -> QueryResult[T]:
        key = self._key
        state = self._client.get_query_state(key) or QueryState()
        fetching = self._client.is_fetching_key(key)
        stale = self._client.is_stale(key, self.stale_time_s)
        if not state.has_data and self.keep_previous_data and self._has_previous and state.error is None:
            return QueryResult(
                data=self._previous_data,
                error=None,
                status="success",
                is_fetching=fetching,
                is_placeholder_data=True,
                is_stale=stale,
            )
        return QueryResult(
            data=state.data,
            error=state.error,
            status=state.status,
            is_fetching=fetching,
            is_placeholder_data=False,
            is_stale=stale,
        )

    def fetch(self, *, force: bool = False) -> QueryResult[T]:
        """Read through the cache, fetching when the entry is missing or stale."""
        if not self.enabled:
            return self.get_result()
        key = self._key
        try:
            self._client.fetch_query(key, self._fn, stale_time_s=self.stale_time_s, force=force)
        except Exception:
            logger.debug("Query %s failed", key, exc_info=True)
        result = self.get_result()
        self._deliver(result)
        return result

    def refetch(self) -> QueryResult[T]:
        return self.fetch(force=True)

    def fetch_in_background(self, executor: Executor, *, force: bool = False) -> Future:
        return executor.submit(self.fetch, force=force)

    def subscribe(self, listener: Callable[[QueryResult[T]], None]) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _deliver(self, result: QueryResult[T]) -> None:
        with self._lock:
            if self._destroyed:
                return
            listeners = list(self._listeners)
        for listener in listeners:
            listener(result)

    def destroy(self) -> None:
        with self._lock:
            if self._destroyed:
                return
            self._destroyed = True
            self._listeners.clear()
        self._client.release(self._key)


MutationStatus = Literal["idle", "pending", "success", "error"]


class Mutation(Generic[V, T]):
    """
    A write bound to cache side effects.

    `mutate()` runs `fn`; on success `on_success(result, variables)` updates the cache.
    On failure the error is logged, recorded, left out of the cache and re-raised.
    """

    def __init__(
        self,
        fn: Callable[[V], T],
        *,
        label: str,
        on_success: Callable[[T, V], None] | None = None,
        logger: logging.Logger | None = None,
    ):
        self._fn = fn
        self.label = label
        self._on_success = on_success
        self._logger = logger or logging.getLogger(__name__)
        self._lock = threading.Lock()
        self.status: MutationStatus = "idle"
        self.data: T | None = None
        self.error: BaseException | None = None

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"

    def mutate(self, variables: V) -> T:
        with self._lock:
            self.status = "pending"
            self.error = None
        try:
            result = self._fn(variables)
        except Exception as exc:
            self._logger.error("Failed to %s: %s", self.label, exc)
            with self._lock:
                self.status = "error"
                self.error = exc
            raise
        with self._lock:
            self.status = "success"
            self.data = result
        if self._on_success is not None:
            self._on_success(result, variables)
        return result

    def reset(self) -> None:
        with self._lock:
            self.status = "idle"
            self.data = None
            self.error = None
