from __future__ import annotations

import contextvars
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generic, Iterator, TypeVar

T = TypeVar("T")


class ScopeError(RuntimeError):
    """Scoped state was read or written outside of its provider."""


class _Slot(Generic[T]):
    __slots__ = ("value",)

    def __init__(self, value: T):
        self.value = value


class ScopeHandle(Generic[T]):
    """State plus setter handed to code running inside `ScopedState.provide()`."""

    def __init__(self, slot: _Slot[T]):
        self._slot = slot

    @property
    def value(self) -> T:
        return self._slot.value

    def set(self, value: T) -> None:
        self._slot.value = value


class ScopedState(Generic[T]):
    """
    Mutable state visible only inside a `provide()` block (per thread / task context).

    Nested `provide()` blocks shadow the outer value until they exit.
    """

    def __init__(self, name: str):
        self.name = name
        self._var: contextvars.ContextVar[_Slot[T] | None] = contextvars.ContextVar(
            f"bizsuite.{name}", default=None
        )

    @contextmanager
    def provide(self, value: T) -> Iterator[ScopeHandle[T]]:
        token = self._var.set(_Slot(value))
        try:
            yield ScopeHandle(self._var.get())  # type: ignore[arg-type]
        finally:
            self._var.reset(token)

    def is_active(self) -> bool:
        return self._var.get() is not None

    def _slot(self) -> _Slot[T]:
        slot = self._var.get()
        if slot is None:
            raise ScopeError(f"{self.name} is not available outside of its provider")
        return slot

    def get(self) -> T:
        return self._slot().value

    def set(self, value: T) -> None:
        self._slot().value = value


@dataclass
class CompanySelection:
    company_id: str | None = None
    company_name: str | None = None


company_scope: ScopedState[CompanySelection] = ScopedState("company")


def resolve_company_id(company_id: str | None = None) -> str | None:
    """Explicit `company_id` wins; otherwise use the active company scope, if any."""
    if company_id:
        return company_id
    if company_scope.is_active():
        return company_scope.get().company_id
    return None
