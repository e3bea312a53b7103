from __future__ import annotations

from typing import Any, Iterable, Mapping, Tuple

from pydantic import BaseModel

QueryKey = Tuple[Any, ...]


class FrozenParams(tuple):
    """
    Hashable, order-independent snapshot of a params mapping.

    Stored as sorted (key, value) pairs; None values are dropped, so `{}` and
    `{"searchTerm": None}` freeze to the same value.
    """

    __slots__ = ()

    def __new__(cls, pairs: Iterable[tuple[str, Any]] = ()):
        return super().__new__(cls, tuple(sorted(pairs, key=lambda kv: kv[0])))

    def as_dict(self) -> dict[str, Any]:
        return {k: _thaw(v) for k, v in self}

    def __repr__(self) -> str:
        return f"FrozenParams({self.as_dict()!r})"


def freeze(value: Any) -> Any:
    if isinstance(value, FrozenParams):
        return value
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, Mapping):
        return FrozenParams((str(k), freeze(v)) for k, v in value.items() if v is not None)
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    if isinstance(value, set):
        return frozenset(freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, FrozenParams):
        return value.as_dict()
    return value


def is_prefix(prefix: QueryKey, key: QueryKey) -> bool:
    """True when `key` lies in the subtree rooted at `prefix` (a key is its own prefix)."""
    return len(prefix) <= len(key) and tuple(key[: len(prefix)]) == tuple(prefix)


class QueryKeys:
    """
    Cache-key factory for one entity.

    all -> lists() -> list(company) / paged(params)
    all -> details() -> detail(id)
    """

    def __init__(self, entity: str):
        self.entity = entity

    @property
    def all(self) -> QueryKey:
        return (self.entity,)

    def lists(self) -> QueryKey:
        return self.all + ("list",)

    def list(self, company_id: str | None = None) -> QueryKey:
        return self.lists() + (freeze({"companyId": company_id or "all"}),)

    def paged(self, params: Mapping[str, Any] | BaseModel | None = None) -> QueryKey:
        return self.lists() + ("paged", freeze(params if params is not None else {}))

    def details(self) -> QueryKey:
        return self.all + ("detail",)

    def detail(self, id: str) -> QueryKey:
        return self.details() + (id,)

    def list_extra(self, name: str, *parts: Any) -> QueryKey:
        """Key for an entity-specific list-like read, invalidated with `lists()`."""
        return self.lists() + (name,) + tuple(freeze(p) for p in parts)

    def detail_extra(self, id: str, name: str, *parts: Any) -> QueryKey:
        """Key for a per-record sub-resource, invalidated with `detail(id)`."""
        return self.detail(id) + (name,) + tuple(freeze(p) for p in parts)


employee_keys = QueryKeys("employees")
product_keys = QueryKeys("products")
tag_keys = QueryKeys("tags")
credit_note_keys = QueryKeys("creditNotes")
audit_trail_keys = QueryKeys("auditTrail")
loan_keys = QueryKeys("loans")
subscription_keys = QueryKeys("subscriptions")
tax_declaration_keys = QueryKeys("taxDeclarations")
employee_document_keys = QueryKeys("employeeDocuments")
file_keys = QueryKeys("files")
