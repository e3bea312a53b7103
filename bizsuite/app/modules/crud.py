from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from pydantic import BaseModel

from bizsuite.app.core.auth import Actor, AuthRequired, get_deps
from bizsuite.app.core.config import settings
from bizsuite.app.core.errors import MockApiError, not_found
from bizsuite.app.dependencies import MockDependencies
from bizsuite.models.common import EntityModel, PaginationParams

logger = logging.getLogger(__name__)

_NON_FILTER_FIELDS = set(PaginationParams.model_fields) | {"company_id", "from_date", "to_date"}

Guard = Callable[[EntityModel], Optional[str]]


@dataclass(frozen=True)
class ResourceSpec:
    """How one entity is stored, filtered and audited by the mock API."""

    entity: str
    label: str
    model: type[EntityModel]
    create_model: type[BaseModel]
    update_model: type[BaseModel]
    filter_model: type[BaseModel]
    search_fields: tuple[str, ...] = ()
    date_field: Optional[str] = None
    display_field: Optional[str] = None
    # (deps, snake_case create data) -> data to build the entity from
    prepare_create: Optional[Callable[[MockDependencies, dict[str, Any]], dict[str, Any]]] = None
    guard_update: Optional[Guard] = None
    guard_delete: Optional[Guard] = None
    after_create: Optional[Callable[[MockDependencies, EntityModel, dict[str, Any]], None]] = None
    after_delete: Optional[Callable[[MockDependencies, EntityModel], None]] = None


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def to_wire(entity: BaseModel) -> dict[str, Any]:
    return entity.model_dump(mode="json", by_alias=True)


async def read_body(request: Request) -> dict[str, Any]:
    raw = await request.body()
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise MockApiError(400, f"Invalid JSON body: {e}") from e
    if not isinstance(data, dict):
        raise MockApiError(400, "JSON body must be an object")
    return data


def parse_filters(spec: ResourceSpec, request: Request) -> BaseModel:
    return spec.filter_model.model_validate(dict(request.query_params))


def load_entity(deps: MockDependencies, spec: ResourceSpec, record_id: str) -> EntityModel:
    record = deps.records.get(spec.entity, record_id)
    if record is None:
        raise not_found(spec.label, record_id)
    return spec.model.model_validate(record)


def _display(spec: ResourceSpec, entity: EntityModel) -> str | None:
    if not spec.display_field:
        return None
    value = getattr(entity, spec.display_field, None)
    return str(value) if value is not None else None


def insert_entity(
    deps: MockDependencies, spec: ResourceSpec, data: dict[str, Any], actor: Actor | None = None
) -> EntityModel:
    raw = dict(data)
    if spec.prepare_create is not None:
        data = spec.prepare_create(deps, dict(data))
    stamp = now_iso()
    entity = spec.model.model_validate({**data, "id": str(uuid.uuid4()), "created_at": stamp, "updated_at": stamp})
    wire = to_wire(entity)
    deps.records.insert(spec.entity, wire)
    if spec.after_create is not None:
        spec.after_create(deps, entity, raw)
    deps.audit_trail.log_event(
        entity_type=spec.label,
        entity_id=entity.id,
        operation="create",
        company_id=entity.company_id,
        entity_display_name=_display(spec, entity),
        new_values=wire,
        actor_id=actor.actor_id if actor else None,
        actor_name=actor.actor_name if actor else None,
    )
    logger.info("Mock %s created: id=%s", spec.entity, entity.id)
    return entity


def save_entity(
    deps: MockDependencies,
    spec: ResourceSpec,
    current: EntityModel,
    changes: dict[str, Any],
    actor: Actor | None = None,
) -> EntityModel:
    merged = {**current.model_dump(mode="json"), **changes, "updated_at": now_iso()}
    entity = spec.model.model_validate(merged)
    old, new = to_wire(current), to_wire(entity)
    deps.records.replace(spec.entity, new)
    deps.audit_trail.log_event(
        entity_type=spec.label,
        entity_id=entity.id,
        operation="update",
        company_id=entity.company_id,
        entity_display_name=_display(spec, entity),
        old_values=old,
        new_values=new,
        actor_id=actor.actor_id if actor else None,
        actor_name=actor.actor_name if actor else None,
    )
    return entity


def remove_entity(
    deps: MockDependencies, spec: ResourceSpec, current: EntityModel, actor: Actor | None = None
) -> None:
    deps.records.delete(spec.entity, current.id)
    if spec.after_delete is not None:
        spec.after_delete(deps, current)
    deps.audit_trail.log_event(
        entity_type=spec.label,
        entity_id=current.id,
        operation="delete",
        company_id=current.company_id,
        entity_display_name=_display(spec, current),
        old_values=to_wire(current),
        actor_id=actor.actor_id if actor else None,
        actor_name=actor.actor_name if actor else None,
    )
    logger.info("Mock %s deleted: id=%s", spec.entity, current.id)


def _same(actual: Any, wanted: Any) -> bool:
    if isinstance(actual, str) and isinstance(wanted, str):
        return actual.casefold() == wanted.casefold()
    return actual == wanted


def _as_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return None


def _sort_attr(spec: ResourceSpec, sort_by: str) -> str | None:
    fields = spec.model.model_fields
    if sort_by in fields:
        return sort_by
    for name, info in fields.items():
        if info.alias == sort_by:
            return name
    return None


def filter_entities(spec: ResourceSpec, entities: list[EntityModel], filters: BaseModel) -> list[EntityModel]:
    out = list(entities)
    for name in type(filters).model_fields:
        if name in _NON_FILTER_FIELDS:
            continue
        wanted = getattr(filters, name)
        if wanted is None:
            continue
        out = [e for e in out if _same(getattr(e, name, None), wanted)]

    from_date = getattr(filters, "from_date", None)
    to_date = getattr(filters, "to_date", None)
    if spec.date_field and (from_date or to_date):
        kept = []
        for e in out:
            d = _as_date(getattr(e, spec.date_field, None))
            if d is None:
                continue
            if from_date and d < from_date:
                continue
            if to_date and d > to_date:
                continue
            kept.append(e)
        out = kept

    term = (getattr(filters, "search_term", None) or "").strip().casefold()
    if term and spec.search_fields:
        out = [
            e
            for e in out
            if any(term in str(getattr(e, f, "") or "").casefold() for f in spec.search_fields)
        ]

    sort_by = getattr(filters, "sort_by", None)
    attr = _sort_attr(spec, sort_by) if sort_by else None
    if sort_by and attr is None:
        raise MockApiError(400, f"Unknown sort field: {sort_by}")
    if attr:
        descending = bool(getattr(filters, "sort_descending", False))
        present = [e for e in out if getattr(e, attr, None) is not None]
        missing = [e for e in out if getattr(e, attr, None) is None]
        try:
            present.sort(key=lambda e: getattr(e, attr), reverse=descending)
        except TypeError:
            present.sort(key=lambda e: str(getattr(e, attr)), reverse=descending)
        out = present + missing
    return out


def page_of(items: list[Any], filters: BaseModel) -> dict[str, Any]:
    page_number = getattr(filters, "page_number", None) or 1
    page_size = min(getattr(filters, "page_size", None) or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    total = len(items)
    start = (page_number - 1) * page_size
    window = items[start : start + page_size]
    return {
        "items": [to_wire(i) if isinstance(i, BaseModel) else i for i in window],
        "totalCount": total,
        "pageNumber": page_number,
        "pageSize": page_size,
        "totalPages": -(-total // page_size),
    }


def list_entities(deps: MockDependencies, spec: ResourceSpec, company_id: str | None = None) -> list[EntityModel]:
    return [spec.model.model_validate(r) for r in deps.records.list_records(spec.entity, company_id=company_id)]


def add_crud_routes(router: APIRouter, spec: ResourceSpec, *, writable: bool = True) -> APIRouter:
    """
    Register list / paged / detail (and create / update / delete when `writable`) routes.

    Call after any entity-specific routes so `/{record_id}` does not shadow them.
    """

    @router.get("")
    async def list_records(
        _: AuthRequired,
        company_id: str | None = Query(default=None, alias="companyId"),
        deps: MockDependencies = Depends(get_deps),
    ):
        return [to_wire(e) for e in list_entities(deps, spec, company_id)]

    @router.get("/paged")
    async def paged_records(
        request: Request,
        _: AuthRequired,
        deps: MockDependencies = Depends(get_deps),
    ):
        filters = parse_filters(spec, request)
        entities = list_entities(deps, spec, getattr(filters, "company_id", None))
        return page_of(filter_entities(spec, entities, filters), filters)

    @router.get("/{record_id}")
    async def get_record(record_id: str, _: AuthRequired, deps: MockDependencies = Depends(get_deps)):
        return to_wire(load_entity(deps, spec, record_id))

    if not writable:
        return router

    @router.post("", status_code=201)
    async def create_record(request: Request, actor: AuthRequired, deps: MockDependencies = Depends(get_deps)):
        dto = spec.create_model.model_validate(await read_body(request))
        data = dto.model_dump(mode="json", exclude_none=True)
        return to_wire(insert_entity(deps, spec, data, actor))

    @router.put("/{record_id}", status_code=204)
    async def update_record(
        record_id: str, request: Request, actor: AuthRequired, deps: MockDependencies = Depends(get_deps)
    ):
        current = load_entity(deps, spec, record_id)
        dto = spec.update_model.model_validate(await read_body(request))
        if spec.guard_update is not None:
            problem = spec.guard_update(current)
            if problem:
                raise MockApiError(400, problem)
        save_entity(deps, spec, current, dto.model_dump(mode="json", exclude_none=True), actor)
        return Response(status_code=204)

    @router.delete("/{record_id}", status_code=204)
    async def delete_record(record_id: str, actor: AuthRequired, deps: MockDependencies = Depends(get_deps)):
        current = load_entity(deps, spec, record_id)
        if spec.guard_delete is not None:
            problem = spec.guard_delete(current)
            if problem:
                raise MockApiError(400, problem)
        remove_entity(deps, spec, current, actor)
        return Response(status_code=204)

    return router
