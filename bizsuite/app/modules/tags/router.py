from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from bizsuite.app.core.auth import AuthRequired, get_deps
from bizsuite.app.core.errors import MockApiError
from bizsuite.app.dependencies import MockDependencies
from bizsuite.app.modules.crud import ResourceSpec, add_crud_routes, list_entities, to_wire
from bizsuite.models.tags import CreateTagDto, Tag, TagsFilterParams, TagSummary, UpdateTagDto


def _prepare(deps: MockDependencies, data: dict) -> dict:
    code = data.get("code")
    if code:
        for other in list_entities(deps, SPEC, data.get("company_id")):
            if other.code == code:
                raise MockApiError(409, f"Tag code {code} already exists")
    segment = code or data["name"]
    parent_id = data.get("parent_tag_id")
    if parent_id:
        parent = deps.records.get(SPEC.entity, parent_id)
        if parent is None:
            raise MockApiError(400, f"Parent tag {parent_id} not found")
        data["level"] = int(parent.get("level") or 0) + 1
        data["full_path"] = f"{parent.get('fullPath') or parent.get('name')}/{segment}"
    else:
        data["level"] = 0
        data["full_path"] = segment
    return data


SPEC = ResourceSpec(
    entity="tag",
    label="Tag",
    model=Tag,
    create_model=CreateTagDto,
    update_model=UpdateTagDto,
    filter_model=TagsFilterParams,
    search_fields=("name", "code", "description"),
    display_field="name",
    prepare_create=_prepare,
)


def create_router() -> APIRouter:
    router = APIRouter(prefix="/tags")

    @router.get("/group/{tag_group}")
    async def list_by_group(
        tag_group: str,
        _: AuthRequired,
        company_id: str | None = Query(default=None, alias="companyId"),
        deps: MockDependencies = Depends(get_deps),
    ):
        tags = [t for t in list_entities(deps, SPEC, company_id) if t.tag_group == tag_group]
        tags.sort(key=lambda t: (t.sort_order, t.name.casefold()))
        return [to_wire(t) for t in tags]

    @router.get("/hierarchy")
    async def hierarchy(
        _: AuthRequired,
        company_id: str | None = Query(default=None, alias="companyId"),
        deps: MockDependencies = Depends(get_deps),
    ):
        tags = list_entities(deps, SPEC, company_id)
        tags.sort(key=lambda t: ((t.full_path or t.name).casefold(), t.sort_order))
        return [to_wire(t) for t in tags]

    @router.get("/summaries")
    async def summaries(
        _: AuthRequired,
        company_id: str | None = Query(default=None, alias="companyId"),
        tag_group: str | None = Query(default=None, alias="tagGroup"),
        deps: MockDependencies = Depends(get_deps),
    ):
        tags = [t for t in list_entities(deps, SPEC, company_id) if t.is_active]
        if tag_group:
            tags = [t for t in tags if t.tag_group == tag_group]
        tags.sort(key=lambda t: (t.sort_order, t.name.casefold()))
        return [
            TagSummary(id=t.id, name=t.name, code=t.code, tag_group=t.tag_group, color=t.color).model_dump(
                mode="json", by_alias=True
            )
            for t in tags
        ]

    return add_crud_routes(router, SPEC)
