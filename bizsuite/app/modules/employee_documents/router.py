from __future__ import annotations

from fastapi import APIRouter, Depends

from bizsuite.app.core.auth import AuthRequired, get_deps
from bizsuite.app.dependencies import MockDependencies
from bizsuite.app.modules.crud import ResourceSpec, add_crud_routes, list_entities, to_wire
from bizsuite.models.employee_documents import (
    CreateEmployeeDocumentDto,
    EmployeeDocument,
    EmployeeDocumentsFilterParams,
    UpdateEmployeeDocumentDto,
)


def _prepare(_: MockDependencies, data: dict) -> dict:
    if data.get("is_company_wide"):
        data["employee_id"] = None
    return data


SPEC = ResourceSpec(
    entity="employee_document",
    label="EmployeeDocument",
    model=EmployeeDocument,
    create_model=CreateEmployeeDocumentDto,
    update_model=UpdateEmployeeDocumentDto,
    filter_model=EmployeeDocumentsFilterParams,
    search_fields=("title", "description", "file_name", "document_type"),
    date_field="expiry_date",
    display_field="title",
    prepare_create=_prepare,
)


def create_router() -> APIRouter:
    router = APIRouter(prefix="/employee-documents")

    @router.get("/employee/{employee_id}")
    async def list_for_employee(employee_id: str, _: AuthRequired, deps: MockDependencies = Depends(get_deps)):
        return [
            to_wire(d)
            for d in list_entities(deps, SPEC)
            if d.employee_id == employee_id or d.is_company_wide
        ]

    return add_crud_routes(router, SPEC)
