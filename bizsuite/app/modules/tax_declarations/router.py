from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response

from bizsuite.app.core.auth import AuthRequired, get_deps
from bizsuite.app.core.errors import MockApiError
from bizsuite.app.dependencies import MockDependencies
from bizsuite.app.modules.crud import (
    ResourceSpec,
    add_crud_routes,
    list_entities,
    load_entity,
    now_iso,
    save_entity,
    to_wire,
)
from bizsuite.models.tax_declarations import (
    CreateTaxDeclarationDto,
    TaxDeclaration,
    TaxDeclarationsFilterParams,
    UpdateTaxDeclarationDto,
)

EMPLOYEE_ENTITY = "employee"


def _prepare(deps: MockDependencies, data: dict) -> dict:
    employee_id = data["employee_id"]
    for other in list_entities(deps, SPEC):
        if other.employee_id == employee_id and other.financial_year == data.get("financial_year"):
            raise MockApiError(
                409, f"A declaration for employee {employee_id} and year {other.financial_year} already exists"
            )
    employee = deps.records.get(EMPLOYEE_ENTITY, employee_id)
    if employee is not None:
        data["employee_name"] = employee.get("employeeName")
        data.setdefault("company_id", employee.get("companyId"))
    data["status"] = "draft"
    return data


def _guard_update(declaration: TaxDeclaration) -> str | None:
    if declaration.status in ("verified", "locked"):
        return f"Cannot modify a {declaration.status} declaration"
    return None


def _guard_delete(declaration: TaxDeclaration) -> str | None:
    if declaration.status in ("verified", "locked"):
        return f"Cannot delete a {declaration.status} declaration"
    return None


SPEC = ResourceSpec(
    entity="tax_declaration",
    label="TaxDeclaration",
    model=TaxDeclaration,
    create_model=CreateTaxDeclarationDto,
    update_model=UpdateTaxDeclarationDto,
    filter_model=TaxDeclarationsFilterParams,
    search_fields=("employee_name", "financial_year"),
    display_field="employee_name",
    prepare_create=_prepare,
    guard_update=_guard_update,
    guard_delete=_guard_delete,
)


def create_router() -> APIRouter:
    router = APIRouter(prefix="/payroll/tax-declarations")

    @router.get("/employee/{employee_id}")
    async def list_by_employee(employee_id: str, _: AuthRequired, deps: MockDependencies = Depends(get_deps)):
        rows = [d for d in list_entities(deps, SPEC) if d.employee_id == employee_id]
        rows.sort(key=lambda d: d.financial_year, reverse=True)
        return [to_wire(d) for d in rows]

    @router.post("/{record_id}/submit", status_code=204)
    async def submit(record_id: str, actor: AuthRequired, deps: MockDependencies = Depends(get_deps)):
        declaration = load_entity(deps, SPEC, record_id)
        if declaration.status != "draft":
            raise MockApiError(400, f"Only draft declarations can be submitted (status: {declaration.status})")
        save_entity(deps, SPEC, declaration, {"status": "submitted", "submitted_at": now_iso()}, actor)
        return Response(status_code=204)

    @router.post("/{record_id}/verify", status_code=204)
    async def verify(
        record_id: str,
        actor: AuthRequired,
        verified_by: str = Query(alias="verifiedBy", min_length=1),
        deps: MockDependencies = Depends(get_deps),
    ):
        declaration = load_entity(deps, SPEC, record_id)
        if declaration.status != "submitted":
            raise MockApiError(400, f"Only submitted declarations can be verified (status: {declaration.status})")
        save_entity(
            deps,
            SPEC,
            declaration,
            {"status": "verified", "verified_at": now_iso(), "verified_by": verified_by},
            actor,
        )
        return Response(status_code=204)

    return add_crud_routes(router, SPEC)
