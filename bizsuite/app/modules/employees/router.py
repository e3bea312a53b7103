from __future__ import annotations

from fastapi import APIRouter, Depends

from bizsuite.app.core.auth import AuthRequired, get_deps
from bizsuite.app.core.errors import MockApiError
from bizsuite.app.dependencies import MockDependencies
from bizsuite.app.modules.crud import ResourceSpec, add_crud_routes, list_entities, to_wire
from bizsuite.models.employees import CreateEmployeeDto, Employee, EmployeesFilterParams, UpdateEmployeeDto


def _prepare(deps: MockDependencies, data: dict) -> dict:
    code = data.get("employee_id")
    if code:
        for other in list_entities(deps, SPEC, data.get("company_id")):
            if other.employee_id == code:
                raise MockApiError(409, f"Employee code {code} already exists")
    manager_id = data.get("manager_id")
    if manager_id:
        manager = deps.records.get(SPEC.entity, manager_id)
        if manager is None:
            raise MockApiError(400, f"Manager {manager_id} not found")
        data["manager_name"] = manager.get("employeeName")
    return data


SPEC = ResourceSpec(
    entity="employee",
    label="Employee",
    model=Employee,
    create_model=CreateEmployeeDto,
    update_model=UpdateEmployeeDto,
    filter_model=EmployeesFilterParams,
    search_fields=("employee_name", "email", "employee_id", "department", "designation"),
    date_field="hire_date",
    display_field="employee_name",
    prepare_create=_prepare,
)


def create_router() -> APIRouter:
    router = APIRouter(prefix="/employees")

    @router.get("/by-code/{employee_code}")
    async def get_by_employee_code(
        employee_code: str,
        _: AuthRequired,
        deps: MockDependencies = Depends(get_deps),
    ):
        for employee in list_entities(deps, SPEC):
            if employee.employee_id == employee_code:
                return to_wire(employee)
        raise MockApiError(404, f"Employee with code {employee_code} not found")

    return add_crud_routes(router, SPEC)
