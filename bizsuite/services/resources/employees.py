from __future__ import annotations

from bizsuite.models.employees import Employee
from bizsuite.services.resources.base import ResourceService


class EmployeeService(ResourceService[Employee]):
    entity_name = "employee"
    path = "/api/employees"
    model = Employee

    def get_by_employee_code(self, employee_code: str) -> Employee:
        return self._one(self._http.get_json(f"{self.path}/by-code/{employee_code}"))
