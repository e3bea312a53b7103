from __future__ import annotations

from bizsuite.models.employee_documents import EmployeeDocument
from bizsuite.services.resources.base import ResourceService


class EmployeeDocumentService(ResourceService[EmployeeDocument]):
    entity_name = "employee document"
    path = "/api/employee-documents"
    model = EmployeeDocument

    def get_by_employee(self, employee_id: str) -> list[EmployeeDocument]:
        """Documents addressed to the employee plus company-wide ones."""
        return self._many(self._http.get_json(f"{self.path}/employee/{employee_id}"))
