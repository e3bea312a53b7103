from __future__ import annotations

from bizsuite.models.tax_declarations import TaxDeclaration
from bizsuite.services.resources.base import ResourceService


class TaxDeclarationService(ResourceService[TaxDeclaration]):
    entity_name = "tax declaration"
    path = "/api/payroll/tax-declarations"
    model = TaxDeclaration

    def get_by_employee(self, employee_id: str) -> list[TaxDeclaration]:
        return self._many(self._http.get_json(f"{self.path}/employee/{employee_id}"))

    def submit(self, id: str) -> None:
        self._action(id, "submit")

    def verify(self, id: str, verified_by: str) -> None:
        self._http.post_json(self.item_path(id, "verify"), params={"verifiedBy": verified_by}, body={})
