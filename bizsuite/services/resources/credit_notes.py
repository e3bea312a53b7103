from __future__ import annotations

from pydantic import ValidationError

from bizsuite.models.credit_notes import CancelCreditNoteRequest, CreditNote, CreditNoteItem
from bizsuite.services.errors import PortalError
from bizsuite.services.resources.base import ResourceService
from bizsuite.services.scope import resolve_company_id


class CreditNoteService(ResourceService[CreditNote]):
    entity_name = "credit note"
    path = "/api/credit-notes"
    model = CreditNote

    def get_by_id(self, id: str) -> CreditNote:
        """
        Fetch one credit note and attach its line items.

        The items come from a second request; if it fails or returns rows that do not
        parse, the note is still returned with `items == []`.
        """
        note = super().get_by_id(id)
        try:
            items = self.get_items(id)
        except (PortalError, ValidationError) as exc:
            self._logger.warning("Failed to load items for credit note %s: %s", id, exc)
            items = []
        return note.model_copy(update={"items": items})

    def get_items(self, id: str) -> list[CreditNoteItem]:
        items = self._http.get_list(self.item_path(id, "items"), context="credit note items")
        return [CreditNoteItem.model_validate(item) for item in items]

    def get_by_invoice(self, invoice_id: str) -> list[CreditNote]:
        return self._many(self._http.get_json(f"{self.path}/by-invoice/{invoice_id}"))

    def generate_next_number(self, company_id: str | None = None) -> str:
        company_id = resolve_company_id(company_id)
        params = {"companyId": company_id} if company_id else None
        payload = self._http.get_json(f"{self.path}/generate-number", params=params)
        if isinstance(payload, dict):
            return str(payload.get("creditNoteNumber") or payload.get("number") or "")
        return str(payload or "")

    def issue(self, id: str) -> CreditNote:
        return self._one(self._action(id, "issue"))

    def cancel(self, id: str, reason: str | None = None) -> CreditNote:
        return self._one(self._action(id, "cancel", CancelCreditNoteRequest(reason=reason)))
