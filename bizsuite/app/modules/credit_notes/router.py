from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, Request

from bizsuite.app.core.auth import AuthRequired, get_deps
from bizsuite.app.core.errors import MockApiError
from bizsuite.app.dependencies import MockDependencies
from bizsuite.app.modules.crud import (
    ResourceSpec,
    add_crud_routes,
    list_entities,
    load_entity,
    now_iso,
    read_body,
    save_entity,
    to_wire,
)
from bizsuite.models.credit_notes import (
    CancelCreditNoteRequest,
    CreateCreditNoteDto,
    CreditNote,
    CreditNoteItem,
    CreditNotesFilterParams,
    UpdateCreditNoteDto,
)

ITEM_ENTITY = "credit_note_item"
NUMBER_PREFIX = "CN-"


def _prepare(_: MockDependencies, data: dict) -> dict:
    data.pop("items", None)
    data["status"] = "draft"
    return data


def _store_items(deps: MockDependencies, note: CreditNote, data: dict) -> None:
    for order, raw in enumerate(data.get("items") or []):
        item = CreditNoteItem.model_validate(raw)
        line_total = item.line_total or round(item.quantity * item.unit_price * (1 + item.tax_rate / 100), 2)
        stored = item.model_copy(
            update={
                "id": str(uuid.uuid4()),
                "credit_note_id": note.id,
                "line_total": line_total,
                "sort_order": item.sort_order or order,
            }
        )
        record = stored.model_dump(mode="json", by_alias=True)
        record["companyId"] = note.company_id
        record["createdAt"] = note.created_at.isoformat() if note.created_at else now_iso()
        deps.records.insert(ITEM_ENTITY, record)


def _delete_items(deps: MockDependencies, note: CreditNote) -> None:
    for item in deps.records.list_records(ITEM_ENTITY):
        if item.get("creditNoteId") == note.id:
            deps.records.delete(ITEM_ENTITY, item["id"])


def _only_draft(note: CreditNote) -> str | None:
    if note.status != "draft":
        return f"Only draft credit notes can be modified (status: {note.status})"
    return None


SPEC = ResourceSpec(
    entity="credit_note",
    label="CreditNote",
    model=CreditNote,
    create_model=CreateCreditNoteDto,
    update_model=UpdateCreditNoteDto,
    filter_model=CreditNotesFilterParams,
    search_fields=("credit_note_number", "original_invoice_number", "reason", "notes"),
    date_field="credit_note_date",
    display_field="credit_note_number",
    prepare_create=_prepare,
    guard_update=_only_draft,
    guard_delete=_only_draft,
    after_create=_store_items,
    after_delete=_delete_items,
)


def create_router() -> APIRouter:
    router = APIRouter(prefix="/credit-notes")

    @router.get("/generate-number")
    async def generate_number(
        _: AuthRequired,
        company_id: str | None = Query(default=None, alias="companyId"),
        deps: MockDependencies = Depends(get_deps),
    ):
        highest = 0
        for note in list_entities(deps, SPEC, company_id):
            suffix = note.credit_note_number[len(NUMBER_PREFIX) :]
            if note.credit_note_number.startswith(NUMBER_PREFIX) and suffix.isdigit():
                highest = max(highest, int(suffix))
        return {"creditNoteNumber": f"{NUMBER_PREFIX}{highest + 1:06d}"}

    @router.get("/by-invoice/{invoice_id}")
    async def list_by_invoice(invoice_id: str, _: AuthRequired, deps: MockDependencies = Depends(get_deps)):
        return [to_wire(n) for n in list_entities(deps, SPEC) if n.original_invoice_id == invoice_id]

    @router.get("/{record_id}/items")
    async def list_items(record_id: str, _: AuthRequired, deps: MockDependencies = Depends(get_deps)):
        load_entity(deps, SPEC, record_id)
        items = [i for i in deps.records.list_records(ITEM_ENTITY) if i.get("creditNoteId") == record_id]
        items.sort(key=lambda i: int(i.get("sortOrder") or 0))
        return [CreditNoteItem.model_validate(i).model_dump(mode="json", by_alias=True) for i in items]

    @router.post("/{record_id}/issue")
    async def issue(record_id: str, actor: AuthRequired, deps: MockDependencies = Depends(get_deps)):
        note = load_entity(deps, SPEC, record_id)
        if note.status != "draft":
            raise MockApiError(400, f"Only draft credit notes can be issued (status: {note.status})")
        return to_wire(save_entity(deps, SPEC, note, {"status": "issued", "issued_at": now_iso()}, actor))

    @router.post("/{record_id}/cancel")
    async def cancel(
        record_id: str, request: Request, actor: AuthRequired, deps: MockDependencies = Depends(get_deps)
    ):
        note = load_entity(deps, SPEC, record_id)
        body = CancelCreditNoteRequest.model_validate(await read_body(request))
        if note.status == "cancelled":
            raise MockApiError(400, "Credit note is already cancelled")
        changes = {"status": "cancelled", "cancelled_at": now_iso()}
        if body.reason:
            changes["notes"] = f"{note.notes or ''}\nCancellation reason: {body.reason}".lstrip("\n")
        return to_wire(save_entity(deps, SPEC, note, changes, actor))

    return add_crud_routes(router, SPEC)
