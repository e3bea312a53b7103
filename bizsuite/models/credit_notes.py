from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import Field

from bizsuite.models.common import ApiModel, CompanyFilterParams, EntityModel

CREDIT_NOTE_STATUSES = ("draft", "issued", "cancelled")


class CreditNoteItem(ApiModel):
    id: Optional[str] = None
    credit_note_id: Optional[str] = None
    original_invoice_item_id: Optional[str] = None
    description: str = ""
    quantity: float = 1.0
    unit_price: float = 0.0
    tax_rate: float = 0.0
    line_total: float = 0.0
    sort_order: int = 0


class CreditNote(EntityModel):
    credit_note_number: str
    credit_note_date: Optional[date] = None
    party_id: Optional[str] = None
    original_invoice_id: Optional[str] = None
    original_invoice_number: Optional[str] = None
    reason: Optional[str] = None
    reason_description: Optional[str] = None
    status: str = "draft"
    subtotal: float = 0.0
    tax_amount: float = 0.0
    total_amount: float = 0.0
    currency: str = "INR"
    notes: Optional[str] = None
    issued_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    # Filled client-side from /{id}/items.
    items: List[CreditNoteItem] = Field(default_factory=list)


class CreateCreditNoteDto(ApiModel):
    credit_note_number: str = Field(min_length=1)
    company_id: Optional[str] = None
    credit_note_date: Optional[date] = None
    party_id: Optional[str] = None
    original_invoice_id: Optional[str] = None
    original_invoice_number: Optional[str] = None
    reason: Optional[str] = None
    reason_description: Optional[str] = None
    subtotal: Optional[float] = 0.0
    tax_amount: Optional[float] = 0.0
    total_amount: Optional[float] = 0.0
    currency: Optional[str] = "INR"
    notes: Optional[str] = None
    items: Optional[List[CreditNoteItem]] = None


class UpdateCreditNoteDto(ApiModel):
    credit_note_date: Optional[date] = None
    party_id: Optional[str] = None
    reason: Optional[str] = None
    reason_description: Optional[str] = None
    subtotal: Optional[float] = None
    tax_amount: Optional[float] = None
    total_amount: Optional[float] = None
    currency: Optional[str] = None
    notes: Optional[str] = None


class CancelCreditNoteRequest(ApiModel):
    reason: Optional[str] = None


class CreditNotesFilterParams(CompanyFilterParams):
    status: Optional[str] = None
    credit_note_number: Optional[str] = None
    party_id: Optional[str] = None
    original_invoice_id: Optional[str] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
