import unittest
from datetime import date

from bizsuite.models.credit_notes import CreateCreditNoteDto, CreditNoteItem, CreditNotesFilterParams, UpdateCreditNoteDto
from bizsuite.services.errors import BadRequestError, NotFoundError
from bizsuite.services.resources import CreditNoteService
from bizsuite.tests._support import MockApiTestCase


class TestCreditNotesUnit(MockApiTestCase):
    def _create(self, number="CN-000001", **extra):
        dto = CreateCreditNoteDto(
            credit_note_number=number,
            company_id="c1",
            credit_note_date=date(2024, 5, 10),
            original_invoice_id="inv-1",
            original_invoice_number="INV-001",
            reason="return",
            items=[
                CreditNoteItem(description="Returned widget", quantity=2, unit_price=100, tax_rate=18),
                CreditNoteItem(description="Restocking fee", quantity=1, unit_price=50),
            ],
            **extra,
        )
        return self.services.credit_notes.create(dto)

    def test_get_by_id_attaches_items(self):
        created = self._create()
        note = self.services.credit_notes.get_by_id(created.id)

        self.assertEqual(note.status, "draft")
        self.assertEqual([i.description for i in note.items], ["Returned widget", "Restocking fee"])
        self.assertEqual(note.items[0].line_total, 236.0)
        self.assertTrue(all(i.credit_note_id == created.id for i in note.items))

    def test_item_failure_still_returns_note(self):
        created = self._create()
        service = CreditNoteService(self.failing_http("/items"))

        with self.assertLogs("bizsuite.services.resources", level="WARNING") as logs:
            note = service.get_by_id(created.id)

        self.assertEqual(note.id, created.id)
        self.assertEqual(note.credit_note_number, "CN-000001")
        self.assertEqual(note.items, [])
        self.assertTrue(any("Failed to load items" in line for line in logs.output))

    def test_unparseable_items_still_return_note(self):
        created = self._create()
        service = CreditNoteService(self.canned_http("/items", [{"quantity": "not-a-number"}]))

        with self.assertLogs("bizsuite.services.resources", level="WARNING") as logs:
            note = service.get_by_id(created.id)

        self.assertEqual(note.id, created.id)
        self.assertEqual(note.items, [])
        self.assertTrue(any("Failed to load items" in line for line in logs.output))

    def test_missing_note_is_not_swallowed(self):
        with self.assertRaises(NotFoundError):
            self.services.credit_notes.get_by_id("missing")

    def test_generate_next_number(self):
        self.assertEqual(self.services.credit_notes.generate_next_number("c1"), "CN-000001")
        self._create("CN-000007")
        self._create("MANUAL-1")
        self.assertEqual(self.services.credit_notes.generate_next_number("c1"), "CN-000008")
        self.assertEqual(self.services.credit_notes.generate_next_number("c2"), "CN-000001")

    def test_issue_then_cancel(self):
        created = self._create(notes="Customer return")
        issued = self.services.credit_notes.issue(created.id)
        self.assertEqual(issued.status, "issued")
        self.assertIsNotNone(issued.issued_at)

        with self.assertRaises(BadRequestError):
            self.services.credit_notes.issue(created.id)
        with self.assertRaises(BadRequestError):
            self.services.credit_notes.update(created.id, UpdateCreditNoteDto(notes="late edit"))
        with self.assertRaises(BadRequestError):
            self.services.credit_notes.delete(created.id)

        cancelled = self.services.credit_notes.cancel(created.id, "Duplicate")
        self.assertEqual(cancelled.status, "cancelled")
        self.assertIsNotNone(cancelled.cancelled_at)
        self.assertIn("Cancellation reason: Duplicate", cancelled.notes)
        self.assertTrue(cancelled.notes.startswith("Customer return"))

        with self.assertRaises(BadRequestError):
            self.services.credit_notes.cancel(created.id, "again")

    def test_draft_can_be_updated_and_deleted_with_items(self):
        created = self._create()
        self.services.credit_notes.update(created.id, UpdateCreditNoteDto(total_amount=286.0))
        self.assertEqual(self.services.credit_notes.get_by_id(created.id).total_amount, 286.0)

        self.services.credit_notes.delete(created.id)
        with self.assertRaises(NotFoundError):
            self.services.credit_notes.get_items(created.id)

    def test_by_invoice_and_date_filters(self):
        first = self._create("CN-000001")
        self.services.credit_notes.create(
            CreateCreditNoteDto(credit_note_number="CN-000002", company_id="c1", credit_note_date=date(2024, 7, 1))
        )
        self.assertEqual([n.id for n in self.services.credit_notes.get_by_invoice("inv-1")], [first.id])

        page = self.services.credit_notes.get_paged(
            CreditNotesFilterParams(company_id="c1", from_date=date(2024, 6, 1), to_date=date(2024, 12, 31))
        )
        self.assertEqual([n.credit_note_number for n in page.items], ["CN-000002"])


if __name__ == "__main__":
    unittest.main()
