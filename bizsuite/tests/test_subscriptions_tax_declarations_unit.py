import unittest
from datetime import date

from bizsuite.models.employees import CreateEmployeeDto
from bizsuite.models.subscriptions import (
    CreateSubscriptionAssignmentDto,
    CreateSubscriptionDto,
    RevokeSubscriptionAssignmentDto,
)
from bizsuite.models.tax_declarations import CreateTaxDeclarationDto, UpdateTaxDeclarationDto
from bizsuite.services.errors import BadRequestError, ConflictError, NotFoundError
from bizsuite.services.query.queries import AssignmentVariables, VerifyVariables
from bizsuite.tests._support import MockApiTestCase


class TestSubscriptionsUnit(MockApiTestCase):
    def _subscription(self, seats_total=2):
        return self.services.subscriptions.create(
            CreateSubscriptionDto(
                company_id="c1",
                name="Design suite",
                vendor="Acme",
                seats_total=seats_total,
                seats_used=0,
                renewal_date=date(2025, 1, 1),
            )
        )

    def test_pause_and_resume(self):
        sub = self._subscription()
        paused = self.services.subscriptions.pause(sub.id, date(2024, 6, 1))
        self.assertEqual(paused.status, "paused")
        self.assertEqual(paused.paused_on, date(2024, 6, 1))

        with self.assertRaises(BadRequestError):
            self.services.subscriptions.pause(sub.id)

        resumed = self.services.subscriptions.resume(sub.id)
        self.assertEqual(resumed.status, "active")
        self.assertEqual(resumed.resumed_on, date.today())

        with self.assertRaises(BadRequestError):
            self.services.subscriptions.resume(sub.id)

    def test_assign_and_revoke_track_seats(self):
        sub = self._subscription(seats_total=1)
        service = self.services.subscriptions
        assignment = service.assign(
            sub.id, CreateSubscriptionAssignmentDto(target_type="employee", company_id="c1", employee_id="e1")
        )
        self.assertEqual(assignment.subscription_id, sub.id)
        self.assertEqual(assignment.assigned_on, date.today())
        self.assertEqual(service.get_by_id(sub.id).seats_used, 1)

        with self.assertRaises(ConflictError):
            service.assign(sub.id, CreateSubscriptionAssignmentDto(target_type="company", company_id="c1"))

        service.revoke_assignment(sub.id, assignment.id, RevokeSubscriptionAssignmentDto(notes="left"))
        self.assertEqual(service.get_by_id(sub.id).seats_used, 0)
        self.assertEqual(service.get_assignments(sub.id), [])

        revoked = service.get_assignments(sub.id, include_revoked=True)
        self.assertEqual(len(revoked), 1)
        self.assertIsNotNone(revoked[0].revoked_on)
        self.assertEqual(revoked[0].notes, "left")

        with self.assertRaises(BadRequestError):
            service.revoke_assignment(sub.id, assignment.id)

    def test_employee_assignment_requires_employee(self):
        sub = self._subscription()
        with self.assertRaises(BadRequestError):
            self.services.subscriptions.assign(
                sub.id, CreateSubscriptionAssignmentDto(target_type="employee", company_id="c1")
            )

    def test_unknown_assignment_is_not_found(self):
        sub = self._subscription()
        with self.assertRaises(NotFoundError):
            self.services.subscriptions.revoke_assignment(sub.id, "missing")

    def test_assign_mutation_refreshes_assignments(self):
        sub = self._subscription()
        q = self.queries.subscriptions
        observer = q.assignments_query(sub.id)
        self.assertEqual(observer.fetch().data, [])

        q.assign_mutation().mutate(
            AssignmentVariables(sub.id, CreateSubscriptionAssignmentDto(target_type="company", company_id="c1"))
        )

        self.assertTrue(observer.get_result().is_stale)
        self.assertEqual(len(observer.fetch().data), 1)


class TestTaxDeclarationsUnit(MockApiTestCase):
    def setUp(self):
        super().setUp()
        self.employee = self.services.employees.create(
            CreateEmployeeDto(employee_name="Asha Rao", employee_id="E1", company_id="c1")
        )

    def _declaration(self, year="2024-25", **extra):
        return self.services.tax_declarations.create(
            CreateTaxDeclarationDto(employee_id=self.employee.id, financial_year=year, **extra)
        )

    def test_create_fills_employee_details(self):
        decl = self._declaration(sec80c_ppf=50000, sec80c_elss=25000, tax_regime="old")
        fetched = self.services.tax_declarations.get_by_id(decl.id)
        self.assertEqual(fetched.employee_name, "Asha Rao")
        self.assertEqual(fetched.company_id, "c1")
        self.assertEqual(fetched.status, "draft")
        self.assertEqual(fetched.sec80c_total, 75000.0)

    def test_one_declaration_per_employee_and_year(self):
        self._declaration()
        with self.assertRaises(ConflictError):
            self._declaration()
        self._declaration("2025-26")
        years = [d.financial_year for d in self.services.tax_declarations.get_by_employee(self.employee.id)]
        self.assertEqual(years, ["2025-26", "2024-25"])

    def test_submit_verify_lifecycle(self):
        service = self.services.tax_declarations
        decl = self._declaration()

        with self.assertRaises(BadRequestError):
            service.verify(decl.id, "hr-admin")

        self.assertIsNone(service.submit(decl.id))
        submitted = service.get_by_id(decl.id)
        self.assertEqual(submitted.status, "submitted")
        self.assertIsNotNone(submitted.submitted_at)

        with self.assertRaises(BadRequestError):
            service.submit(decl.id)

        service.verify(decl.id, "hr-admin")
        verified = service.get_by_id(decl.id)
        self.assertEqual(verified.status, "verified")
        self.assertEqual(verified.verified_by, "hr-admin")

        with self.assertRaises(BadRequestError):
            service.update(decl.id, UpdateTaxDeclarationDto(sec80c_ppf=1))
        with self.assertRaises(BadRequestError):
            service.delete(decl.id)

    def test_verify_mutation_invalidates_employee_list(self):
        q = self.queries.tax_declarations
        decl = self._declaration()
        self.services.tax_declarations.submit(decl.id)
        by_employee = q.by_employee_query(self.employee.id)
        self.assertEqual(by_employee.fetch().data[0].status, "submitted")

        q.verify_mutation().mutate(VerifyVariables(decl.id, "hr-admin"))

        self.assertEqual(by_employee.fetch().data[0].status, "verified")

    def test_invalid_financial_year_is_rejected(self):
        with self.assertRaises(BadRequestError):
            self.services.tax_declarations.create({"employeeId": self.employee.id, "financialYear": "2024"})


if __name__ == "__main__":
    unittest.main()
