import unittest
from datetime import date

from pydantic import ValidationError

from bizsuite.models.common import PagedResponse
from bizsuite.models.employees import Employee
from bizsuite.models.tax_declarations import CreateTaxDeclarationDto, TaxDeclaration


class TestPagedResponseUnit(unittest.TestCase):
    def test_count_pages(self):
        self.assertEqual(PagedResponse.count_pages(0, 10), 0)
        self.assertEqual(PagedResponse.count_pages(10, 10), 1)
        self.assertEqual(PagedResponse.count_pages(11, 10), 2)
        self.assertEqual(PagedResponse.count_pages(7, 3), 3)
        with self.assertRaises(ValueError):
            PagedResponse.count_pages(5, 0)

    def test_build_and_navigation(self):
        page = PagedResponse.build([1, 2], total_count=5, page_number=2, page_size=2)
        self.assertEqual(page.total_pages, 3)
        self.assertTrue(page.has_previous_page)
        self.assertTrue(page.has_next_page)
        last = PagedResponse.build([5], total_count=5, page_number=3, page_size=2)
        self.assertFalse(last.has_next_page)

    def test_wire_shape_is_camel_case(self):
        page = PagedResponse[Employee].model_validate(
            {
                "items": [{"id": "e1", "employeeName": "Asha", "hireDate": "2023-04-01"}],
                "totalCount": 1,
                "pageNumber": 1,
                "pageSize": 10,
                "totalPages": 1,
            }
        )
        self.assertIsInstance(page.items[0], Employee)
        self.assertEqual(page.items[0].hire_date, date(2023, 4, 1))
        self.assertEqual(page.to_payload()["totalCount"], 1)


class TestTaxDeclarationModelsUnit(unittest.TestCase):
    def test_section_fields_use_explicit_aliases(self):
        decl = TaxDeclaration.model_validate(
            {
                "id": "t1",
                "employeeId": "e1",
                "financialYear": "2024-25",
                "sec80cPpf": 1000,
                "sec80cNsc": 500,
                "sec80dParents": 25000,
            }
        )
        self.assertEqual(decl.sec80c_total, 1500.0)
        wire = decl.to_payload()
        self.assertEqual(wire["sec80dParents"], 25000)
        self.assertIn("sec80cPpf", wire)

    def test_financial_year_format(self):
        CreateTaxDeclarationDto(employee_id="e1", financial_year="2024-25")
        with self.assertRaises(ValidationError):
            CreateTaxDeclarationDto(employee_id="e1", financial_year="24-25")


if __name__ == "__main__":
    unittest.main()
