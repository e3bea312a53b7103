from bizsuite.services.resources.audit_trail import AuditTrailService
from bizsuite.services.resources.base import ReadOnlyResourceService, ResourceService
from bizsuite.services.resources.credit_notes import CreditNoteService
from bizsuite.services.resources.employee_documents import EmployeeDocumentService
from bizsuite.services.resources.employees import EmployeeService
from bizsuite.services.resources.files import FileService
from bizsuite.services.resources.loans import LoanService
from bizsuite.services.resources.products import ProductService
from bizsuite.services.resources.subscriptions import SubscriptionService
from bizsuite.services.resources.tags import TagService
from bizsuite.services.resources.tax_declarations import TaxDeclarationService

__all__ = [
    "AuditTrailService",
    "CreditNoteService",
    "EmployeeDocumentService",
    "EmployeeService",
    "FileService",
    "LoanService",
    "ProductService",
    "ReadOnlyResourceService",
    "ResourceService",
    "SubscriptionService",
    "TagService",
    "TaxDeclarationService",
]
