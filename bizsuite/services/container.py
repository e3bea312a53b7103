from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from bizsuite.services.connection import PortalConnection, create_portal_connection
from bizsuite.services.http_client import PortalHttpClient
from bizsuite.services.query.client import QueryClient
from bizsuite.services.query.queries import (
    AuditTrailQueries,
    CreditNoteQueries,
    EmployeeDocumentQueries,
    EmployeeQueries,
    FileQueries,
    LoanQueries,
    ProductQueries,
    SubscriptionQueries,
    TagQueries,
    TaxDeclarationQueries,
)
from bizsuite.services.registry import get_or_create
from bizsuite.services.resources import (
    AuditTrailService,
    CreditNoteService,
    EmployeeDocumentService,
    EmployeeService,
    FileService,
    LoanService,
    ProductService,
    SubscriptionService,
    TagService,
    TaxDeclarationService,
)

SERVICES_KEY = "bizsuite.services"
QUERY_CLIENT_KEY = "bizsuite.query_client"


@dataclass(frozen=True)
class PortalServices:
    http: PortalHttpClient
    employees: EmployeeService
    products: ProductService
    tags: TagService
    credit_notes: CreditNoteService
    audit_trail: AuditTrailService
    loans: LoanService
    subscriptions: SubscriptionService
    tax_declarations: TaxDeclarationService
    employee_documents: EmployeeDocumentService
    files: FileService


def create_services(http: PortalHttpClient, *, logger: logging.Logger | None = None) -> PortalServices:
    log = logger or logging.getLogger(__name__)
    return PortalServices(
        http=http,
        employees=EmployeeService(http, logger=log),
        products=ProductService(http, logger=log),
        tags=TagService(http, logger=log),
        credit_notes=CreditNoteService(http, logger=log),
        audit_trail=AuditTrailService(http, logger=log),
        loans=LoanService(http, logger=log),
        subscriptions=SubscriptionService(http, logger=log),
        tax_declarations=TaxDeclarationService(http, logger=log),
        employee_documents=EmployeeDocumentService(http, logger=log),
        files=FileService(http, logger=log),
    )


@dataclass(frozen=True)
class PortalQueries:
    client: QueryClient
    employees: EmployeeQueries
    products: ProductQueries
    tags: TagQueries
    credit_notes: CreditNoteQueries
    audit_trail: AuditTrailQueries
    loans: LoanQueries
    subscriptions: SubscriptionQueries
    tax_declarations: TaxDeclarationQueries
    employee_documents: EmployeeDocumentQueries
    files: FileQueries


def create_queries(
    services: PortalServices,
    client: QueryClient | None = None,
    *,
    logger: logging.Logger | None = None,
) -> PortalQueries:
    qc = client if client is not None else QueryClient()
    kw: dict[str, Any] = {"logger": logger or logging.getLogger(__name__)}
    return PortalQueries(
        client=qc,
        employees=EmployeeQueries(qc, services.employees, **kw),
        products=ProductQueries(qc, services.products, **kw),
        tags=TagQueries(qc, services.tags, **kw),
        credit_notes=CreditNoteQueries(qc, services.credit_notes, **kw),
        audit_trail=AuditTrailQueries(qc, services.audit_trail, **kw),
        loans=LoanQueries(qc, services.loans, **kw),
        subscriptions=SubscriptionQueries(qc, services.subscriptions, **kw),
        tax_declarations=TaxDeclarationQueries(qc, services.tax_declarations, **kw),
        employee_documents=EmployeeDocumentQueries(qc, services.employee_documents, **kw),
        files=FileQueries(qc, services.files, **kw),
    )


def get_default_connection(config_path: str | Path | None = None) -> PortalConnection:
    return get_or_create("bizsuite.connection", lambda: create_portal_connection(config_path=config_path))


def get_default_services() -> PortalServices:
    """Process-wide resource services over the default connection, built on first use."""
    return get_or_create(SERVICES_KEY, lambda: create_services(get_default_connection().http))


def get_query_client() -> QueryClient:
    return get_or_create(QUERY_CLIENT_KEY, QueryClient)


def get_default_queries() -> PortalQueries:
    return get_or_create(
        "bizsuite.queries", lambda: create_queries(get_default_services(), get_query_client())
    )
