from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable, Generic, Mapping, Optional, TypeVar

from pydantic import BaseModel

from bizsuite.services.query.client import Mutation, QueryClient, QueryObserver
from bizsuite.services.query.keys import (
    QueryKey,
    QueryKeys,
    audit_trail_keys,
    credit_note_keys,
    employee_document_keys,
    employee_keys,
    file_keys,
    loan_keys,
    product_keys,
    subscription_keys,
    tag_keys,
    tax_declaration_keys,
)
from bizsuite.services.resources import (
    AuditTrailService,
    CreditNoteService,
    EmployeeDocumentService,
    EmployeeService,
    FileService,
    LoanService,
    ProductService,
    ReadOnlyResourceService,
    ResourceService,
    SubscriptionService,
    TagService,
    TaxDeclarationService,
)
from bizsuite.services.resources.base import with_company
from bizsuite.services.scope import resolve_company_id

D = TypeVar("D")

LIST_STALE_TIME_S = 5 * 60
DETAIL_STALE_TIME_S = 5 * 60
PAGED_STALE_TIME_S = 30


@dataclass(frozen=True)
class UpdateVariables(Generic[D]):
    id: str
    data: D


@dataclass(frozen=True)
class CancelVariables:
    id: str
    reason: Optional[str] = None


@dataclass(frozen=True)
class VerifyVariables:
    id: str
    verified_by: str


@dataclass(frozen=True)
class AssignmentVariables:
    id: str
    data: Any


@dataclass(frozen=True)
class RevokeVariables:
    id: str
    assignment_id: str
    data: Any = None


@dataclass(frozen=True)
class UploadVariables:
    file: Any
    filename: Optional[str] = None
    content_type: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    company_id: Optional[str] = None


@dataclass(frozen=True)
class ExportVariables:
    company_id: Optional[str] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None
    entity_type: Optional[str] = None
    target: Optional[Path] = field(default=None)


class ReadOnlyResourceQueries:
    """List / paged / detail observers for one entity, keyed by its `QueryKeys`."""

    def __init__(
        self,
        client: QueryClient,
        service: ReadOnlyResourceService,
        keys: QueryKeys,
        *,
        logger: logging.Logger | None = None,
    ):
        self.client = client
        self.service = service
        self.keys = keys
        self._logger = logger or logging.getLogger(__name__)

    @property
    def entity_name(self) -> str:
        return self.service.entity_name

    def observe(
        self,
        key: QueryKey,
        fn: Callable[[], Any],
        *,
        stale_time_s: float = LIST_STALE_TIME_S,
        keep_previous_data: bool = False,
        enabled: bool = True,
    ) -> QueryObserver:
        return QueryObserver(
            self.client,
            key,
            fn,
            stale_time_s=stale_time_s,
            keep_previous_data=keep_previous_data,
            enabled=enabled,
        )

    def list_query(self, company_id: str | None = None, *, enabled: bool = True) -> QueryObserver:
        company_id = resolve_company_id(company_id)
        return self.observe(
            self.keys.list(company_id),
            lambda: self.service.get_all(company_id),
            stale_time_s=LIST_STALE_TIME_S,
            enabled=enabled,
        )

    def paged_query(
        self, params: Mapping[str, Any] | BaseModel | None = None, *, enabled: bool = True
    ) -> QueryObserver:
        scoped = with_company(params)
        return self.observe(
            self.keys.paged(scoped),
            lambda: self.service.get_paged(scoped),
            stale_time_s=PAGED_STALE_TIME_S,
            keep_previous_data=True,
            enabled=enabled,
        )

    def set_paged_params(self, observer: QueryObserver, params: Mapping[str, Any] | BaseModel | None) -> None:
        """Point a paged observer at new params, showing the old page until the new one lands."""
        scoped = with_company(params)
        observer.set_options(key=self.keys.paged(scoped), fn=lambda: self.service.get_paged(scoped))

    def detail_query(self, id: str | None, *, enabled: bool = True) -> QueryObserver:
        return self.observe(
            self.keys.detail(id or ""),
            lambda: self.service.get_by_id(id),
            stale_time_s=DETAIL_STALE_TIME_S,
            enabled=enabled and bool(id),
        )

    def fetch_list(self, company_id: str | None = None) -> Any:
        company_id = resolve_company_id(company_id)
        return self.client.fetch_query(
            self.keys.list(company_id), lambda: self.service.get_all(company_id), stale_time_s=LIST_STALE_TIME_S
        )

    def fetch_paged(self, params: Mapping[str, Any] | BaseModel | None = None) -> Any:
        scoped = with_company(params)
        return self.client.fetch_query(
            self.keys.paged(scoped), lambda: self.service.get_paged(scoped), stale_time_s=PAGED_STALE_TIME_S
        )

    def fetch_detail(self, id: str) -> Any:
        return self.client.fetch_query(
            self.keys.detail(id), lambda: self.service.get_by_id(id), stale_time_s=DETAIL_STALE_TIME_S
        )

    def invalidate_lists(self) -> None:
        self.client.invalidate_queries(self.keys.lists())

    def invalidate_detail(self, id: str) -> None:
        self.client.invalidate_queries(self.keys.detail(id))
        self.invalidate_lists()

    def mutation(
        self, action: str, fn: Callable[[Any], Any], on_success: Callable[[Any, Any], None] | None = None
    ) -> Mutation:
        return Mutation(fn, label=f"{action} {self.entity_name}", on_success=on_success, logger=self._logger)

    def action_mutation(self, action: str, fn: Callable[[Any], Any], id_of: Callable[[Any], str]) -> Mutation:
        """Mutation for a status transition on one record; refreshes that record and every list."""
        return self.mutation(action, fn, lambda _result, variables: self.invalidate_detail(id_of(variables)))


class ResourceQueries(ReadOnlyResourceQueries):
    service: ResourceService

    def create_mutation(self) -> Mutation:
        return self.mutation("create", self.service.create, lambda _r, _v: self.invalidate_lists())

    def update_mutation(self) -> Mutation:
        def run(variables: UpdateVariables) -> None:
            return self.service.update(variables.id, variables.data)

        return self.mutation("update", run, lambda _r, v: self.invalidate_detail(v.id))

    def delete_mutation(self) -> Mutation:
        def on_success(_result: Any, id: str) -> None:
            self.client.remove_queries(self.keys.detail(id))
            self.invalidate_lists()

        return self.mutation("delete", self.service.delete, on_success)


class EmployeeQueries(ResourceQueries):
    service: EmployeeService

    def __init__(self, client: QueryClient, service: EmployeeService, **kwargs: Any):
        super().__init__(client, service, employee_keys, **kwargs)

    def by_code_query(self, employee_code: str | None) -> QueryObserver:
        return self.observe(
            self.keys.list_extra("byCode", employee_code or ""),
            lambda: self.service.get_by_employee_code(employee_code),
            enabled=bool(employee_code),
        )


class ProductQueries(ResourceQueries):
    def __init__(self, client: QueryClient, service: ProductService, **kwargs: Any):
        super().__init__(client, service, product_keys, **kwargs)


class LoanQueries(ResourceQueries):
    def __init__(self, client: QueryClient, service: LoanService, **kwargs: Any):
        super().__init__(client, service, loan_keys, **kwargs)


class TagQueries(ResourceQueries):
    service: TagService

    def __init__(self, client: QueryClient, service: TagService, **kwargs: Any):
        super().__init__(client, service, tag_keys, **kwargs)

    def group_query(self, tag_group: str, company_id: str | None = None) -> QueryObserver:
        company_id = resolve_company_id(company_id)
        return self.observe(
            self.keys.list_extra("group", tag_group, company_id or "all"),
            lambda: self.service.get_by_group(tag_group, company_id),
        )

    def hierarchy_query(self, company_id: str | None = None) -> QueryObserver:
        company_id = resolve_company_id(company_id)
        return self.observe(
            self.keys.list_extra("hierarchy", company_id or "all"),
            lambda: self.service.get_hierarchy(company_id),
        )

    def summaries_query(self, company_id: str | None = None, tag_group: str | None = None) -> QueryObserver:
        company_id = resolve_company_id(company_id)
        return self.observe(
            self.keys.list_extra("summaries", {"companyId": company_id or "all", "tagGroup": tag_group}),
            lambda: self.service.get_summaries(company_id, tag_group),
        )


class CreditNoteQueries(ResourceQueries):
    service: CreditNoteService

    def __init__(self, client: QueryClient, service: CreditNoteService, **kwargs: Any):
        super().__init__(client, service, credit_note_keys, **kwargs)

    def items_query(self, id: str | None) -> QueryObserver:
        return self.observe(
            self.keys.detail_extra(id or "", "items"),
            lambda: self.service.get_items(id),
            stale_time_s=DETAIL_STALE_TIME_S,
            enabled=bool(id),
        )

    def by_invoice_query(self, invoice_id: str | None) -> QueryObserver:
        return self.observe(
            self.keys.list_extra("byInvoice", invoice_id or ""),
            lambda: self.service.get_by_invoice(invoice_id),
            enabled=bool(invoice_id),
        )

    def next_number_query(self, company_id: str | None = None) -> QueryObserver:
        company_id = resolve_company_id(company_id)
        return self.observe(
            self.keys.list_extra("nextNumber", company_id or "all"),
            lambda: self.service.generate_next_number(company_id),
            stale_time_s=0,
            enabled=bool(company_id),
        )

    def issue_mutation(self) -> Mutation:
        return self.action_mutation("issue", self.service.issue, lambda id: id)

    def cancel_mutation(self) -> Mutation:
        return self.action_mutation(
            "cancel", lambda v: self.service.cancel(v.id, v.reason), lambda v: v.id
        )


class AuditTrailQueries(ReadOnlyResourceQueries):
    service: AuditTrailService

    def __init__(self, client: QueryClient, service: AuditTrailService, **kwargs: Any):
        super().__init__(client, service, audit_trail_keys, **kwargs)

    def entity_types_query(self, company_id: str | None = None) -> QueryObserver:
        company_id = resolve_company_id(company_id)
        return self.observe(
            self.keys.list_extra("entityTypes", company_id or "all"),
            lambda: self.service.get_entity_types(company_id),
        )

    def stats_query(
        self,
        company_id: str | None = None,
        *,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> QueryObserver:
        company_id = resolve_company_id(company_id)
        params = {"companyId": company_id or "all", "fromDate": from_date, "toDate": to_date}
        return self.observe(
            self.keys.list_extra("stats", {k: (v.isoformat() if isinstance(v, date) else v) for k, v in params.items()}),
            lambda: self.service.get_stats(company_id, from_date=from_date, to_date=to_date),
        )

    def export_mutation(self) -> Mutation:
        """Download the CSV export; writes to `target` when given and returns the path, else the bytes."""

        def run(v: ExportVariables) -> Any:
            kwargs = {"from_date": v.from_date, "to_date": v.to_date, "entity_type": v.entity_type}
            if v.target is not None:
                return self.service.download_csv(v.target, v.company_id, **kwargs)
            return self.service.export_csv(v.company_id, **kwargs)

        return self.mutation("export", run)


class SubscriptionQueries(ResourceQueries):
    service: SubscriptionService

    def __init__(self, client: QueryClient, service: SubscriptionService, **kwargs: Any):
        super().__init__(client, service, subscription_keys, **kwargs)

    def assignments_query(self, id: str | None, include_revoked: bool = False) -> QueryObserver:
        return self.observe(
            self.keys.detail_extra(id or "", "assignments", {"includeRevoked": include_revoked}),
            lambda: self.service.get_assignments(id, include_revoked),
            stale_time_s=DETAIL_STALE_TIME_S,
            enabled=bool(id),
        )

    def pause_mutation(self) -> Mutation:
        return self.action_mutation("pause", lambda v: self.service.pause(v.id, v.data), lambda v: v.id)

    def resume_mutation(self) -> Mutation:
        return self.action_mutation("resume", lambda v: self.service.resume(v.id, v.data), lambda v: v.id)

    def assign_mutation(self) -> Mutation:
        return self.action_mutation("assign", lambda v: self.service.assign(v.id, v.data), lambda v: v.id)

    def revoke_assignment_mutation(self) -> Mutation:
        return self.action_mutation(
            "revoke assignment for",
            lambda v: self.service.revoke_assignment(v.id, v.assignment_id, v.data),
            lambda v: v.id,
        )


class TaxDeclarationQueries(ResourceQueries):
    service: TaxDeclarationService

    def __init__(self, client: QueryClient, service: TaxDeclarationService, **kwargs: Any):
        super().__init__(client, service, tax_declaration_keys, **kwargs)

    def by_employee_query(self, employee_id: str | None) -> QueryObserver:
        return self.observe(
            self.keys.list_extra("employee", employee_id or ""),
            lambda: self.service.get_by_employee(employee_id),
            enabled=bool(employee_id),
        )

    def submit_mutation(self) -> Mutation:
        return self.action_mutation("submit", self.service.submit, lambda id: id)

    def verify_mutation(self) -> Mutation:
        return self.action_mutation(
            "verify", lambda v: self.service.verify(v.id, v.verified_by), lambda v: v.id
        )


class EmployeeDocumentQueries(ResourceQueries):
    service: EmployeeDocumentService

    def __init__(self, client: QueryClient, service: EmployeeDocumentService, **kwargs: Any):
        super().__init__(client, service, employee_document_keys, **kwargs)

    def by_employee_query(self, employee_id: str | None) -> QueryObserver:
        return self.observe(
            self.keys.list_extra("employee", employee_id or ""),
            lambda: self.service.get_by_employee(employee_id),
            enabled=bool(employee_id),
        )


class FileQueries(ReadOnlyResourceQueries):
    service: FileService

    def __init__(self, client: QueryClient, service: FileService, **kwargs: Any):
        super().__init__(client, service, file_keys, **kwargs)

    def by_entity_query(self, entity_type: str, entity_id: str | None) -> QueryObserver:
        return self.observe(
            self.keys.list_extra("entity", entity_type, entity_id or ""),
            lambda: self.service.get_by_entity(entity_type, entity_id),
            enabled=bool(entity_id),
        )

    def download(self, id: str) -> bytes:
        return self.service.download(id)

    def upload_mutation(self) -> Mutation:
        def run(v: UploadVariables) -> Any:
            return self.service.upload(
                v.file,
                filename=v.filename,
                content_type=v.content_type,
                entity_type=v.entity_type,
                entity_id=v.entity_id,
                company_id=v.company_id,
            )

        return self.mutation("upload", run, lambda _r, _v: self.invalidate_lists())

    def delete_mutation(self) -> Mutation:
        def on_success(_result: Any, id: str) -> None:
            self.client.remove_queries(self.keys.detail(id))
            self.invalidate_lists()

        return self.mutation("delete", self.service.delete, on_success)
