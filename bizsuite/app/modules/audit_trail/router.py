from __future__ import annotations

from datetime import date, timedelta

from fastapi import APIRouter, Depends, Query, Request, Response

from bizsuite.app.core.auth import AuthRequired, get_deps
from bizsuite.app.core.config import settings
from bizsuite.app.core.errors import MockApiError
from bizsuite.app.dependencies import MockDependencies
from bizsuite.models.audit_trail import AuditExportParams, AuditTrailFilterParams


def create_router() -> APIRouter:
    router = APIRouter(prefix="/audit-trail")

    @router.get("")
    async def list_entries(
        _: AuthRequired,
        company_id: str | None = Query(default=None, alias="companyId"),
        deps: MockDependencies = Depends(get_deps),
    ):
        _, rows = deps.audit_trail.list_events(company_id=company_id)
        return [r.to_wire() for r in rows]

    @router.get("/paged")
    async def paged_entries(request: Request, _: AuthRequired, deps: MockDependencies = Depends(get_deps)):
        filters = AuditTrailFilterParams.model_validate(dict(request.query_params))
        if filters.sort_by and filters.sort_by not in ("createdAt", "created_at"):
            raise MockApiError(400, f"Unknown sort field: {filters.sort_by}")
        page_number = filters.page_number or 1
        page_size = min(filters.page_size or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
        total, rows = deps.audit_trail.list_events(
            company_id=filters.company_id,
            entity_type=filters.entity_type,
            entity_id=filters.entity_id,
            operation=filters.operation,
            actor_id=filters.actor_id,
            search_term=filters.search_term,
            from_date=filters.from_date,
            to_date=filters.to_date,
            sort_descending=filters.sort_descending is not False,
            offset=(page_number - 1) * page_size,
            limit=page_size,
        )
        return {
            "items": [r.to_wire() for r in rows],
            "totalCount": total,
            "pageNumber": page_number,
            "pageSize": page_size,
            "totalPages": -(-total // page_size),
        }

    @router.get("/entity-types")
    async def entity_types(
        _: AuthRequired,
        company_id: str | None = Query(default=None, alias="companyId"),
        deps: MockDependencies = Depends(get_deps),
    ):
        return deps.audit_trail.entity_types(company_id=company_id)

    @router.get("/stats")
    async def stats(
        _: AuthRequired,
        company_id: str | None = Query(default=None, alias="companyId"),
        from_date: date | None = Query(default=None, alias="fromDate"),
        to_date: date | None = Query(default=None, alias="toDate"),
        deps: MockDependencies = Depends(get_deps),
    ):
        return deps.audit_trail.stats(company_id=company_id, from_date=from_date, to_date=to_date)

    @router.get("/export")
    async def export(request: Request, _: AuthRequired, deps: MockDependencies = Depends(get_deps)):
        query = dict(request.query_params)
        if not query.get("companyId"):
            raise MockApiError(400, "companyId is required")
        query.setdefault("toDate", date.today().isoformat())
        try:
            default_from = date.fromisoformat(query["toDate"]) - timedelta(days=30)
        except ValueError as e:
            raise MockApiError(400, f"Invalid toDate: {e}") from e
        query.setdefault("fromDate", default_from.isoformat())
        params = AuditExportParams.model_validate(query)
        if params.from_date > params.to_date:
            raise MockApiError(400, "fromDate must not be after toDate")
        content = deps.audit_trail.export_csv(
            company_id=params.company_id,
            from_date=params.from_date,
            to_date=params.to_date,
            entity_type=params.entity_type,
        )
        filename = f"audit-trail-{params.from_date.isoformat()}-to-{params.to_date.isoformat()}.csv"
        return Response(
            content=content.encode("utf-8"),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    @router.get("/{entry_id}")
    async def get_entry(entry_id: str, _: AuthRequired, deps: MockDependencies = Depends(get_deps)):
        row = deps.audit_trail.get(entry_id)
        if row is None:
            raise MockApiError(404, f"Audit trail entry with id {entry_id} not found")
        return row.to_wire()

    return router
