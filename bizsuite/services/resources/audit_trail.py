from __future__ import annotations

from datetime import date, timedelta
from pathlib import Path

from bizsuite.models.audit_trail import AuditExportParams, AuditStats, AuditTrailEntry
from bizsuite.services.errors import ExportFailedError, PortalError
from bizsuite.services.resources.base import ReadOnlyResourceService
from bizsuite.services.scope import resolve_company_id

DEFAULT_EXPORT_DAYS = 30


class AuditTrailService(ReadOnlyResourceService[AuditTrailEntry]):
    entity_name = "audit trail"
    path = "/api/audit-trail"
    model = AuditTrailEntry

    def get_entity_types(self, company_id: str | None = None) -> list[str]:
        company_id = resolve_company_id(company_id)
        payload = self._http.get_json(
            f"{self.path}/entity-types", params={"companyId": company_id} if company_id else None
        )
        return [str(v) for v in payload or []]

    def get_stats(
        self,
        company_id: str | None = None,
        *,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> AuditStats:
        params = {"companyId": resolve_company_id(company_id), "fromDate": from_date, "toDate": to_date}
        return AuditStats.model_validate(self._http.get_json(f"{self.path}/stats", params=params) or {})

    def export_params(
        self,
        company_id: str | None = None,
        *,
        from_date: date | None = None,
        to_date: date | None = None,
        entity_type: str | None = None,
    ) -> AuditExportParams:
        company_id = resolve_company_id(company_id)
        if not company_id:
            raise ExportFailedError("company_id is required to export the audit trail")
        to_date = to_date or date.today()
        from_date = from_date or (to_date - timedelta(days=DEFAULT_EXPORT_DAYS))
        return AuditExportParams(
            company_id=company_id, from_date=from_date, to_date=to_date, entity_type=entity_type
        )

    def export_csv(
        self,
        company_id: str | None = None,
        *,
        from_date: date | None = None,
        to_date: date | None = None,
        entity_type: str | None = None,
    ) -> bytes:
        params = self.export_params(company_id, from_date=from_date, to_date=to_date, entity_type=entity_type)
        try:
            return self._http.get_bytes(f"{self.path}/export", params=params)
        except PortalError as exc:
            self._logger.error("Failed to export audit trail: %s", exc)
            raise ExportFailedError(f"Failed to export audit trail: {exc}") from exc

    def download_csv(
        self,
        target: str | Path | None = None,
        company_id: str | None = None,
        *,
        from_date: date | None = None,
        to_date: date | None = None,
        entity_type: str | None = None,
    ) -> Path:
        params = self.export_params(company_id, from_date=from_date, to_date=to_date, entity_type=entity_type)
        content = self.export_csv(
            params.company_id, from_date=params.from_date, to_date=params.to_date, entity_type=entity_type
        )
        path = Path(target) if target is not None else Path(
            f"audit-trail-{params.from_date.isoformat()}-to-{params.to_date.isoformat()}.csv"
        )
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)
        except OSError as exc:
            raise ExportFailedError(f"Failed to write {path}: {exc}") from exc
        self._logger.info("Audit trail exported: path=%s bytes=%s", path, len(content))
        return path
