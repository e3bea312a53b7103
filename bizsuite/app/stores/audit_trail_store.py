from __future__ import annotations

import csv
import io
import json
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Optional

from bizsuite.app.stores.sqlite import connect_sqlite

CSV_COLUMNS = (
    "Timestamp",
    "Entity Type",
    "Entity Id",
    "Entity",
    "Operation",
    "Changed Fields",
    "Actor",
)


@dataclass(frozen=True)
class AuditTrailRow:
    id: str
    company_id: Optional[str]
    entity_type: str
    entity_id: str
    entity_display_name: Optional[str]
    operation: str
    old_values: Optional[dict[str, Any]]
    new_values: Optional[dict[str, Any]]
    changed_fields: list[str] = field(default_factory=list)
    actor_id: Optional[str] = None
    actor_name: Optional[str] = None
    created_at: str = ""

    def to_wire(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "companyId": self.company_id,
            "entityType": self.entity_type,
            "entityId": self.entity_id,
            "entityDisplayName": self.entity_display_name,
            "operation": self.operation,
            "oldValues": self.old_values,
            "newValues": self.new_values,
            "changedFields": list(self.changed_fields),
            "actorId": self.actor_id,
            "actorName": self.actor_name,
            "createdAt": self.created_at,
            "updatedAt": self.created_at,
        }


def _loads(raw: str | None) -> Any:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


def _row(r: Any) -> AuditTrailRow:
    return AuditTrailRow(
        id=r["id"],
        company_id=r["company_id"],
        entity_type=r["entity_type"],
        entity_id=r["entity_id"],
        entity_display_name=r["entity_display_name"],
        operation=r["operation"],
        old_values=_loads(r["old_values_json"]),
        new_values=_loads(r["new_values_json"]),
        changed_fields=list(_loads(r["changed_fields_json"]) or []),
        actor_id=r["actor_id"],
        actor_name=r["actor_name"],
        created_at=r["created_at"],
    )


def _day_start(d: date) -> str:
    return datetime(d.year, d.month, d.day, tzinfo=timezone.utc).isoformat()


def _day_end(d: date) -> str:
    return datetime(d.year, d.month, d.day, 23, 59, 59, 999999, tzinfo=timezone.utc).isoformat()


def changed_fields(old: dict[str, Any] | None, new: dict[str, Any] | None) -> list[str]:
    old = old or {}
    new = new or {}
    ignored = {"updatedAt", "createdAt"}
    return sorted(k for k in set(old) | set(new) if k not in ignored and old.get(k) != new.get(k))


class AuditTrailStore:
    """
    Change history for mock entities.

    Every create / update / delete through the mock API lands here with the old and new
    wire documents; the audit-trail endpoints read from this table only.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)

    def _get_connection(self):
        return connect_sqlite(self.db_path)

    def log_event(
        self,
        *,
        entity_type: str,
        entity_id: str,
        operation: str,
        company_id: str | None = None,
        entity_display_name: str | None = None,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
        actor_id: str | None = None,
        actor_name: str | None = None,
    ) -> AuditTrailRow:
        row = AuditTrailRow(
            id=str(uuid.uuid4()),
            company_id=company_id or None,
            entity_type=entity_type,
            entity_id=str(entity_id),
            entity_display_name=entity_display_name or None,
            operation=operation,
            old_values=old_values,
            new_values=new_values,
            changed_fields=changed_fields(old_values, new_values) if operation == "update" else [],
            actor_id=actor_id or None,
            actor_name=actor_name or None,
            created_at=datetime.now(timezone.utc).isoformat(),
        )
        conn = self._get_connection()
        try:
            conn.execute(
                """
                INSERT INTO audit_trail (
                    id, company_id, entity_type, entity_id, entity_display_name, operation,
                    old_values_json, new_values_json, changed_fields_json,
                    actor_id, actor_name, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    row.id,
                    row.company_id,
                    row.entity_type,
                    row.entity_id,
                    row.entity_display_name,
                    row.operation,
                    json.dumps(old_values, ensure_ascii=False) if old_values is not None else None,
                    json.dumps(new_values, ensure_ascii=False) if new_values is not None else None,
                    json.dumps(row.changed_fields),
                    row.actor_id,
                    row.actor_name,
                    row.created_at,
                ),
            )
            conn.commit()
            return row
        finally:
            conn.close()

    def _where(
        self,
        *,
        company_id: str | None = None,
        entity_type: str | None = None,
        entity_id: str | None = None,
        operation: str | None = None,
        actor_id: str | None = None,
        search_term: str | None = None,
        from_date: date | None = None,
        to_date: date | None = None,
    ) -> tuple[str, list[Any]]:
        where = " WHERE 1=1"
        params: list[Any] = []
        if company_id:
            where += " AND company_id = ?"
            params.append(company_id)
        if entity_type:
            where += " AND entity_type = ?"
            params.append(entity_type)
        if entity_id:
            where += " AND entity_id = ?"
            params.append(entity_id)
        if operation:
            where += " AND operation = ?"
            params.append(operation)
        if actor_id:
            where += " AND actor_id = ?"
            params.append(actor_id)
        if search_term:
            where += " AND (entity_display_name LIKE ? OR entity_type LIKE ? OR actor_name LIKE ?)"
            like = f"%{search_term}%"
            params.extend([like, like, like])
        if from_date is not None:
            where += " AND created_at >= ?"
            params.append(_day_start(from_date))
        if to_date is not None:
            where += " AND created_at <= ?"
            params.append(_day_end(to_date))
        return where, params

    def list_events(
        self,
        *,
        offset: int = 0,
        limit: int | None = None,
        sort_descending: bool = True,
        **filters: Any,
    ) -> tuple[int, list[AuditTrailRow]]:
        where, params = self._where(**filters)
        order = "DESC" if sort_descending else "ASC"
        conn = self._get_connection()
        try:
            total = int(conn.execute(f"SELECT COUNT(*) FROM audit_trail{where}", params).fetchone()[0])
            sql = f"SELECT * FROM audit_trail{where} ORDER BY created_at {order}, rowid {order}"
            args = list(params)
            if limit is not None:
                sql += " LIMIT ? OFFSET ?"
                args.extend([int(limit), max(int(offset), 0)])
            return total, [_row(r) for r in conn.execute(sql, args).fetchall()]
        finally:
            conn.close()

    def get(self, entry_id: str) -> AuditTrailRow | None:
        conn = self._get_connection()
        try:
            r = conn.execute("SELECT * FROM audit_trail WHERE id = ?", (entry_id,)).fetchone()
            return _row(r) if r else None
        finally:
            conn.close()

    def entity_types(self, *, company_id: str | None = None) -> list[str]:
        where, params = self._where(company_id=company_id)
        conn = self._get_connection()
        try:
            rows = conn.execute(
                f"SELECT DISTINCT entity_type FROM audit_trail{where} ORDER BY entity_type", params
            ).fetchall()
            return [r[0] for r in rows]
        finally:
            conn.close()

    def stats(
        self, *, company_id: str | None = None, from_date: date | None = None, to_date: date | None = None
    ) -> dict[str, Any]:
        where, params = self._where(company_id=company_id, from_date=from_date, to_date=to_date)
        conn = self._get_connection()
        try:
            total = int(conn.execute(f"SELECT COUNT(*) FROM audit_trail{where}", params).fetchone()[0])
            by_op = conn.execute(
                f"SELECT operation, COUNT(*) FROM audit_trail{where} GROUP BY operation", params
            ).fetchall()
            by_type = conn.execute(
                f"SELECT entity_type, COUNT(*) FROM audit_trail{where} GROUP BY entity_type", params
            ).fetchall()
        finally:
            conn.close()
        return {
            "totalEntries": total,
            "byOperation": {r[0]: int(r[1]) for r in by_op},
            "byEntityType": {r[0]: int(r[1]) for r in by_type},
        }

    def export_csv(
        self,
        *,
        company_id: str,
        from_date: date,
        to_date: date,
        entity_type: str | None = None,
    ) -> str:
        _, rows = self.list_events(
            company_id=company_id, from_date=from_date, to_date=to_date, entity_type=entity_type
        )
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(CSV_COLUMNS)
        for r in rows:
            writer.writerow(
                [
                    r.created_at,
                    r.entity_type,
                    r.entity_id,
                    r.entity_display_name or "",
                    r.operation,
                    ";".join(r.changed_fields),
                    r.actor_name or r.actor_id or "",
                ]
            )
        return buf.getvalue()
