from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from bizsuite.app.stores.sqlite import connect_sqlite


class RecordStore:
    """
    Entity records of the mock API, one JSON document per row.

    Documents are stored in wire form (camelCase keys); `entity` partitions the table
    per resource (employee, tag, credit_note_item, ...).
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)

    def _get_connection(self):
        return connect_sqlite(self.db_path)

    def insert(self, entity: str, record: dict[str, Any]) -> dict[str, Any]:
        conn = self._get_connection()
        try:
            conn.execute(
                "INSERT INTO records (entity, id, company_id, created_at, data_json) VALUES (?, ?, ?, ?, ?)",
                (
                    entity,
                    str(record["id"]),
                    record.get("companyId"),
                    str(record.get("createdAt") or ""),
                    json.dumps(record, ensure_ascii=False),
                ),
            )
            conn.commit()
            return record
        finally:
            conn.close()

    def get(self, entity: str, record_id: str) -> dict[str, Any] | None:
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT data_json FROM records WHERE entity = ? AND id = ?", (entity, str(record_id))
            ).fetchone()
            return json.loads(row["data_json"]) if row else None
        finally:
            conn.close()

    def replace(self, entity: str, record: dict[str, Any]) -> bool:
        conn = self._get_connection()
        try:
            cur = conn.execute(
                "UPDATE records SET company_id = ?, data_json = ? WHERE entity = ? AND id = ?",
                (record.get("companyId"), json.dumps(record, ensure_ascii=False), entity, str(record["id"])),
            )
            conn.commit()
            return cur.rowcount > 0
        finally:
            conn.close()

    def delete(self, entity: str, record_id: str) -> bool:
        conn = self._get_connection()
        try:
            cur = conn.execute("DELETE FROM records WHERE entity = ? AND id = ?", (entity, str(record_id)))
            conn.commit()
            return cur.rowcount > 0
        finally:
            conn.close()

    def list_records(self, entity: str, *, company_id: str | None = None) -> list[dict[str, Any]]:
        """All documents of `entity`, newest first, optionally limited to one company."""
        sql = "SELECT data_json FROM records WHERE entity = ?"
        params: list[Any] = [entity]
        if company_id:
            sql += " AND company_id = ?"
            params.append(company_id)
        sql += " ORDER BY created_at DESC, rowid DESC"
        conn = self._get_connection()
        try:
            return [json.loads(r["data_json"]) for r in conn.execute(sql, params).fetchall()]
        finally:
            conn.close()

    def count(self, entity: str, *, company_id: str | None = None) -> int:
        sql = "SELECT COUNT(*) FROM records WHERE entity = ?"
        params: list[Any] = [entity]
        if company_id:
            sql += " AND company_id = ?"
            params.append(company_id)
        conn = self._get_connection()
        try:
            return int(conn.execute(sql, params).fetchone()[0])
        finally:
            conn.close()
