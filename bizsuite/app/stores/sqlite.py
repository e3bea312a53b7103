from __future__ import annotations

import sqlite3
from pathlib import Path

SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS records (
        entity TEXT NOT NULL,
        id TEXT NOT NULL,
        company_id TEXT,
        created_at TEXT NOT NULL,
        data_json TEXT NOT NULL,
        PRIMARY KEY (entity, id)
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_records_company ON records (entity, company_id)",
    """
    CREATE TABLE IF NOT EXISTS audit_trail (
        id TEXT PRIMARY KEY,
        company_id TEXT,
        entity_type TEXT NOT NULL,
        entity_id TEXT NOT NULL,
        entity_display_name TEXT,
        operation TEXT NOT NULL,
        old_values_json TEXT,
        new_values_json TEXT,
        changed_fields_json TEXT,
        actor_id TEXT,
        actor_name TEXT,
        created_at TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_audit_trail_company ON audit_trail (company_id, created_at)",
)


def connect_sqlite(db_path: str | Path) -> sqlite3.Connection:
    """Open a connection to the mock database with `sqlite3.Row` rows."""
    conn = sqlite3.connect(str(db_path), timeout=30.0)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA busy_timeout = 5000")
    return conn


def ensure_schema(db_path: str | Path) -> None:
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = connect_sqlite(path)
    try:
        # WAL is persistent, so setting it once per file covers later connections.
        conn.execute("PRAGMA journal_mode = WAL")
        for stmt in SCHEMA:
            conn.execute(stmt)
        conn.commit()
    finally:
        conn.close()
