from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from bizsuite.app.core.config import settings
from bizsuite.app.core.paths import resolve_home_path
from bizsuite.app.stores.audit_trail_store import AuditTrailStore
from bizsuite.app.stores.file_store import FileBlobStore
from bizsuite.app.stores.record_store import RecordStore
from bizsuite.app.stores.sqlite import ensure_schema


@dataclass
class MockDependencies:
    records: RecordStore
    audit_trail: AuditTrailStore
    blobs: FileBlobStore
    require_auth: bool = True
    # token -> display name; empty means any non-empty bearer token is accepted
    tokens: dict[str, str] = field(default_factory=dict)


def create_dependencies(
    data_dir: str | Path | None = None,
    *,
    require_auth: bool | None = None,
    tokens: dict[str, str] | None = None,
) -> MockDependencies:
    root = Path(data_dir) if data_dir is not None else resolve_home_path(settings.MOCK_DATA_DIR)
    root.mkdir(parents=True, exist_ok=True)
    db_path = root / "mock.db"
    ensure_schema(db_path)
    return MockDependencies(
        records=RecordStore(db_path),
        audit_trail=AuditTrailStore(db_path),
        blobs=FileBlobStore(root / "files"),
        require_auth=settings.MOCK_REQUIRE_AUTH if require_auth is None else require_auth,
        tokens=dict(tokens or {}),
    )
