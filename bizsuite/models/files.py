from __future__ import annotations

from typing import Optional

from bizsuite.models.common import CompanyFilterParams, EntityModel


class StoredFile(EntityModel):
    original_filename: str
    storage_path: str
    mime_type: Optional[str] = None
    file_size: int = 0
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    uploaded_by: Optional[str] = None


class FilesFilterParams(CompanyFilterParams):
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    mime_type: Optional[str] = None
