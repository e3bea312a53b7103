from __future__ import annotations

import mimetypes
from pathlib import Path
from typing import BinaryIO

from bizsuite.models.files import StoredFile
from bizsuite.services.resources.base import ReadOnlyResourceService
from bizsuite.services.scope import resolve_company_id


class FileService(ReadOnlyResourceService[StoredFile]):
    """Uploaded files: multipart upload, metadata reads, raw download, delete."""

    entity_name = "file"
    path = "/api/files"
    model = StoredFile

    def upload(
        self,
        file: str | Path | bytes | BinaryIO,
        *,
        filename: str | None = None,
        content_type: str | None = None,
        entity_type: str | None = None,
        entity_id: str | None = None,
        company_id: str | None = None,
    ) -> StoredFile:
        if isinstance(file, (str, Path)):
            path = Path(file)
            content = path.read_bytes()
            filename = filename or path.name
        elif isinstance(file, bytes):
            content = file
        else:
            content = file.read()
        if not filename:
            raise ValueError("filename is required when uploading raw content")
        mime = content_type or mimetypes.guess_type(filename)[0] or "application/octet-stream"
        payload = self._http.post_multipart(
            f"{self.path}/upload",
            files={"file": (filename, content, mime)},
            data={
                "companyId": resolve_company_id(company_id),
                "entityType": entity_type,
                "entityId": entity_id,
            },
        )
        return self._one(payload)

    def get_metadata(self, id: str) -> StoredFile:
        return self.get_by_id(id)

    def get_by_entity(self, entity_type: str, entity_id: str) -> list[StoredFile]:
        return self._many(self._http.get_json(f"{self.path}/entity/{entity_type}/{entity_id}"))

    def download(self, id: str) -> bytes:
        return self._http.get_bytes(self.item_path(id, "download"))

    def delete(self, id: str) -> None:
        self._http.delete_json(self.item_path(id))
