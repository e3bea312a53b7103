from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile

from bizsuite.app.core.auth import AuthRequired, get_deps
from bizsuite.app.core.config import settings
from bizsuite.app.core.errors import MockApiError
from bizsuite.app.dependencies import MockDependencies
from bizsuite.app.modules.crud import (
    ResourceSpec,
    add_crud_routes,
    insert_entity,
    list_entities,
    load_entity,
    remove_entity,
    to_wire,
)
from bizsuite.app.stores.file_store import safe_filename
from bizsuite.models.common import ApiModel
from bizsuite.models.files import FilesFilterParams, StoredFile

logger = logging.getLogger(__name__)


def _delete_blob(deps: MockDependencies, stored: StoredFile) -> None:
    try:
        deps.blobs.delete(stored.storage_path)
    except (OSError, ValueError) as e:
        logger.warning("Failed to delete blob %s: %s", stored.storage_path, e)


SPEC = ResourceSpec(
    entity="file",
    label="File",
    model=StoredFile,
    create_model=ApiModel,
    update_model=ApiModel,
    filter_model=FilesFilterParams,
    search_fields=("original_filename", "mime_type"),
    display_field="original_filename",
    after_delete=_delete_blob,
)


def create_router() -> APIRouter:
    router = APIRouter(prefix="/files")

    @router.post("/upload", status_code=201)
    async def upload(
        actor: AuthRequired,
        file: UploadFile = File(...),
        company_id: str | None = Form(default=None, alias="companyId"),
        entity_type: str | None = Form(default=None, alias="entityType"),
        entity_id: str | None = Form(default=None, alias="entityId"),
        deps: MockDependencies = Depends(get_deps),
    ):
        content = await file.read()
        if not content:
            raise MockApiError(400, "Uploaded file is empty")
        if len(content) > settings.MAX_UPLOAD_BYTES:
            raise MockApiError(413, f"File exceeds {settings.MAX_UPLOAD_BYTES} bytes")
        filename = safe_filename(file.filename or "file")
        storage_path = deps.blobs.save(content, filename=filename, company_id=company_id)
        stored = insert_entity(
            deps,
            SPEC,
            {
                "company_id": company_id,
                "original_filename": file.filename or filename,
                "storage_path": storage_path,
                "mime_type": file.content_type or "application/octet-stream",
                "file_size": len(content),
                "entity_type": entity_type,
                "entity_id": entity_id,
                "uploaded_by": actor.actor_name or actor.actor_id,
            },
            actor,
        )
        return to_wire(stored)

    @router.get("/entity/{entity_type}/{entity_id}")
    async def list_for_entity(
        entity_type: str, entity_id: str, _: AuthRequired, deps: MockDependencies = Depends(get_deps)
    ):
        return [
            to_wire(f)
            for f in list_entities(deps, SPEC)
            if f.entity_type == entity_type and f.entity_id == entity_id
        ]

    @router.get("/{record_id}/download")
    async def download(record_id: str, _: AuthRequired, deps: MockDependencies = Depends(get_deps)):
        stored = load_entity(deps, SPEC, record_id)
        try:
            content = deps.blobs.read(stored.storage_path)
        except FileNotFoundError as e:
            raise MockApiError(404, f"Content of file {record_id} is missing") from e
        return Response(
            content=content,
            media_type=stored.mime_type or "application/octet-stream",
            headers={"Content-Disposition": f'attachment; filename="{safe_filename(stored.original_filename)}"'},
        )

    @router.delete("/{record_id}", status_code=204)
    async def delete(record_id: str, actor: AuthRequired, deps: MockDependencies = Depends(get_deps)):
        remove_entity(deps, SPEC, load_entity(deps, SPEC, record_id), actor)
        return Response(status_code=204)

    return add_crud_routes(router, SPEC, writable=False)
