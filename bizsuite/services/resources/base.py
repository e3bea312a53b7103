from __future__ import annotations

import logging
from typing import Any, Generic, Mapping, TypeVar

from pydantic import BaseModel

from bizsuite.models.common import PagedResponse
from bizsuite.services.http_client import PortalHttpClient
from bizsuite.services.scope import resolve_company_id

E = TypeVar("E", bound=BaseModel)

Params = Mapping[str, Any] | BaseModel | None


def with_company(params: Params, company_id_field: str = "companyId") -> dict[str, Any]:
    """Dump filter params by alias and fill `companyId` from the active company scope."""
    if params is None:
        out: dict[str, Any] = {}
    elif isinstance(params, BaseModel):
        out = params.model_dump(mode="json", by_alias=True, exclude_none=True)
    else:
        out = {k: v for k, v in params.items() if v is not None}
    if not out.get(company_id_field):
        company_id = resolve_company_id(None)
        if company_id:
            out[company_id_field] = company_id
    return out


class ReadOnlyResourceService(Generic[E]):
    """
    List / paged / detail reads for one REST collection.

    One method call issues exactly one request; nothing is cached here.
    """

    entity_name: str = ""
    path: str = ""
    model: type[BaseModel]

    def __init__(self, http: PortalHttpClient, *, logger: logging.Logger | None = None):
        self._http = http
        self._logger = logger or logging.getLogger(__name__)

    @property
    def http(self) -> PortalHttpClient:
        return self._http

    def item_path(self, id: str, *suffix: str) -> str:
        return "/".join([self.path, str(id), *suffix])

    def _one(self, payload: Any) -> E:
        return self.model.model_validate(payload)  # type: ignore[return-value]

    def _many(self, payload: Any) -> list[E]:
        items = self._http.coerce_list(payload, context=self.entity_name)
        return [self._one(item) for item in items]

    def get_all(self, company_id: str | None = None) -> list[E]:
        company_id = resolve_company_id(company_id)
        params = {"companyId": company_id} if company_id else None
        return self._many(self._http.get_json(self.path, params=params))

    def get_paged(self, params: Params = None) -> PagedResponse:
        return self._http.get_paged(f"{self.path}/paged", with_company(params), self.model)

    def get_by_id(self, id: str) -> E:
        return self._one(self._http.get_json(self.item_path(id)))


class ResourceService(ReadOnlyResourceService[E]):
    """Adds create / update / delete to the read operations."""

    def create(self, dto: BaseModel | Mapping[str, Any]) -> E:
        return self._one(self._http.post_json(self.path, body=with_company(_payload(dto))))

    def update(self, id: str, dto: BaseModel | Mapping[str, Any]) -> None:
        self._http.put_json(self.item_path(id), body=_payload(dto))

    def delete(self, id: str) -> None:
        self._http.delete_json(self.item_path(id))

    def _action(self, id: str, action: str, body: Any = None) -> Any:
        return self._http.post_json(self.item_path(id, action), body=_payload(body) if body is not None else {})


def _payload(dto: Any) -> Any:
    if isinstance(dto, BaseModel):
        return dto.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(dto, Mapping):
        return {k: v for k, v in dto.items() if v is not None}
    return dto
