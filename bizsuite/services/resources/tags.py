from __future__ import annotations

from bizsuite.models.tags import Tag, TagSummary
from bizsuite.services.resources.base import ResourceService
from bizsuite.services.scope import resolve_company_id


class TagService(ResourceService[Tag]):
    entity_name = "tag"
    path = "/api/tags"
    model = Tag

    def _company_params(self, company_id: str | None) -> dict[str, str] | None:
        company_id = resolve_company_id(company_id)
        return {"companyId": company_id} if company_id else None

    def get_by_group(self, tag_group: str, company_id: str | None = None) -> list[Tag]:
        payload = self._http.get_json(f"{self.path}/group/{tag_group}", params=self._company_params(company_id))
        return self._many(payload)

    def get_hierarchy(self, company_id: str | None = None) -> list[Tag]:
        """Root tags first, each followed by its descendants (ordered by `full_path`)."""
        return self._many(self._http.get_json(f"{self.path}/hierarchy", params=self._company_params(company_id)))

    def get_summaries(self, company_id: str | None = None, tag_group: str | None = None) -> list[TagSummary]:
        params = self._company_params(company_id) or {}
        if tag_group:
            params["tagGroup"] = tag_group
        items = self._http.get_list(f"{self.path}/summaries", params=params or None, context="tag summaries")
        return [TagSummary.model_validate(item) for item in items]
