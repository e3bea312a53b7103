from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import Field

from bizsuite.models.common import ApiModel, CompanyFilterParams, EntityModel

AUDIT_OPERATIONS = ("create", "update", "delete")


class AuditTrailEntry(EntityModel):
    entity_type: str
    entity_id: str
    entity_display_name: Optional[str] = None
    operation: str
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
    changed_fields: List[str] = Field(default_factory=list)
    actor_id: Optional[str] = None
    actor_name: Optional[str] = None


class AuditTrailFilterParams(CompanyFilterParams):
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    operation: Optional[str] = None
    actor_id: Optional[str] = None
    from_date: Optional[date] = None
    to_date: Optional[date] = None


class AuditStats(ApiModel):
    total_entries: int = 0
    by_operation: Dict[str, int] = Field(default_factory=dict)
    by_entity_type: Dict[str, int] = Field(default_factory=dict)


class AuditExportParams(ApiModel):
    company_id: str
    from_date: date
    to_date: date
    entity_type: Optional[str] = None
