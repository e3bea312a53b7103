from __future__ import annotations

from typing import Optional

from pydantic import Field

from bizsuite.models.common import ApiModel, CompanyFilterParams, EntityModel


class Tag(EntityModel):
    name: str
    code: Optional[str] = None
    tag_group: str = "custom"
    description: Optional[str] = None
    parent_tag_id: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    sort_order: int = 0
    budget_amount: Optional[float] = None
    budget_period: Optional[str] = None
    budget_year: Optional[str] = None
    is_active: bool = True
    level: Optional[int] = None
    full_path: Optional[str] = None


class TagSummary(ApiModel):
    id: str
    name: str
    code: Optional[str] = None
    tag_group: Optional[str] = None
    color: Optional[str] = None


class CreateTagDto(ApiModel):
    name: str = Field(min_length=1)
    company_id: Optional[str] = None
    code: Optional[str] = None
    tag_group: Optional[str] = "custom"
    description: Optional[str] = None
    parent_tag_id: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    sort_order: Optional[int] = 0
    budget_amount: Optional[float] = None
    budget_period: Optional[str] = None
    budget_year: Optional[str] = None


class UpdateTagDto(ApiModel):
    name: Optional[str] = None
    code: Optional[str] = None
    tag_group: Optional[str] = None
    description: Optional[str] = None
    parent_tag_id: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    sort_order: Optional[int] = None
    budget_amount: Optional[float] = None
    budget_period: Optional[str] = None
    budget_year: Optional[str] = None
    is_active: Optional[bool] = None


class TagsFilterParams(CompanyFilterParams):
    tag_group: Optional[str] = None
    parent_tag_id: Optional[str] = None
    is_active: Optional[bool] = None
