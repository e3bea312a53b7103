from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class ApiModel(BaseModel):
    """Base for every wire shape: snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class EntityModel(ApiModel):
    id: str
    company_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PaginationParams(ApiModel):
    page_number: Optional[int] = Field(default=None, ge=1)
    page_size: Optional[int] = Field(default=None, ge=1)
    search_term: Optional[str] = None
    sort_by: Optional[str] = None
    sort_descending: Optional[bool] = None


class CompanyFilterParams(PaginationParams):
    company_id: Optional[str] = None


class PagedResponse(ApiModel, Generic[T]):
    items: List[T] = Field(default_factory=list)
    total_count: int = 0
    page_number: int = 1
    page_size: int = 10
    total_pages: int = 0

    @staticmethod
    def count_pages(total_count: int, page_size: int) -> int:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        return math.ceil(max(total_count, 0) / page_size)

    @classmethod
    def build(cls, items: List[Any], total_count: int, page_number: int, page_size: int) -> "PagedResponse":
        return cls(
            items=list(items),
            total_count=total_count,
            page_number=page_number,
            page_size=page_size,
            total_pages=cls.count_pages(total_count, page_size),
        )

    @property
    def has_previous_page(self) -> bool:
        return self.page_number > 1

    @property
    def has_next_page(self) -> bool:
        return self.page_number < self.total_pages


class StatusReason(ApiModel):
    reason: Optional[str] = None
