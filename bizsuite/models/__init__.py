from bizsuite.models.common import (
    ApiModel,
    CompanyFilterParams,
    EntityModel,
    PagedResponse,
    PaginationParams,
    StatusReason,
)

__all__ = [
    "ApiModel",
    "CompanyFilterParams",
    "EntityModel",
    "PagedResponse",
    "PaginationParams",
    "StatusReason",
]
