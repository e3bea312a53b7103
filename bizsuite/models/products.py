from __future__ import annotations

from typing import Optional

from pydantic import Field

from bizsuite.models.common import ApiModel, CompanyFilterParams, EntityModel


class Product(EntityModel):
    name: str
    description: Optional[str] = None
    sku: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None
    unit_price: float = 0.0
    unit: Optional[str] = None
    tax_rate: Optional[float] = None
    is_active: bool = True
    hsn_sac_code: Optional[str] = None
    is_service: Optional[bool] = None
    default_gst_rate: Optional[float] = None


class CreateProductDto(ApiModel):
    name: str = Field(min_length=1)
    company_id: Optional[str] = None
    description: Optional[str] = None
    sku: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None
    unit_price: float = Field(default=0.0, ge=0)
    unit: Optional[str] = None
    tax_rate: Optional[float] = None
    is_active: Optional[bool] = True
    hsn_sac_code: Optional[str] = None
    is_service: Optional[bool] = None
    default_gst_rate: Optional[float] = None


class UpdateProductDto(ApiModel):
    name: Optional[str] = None
    description: Optional[str] = None
    sku: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None
    unit_price: Optional[float] = Field(default=None, ge=0)
    unit: Optional[str] = None
    tax_rate: Optional[float] = None
    is_active: Optional[bool] = None
    hsn_sac_code: Optional[str] = None
    is_service: Optional[bool] = None
    default_gst_rate: Optional[float] = None


class ProductsFilterParams(CompanyFilterParams):
    name: Optional[str] = None
    category: Optional[str] = None
    type: Optional[str] = None
    is_active: Optional[bool] = None
