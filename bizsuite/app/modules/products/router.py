from __future__ import annotations

from fastapi import APIRouter

from bizsuite.app.modules.crud import ResourceSpec, add_crud_routes
from bizsuite.models.products import CreateProductDto, Product, ProductsFilterParams, UpdateProductDto

SPEC = ResourceSpec(
    entity="product",
    label="Product",
    model=Product,
    create_model=CreateProductDto,
    update_model=UpdateProductDto,
    filter_model=ProductsFilterParams,
    search_fields=("name", "sku", "description", "hsn_sac_code"),
    display_field="name",
)


def create_router() -> APIRouter:
    return add_crud_routes(APIRouter(prefix="/products"), SPEC)
