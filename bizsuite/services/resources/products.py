from __future__ import annotations

from bizsuite.models.products import Product
from bizsuite.services.resources.base import ResourceService


class ProductService(ResourceService[Product]):
    entity_name = "product"
    path = "/api/products"
    model = Product
