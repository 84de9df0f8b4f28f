# module storefront.products.views

"""Endpoints du catalogue.
- GET /products: liste publique triée par id.
- /admin/products: création, mise à jour, suppression (require_admin).
"""
from typing import List

from fastapi import APIRouter, Depends, Path, Response
from pydantic import BaseModel, Field
from starlette.status import HTTP_201_CREATED, HTTP_204_NO_CONTENT

from storefront.infra.database import MAX_ID, MAX_INT, Store
from storefront.infra.deps import get_store
from storefront.utils.rate_limit import optional_rate_limit
from storefront.utils.security import require_admin
from . import service

router = APIRouter(tags=["Products"])
admin_router = APIRouter(prefix="/admin/products", tags=["Admin"], dependencies=[Depends(require_admin)])


class Product(BaseModel):
    id: int
    name: str
    description: str
    price_cents: int


class ProductPayload(BaseModel):
    name: str = ""
    description: str = ""
    price_cents: int = Field(0, le=MAX_INT)


@router.get("/products", response_model=List[Product])
def list_products(store: Store = Depends(get_store)):
    return service.list_products(store)


@admin_router.post(
    "",
    status_code=HTTP_201_CREATED,
    response_model=Product,
    dependencies=[Depends(optional_rate_limit(times=20, seconds=60))],
)
def create_product(payload: ProductPayload, store: Store = Depends(get_store)):
    return service.create_product(
        store, name=payload.name, description=payload.description, price_cents=payload.price_cents
    )


@admin_router.put("/{product_id}", response_model=Product)
def update_product(
    payload: ProductPayload,
    product_id: int = Path(..., ge=1, le=MAX_ID),
    store: Store = Depends(get_store),
):
    return service.update_product(
        store, product_id, name=payload.name, description=payload.description, price_cents=payload.price_cents
    )


@admin_router.delete("/{product_id}", status_code=HTTP_204_NO_CONTENT)
def delete_product(product_id: int = Path(..., ge=1, le=MAX_ID), store: Store = Depends(get_store)) -> Response:
    service.delete_product(store, product_id)
    return Response(status_code=HTTP_204_NO_CONTENT)
