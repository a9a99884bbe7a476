from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from backoffice.database.database import get_db
from backoffice.modules.auth.dependencies import AuthDependencies
from backoffice.modules.auth.resolver import Identity
from backoffice.modules.products import service
from backoffice.modules.products.schemas import ProductCreate, ProductUpdate, ProductOut
from backoffice.modules.rbac.registry import Permission

products_router = APIRouter(tags=["Products"])


@products_router.get("/", response_model=List[ProductOut])
def list_products(
    updated_since: Optional[datetime] = Query(None, alias="updatedSince"),
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.VIEW_PRODUCTS))
):
    return service.ProductService(db).list(identity.company_id, updated_since)


@products_router.get("/{product_uuid}", response_model=ProductOut)
def get_product(
    product_uuid: UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.VIEW_PRODUCTS))
):
    return service.ProductService(db).get(product_uuid, identity.company_id)


@products_router.post("/", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def save_product(
    product: ProductCreate,
    response: Response,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_PRODUCTS))
):
    row, created = service.ProductService(db).save(product, identity.company_id)
    if not created:
        response.status_code = status.HTTP_200_OK
    return row


@products_router.put("/{product_uuid}", response_model=ProductOut)
def update_product(
    product_uuid: UUID,
    update: ProductUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_PRODUCTS))
):
    return service.ProductService(db).update(product_uuid, update, identity.company_id)


@products_router.delete("/{product_uuid}", response_model=ProductOut)
def delete_product(
    product_uuid: UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_PRODUCTS))
):
    return service.ProductService(db).delete(product_uuid, identity.company_id)
