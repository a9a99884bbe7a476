from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from backoffice.database.database import get_db
from backoffice.modules.auth.dependencies import AuthDependencies
from backoffice.modules.auth.resolver import Identity
from backoffice.modules.brands import service
from backoffice.modules.brands.schemas import BrandCreate, BrandUpdate, BrandOut
from backoffice.modules.rbac.registry import Permission

brands_router = APIRouter(tags=["Brands"])


@brands_router.get("/", response_model=List[BrandOut])
def list_brands(
    updated_since: Optional[datetime] = Query(None, alias="updatedSince"),
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.VIEW_PRODUCTS))
):
    return service.BrandService(db).list(identity.company_id, updated_since)


@brands_router.get("/{brand_uuid}", response_model=BrandOut)
def get_brand(
    brand_uuid: UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.VIEW_PRODUCTS))
):
    return service.BrandService(db).get(brand_uuid, identity.company_id)


@brands_router.post("/", response_model=BrandOut, status_code=status.HTTP_201_CREATED)
def save_brand(
    brand: BrandCreate,
    response: Response,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_PRODUCTS))
):
    row, created = service.BrandService(db).save(brand, identity.company_id)
    if not created:
        response.status_code = status.HTTP_200_OK
    return row


@brands_router.put("/{brand_uuid}", response_model=BrandOut)
def update_brand(
    brand_uuid: UUID,
    update: BrandUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_PRODUCTS))
):
    return service.BrandService(db).update(brand_uuid, update, identity.company_id)


@brands_router.delete("/{brand_uuid}", response_model=BrandOut)
def delete_brand(
    brand_uuid: UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_PRODUCTS))
):
    return service.BrandService(db).delete(brand_uuid, identity.company_id)
