from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from backoffice.database.database import get_db
from backoffice.modules.auth.dependencies import AuthDependencies
from backoffice.modules.auth.resolver import Identity
from backoffice.modules.categories import service
from backoffice.modules.categories.schemas import CategoryCreate, CategoryUpdate, CategoryOut
from backoffice.modules.rbac.registry import Permission

categories_router = APIRouter(tags=["Categories"])


@categories_router.get("/", response_model=List[CategoryOut])
def list_categories(
    updated_since: Optional[datetime] = Query(None, alias="updatedSince"),
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.VIEW_PRODUCTS))
):
    return service.CategoryService(db).list(identity.company_id, updated_since)


@categories_router.get("/{category_uuid}", response_model=CategoryOut)
def get_category(
    category_uuid: UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.VIEW_PRODUCTS))
):
    return service.CategoryService(db).get(category_uuid, identity.company_id)


@categories_router.post("/", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def save_category(
    category: CategoryCreate,
    response: Response,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_PRODUCTS))
):
    row, created = service.CategoryService(db).save(category, identity.company_id)
    if not created:
        response.status_code = status.HTTP_200_OK
    return row


@categories_router.put("/{category_uuid}", response_model=CategoryOut)
def update_category(
    category_uuid: UUID,
    update: CategoryUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_PRODUCTS))
):
    return service.CategoryService(db).update(category_uuid, update, identity.company_id)


@categories_router.delete("/{category_uuid}", response_model=CategoryOut)
def delete_category(
    category_uuid: UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_PRODUCTS))
):
    return service.CategoryService(db).delete(category_uuid, identity.company_id)
