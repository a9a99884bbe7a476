from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from backoffice.database.database import get_db
from backoffice.modules.auth.dependencies import AuthDependencies
from backoffice.modules.auth.resolver import Identity
from backoffice.modules.suppliers import service
from backoffice.modules.suppliers.schemas import SupplierCreate, SupplierUpdate, SupplierOut
from backoffice.modules.rbac.registry import Permission

suppliers_router = APIRouter(tags=["Suppliers"])


@suppliers_router.get("/", response_model=List[SupplierOut])
def list_suppliers(
    updated_since: Optional[datetime] = Query(None, alias="updatedSince"),
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.VIEW_SUPPLIERS))
):
    return service.SupplierService(db).list(identity.company_id, updated_since)


@suppliers_router.get("/{supplier_uuid}", response_model=SupplierOut)
def get_supplier(
    supplier_uuid: UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.VIEW_SUPPLIERS))
):
    return service.SupplierService(db).get(supplier_uuid, identity.company_id)


@suppliers_router.post("/", response_model=SupplierOut, status_code=status.HTTP_201_CREATED)
def save_supplier(
    supplier: SupplierCreate,
    response: Response,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_SUPPLIERS))
):
    row, created = service.SupplierService(db).save(supplier, identity.company_id)
    if not created:
        response.status_code = status.HTTP_200_OK
    return row


@suppliers_router.put("/{supplier_uuid}", response_model=SupplierOut)
def update_supplier(
    supplier_uuid: UUID,
    update: SupplierUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_SUPPLIERS))
):
    return service.SupplierService(db).update(supplier_uuid, update, identity.company_id)


@suppliers_router.delete("/{supplier_uuid}", response_model=SupplierOut)
def delete_supplier(
    supplier_uuid: UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_SUPPLIERS))
):
    return service.SupplierService(db).delete(supplier_uuid, identity.company_id)
