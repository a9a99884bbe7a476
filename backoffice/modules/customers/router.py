from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from backoffice.database.database import get_db
from backoffice.modules.auth.dependencies import AuthDependencies
from backoffice.modules.auth.resolver import Identity
from backoffice.modules.customers import service
from backoffice.modules.customers.schemas import CustomerCreate, CustomerUpdate, CustomerOut
from backoffice.modules.rbac.registry import Permission

customers_router = APIRouter(tags=["Customers"])


@customers_router.get("/", response_model=List[CustomerOut])
def list_customers(
    updated_since: Optional[datetime] = Query(None, alias="updatedSince"),
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.VIEW_CUSTOMERS))
):
    return service.CustomerService(db).list(identity.company_id, updated_since)


@customers_router.get("/{customer_uuid}", response_model=CustomerOut)
def get_customer(
    customer_uuid: UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.VIEW_CUSTOMERS))
):
    return service.CustomerService(db).get(customer_uuid, identity.company_id)


@customers_router.post("/", response_model=CustomerOut, status_code=status.HTTP_201_CREATED)
def save_customer(
    customer: CustomerCreate,
    response: Response,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_CUSTOMERS))
):
    row, created = service.CustomerService(db).save(customer, identity.company_id)
    if not created:
        response.status_code = status.HTTP_200_OK
    return row


@customers_router.put("/{customer_uuid}", response_model=CustomerOut)
def update_customer(
    customer_uuid: UUID,
    update: CustomerUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_CUSTOMERS))
):
    return service.CustomerService(db).update(customer_uuid, update, identity.company_id)


@customers_router.delete("/{customer_uuid}", response_model=CustomerOut)
def delete_customer(
    customer_uuid: UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_CUSTOMERS))
):
    return service.CustomerService(db).delete(customer_uuid, identity.company_id)
