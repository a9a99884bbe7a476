from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from backoffice.database.database import get_db
from backoffice.modules.auth.dependencies import AuthDependencies
from backoffice.modules.auth.resolver import Identity
from backoffice.modules.invoices import service
from backoffice.modules.invoices.schemas import (
    InvoiceCreate, InvoiceUpdate, InvoiceOut, InvoiceDetailOut
)
from backoffice.modules.rbac.registry import Permission

invoices_router = APIRouter(tags=["Invoices"])


@invoices_router.get("/", response_model=List[InvoiceOut])
def list_invoices(
    updated_since: Optional[datetime] = Query(None, alias="updatedSince"),
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.VIEW_INVOICES))
):
    return service.InvoiceService(db).list(identity.company_id, updated_since)


@invoices_router.get("/{invoice_uuid}", response_model=InvoiceDetailOut)
def get_invoice(
    invoice_uuid: UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.VIEW_INVOICES))
):
    """Invoice header with its line items."""
    return service.InvoiceService(db).get(invoice_uuid, identity.company_id)


@invoices_router.post("/", response_model=InvoiceDetailOut, status_code=status.HTTP_201_CREATED)
def save_invoice(
    invoice: InvoiceCreate,
    response: Response,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_INVOICES))
):
    """
    Create an invoice, or re-sync one the client created offline.

    A missing customer bills the company's walk-in customer. When `items`
    is sent it replaces the invoice's previous items.
    """
    row, created = service.InvoiceService(db).save(invoice, identity.company_id)
    if not created:
        response.status_code = status.HTTP_200_OK
    return row


@invoices_router.put("/{invoice_uuid}", response_model=InvoiceDetailOut)
def update_invoice(
    invoice_uuid: UUID,
    update: InvoiceUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_INVOICES))
):
    return service.InvoiceService(db).update(invoice_uuid, update, identity.company_id)


@invoices_router.delete("/{invoice_uuid}", response_model=InvoiceOut)
def delete_invoice(
    invoice_uuid: UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_INVOICES))
):
    return service.InvoiceService(db).delete(invoice_uuid, identity.company_id)
