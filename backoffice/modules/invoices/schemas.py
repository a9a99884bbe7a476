from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import Field

from backoffice.common.schemas import CamelModel, Identified, RecordOut, UpsertPayload, UtcDatetime


class InvoiceItemIn(CamelModel):
    uuid: Optional[UUID] = None
    product_uuid: UUID
    quantity: float = Field(..., gt=0)
    bonus: float = Field(0.0, ge=0)
    unit_price: float = Field(..., ge=0)
    discount: float = Field(0.0, ge=0)
    # Computed from quantity, unit price and discount when omitted
    total_price: Optional[float] = None


class InvoiceUpdate(UpsertPayload):
    invoice_number: Optional[str] = None
    customer_uuid: Optional[UUID] = None
    date: Optional[datetime] = None
    subtotal: Optional[float] = None
    tax: Optional[float] = None
    discount: Optional[float] = None
    total: Optional[float] = None
    sign_url: Optional[str] = None
    items: Optional[List[InvoiceItemIn]] = None


class InvoiceCreate(InvoiceUpdate, Identified):
    pass


class InvoiceItemOut(CamelModel):
    uuid: UUID
    invoice_uuid: Optional[UUID] = None
    product_uuid: Optional[UUID] = None
    quantity: float
    bonus: float = 0.0
    unit_price: float
    discount: float = 0.0
    total_price: float
    created_at: UtcDatetime


class InvoiceOut(RecordOut):
    invoice_number: str
    customer_uuid: Optional[UUID] = None
    date: UtcDatetime
    subtotal: float
    tax: float
    discount: float = 0.0
    total: float
    sign_url: Optional[str] = None


class InvoiceDetailOut(InvoiceOut):
    items: List[InvoiceItemOut] = []
