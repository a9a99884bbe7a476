from typing import Optional
from uuid import UUID

from pydantic import Field

from backoffice.common.schemas import Identified, RecordOut, UpsertPayload


class ProductUpdate(UpsertPayload):
    name: Optional[str] = None
    sku: Optional[str] = None
    category_uuid: Optional[UUID] = None
    unit_uuid: Optional[UUID] = None
    brand_uuid: Optional[UUID] = None
    type: Optional[str] = None
    pack_size: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    cost: Optional[float] = Field(None, ge=0)
    stock_quantity: Optional[int] = None
    is_active: Optional[bool] = None
    gst_type: Optional[str] = None
    gst_rate: Optional[float] = Field(None, ge=0)
    image_url: Optional[str] = None
    description: Optional[str] = None
    discount: Optional[float] = Field(None, ge=0)
    is_percent_discount: Optional[bool] = None


class ProductCreate(ProductUpdate, Identified):
    pass


class ProductOut(RecordOut):
    name: str
    sku: str
    category_uuid: Optional[UUID] = None
    unit_uuid: Optional[UUID] = None
    brand_uuid: Optional[UUID] = None
    type: Optional[str] = None
    pack_size: Optional[str] = None
    price: float
    cost: Optional[float] = None
    stock_quantity: int = 0
    is_active: bool
    gst_type: Optional[str] = None
    gst_rate: Optional[float] = None
    image_url: Optional[str] = None
    description: Optional[str] = None
    discount: float = 0.0
    is_percent_discount: bool = False
