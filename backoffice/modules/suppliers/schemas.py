from typing import Optional

from pydantic import EmailStr

from backoffice.common.schemas import Identified, RecordOut, UpsertPayload


class SupplierUpdate(UpsertPayload):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None


class SupplierCreate(SupplierUpdate, Identified):
    pass


class SupplierOut(RecordOut):
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
