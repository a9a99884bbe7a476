from typing import Optional

from pydantic import EmailStr

from backoffice.common.schemas import Identified, RecordOut, UpsertPayload


class CustomerUpdate(UpsertPayload):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    credit_limit: Optional[float] = None
    current_balance: Optional[float] = None


class CustomerCreate(CustomerUpdate, Identified):
    pass


class CustomerOut(RecordOut):
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    credit_limit: float = 0.0
    current_balance: float = 0.0
