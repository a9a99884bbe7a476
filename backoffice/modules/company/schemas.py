from typing import Optional
from uuid import UUID

from pydantic import EmailStr

from backoffice.common.schemas import CamelModel, UtcDatetime


class CompanyOut(CamelModel):
    uuid: UUID
    business_name: str
    business_address: Optional[str] = None
    tax_id: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    logo_url: Optional[str] = None
    created_at: UtcDatetime
    updated_at: UtcDatetime


class CompanyUpdate(CamelModel):
    business_name: Optional[str] = None
    business_address: Optional[str] = None
    tax_id: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    logo_url: Optional[str] = None


class ProfileOut(CamelModel):
    """Flat view of the signed-in employee and their company."""

    uuid: UUID
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    position: Optional[str] = None
    role: str
    is_owner: bool
    is_email_verified: bool
    company_uuid: UUID
    business_name: str
    business_address: Optional[str] = None
    tax_id: Optional[str] = None
    company_phone: Optional[str] = None
    company_email: Optional[str] = None
    logo_url: Optional[str] = None


class ProfileUpdate(CamelModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    # Company fields; only editable with the Manage Company permission
    business_name: Optional[str] = None
    business_address: Optional[str] = None
    tax_id: Optional[str] = None
    company_phone: Optional[str] = None
    company_email: Optional[EmailStr] = None
    logo_url: Optional[str] = None
