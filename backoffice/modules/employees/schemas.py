from typing import Optional

from pydantic import EmailStr, field_validator

from backoffice.common.schemas import Identified, RecordOut, UpsertPayload


class EmployeeUpdate(UpsertPayload):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    position: Optional[str] = None
    salary: Optional[float] = None
    role: Optional[str] = None
    google_auth: Optional[bool] = None

    @field_validator("role")
    @classmethod
    def normalize_role(cls, v):
        if v is None:
            return v
        v = v.strip().lower()
        if not v:
            raise ValueError("Role cannot be empty")
        return v


class EmployeeCreate(EmployeeUpdate, Identified):
    pass


class EmployeeOut(RecordOut):
    """Employee as seen by clients. Credentials and account tokens are never included."""

    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    position: Optional[str] = None
    salary: Optional[float] = None
    role: str
    google_auth: bool = False
    is_owner: bool = False
    is_email_verified: bool = False
