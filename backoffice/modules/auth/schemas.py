from typing import List, Optional

from pydantic import EmailStr, Field

from backoffice.common.schemas import CamelModel
from backoffice.modules.company.schemas import CompanyOut
from backoffice.modules.employees.schemas import EmployeeOut


class SignupIn(CamelModel):
    business_name: str = Field(..., min_length=1)
    business_address: Optional[str] = None
    tax_id: Optional[str] = None
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str
    phone: Optional[str] = None


class LoginIn(CamelModel):
    email: EmailStr
    password: str


class GoogleAuthIn(CamelModel):
    id_token: Optional[str] = None
    access_token: Optional[str] = None


class EmailIn(CamelModel):
    email: EmailStr


class ResetPasswordIn(CamelModel):
    token: str
    password: str


class SessionOut(CamelModel):
    """Signed-in employee with company and effective permissions."""

    employee: EmployeeOut
    company: CompanyOut
    permissions: List[str]


class TokenOut(SessionOut):
    token: str
    token_type: str = "bearer"
