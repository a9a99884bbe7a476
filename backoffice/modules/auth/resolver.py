"""
Turns a bearer credential into the acting employee and their company.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from uuid import UUID

import jwt
from sqlalchemy.orm import Session

from backoffice.modules.auth.utils import decode_access_token
from backoffice.modules.company.models import Company
from backoffice.modules.employees.models import Employee

logger = logging.getLogger(__name__)


class RejectionReason(str, Enum):
    MISSING_CREDENTIAL = "MissingCredential"
    INVALID_CREDENTIAL = "InvalidCredential"
    UNKNOWN_IDENTITY = "UnknownIdentity"


class IdentityRejected(Exception):
    def __init__(self, reason: RejectionReason):
        super().__init__(reason.value)
        self.reason = reason


@dataclass(frozen=True)
class Identity:
    employee_id: int
    employee_uuid: UUID
    company_id: int
    role: Optional[str]
    is_owner: bool = False


class IdentityResolver:
    def __init__(self, db: Session):
        self.db = db

    def resolve(self, credential: Optional[str]) -> Identity:
        if not credential:
            raise IdentityRejected(RejectionReason.MISSING_CREDENTIAL)

        try:
            payload = decode_access_token(credential)
            subject = payload.get("sub")
            company = payload.get("company")
            if not subject or not company:
                raise IdentityRejected(RejectionReason.INVALID_CREDENTIAL)
            employee_uuid = UUID(str(subject))
            company_uuid = UUID(str(company))
        except jwt.PyJWTError:
            raise IdentityRejected(RejectionReason.INVALID_CREDENTIAL)
        except ValueError:
            raise IdentityRejected(RejectionReason.INVALID_CREDENTIAL)

        row = self.db.query(Employee, Company).join(
            Company, Company.id == Employee.company_id
        ).filter(
            Employee.uuid == employee_uuid,
            Company.uuid == company_uuid,
            Employee.is_deleted == False,
            Company.is_deleted == False
        ).first()

        if row is None:
            logger.debug(f"Token subject {employee_uuid} does not match an active employee")
            raise IdentityRejected(RejectionReason.UNKNOWN_IDENTITY)

        employee, _company = row
        return Identity(
            employee_id=employee.id,
            employee_uuid=employee.uuid,
            company_id=employee.company_id,
            role=employee.role,
            is_owner=bool(employee.is_owner),
        )
