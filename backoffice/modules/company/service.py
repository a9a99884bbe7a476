import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.common.mixins import utcnow
from backoffice.modules.auth.resolver import Identity
from backoffice.modules.company.models import Company
from backoffice.modules.company.schemas import CompanyUpdate, ProfileOut, ProfileUpdate
from backoffice.modules.employees.models import Employee
from backoffice.modules.rbac.gate import AccessGate
from backoffice.modules.rbac.registry import Permission

logger = logging.getLogger(__name__)

# ProfileUpdate field -> Company column
COMPANY_FIELDS = {
    "business_name": "business_name",
    "business_address": "business_address",
    "tax_id": "tax_id",
    "company_phone": "phone",
    "company_email": "email",
    "logo_url": "logo_url",
}
EMPLOYEE_FIELDS = ("name", "phone", "address")
# Columns that cannot be cleared
REQUIRED_FIELDS = {"name": "Name", "business_name": "Business name"}


class ProfileService:
    """Signed-in employee's own profile and the company it belongs to."""

    def __init__(self, db: Session):
        self.db = db

    def _load(self, identity: Identity):
        employee = self.db.query(Employee).filter(Employee.id == identity.employee_id).one()
        return employee, employee.company

    def _can_manage_company(self, identity: Identity) -> bool:
        if identity.is_owner:
            return True
        decision = AccessGate(self.db).authorize(identity.role, identity.company_id, Permission.MANAGE_COMPANY)
        return decision.allowed

    def _require_company_access(self, identity: Identity):
        if not self._can_manage_company(identity):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail={
                    "error": "Access denied. Insufficient permissions.",
                    "required": Permission.MANAGE_COMPANY.value,
                    "role": identity.role,
                }
            )

    def _reject_cleared(self, changes: dict):
        for field, label in REQUIRED_FIELDS.items():
            if field in changes and (changes[field] is None or not str(changes[field]).strip()):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"{label} cannot be empty"
                )

    def _commit(self, action: str):
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"{action} rejected by the database", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{action} failed: invalid or conflicting values"
            )
        except Exception:
            self.db.rollback()
            logger.error(f"{action} failed", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"{action} failed"
            )

    def get_profile(self, identity: Identity) -> ProfileOut:
        employee, company = self._load(identity)
        return ProfileOut(
            uuid=employee.uuid,
            name=employee.name,
            email=employee.email,
            phone=employee.phone,
            address=employee.address,
            position=employee.position,
            role=employee.role,
            is_owner=employee.is_owner,
            is_email_verified=employee.is_email_verified,
            company_uuid=company.uuid,
            business_name=company.business_name,
            business_address=company.business_address,
            tax_id=company.tax_id,
            company_phone=company.phone,
            company_email=company.email,
            logo_url=company.logo_url,
        )

    def update_profile(self, identity: Identity, data: ProfileUpdate) -> ProfileOut:
        """
        Update personal fields, and company fields when the caller may manage
        the company. Nothing is written if the company part is refused.
        """
        changes = data.model_dump(exclude_unset=True)
        self._reject_cleared(changes)
        company_changes = {COMPANY_FIELDS[k]: v for k, v in changes.items() if k in COMPANY_FIELDS}
        employee_changes = {k: v for k, v in changes.items() if k in EMPLOYEE_FIELDS}

        if company_changes:
            self._require_company_access(identity)

        employee, company = self._load(identity)
        now = utcnow()
        if employee_changes:
            for field, value in employee_changes.items():
                setattr(employee, field, value)
            employee.updated_at = now
        if company_changes:
            for field, value in company_changes.items():
                setattr(company, field, value)
            company.updated_at = now

        self._commit("Profile update")
        return self.get_profile(identity)

    def update_company(self, identity: Identity, data: CompanyUpdate) -> Company:
        self._require_company_access(identity)
        company = self.db.query(Company).filter(Company.id == identity.company_id).one()
        changes = data.model_dump(exclude_unset=True)
        self._reject_cleared(changes)
        for field, value in changes.items():
            setattr(company, field, value)
        company.updated_at = utcnow()
        self._commit("Company update")
        self.db.refresh(company)
        logger.info(f"Company {company.uuid} updated by employee {identity.employee_uuid}")
        return company
