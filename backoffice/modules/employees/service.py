import logging
from typing import Any, Dict

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from backoffice.common.service import TenantResourceService
from backoffice.core.config import settings
from backoffice.modules.auth.resolver import Identity
from backoffice.modules.auth.utils import hash_password
from backoffice.modules.employees.models import Employee
from backoffice.modules.rbac.registry import DefaultRole

logger = logging.getLogger(__name__)


class EmployeeService(TenantResourceService):
    """
    Staff management. Writes are checked against the acting employee:
    only admins may hand out the admin role.
    """

    model = Employee
    label = "Employee"
    required_fields = ("name", "email")

    def __init__(self, db: Session, actor: Identity):
        super().__init__(db)
        self.actor = actor

    def prepare(self, values: Dict[str, Any], company_id: int, existing=None) -> Dict[str, Any]:
        if values.get("role") == DefaultRole.ADMIN.value and self.actor.role != DefaultRole.ADMIN.value:
            logger.info(f"Employee {self.actor.employee_uuid} tried to assign the admin role")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Only admins can assign the admin role"
            )

        if values.get("email"):
            values["email"] = values["email"].strip().lower()
            self._ensure_email_available(values["email"], existing)

        password = values.pop("password", None)
        if password is not None:
            if len(password) < settings.MIN_PASSWORD_LENGTH:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters long"
                )
            values["password"] = hash_password(password)
        elif existing is None and not values.get("google_auth"):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Password is required"
            )

        return values

    def _ensure_email_available(self, email: str, existing=None):
        # Email is the login identifier, so it is unique across every company
        query = self.db.query(Employee.id).filter(Employee.email == email)
        if existing is not None:
            query = query.filter(Employee.id != existing.id)
        if query.first():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already in use"
            )
