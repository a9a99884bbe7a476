import logging
from datetime import timedelta
from typing import Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.common.mixins import utcnow
from backoffice.core.config import settings
from backoffice.modules.auth.google import verify_google_token
from backoffice.modules.auth.resolver import Identity
from backoffice.modules.auth.schemas import SessionOut, SignupIn, TokenOut
from backoffice.modules.auth.utils import (
    create_access_token, generate_secure_token, hash_password, verify_password
)
from backoffice.modules.company.models import Company
from backoffice.modules.company.schemas import CompanyOut
from backoffice.modules.email.tasks import send_password_reset_email_task, send_verification_email_task
from backoffice.modules.employees.models import Employee
from backoffice.modules.employees.schemas import EmployeeOut
from backoffice.modules.rbac.registry import DefaultRole, sort_permissions
from backoffice.modules.rbac.store import RolePermissionStore

logger = logging.getLogger(__name__)


class AuthService:
    """
    Account life cycle: signup, login, email verification and password reset.
    """

    def __init__(self, db: Session):
        self.db = db

    def _check_password(self, password: str):
        if len(password) < settings.MIN_PASSWORD_LENGTH:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters long"
            )

    def _session(self, employee: Employee, company: Company) -> dict:
        permissions = RolePermissionStore(self.db).effective_permissions(employee.role, company.id)
        return {
            "employee": EmployeeOut.model_validate(employee),
            "company": CompanyOut.model_validate(company),
            "permissions": sort_permissions(permissions),
        }

    def _enqueue(self, task, **kwargs):
        # Mail delivery is best effort; the account change is already committed
        try:
            task.delay(**kwargs)
        except Exception:
            logger.error(f"Could not enqueue {task.name}", exc_info=True)

    def signup(self, data: SignupIn) -> TokenOut:
        """
        Register a company together with its owner, who becomes its first admin.
        """
        self._check_password(data.password)
        email = data.email.strip().lower()

        if self.db.query(Employee.id).filter(Employee.email == email).first():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already registered"
            )

        verification_token = generate_secure_token()
        try:
            company = Company(
                business_name=data.business_name,
                business_address=data.business_address,
                tax_id=data.tax_id,
                phone=data.phone,
                email=email
            )
            self.db.add(company)
            self.db.flush()

            employee = Employee(
                company_id=company.id,
                name=data.name,
                email=email,
                password=hash_password(data.password),
                phone=data.phone,
                role=DefaultRole.ADMIN.value,
                is_owner=True,
                is_email_verified=False,
                email_verification_token=verification_token,
                email_verification_expires=utcnow() + timedelta(hours=settings.EMAIL_VERIFICATION_HOURS)
            )
            self.db.add(employee)
            self.db.commit()
            self.db.refresh(employee)
            self.db.refresh(company)
        except IntegrityError:
            self.db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already registered"
            )
        except Exception:
            self.db.rollback()
            logger.error("Signup failed", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error creating account"
            )

        logger.info(f"Company {company.uuid} registered by {email}")
        self._enqueue(
            send_verification_email_task,
            user_email=employee.email,
            user_name=employee.name,
            verification_token=verification_token,
            company_name=company.business_name
        )

        return TokenOut(
            token=create_access_token(str(employee.uuid), str(company.uuid)),
            **self._session(employee, company)
        )

    def login(self, email: str, password: str) -> TokenOut:
        row = self.db.query(Employee, Company).join(
            Company, Company.id == Employee.company_id
        ).filter(
            Employee.email == email.strip().lower(),
            Employee.is_deleted == False,
            Company.is_deleted == False
        ).first()

        if not row or not verify_password(password, row.Employee.password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials"
            )

        employee, company = row
        logger.info(f"Employee {employee.uuid} logged in")
        return TokenOut(
            token=create_access_token(str(employee.uuid), str(company.uuid)),
            **self._session(employee, company)
        )

    def google_sign_in(self, id_token: Optional[str], access_token: Optional[str]) -> Tuple[TokenOut, bool]:
        """
        Sign in with Google. A known email signs in that employee and marks
        the address verified; an unknown one registers a new company with the
        Google account as owner. Returns (session, created).
        """
        profile = verify_google_token(id_token=id_token, access_token=access_token)

        row = self.db.query(Employee, Company).join(
            Company, Company.id == Employee.company_id
        ).filter(Employee.email == profile.email).first()

        if row:
            employee, company = row
            if employee.is_deleted or company.is_deleted:
                raise HTTPException(
                    status_code=status.HTTP_401_UNAUTHORIZED,
                    detail="Account has been deleted"
                )
            if not employee.is_email_verified:
                employee.is_email_verified = True
                employee.email_verification_token = None
                employee.email_verification_expires = None
                employee.updated_at = utcnow()
                self.db.commit()
            logger.info(f"Employee {employee.uuid} signed in with Google")
            created = False
        else:
            name = profile.name or profile.email.split("@")[0]
            try:
                company = Company(business_name=f"{name}'s Company", email=profile.email)
                self.db.add(company)
                self.db.flush()

                employee = Employee(
                    company_id=company.id,
                    name=name,
                    email=profile.email,
                    password=None,
                    role=DefaultRole.ADMIN.value,
                    is_owner=True,
                    google_auth=True,
                    is_email_verified=True
                )
                self.db.add(employee)
                self.db.commit()
                self.db.refresh(employee)
                self.db.refresh(company)
            except IntegrityError:
                self.db.rollback()
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail="Email already registered"
                )
            except Exception:
                self.db.rollback()
                logger.error("Google signup failed", exc_info=True)
                raise HTTPException(
                    status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                    detail="Error creating account"
                )
            logger.info(f"Company {company.uuid} registered with Google by {profile.email}")
            created = True

        session = TokenOut(
            token=create_access_token(str(employee.uuid), str(company.uuid)),
            **self._session(employee, company)
        )
        return session, created

    def me(self, identity: Identity) -> SessionOut:
        employee = self.db.query(Employee).filter(Employee.id == identity.employee_id).one()
        return SessionOut(**self._session(employee, employee.company))

    def verify_email(self, token: str) -> Employee:
        employee = self.db.query(Employee).filter(
            Employee.email_verification_token == token,
            Employee.email_verification_expires > utcnow(),
            Employee.is_deleted == False
        ).first()

        if not employee:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid or expired verification token"
            )

        employee.is_email_verified = True
        employee.email_verification_token = None
        employee.email_verification_expires = None
        employee.updated_at = utcnow()
        self.db.commit()
        return employee

    def resend_verification(self, email: str) -> bool:
        """Issue a new verification link. Unknown or verified addresses are ignored silently."""
        employee = self.db.query(Employee).filter(
            Employee.email == email.strip().lower(),
            Employee.is_deleted == False
        ).first()
        if not employee or employee.is_email_verified:
            return True

        token = generate_secure_token()
        employee.email_verification_token = token
        employee.email_verification_expires = utcnow() + timedelta(hours=settings.EMAIL_VERIFICATION_HOURS)
        employee.updated_at = utcnow()
        self.db.commit()

        self._enqueue(
            send_verification_email_task,
            user_email=employee.email,
            user_name=employee.name,
            verification_token=token
        )
        return True

    def request_password_reset(self, email: str) -> bool:
        """Send a reset link. The response never reveals whether the address exists."""
        employee = self.db.query(Employee).filter(
            Employee.email == email.strip().lower(),
            Employee.is_deleted == False
        ).first()
        if not employee:
            return True

        token = generate_secure_token()
        employee.password_reset_token = token
        employee.password_reset_expires = utcnow() + timedelta(minutes=settings.PASSWORD_RESET_MINUTES)
        employee.updated_at = utcnow()
        self.db.commit()

        self._enqueue(
            send_password_reset_email_task,
            user_email=employee.email,
            user_name=employee.name,
            reset_token=token
        )
        return True

    def reset_password(self, token: str, new_password: str) -> Employee:
        self._check_password(new_password)
        employee = self.db.query(Employee).filter(
            Employee.password_reset_token == token,
            Employee.password_reset_expires > utcnow(),
            Employee.is_deleted == False
        ).first()

        if not employee:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid or expired reset token"
            )

        employee.password = hash_password(new_password)
        employee.password_reset_token = None
        employee.password_reset_expires = None
        employee.updated_at = utcnow()
        self.db.commit()
        logger.info(f"Password reset for employee {employee.uuid}")
        return employee
