from sqlalchemy import Column, Integer, String, UniqueConstraint

from backoffice.database.database import Base
from backoffice.common.mixins import TenantMixin, TimestampMixin


class RolePermission(Base, TenantMixin, TimestampMixin):
    """One granted permission of a role inside a company."""

    __tablename__ = "role_permissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    role = Column(String(50), nullable=False)
    permission = Column(String(50), nullable=False)

    __table_args__ = (
        UniqueConstraint("role", "permission", "company_id", name="uq_role_permission_company"),
    )


class CompanyRole(Base, TenantMixin, TimestampMixin):
    """
    Marks a role as configured by the company.

    While a marker exists the stored permission rows are authoritative, even
    when there are none; without it the role uses the built-in defaults.
    """

    __tablename__ = "company_roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    role = Column(String(50), nullable=False)

    __table_args__ = (
        UniqueConstraint("role", "company_id", name="uq_company_role"),
    )
