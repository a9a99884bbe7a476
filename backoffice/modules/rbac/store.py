"""
Per-company role permission overrides.
"""
import logging
from typing import FrozenSet, Iterable, List

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from backoffice.modules.rbac.models import CompanyRole, RolePermission
from backoffice.modules.rbac.registry import (
    DEFAULT_ROLES,
    default_permissions,
    is_known_permission,
    sort_permissions,
)

logger = logging.getLogger(__name__)


class RolePermissionStore:
    """Reads and replaces the permission set a company assigns to a role."""

    def __init__(self, db: Session):
        self.db = db

    def is_configured(self, role: str, company_id: int) -> bool:
        marker = self.db.query(CompanyRole.id).filter(
            CompanyRole.role == role,
            CompanyRole.company_id == company_id
        ).first()
        if marker:
            return True
        # Rows written before markers existed still count as a configuration
        row = self.db.query(RolePermission.id).filter(
            RolePermission.role == role,
            RolePermission.company_id == company_id
        ).first()
        return row is not None

    def stored_permissions(self, role: str, company_id: int) -> FrozenSet[str]:
        rows = self.db.query(RolePermission.permission).filter(
            RolePermission.role == role,
            RolePermission.company_id == company_id
        ).all()
        return frozenset(row.permission for row in rows)

    def effective_permissions(self, role: str, company_id: int) -> FrozenSet[str]:
        """
        Company configuration when the role is configured (possibly empty),
        otherwise the built-in defaults for the role.
        """
        if self.is_configured(role, company_id):
            return self.stored_permissions(role, company_id)
        return frozenset(p.value for p in default_permissions(role))

    def replace_permissions(self, role: str, company_id: int, permissions: Iterable[str]) -> List[str]:
        """
        Atomically replace the role's permissions. An empty list is a valid
        configuration meaning "no permissions at all".
        """
        requested = set(permissions)
        unknown = sorted(p for p in requested if not is_known_permission(p))
        if unknown:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"error": "Unknown permissions", "unknownPermissions": unknown}
            )

        try:
            self.db.query(RolePermission).filter(
                RolePermission.role == role,
                RolePermission.company_id == company_id
            ).delete(synchronize_session=False)

            marker = self.db.query(CompanyRole).filter(
                CompanyRole.role == role,
                CompanyRole.company_id == company_id
            ).first()
            if marker is None:
                self.db.add(CompanyRole(role=role, company_id=company_id))

            for permission in sort_permissions(requested):
                self.db.add(RolePermission(role=role, permission=permission, company_id=company_id))

            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(f"Failed to replace permissions for role {role} in company {company_id}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to update permissions"
            )

        logger.info(f"Company {company_id} configured role '{role}' with {len(requested)} permissions")
        return sort_permissions(requested)

    def reset_permissions(self, role: str, company_id: int) -> List[str]:
        """Drop the company configuration so the role falls back to its defaults."""
        try:
            self.db.query(RolePermission).filter(
                RolePermission.role == role,
                RolePermission.company_id == company_id
            ).delete(synchronize_session=False)
            self.db.query(CompanyRole).filter(
                CompanyRole.role == role,
                CompanyRole.company_id == company_id
            ).delete(synchronize_session=False)
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(f"Failed to reset permissions for role {role} in company {company_id}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to reset permissions"
            )
        return sort_permissions(default_permissions(role))

    def configured_roles(self, company_id: int) -> List[str]:
        marked = self.db.query(CompanyRole.role).filter(CompanyRole.company_id == company_id).all()
        legacy = self.db.query(RolePermission.role).filter(
            RolePermission.company_id == company_id
        ).distinct().all()
        return sorted({row.role for row in marked} | {row.role for row in legacy})

    def list_roles(self, company_id: int) -> List[str]:
        """Built-in roles first, then the company's custom roles alphabetically."""
        custom = [r for r in self.configured_roles(company_id) if r not in DEFAULT_ROLES]
        return list(DEFAULT_ROLES) + custom
