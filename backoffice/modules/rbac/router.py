from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backoffice.database.database import get_db
from backoffice.modules.auth.dependencies import AuthDependencies
from backoffice.modules.auth.resolver import Identity
from backoffice.modules.rbac.registry import (
    DEFAULT_ROLES, SYSTEM_PERMISSIONS, Permission, default_permissions, sort_permissions
)
from backoffice.modules.rbac.schemas import (
    PermissionDefinition, RoleDefinitions, RolePermissionsIn, RolePermissionsOut, RoleSummary
)
from backoffice.modules.rbac.store import RolePermissionStore

roles_router = APIRouter(tags=["Roles"])


def _normalize_role(role: str) -> str:
    role = role.strip().lower()
    if not role:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Role cannot be empty")
    return role


@roles_router.get("/definitions", response_model=RoleDefinitions)
def get_definitions(identity: Identity = Depends(AuthDependencies.get_identity)):
    """Permission catalog and built-in roles."""
    return RoleDefinitions(
        permissions=[
            PermissionDefinition(key=permission.value, label=label)
            for permission, label in SYSTEM_PERMISSIONS.items()
        ],
        roles=list(DEFAULT_ROLES)
    )


@roles_router.get("/", response_model=List[RoleSummary])
def list_roles(
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.get_identity)
):
    store = RolePermissionStore(db)
    configured = set(store.configured_roles(identity.company_id))
    return [
        RoleSummary(role=role, is_default=role in DEFAULT_ROLES, is_configured=role in configured)
        for role in store.list_roles(identity.company_id)
    ]


@roles_router.get("/{role}/permissions", response_model=RolePermissionsOut)
def get_role_permissions(
    role: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.get_identity)
):
    role = _normalize_role(role)
    store = RolePermissionStore(db)
    return RolePermissionsOut(
        role=role,
        permissions=sort_permissions(store.effective_permissions(role, identity.company_id)),
        uses_defaults=not store.is_configured(role, identity.company_id)
    )


@roles_router.post("/{role}/permissions", response_model=RolePermissionsOut)
def replace_role_permissions(
    role: str,
    body: RolePermissionsIn,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_SETTINGS))
):
    """Replace the whole permission set of a role for the caller's company."""
    role = _normalize_role(role)
    if role == identity.role and Permission.MANAGE_SETTINGS.value not in body.permissions:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot remove Manage Settings from your own role"
        )
    permissions = RolePermissionStore(db).replace_permissions(role, identity.company_id, body.permissions)
    return RolePermissionsOut(role=role, permissions=permissions, uses_defaults=False)


@roles_router.delete("/{role}/permissions", response_model=RolePermissionsOut)
def reset_role_permissions(
    role: str,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_SETTINGS))
):
    """Forget the company's configuration so the role uses its defaults again."""
    role = _normalize_role(role)
    if role == identity.role and Permission.MANAGE_SETTINGS not in default_permissions(role):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="You cannot remove Manage Settings from your own role"
        )
    permissions = RolePermissionStore(db).reset_permissions(role, identity.company_id)
    return RolePermissionsOut(role=role, permissions=permissions, uses_defaults=True)
