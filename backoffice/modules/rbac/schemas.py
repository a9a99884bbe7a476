from typing import List

from backoffice.common.schemas import CamelModel


class PermissionDefinition(CamelModel):
    key: str
    label: str


class RoleDefinitions(CamelModel):
    permissions: List[PermissionDefinition]
    roles: List[str]


class RoleSummary(CamelModel):
    role: str
    is_default: bool
    is_configured: bool


class RolePermissionsIn(CamelModel):
    permissions: List[str]


class RolePermissionsOut(CamelModel):
    role: str
    permissions: List[str]
    # True when the company has not configured the role and defaults apply
    uses_defaults: bool
