"""
Access control decisions.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy.orm import Session

from backoffice.modules.rbac.registry import Permission
from backoffice.modules.rbac.store import RolePermissionStore


class DenialReason(str, Enum):
    NO_ROLE = "NoRole"
    INSUFFICIENT_PERMISSION = "InsufficientPermission"


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    required: str
    role: Optional[str] = None
    reason: Optional[DenialReason] = None

    @property
    def message(self) -> str:
        if self.reason == DenialReason.NO_ROLE:
            return "Access denied. No role assigned."
        if self.reason == DenialReason.INSUFFICIENT_PERMISSION:
            return "Access denied. Insufficient permissions."
        return "Access granted."


class AccessGate:
    """Evaluated on every request; permission changes apply to the next call."""

    def __init__(self, db: Session):
        self.store = RolePermissionStore(db)

    def authorize(self, role: Optional[str], company_id: int, required: Permission) -> AccessDecision:
        required_key = required.value if isinstance(required, Permission) else str(required)
        if not role:
            return AccessDecision(
                allowed=False, required=required_key, role=role, reason=DenialReason.NO_ROLE
            )

        permissions = self.store.effective_permissions(role, company_id)
        if required_key in permissions:
            return AccessDecision(allowed=True, required=required_key, role=role)

        return AccessDecision(
            allowed=False,
            required=required_key,
            role=role,
            reason=DenialReason.INSUFFICIENT_PERMISSION,
        )
