"""
FastAPI dependencies for authentication and permission checks.
"""
import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from backoffice.database.database import get_db
from backoffice.modules.auth.resolver import Identity, IdentityRejected, IdentityResolver, RejectionReason
from backoffice.modules.rbac.gate import AccessGate
from backoffice.modules.rbac.registry import Permission

logger = logging.getLogger(__name__)

# auto_error is off so a missing header produces our 401 instead of FastAPI's 403
security = HTTPBearer(auto_error=False)

_REJECTION_MESSAGES = {
    RejectionReason.MISSING_CREDENTIAL: "No token, authorization denied",
    RejectionReason.INVALID_CREDENTIAL: "Token is not valid",
    RejectionReason.UNKNOWN_IDENTITY: "Token is not valid",
}


class AuthDependencies:
    """Reusable authentication dependencies."""

    @staticmethod
    def get_identity(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
        x_auth_token: Optional[str] = Header(default=None, alias="x-auth-token"),
        db: Session = Depends(get_db)
    ) -> Identity:
        """Resolve the caller from `Authorization: Bearer` or the legacy `x-auth-token` header."""
        token = credentials.credentials if credentials else x_auth_token
        try:
            return IdentityResolver(db).resolve(token)
        except IdentityRejected as e:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail={"error": _REJECTION_MESSAGES[e.reason], "reason": e.reason.value},
                headers={"WWW-Authenticate": "Bearer"},
            )

    @staticmethod
    def require_permission(permission: Permission):
        """
        Dependency factory that authenticates the caller and enforces one permission.

        Returns the caller's Identity so routes can scope queries to its company.
        """
        def permission_checker(
            identity: Identity = Depends(AuthDependencies.get_identity),
            db: Session = Depends(get_db)
        ) -> Identity:
            decision = AccessGate(db).authorize(identity.role, identity.company_id, permission)
            if not decision.allowed:
                logger.info(
                    f"Denied {decision.required} to employee {identity.employee_uuid} "
                    f"(role={decision.role}, reason={decision.reason.value})"
                )
                detail = {"error": decision.message, "required": decision.required}
                if decision.role:
                    detail["role"] = decision.role
                raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
            return identity

        return permission_checker
