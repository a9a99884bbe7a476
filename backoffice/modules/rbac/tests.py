"""
Tests for roles and permissions

Covers:
- Built-in role defaults
- Company overrides, including an explicitly empty configuration
- Access decisions and the 403 body returned to clients
- Role management endpoints
"""
import pytest

from backoffice.conftest import make_employee, auth_headers
from backoffice.modules.rbac.gate import AccessGate, DenialReason
from backoffice.modules.rbac.registry import (
    DEFAULT_ROLES, SYSTEM_PERMISSIONS, Permission, default_permissions, sort_permissions
)
from backoffice.modules.rbac.store import RolePermissionStore


# ===== REGISTRY =====

class TestPermissionRegistry:
    """Static role defaults"""

    def test_admin_has_every_permission(self):
        assert default_permissions("admin") == frozenset(Permission)

    def test_manager_defaults(self):
        manager = default_permissions("manager")
        assert Permission.VIEW_PRODUCTS in manager
        assert Permission.VIEW_EMPLOYEES in manager
        assert Permission.MANAGE_EMPLOYEES not in manager
        assert Permission.MANAGE_SETTINGS not in manager
        assert Permission.MANAGE_COMPANY not in manager

    def test_cashier_is_limited_to_the_till(self):
        cashier = default_permissions("cashier")
        assert Permission.POS_ACCESS in cashier
        assert Permission.MANAGE_INVOICES in cashier
        assert Permission.MANAGE_PRODUCTS not in cashier
        assert Permission.VIEW_EMPLOYEES not in cashier

    def test_unknown_role_has_nothing(self):
        assert default_permissions("custom") == frozenset()
        assert default_permissions("") == frozenset()

    def test_every_permission_has_a_label(self):
        assert set(SYSTEM_PERMISSIONS) == set(Permission)

    def test_sort_permissions_follows_catalog_order(self):
        assert sort_permissions({"VIEW_REPORTS", "VIEW_DASHBOARD"}) == ["VIEW_DASHBOARD", "VIEW_REPORTS"]


# ===== STORE =====

class TestRolePermissionStore:
    """Company overrides with fallback to defaults"""

    @pytest.mark.parametrize("role", DEFAULT_ROLES + ["custom"])
    def test_unconfigured_roles_use_defaults(self, db_session, company, role):
        store = RolePermissionStore(db_session)
        expected = {p.value for p in default_permissions(role)}
        assert store.effective_permissions(role, company.id) == expected
        assert store.is_configured(role, company.id) is False

    def test_replace_sets_exact_permissions(self, db_session, company):
        store = RolePermissionStore(db_session)
        wanted = ["VIEW_PRODUCTS", "POS_ACCESS"]

        store.replace_permissions("cashier", company.id, wanted)

        assert store.effective_permissions("cashier", company.id) == set(wanted)

    def test_replace_is_a_replacement_not_a_merge(self, db_session, company):
        store = RolePermissionStore(db_session)
        store.replace_permissions("manager", company.id, ["VIEW_PRODUCTS", "VIEW_REPORTS"])
        store.replace_permissions("manager", company.id, ["VIEW_CUSTOMERS"])

        assert store.effective_permissions("manager", company.id) == {"VIEW_CUSTOMERS"}

    def test_empty_configuration_means_no_permissions(self, db_session, company):
        store = RolePermissionStore(db_session)
        store.replace_permissions("employee", company.id, [])

        assert store.is_configured("employee", company.id) is True
        assert store.effective_permissions("employee", company.id) == frozenset()

    def test_reset_restores_defaults(self, db_session, company):
        store = RolePermissionStore(db_session)
        store.replace_permissions("employee", company.id, [])
        store.reset_permissions("employee", company.id)

        expected = {p.value for p in default_permissions("employee")}
        assert store.effective_permissions("employee", company.id) == expected

    def test_overrides_are_scoped_to_company(self, db_session, company, other_company):
        store = RolePermissionStore(db_session)
        store.replace_permissions("cashier", company.id, ["VIEW_REPORTS"])

        expected = {p.value for p in default_permissions("cashier")}
        assert store.effective_permissions("cashier", other_company.id) == expected

    def test_unknown_permission_is_rejected_without_writing(self, db_session, company):
        from fastapi import HTTPException

        store = RolePermissionStore(db_session)
        with pytest.raises(HTTPException) as exc:
            store.replace_permissions("cashier", company.id, ["VIEW_PRODUCTS", "FLY_TO_MOON"])

        assert exc.value.status_code == 400
        assert exc.value.detail["unknownPermissions"] == ["FLY_TO_MOON"]
        assert store.is_configured("cashier", company.id) is False

    def test_list_roles_includes_custom_roles(self, db_session, company):
        store = RolePermissionStore(db_session)
        store.replace_permissions("stocker", company.id, ["VIEW_PRODUCTS"])

        assert store.list_roles(company.id) == DEFAULT_ROLES + ["stocker"]


# ===== GATE =====

class TestAccessGate:
    """Access decisions"""

    def test_missing_role_is_denied(self, db_session, company):
        decision = AccessGate(db_session).authorize(None, company.id, Permission.VIEW_PRODUCTS)
        assert decision.allowed is False
        assert decision.reason == DenialReason.NO_ROLE

    def test_insufficient_permission(self, db_session, company):
        decision = AccessGate(db_session).authorize("cashier", company.id, Permission.MANAGE_PRODUCTS)
        assert decision.allowed is False
        assert decision.reason == DenialReason.INSUFFICIENT_PERMISSION
        assert decision.required == "MANAGE_PRODUCTS"
        assert decision.role == "cashier"

    def test_override_grants_access(self, db_session, company):
        RolePermissionStore(db_session).replace_permissions("cashier", company.id, ["MANAGE_PRODUCTS"])
        decision = AccessGate(db_session).authorize("cashier", company.id, Permission.MANAGE_PRODUCTS)
        assert decision.allowed is True

    def test_custom_role_without_configuration_is_denied(self, db_session, company):
        decision = AccessGate(db_session).authorize("auditor", company.id, Permission.VIEW_DASHBOARD)
        assert decision.allowed is False


# ===== ENDPOINTS =====

class TestRoleEndpoints:
    """Role management over HTTP"""

    def test_definitions(self, client, admin_headers):
        response = client.get("/api/roles/definitions", headers=admin_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["roles"] == DEFAULT_ROLES
        assert {"key": "MANAGE_SETTINGS", "label": SYSTEM_PERMISSIONS[Permission.MANAGE_SETTINGS]} in body["permissions"]

    def test_get_permissions_falls_back_to_defaults(self, client, admin_headers):
        response = client.get("/api/roles/manager/permissions", headers=admin_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["usesDefaults"] is True
        assert set(body["permissions"]) == {p.value for p in default_permissions("manager")}

    def test_admin_replaces_permissions(self, client, admin_headers):
        response = client.post(
            "/api/roles/cashier/permissions",
            json={"permissions": ["POS_ACCESS", "VIEW_PRODUCTS"]},
            headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["permissions"] == ["POS_ACCESS", "VIEW_PRODUCTS"]

        response = client.get("/api/roles/cashier/permissions", headers=admin_headers)
        assert response.json()["usesDefaults"] is False
        assert response.json()["permissions"] == ["POS_ACCESS", "VIEW_PRODUCTS"]

    def test_non_list_payload_is_rejected(self, client, admin_headers):
        response = client.post(
            "/api/roles/cashier/permissions",
            json={"permissions": "POS_ACCESS"},
            headers=admin_headers
        )
        assert response.status_code == 422

    def test_cannot_lock_yourself_out(self, client, admin_headers):
        response = client.post(
            "/api/roles/admin/permissions",
            json={"permissions": ["VIEW_DASHBOARD"]},
            headers=admin_headers
        )
        assert response.status_code == 400

    def test_manager_cannot_change_permissions(self, client, headers_for):
        response = client.post(
            "/api/roles/cashier/permissions",
            json={"permissions": []},
            headers=headers_for("manager")
        )
        assert response.status_code == 403
        assert response.json()["detail"]["required"] == "MANAGE_SETTINGS"

    def test_list_roles(self, client, admin_headers):
        client.post("/api/roles/stocker/permissions", json={"permissions": ["VIEW_PRODUCTS"]}, headers=admin_headers)

        response = client.get("/api/roles/", headers=admin_headers)
        assert response.status_code == 200
        roles = {r["role"]: r for r in response.json()}
        assert list(roles) == DEFAULT_ROLES + ["stocker"]
        assert roles["stocker"]["isDefault"] is False
        assert roles["stocker"]["isConfigured"] is True

    def test_reset_permissions(self, client, admin_headers):
        client.post("/api/roles/cashier/permissions", json={"permissions": []}, headers=admin_headers)

        response = client.delete("/api/roles/cashier/permissions", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["usesDefaults"] is True


class TestPermissionEnforcement:
    """Permission changes apply to the next request"""

    def test_manager_defaults_and_employee_management_denied(self, client, db_session, company):
        manager = make_employee(db_session, company, role="manager")
        headers = auth_headers(manager)

        effective = RolePermissionStore(db_session).effective_permissions("manager", company.id)
        assert "VIEW_PRODUCTS" in effective
        assert "MANAGE_EMPLOYEES" not in effective

        response = client.post(
            "/api/employees/",
            json={"name": "New Hire", "email": "hire@example.com", "password": "secret123"},
            headers=headers
        )
        assert response.status_code == 403
        detail = response.json()["detail"]
        assert detail["required"] == "MANAGE_EMPLOYEES"
        assert detail["role"] == "manager"
        assert detail["error"] == "Access denied. Insufficient permissions."

        assert client.get("/api/products/", headers=headers).status_code == 200

    def test_revoked_permission_applies_immediately(self, client, admin_headers, headers_for):
        cashier_headers = headers_for("cashier")
        assert client.get("/api/products/", headers=cashier_headers).status_code == 200

        client.post("/api/roles/cashier/permissions", json={"permissions": ["POS_ACCESS"]}, headers=admin_headers)

        response = client.get("/api/products/", headers=cashier_headers)
        assert response.status_code == 403
        assert response.json()["detail"]["required"] == "VIEW_PRODUCTS"

    def test_custom_role_starts_without_access(self, client, headers_for):
        response = client.get("/api/customers/", headers=headers_for("auditor"))
        assert response.status_code == 403
