"""
Tests for employee management
"""
from uuid import uuid4

import pytest

from backoffice.conftest import auth_headers, make_employee
from backoffice.modules.auth.utils import verify_password
from backoffice.modules.employees.models import Employee
from backoffice.modules.rbac.store import RolePermissionStore


@pytest.fixture
def employee_data():
    return {
        "name": "Sam Carter",
        "email": "Sam.Carter@example.com",
        "password": "till-pass-1",
        "role": "Cashier",
        "position": "Front desk",
    }


@pytest.fixture
def hr_headers(db_session, company):
    """A manager whose company lets managers handle staff."""
    RolePermissionStore(db_session).replace_permissions(
        "manager", company.id, ["VIEW_EMPLOYEES", "MANAGE_EMPLOYEES"]
    )
    return auth_headers(make_employee(db_session, company, role="manager"))


class TestEmployeeCreate:

    def test_create_employee(self, client, db_session, admin_headers, employee_data):
        response = client.post("/api/employees/", json=employee_data, headers=admin_headers)

        assert response.status_code == 201
        body = response.json()
        assert body["email"] == "sam.carter@example.com"
        assert body["role"] == "cashier"
        assert "password" not in body
        assert "passwordResetToken" not in body
        assert "emailVerificationToken" not in body

        db_session.expire_all()
        stored = db_session.query(Employee).filter(Employee.email == "sam.carter@example.com").one()
        assert stored.password != "till-pass-1"
        assert verify_password("till-pass-1", stored.password)

    def test_created_employee_can_log_in(self, client, admin_headers, employee_data):
        client.post("/api/employees/", json=employee_data, headers=admin_headers)

        response = client.post(
            "/api/auth/login", json={"email": "sam.carter@example.com", "password": "till-pass-1"}
        )
        assert response.status_code == 200

    def test_password_is_required(self, client, admin_headers, employee_data):
        del employee_data["password"]
        response = client.post("/api/employees/", json=employee_data, headers=admin_headers)
        assert response.status_code == 400

    def test_google_accounts_need_no_password(self, client, admin_headers, employee_data):
        del employee_data["password"]
        employee_data["googleAuth"] = True
        response = client.post("/api/employees/", json=employee_data, headers=admin_headers)
        assert response.status_code == 201

    def test_email_in_use_in_other_company(self, client, db_session, other_company, admin_headers, employee_data):
        make_employee(db_session, other_company, email="sam.carter@example.com")

        response = client.post("/api/employees/", json=employee_data, headers=admin_headers)
        assert response.status_code == 409

    def test_empty_role_is_rejected(self, client, admin_headers, employee_data):
        employee_data["role"] = "   "
        response = client.post("/api/employees/", json=employee_data, headers=admin_headers)
        assert response.status_code == 422


class TestRoleAssignment:
    """Only admins hand out the admin role"""

    def test_admin_can_create_admin(self, client, admin_headers, employee_data):
        employee_data["role"] = "admin"
        response = client.post("/api/employees/", json=employee_data, headers=admin_headers)
        assert response.status_code == 201

    def test_non_admin_cannot_create_admin(self, client, db_session, hr_headers, employee_data):
        employee_data["role"] = "admin"
        response = client.post("/api/employees/", json=employee_data, headers=hr_headers)

        assert response.status_code == 403
        db_session.expire_all()
        assert db_session.query(Employee).filter(Employee.email == "sam.carter@example.com").count() == 0

    def test_non_admin_cannot_promote_to_admin(self, client, db_session, company, hr_headers):
        cashier = make_employee(db_session, company, role="cashier")

        response = client.put(f"/api/employees/{cashier.uuid}", json={"role": "admin"}, headers=hr_headers)

        assert response.status_code == 403
        db_session.expire_all()
        assert db_session.query(Employee).filter(Employee.id == cashier.id).one().role == "cashier"

    def test_non_admin_can_assign_other_roles(self, client, hr_headers, employee_data):
        response = client.post("/api/employees/", json=employee_data, headers=hr_headers)
        assert response.status_code == 201


class TestEmployeeUpsert:

    def test_replay_with_uuid(self, client, db_session, admin_headers, employee_data):
        uuid = str(uuid4())
        client.post("/api/employees/", json={**employee_data, "uuid": uuid}, headers=admin_headers)

        response = client.post(
            "/api/employees/", json={"uuid": uuid, "position": "Supervisor"}, headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["position"] == "Supervisor"
        assert response.json()["name"] == "Sam Carter"

    def test_keeping_own_email_is_not_a_conflict(self, client, admin_headers, employee_data):
        uuid = client.post("/api/employees/", json=employee_data, headers=admin_headers).json()["uuid"]

        response = client.put(
            f"/api/employees/{uuid}", json={"email": "sam.carter@example.com"}, headers=admin_headers
        )
        assert response.status_code == 200

    def test_list_is_company_scoped(self, client, db_session, other_company, admin, admin_headers):
        make_employee(db_session, other_company, role="cashier")

        listed = client.get("/api/employees/", headers=admin_headers).json()
        assert [e["uuid"] for e in listed] == [str(admin.uuid)]

    def test_cashier_cannot_list(self, client, headers_for):
        response = client.get("/api/employees/", headers=headers_for("cashier"))
        assert response.status_code == 403
        assert response.json()["detail"]["required"] == "VIEW_EMPLOYEES"
