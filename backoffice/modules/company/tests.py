"""
Tests for the signed-in employee's profile and company settings
"""
from backoffice.conftest import auth_headers, make_employee
from backoffice.modules.company.models import Company
from backoffice.modules.employees.models import Employee
from backoffice.modules.rbac.store import RolePermissionStore


class TestProfile:

    def test_get_profile(self, client, admin, company, admin_headers):
        response = client.get("/api/profile/", headers=admin_headers)

        assert response.status_code == 200
        body = response.json()
        assert body["uuid"] == str(admin.uuid)
        assert body["companyUuid"] == str(company.uuid)
        assert body["businessName"] == "Acme Store"
        assert "password" not in body

    def test_update_personal_fields(self, client, headers_for):
        headers = headers_for("cashier")

        response = client.put("/api/profile/", json={"phone": "555-0101"}, headers=headers)

        assert response.status_code == 200
        assert response.json()["phone"] == "555-0101"

    def test_owner_updates_company_through_profile(self, client, admin_headers):
        response = client.put(
            "/api/profile/", json={"businessName": "Acme Superstore", "companyPhone": "555-0199"},
            headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["businessName"] == "Acme Superstore"
        assert response.json()["companyPhone"] == "555-0199"

    def test_name_cannot_be_cleared(self, client, db_session, admin, admin_headers):
        response = client.put("/api/profile/", json={"name": None, "phone": "555-0101"}, headers=admin_headers)

        assert response.status_code == 400
        db_session.expire_all()
        employee = db_session.query(Employee).filter(Employee.id == admin.id).one()
        assert employee.name == "Admin User"
        assert employee.phone is None

    def test_business_name_cannot_be_cleared_through_profile(self, client, db_session, company, admin_headers):
        response = client.put("/api/profile/", json={"businessName": None}, headers=admin_headers)

        assert response.status_code == 400
        db_session.expire_all()
        assert db_session.query(Company).filter(Company.id == company.id).one().business_name == "Acme Store"

    def test_cashier_cannot_change_company_fields(self, client, db_session, company, headers_for):
        response = client.put(
            "/api/profile/", json={"phone": "555-0101", "businessName": "Hijacked"},
            headers=headers_for("cashier")
        )

        assert response.status_code == 403
        assert response.json()["detail"]["required"] == "MANAGE_COMPANY"
        db_session.expire_all()
        assert db_session.query(Company).filter(Company.id == company.id).one().business_name == "Acme Store"


class TestCompanySettings:

    def test_owner_updates_company(self, client, admin_headers):
        response = client.put(
            "/api/profile/company", json={"taxId": "TX-991", "email": "billing@acme.example"},
            headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["taxId"] == "TX-991"
        assert response.json()["email"] == "billing@acme.example"

    def test_empty_business_name_is_rejected(self, client, admin_headers):
        response = client.put("/api/profile/company", json={"businessName": "  "}, headers=admin_headers)
        assert response.status_code == 400

    def test_null_business_name_is_rejected(self, client, db_session, company, admin_headers):
        response = client.put(
            "/api/profile/company", json={"businessName": None, "taxId": "TX-1"}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Business name cannot be empty"
        db_session.expire_all()
        row = db_session.query(Company).filter(Company.id == company.id).one()
        assert row.business_name == "Acme Store"
        assert row.tax_id is None

    def test_manager_needs_manage_company(self, client, db_session, company):
        manager = make_employee(db_session, company, role="manager")
        headers = auth_headers(manager)

        assert client.put(
            "/api/profile/company", json={"taxId": "X"}, headers=headers
        ).status_code == 403

        RolePermissionStore(db_session).replace_permissions("manager", company.id, ["MANAGE_COMPANY"])

        assert client.put(
            "/api/profile/company", json={"taxId": "X"}, headers=headers
        ).status_code == 200

    def test_non_owner_admin_uses_role_permissions(self, client, headers_for):
        response = client.put("/api/profile/company", json={"taxId": "A-1"}, headers=headers_for("admin"))
        assert response.status_code == 200
