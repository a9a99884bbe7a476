"""
Tests for authentication

Covers:
- Identity resolution from bearer and legacy x-auth-token headers
- Rejection of missing, malformed, expired and orphaned credentials
- Signup, login, email verification and password reset flows
- Google sign-in for new and existing accounts
"""
from datetime import timedelta
from uuid import uuid4

import jwt
import pytest

from backoffice.conftest import auth_headers, make_employee
from backoffice.core.config import settings
from backoffice.modules.auth import google
from backoffice.modules.auth.resolver import IdentityRejected, IdentityResolver, RejectionReason
from backoffice.modules.auth.utils import create_access_token
from backoffice.modules.company.models import Company
from backoffice.modules.employees.models import Employee


@pytest.fixture
def signup_data():
    return {
        "businessName": "Sunrise Grocers",
        "businessAddress": "12 Market Street",
        "name": "Maria Lopez",
        "email": "Maria@Sunrise.example",
        "password": "s3cret-pass",
    }


# ===== RESOLVER =====

class TestIdentityResolver:
    """Credential to identity"""

    def test_resolves_employee_and_company(self, db_session, admin, company):
        token = create_access_token(str(admin.uuid), str(company.uuid))
        identity = IdentityResolver(db_session).resolve(token)

        assert identity.employee_uuid == admin.uuid
        assert identity.company_id == company.id
        assert identity.role == "admin"
        assert identity.is_owner is True

    def test_missing_credential(self, db_session):
        with pytest.raises(IdentityRejected) as exc:
            IdentityResolver(db_session).resolve(None)
        assert exc.value.reason == RejectionReason.MISSING_CREDENTIAL

    def test_garbage_token(self, db_session):
        with pytest.raises(IdentityRejected) as exc:
            IdentityResolver(db_session).resolve("not-a-jwt")
        assert exc.value.reason == RejectionReason.INVALID_CREDENTIAL

    def test_token_signed_with_other_secret(self, db_session, admin, company):
        token = jwt.encode(
            {"sub": str(admin.uuid), "company": str(company.uuid)}, "wrong-secret", algorithm="HS256"
        )
        with pytest.raises(IdentityRejected) as exc:
            IdentityResolver(db_session).resolve(token)
        assert exc.value.reason == RejectionReason.INVALID_CREDENTIAL

    def test_expired_token(self, db_session, admin, company):
        token = create_access_token(str(admin.uuid), str(company.uuid), expires_delta=timedelta(minutes=-1))
        with pytest.raises(IdentityRejected) as exc:
            IdentityResolver(db_session).resolve(token)
        assert exc.value.reason == RejectionReason.INVALID_CREDENTIAL

    def test_unknown_employee(self, db_session, company):
        token = create_access_token(str(uuid4()), str(company.uuid))
        with pytest.raises(IdentityRejected) as exc:
            IdentityResolver(db_session).resolve(token)
        assert exc.value.reason == RejectionReason.UNKNOWN_IDENTITY

    def test_deleted_employee(self, db_session, admin, company):
        admin.is_deleted = True
        db_session.commit()

        token = create_access_token(str(admin.uuid), str(company.uuid))
        with pytest.raises(IdentityRejected) as exc:
            IdentityResolver(db_session).resolve(token)
        assert exc.value.reason == RejectionReason.UNKNOWN_IDENTITY

    def test_employee_of_another_company(self, db_session, admin, other_company):
        token = create_access_token(str(admin.uuid), str(other_company.uuid))
        with pytest.raises(IdentityRejected) as exc:
            IdentityResolver(db_session).resolve(token)
        assert exc.value.reason == RejectionReason.UNKNOWN_IDENTITY


class TestAuthenticationHeaders:
    """401 responses over HTTP"""

    def test_no_token_is_401(self, client):
        response = client.get("/api/products/")
        assert response.status_code == 401
        assert response.json()["detail"]["reason"] == "MissingCredential"

    def test_invalid_token_is_401(self, client):
        response = client.get("/api/products/", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401
        assert response.json()["detail"]["reason"] == "InvalidCredential"

    def test_legacy_header_is_accepted(self, client, admin, company):
        token = create_access_token(str(admin.uuid), str(company.uuid))
        response = client.get("/api/products/", headers={"x-auth-token": token})
        assert response.status_code == 200

    def test_deleted_employee_is_401(self, client, db_session, admin, admin_headers):
        admin.is_deleted = True
        db_session.commit()

        response = client.get("/api/auth/me", headers=admin_headers)
        assert response.status_code == 401


# ===== ACCOUNT FLOWS =====

class TestSignupAndLogin:
    """Signup and login"""

    def test_signup_creates_company_and_owner(self, client, db_session, signup_data):
        response = client.post("/api/auth/signup", json=signup_data)
        assert response.status_code == 201

        body = response.json()
        assert body["token"]
        assert body["employee"]["email"] == "maria@sunrise.example"
        assert body["employee"]["role"] == "admin"
        assert body["employee"]["isOwner"] is True
        assert body["employee"]["isEmailVerified"] is False
        assert "password" not in body["employee"]
        assert body["company"]["businessName"] == "Sunrise Grocers"
        assert "MANAGE_SETTINGS" in body["permissions"]

        employee = db_session.query(Employee).filter(Employee.email == "maria@sunrise.example").one()
        assert employee.email_verification_token is not None

    def test_signup_token_works(self, client, signup_data):
        token = client.post("/api/auth/signup", json=signup_data).json()["token"]
        response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 200
        assert response.json()["employee"]["name"] == "Maria Lopez"

    def test_duplicate_email_is_409(self, client, signup_data):
        client.post("/api/auth/signup", json=signup_data)
        response = client.post("/api/auth/signup", json=signup_data)
        assert response.status_code == 409

    def test_short_password_is_400(self, client, signup_data):
        signup_data["password"] = "123"
        response = client.post("/api/auth/signup", json=signup_data)
        assert response.status_code == 400

    def test_login(self, client, db_session, company):
        make_employee(db_session, company, role="cashier", email="till@example.com", password="till-pass")

        response = client.post("/api/auth/login", json={"email": "till@example.com", "password": "till-pass"})
        assert response.status_code == 200
        body = response.json()
        assert body["employee"]["role"] == "cashier"
        assert "POS_ACCESS" in body["permissions"]
        assert "MANAGE_PRODUCTS" not in body["permissions"]

    def test_login_wrong_password(self, client, db_session, company):
        make_employee(db_session, company, email="till@example.com", password="till-pass")
        response = client.post("/api/auth/login", json={"email": "till@example.com", "password": "nope-nope"})
        assert response.status_code == 401

    def test_login_deleted_employee(self, client, db_session, company):
        employee = make_employee(db_session, company, email="gone@example.com", password="gone-pass")
        employee.is_deleted = True
        db_session.commit()

        response = client.post("/api/auth/login", json={"email": "gone@example.com", "password": "gone-pass"})
        assert response.status_code == 401

    def test_login_reports_company_overrides(self, client, db_session, company, admin_headers):
        make_employee(db_session, company, role="cashier", email="till@example.com", password="till-pass")
        client.post("/api/roles/cashier/permissions", json={"permissions": ["VIEW_REPORTS"]}, headers=admin_headers)

        response = client.post("/api/auth/login", json={"email": "till@example.com", "password": "till-pass"})
        assert response.json()["permissions"] == ["VIEW_REPORTS"]


class TestEmailVerificationAndReset:
    """Token based account flows"""

    def test_verify_email(self, client, db_session, signup_data):
        client.post("/api/auth/signup", json=signup_data)
        employee = db_session.query(Employee).filter(Employee.email == "maria@sunrise.example").one()
        token = employee.email_verification_token

        response = client.get("/api/auth/verify-email", params={"token": token})
        assert response.status_code == 200

        db_session.expire_all()
        employee = db_session.query(Employee).filter(Employee.email == "maria@sunrise.example").one()
        assert employee.is_email_verified is True
        assert employee.email_verification_token is None

    def test_verify_email_bad_token(self, client, db_session):
        response = client.get("/api/auth/verify-email", params={"token": "bogus"})
        assert response.status_code == 400

    def test_resend_verification_does_not_reveal_accounts(self, client, db_session):
        response = client.post("/api/auth/resend-verification", json={"email": "nobody@example.com"})
        assert response.status_code == 200

    def test_password_reset_flow(self, client, db_session, company):
        make_employee(db_session, company, email="forgot@example.com", password="old-pass")

        response = client.post("/api/auth/forgot-password", json={"email": "forgot@example.com"})
        assert response.status_code == 200

        db_session.expire_all()
        token = db_session.query(Employee).filter(Employee.email == "forgot@example.com").one().password_reset_token
        assert token

        response = client.post("/api/auth/reset-password", json={"token": token, "password": "new-pass"})
        assert response.status_code == 200

        assert client.post(
            "/api/auth/login", json={"email": "forgot@example.com", "password": "old-pass"}
        ).status_code == 401
        assert client.post(
            "/api/auth/login", json={"email": "forgot@example.com", "password": "new-pass"}
        ).status_code == 200

        # Tokens are single use
        response = client.post("/api/auth/reset-password", json={"token": token, "password": "another-pass"})
        assert response.status_code == 400

    def test_forgot_password_unknown_email(self, client, db_session):
        response = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
        assert response.status_code == 200

    def test_reset_tokens_expire(self, client, db_session, company, monkeypatch):
        monkeypatch.setattr(settings, "PASSWORD_RESET_MINUTES", -1)
        make_employee(db_session, company, email="late@example.com", password="old-pass")
        client.post("/api/auth/forgot-password", json={"email": "late@example.com"})

        db_session.expire_all()
        token = db_session.query(Employee).filter(Employee.email == "late@example.com").one().password_reset_token

        response = client.post("/api/auth/reset-password", json={"token": token, "password": "new-pass"})
        assert response.status_code == 400

    def test_me_requires_token(self, client):
        assert client.get("/api/auth/me").status_code == 401

    def test_me(self, client, admin, admin_headers):
        response = client.get("/api/auth/me", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["employee"]["uuid"] == str(admin.uuid)


# ===== GOOGLE =====

@pytest.fixture
def google_tokens(monkeypatch):
    """Configure a client id and have Google accept any ID token. Returns the verified (token, audience) pairs."""
    claims = {
        "email": "Ana@Gmail.example",
        "name": "Ana Ruiz",
        "sub": "1098765",
        "email_verified": True,
    }
    seen = []

    def verify(token, request, audience):
        seen.append((token, audience))
        return dict(claims)

    monkeypatch.setattr(settings, "GOOGLE_CLIENT_ID", "client-id.apps.example")
    monkeypatch.setattr(google.google_id_token, "verify_oauth2_token", verify)
    return seen


class TestGoogleSignIn:
    """POST /api/auth/google"""

    def test_new_address_registers_company_and_owner(self, client, db_session, google_tokens):
        response = client.post("/api/auth/google", json={"idToken": "google-id-token"})
        assert response.status_code == 201

        body = response.json()
        assert body["token"]
        assert body["employee"]["email"] == "ana@gmail.example"
        assert body["employee"]["role"] == "admin"
        assert body["employee"]["isOwner"] is True
        assert body["employee"]["isEmailVerified"] is True
        assert body["employee"]["googleAuth"] is True
        assert body["company"]["businessName"] == "Ana Ruiz's Company"
        assert google_tokens == [("google-id-token", "client-id.apps.example")]

        employee = db_session.query(Employee).filter(Employee.email == "ana@gmail.example").one()
        assert employee.password is None

        me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
        assert me.status_code == 200

    def test_second_sign_in_reuses_the_account(self, client, db_session, google_tokens):
        first = client.post("/api/auth/google", json={"idToken": "google-id-token"}).json()
        response = client.post("/api/auth/google", json={"idToken": "google-id-token"})

        assert response.status_code == 200
        assert response.json()["employee"]["uuid"] == first["employee"]["uuid"]
        assert db_session.query(Company).count() == 1

    def test_existing_employee_signs_in_and_is_verified(self, client, db_session, company, google_tokens):
        employee = make_employee(db_session, company, role="cashier", email="ana@gmail.example", password="pw-123456")
        assert employee.is_email_verified is False

        response = client.post("/api/auth/google", json={"idToken": "google-id-token"})
        assert response.status_code == 200
        body = response.json()
        assert body["employee"]["uuid"] == str(employee.uuid)
        assert body["company"]["uuid"] == str(company.uuid)
        assert "POS_ACCESS" in body["permissions"]

        db_session.expire_all()
        assert db_session.query(Employee).filter(Employee.id == employee.id).one().is_email_verified is True

    def test_google_only_employee_added_by_admin(self, client, db_session, company, admin_headers, google_tokens):
        created = client.post(
            "/api/employees/",
            json={"name": "Ana Ruiz", "email": "ana@gmail.example", "role": "manager", "googleAuth": True},
            headers=admin_headers
        )
        assert created.status_code == 201

        response = client.post("/api/auth/google", json={"idToken": "google-id-token"})
        assert response.status_code == 200
        assert response.json()["employee"]["role"] == "manager"
        assert response.json()["company"]["uuid"] == str(company.uuid)

    def test_deleted_employee_is_401(self, client, db_session, company, google_tokens):
        employee = make_employee(db_session, company, email="ana@gmail.example")
        employee.is_deleted = True
        db_session.commit()

        response = client.post("/api/auth/google", json={"idToken": "google-id-token"})
        assert response.status_code == 401
        assert db_session.query(Company).count() == 1

    def test_rejected_token_is_401(self, client, db_session, monkeypatch):
        def verify(token, request, audience):
            raise ValueError("Token used too late")

        monkeypatch.setattr(settings, "GOOGLE_CLIENT_ID", "client-id.apps.example")
        monkeypatch.setattr(google.google_id_token, "verify_oauth2_token", verify)

        response = client.post("/api/auth/google", json={"idToken": "stale"})
        assert response.status_code == 401
        assert db_session.query(Employee).count() == 0

    def test_unverified_google_email_is_401(self, client, db_session, google_tokens, monkeypatch):
        monkeypatch.setattr(
            google.google_id_token, "verify_oauth2_token",
            lambda token, request, audience: {"email": "ana@gmail.example", "email_verified": False}
        )
        response = client.post("/api/auth/google", json={"idToken": "google-id-token"})
        assert response.status_code == 401

    def test_token_is_required(self, client, db_session, google_tokens):
        response = client.post("/api/auth/google", json={})
        assert response.status_code == 400

    def test_not_configured_is_503(self, client, db_session, monkeypatch):
        monkeypatch.setattr(settings, "GOOGLE_CLIENT_ID", "")
        response = client.post("/api/auth/google", json={"idToken": "google-id-token"})
        assert response.status_code == 503
