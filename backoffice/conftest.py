"""
Shared pytest fixtures.

Tests run against an in-memory SQLite database; the schema is created for
each test and dropped afterwards. Celery tasks run eagerly and email is left
unconfigured, so account mails are only logged.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["EMAIL_USERNAME"] = ""

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from backoffice.database.database import Base, SessionLocal, engine
from backoffice.main import app
from backoffice.modules.auth.utils import create_access_token, hash_password
from backoffice.modules.company.models import Company
from backoffice.modules.employees.models import Employee


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    return TestClient(app)


def make_company(db, name="Corner Shop"):
    company = Company(business_name=name)
    db.add(company)
    db.commit()
    db.refresh(company)
    return company


def make_employee(db, company, role="admin", email=None, password=None, is_owner=False, name=None):
    employee = Employee(
        company_id=company.id,
        name=name or f"{role.title()} User",
        email=email or f"{role}.{uuid4().hex[:8]}@example.com",
        password=hash_password(password) if password else None,
        role=role,
        is_owner=is_owner
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)
    return employee


def auth_headers(employee):
    token = create_access_token(str(employee.uuid), str(employee.company.uuid))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def company(db_session):
    return make_company(db_session, "Acme Store")


@pytest.fixture
def other_company(db_session):
    return make_company(db_session, "Rival Mart")


@pytest.fixture
def admin(db_session, company):
    return make_employee(db_session, company, role="admin", is_owner=True)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def other_admin_headers(db_session, other_company):
    return auth_headers(make_employee(db_session, other_company, role="admin", is_owner=True))


@pytest.fixture
def headers_for(db_session, company):
    """Build auth headers for a fresh employee of `company` with the given role."""
    def _headers(role, **kwargs):
        return auth_headers(make_employee(db_session, company, role=role, **kwargs))
    return _headers
