"""
Tests for the shared resource life cycle and the upsert reconciler
"""
from uuid import uuid4

import pytest
from fastapi import HTTPException

from backoffice.common.reconciler import UpsertReconciler
from backoffice.modules.categories.models import Category
from backoffice.modules.customers.service import CustomerService

RESOURCES = [
    ("categories", {"name": "Snacks"}, {"subcategory": "Chips"}),
    ("units", {"name": "Piece", "symbol": "pc"}, {"symbol": "pcs"}),
    ("brands", {"name": "Acme"}, {"name": "Acme Foods"}),
    ("customers", {"name": "Ada", "email": "ada@example.com"}, {"creditLimit": 250.0}),
    ("suppliers", {"name": "Wholesale Co"}, {"phone": "555-0123"}),
]


@pytest.mark.parametrize("resource,payload,change", RESOURCES)
class TestResourceLifecycle:

    def test_create_get_update_delete(self, client, admin_headers, resource, payload, change):
        base = f"/api/{resource}/"

        created = client.post(base, json=payload, headers=admin_headers)
        assert created.status_code == 201
        uuid = created.json()["uuid"]

        assert client.get(f"{base}{uuid}", headers=admin_headers).status_code == 200

        updated = client.put(f"{base}{uuid}", json=change, headers=admin_headers)
        assert updated.status_code == 200
        for key, value in change.items():
            assert updated.json()[key] == value

        deleted = client.delete(f"{base}{uuid}", headers=admin_headers)
        assert deleted.json()["isDeleted"] is True
        assert client.get(base, headers=admin_headers).json() == []

    def test_upsert_with_client_uuid(self, client, admin_headers, resource, payload, change):
        uuid = str(uuid4())
        base = f"/api/{resource}/"

        assert client.post(base, json={**payload, "uuid": uuid}, headers=admin_headers).status_code == 201
        response = client.post(base, json={**change, "uuid": uuid}, headers=admin_headers)

        assert response.status_code == 200
        assert len(client.get(base, headers=admin_headers).json()) == 1

    def test_other_company_cannot_read(self, client, admin_headers, other_admin_headers, resource, payload, change):
        base = f"/api/{resource}/"
        uuid = client.post(base, json=payload, headers=admin_headers).json()["uuid"]

        assert client.get(f"{base}{uuid}", headers=other_admin_headers).status_code == 404
        assert client.delete(f"{base}{uuid}", headers=other_admin_headers).status_code == 404
        assert client.get(base, headers=other_admin_headers).json() == []


class TestUpsertReconciler:

    def test_insert_then_merge(self, db_session, company):
        reconciler = UpsertReconciler(db_session, Category, company.id)
        uuid = uuid4()

        row, created = reconciler.upsert(uuid, {"name": "Dairy", "subcategory": "Milk"}, ("name",))
        assert created is True

        row, created = reconciler.upsert(uuid, {"subcategory": "Cheese"}, ("name",))
        assert created is False
        assert row.name == "Dairy"
        assert row.subcategory == "Cheese"
        assert db_session.query(Category).count() == 1

    def test_missing_required_on_insert(self, db_session, company):
        reconciler = UpsertReconciler(db_session, Category, company.id)
        with pytest.raises(HTTPException) as exc:
            reconciler.upsert(uuid4(), {"subcategory": "No name"}, ("name",))
        assert exc.value.status_code == 400
        assert exc.value.detail["missingFields"] == ["name"]

    def test_find_is_company_scoped(self, db_session, company, other_company):
        uuid = uuid4()
        UpsertReconciler(db_session, Category, company.id).upsert(uuid, {"name": "Dairy"}, ("name",))

        assert UpsertReconciler(db_session, Category, other_company.id).find(uuid) is None
        assert UpsertReconciler(db_session, Category, company.id).find(uuid) is not None

    def test_lenient_references_are_dropped(self, db_session, company):
        from backoffice.modules.products.models import Product

        reconciler = UpsertReconciler(db_session, Product, company.id)
        values = reconciler.resolve_references(
            {"name": "Tea", "category_uuid": uuid4()},
            {"category_uuid": ("category_id", Category)},
            strict=False
        )
        assert values == {"name": "Tea"}


class TestWalkInCustomer:

    def test_created_once(self, db_session, company):
        service = CustomerService(db_session)

        first = service.get_walk_in_customer(company.id)
        second = service.get_walk_in_customer(company.id)
        db_session.commit()

        assert first.id == second.id
        assert first.name == "Walk-in Customer"

    def test_one_per_company(self, db_session, company, other_company):
        service = CustomerService(db_session)

        ours = service.get_walk_in_customer(company.id)
        theirs = service.get_walk_in_customer(other_company.id)

        assert ours.id != theirs.id
        assert theirs.company_id == other_company.id
