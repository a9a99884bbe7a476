"""
Tests for products and the uuid upsert protocol

Covers:
- Inserts without uuid always create rows
- Replayed upserts converge on one row and merge fields
- Tenant isolation of uuids and of referenced categories, units and brands
- Strict and lenient handling of unknown references
- Soft delete and the updatedSince filter
"""
from uuid import uuid4

import pytest

from backoffice.core.config import settings
from backoffice.modules.products.models import Product


@pytest.fixture
def product_payload():
    return {"name": "Olive Oil 1L", "sku": "OIL-1L", "price": 9.5, "stockQuantity": 20}


def count_products(db_session, **filters):
    db_session.expire_all()
    return db_session.query(Product).filter_by(**filters).count()


class TestProductCreate:
    """Inserts"""

    def test_create_without_uuid_twice_creates_two_rows(self, client, db_session, admin_headers, product_payload):
        first = client.post("/api/products/", json=product_payload, headers=admin_headers)
        second = client.post("/api/products/", json={**product_payload, "price": 11.0}, headers=admin_headers)

        assert first.status_code == 201
        assert second.status_code == 201
        assert first.json()["uuid"] != second.json()["uuid"]
        assert count_products(db_session) == 2

    def test_response_is_camel_case_without_internal_ids(self, client, admin_headers, product_payload):
        body = client.post("/api/products/", json=product_payload, headers=admin_headers).json()

        assert body["stockQuantity"] == 20
        assert body["isDeleted"] is False
        assert "id" not in body
        assert "companyId" not in body
        assert "categoryId" not in body

    def test_missing_required_fields(self, client, db_session, admin_headers):
        response = client.post("/api/products/", json={"name": "No price"}, headers=admin_headers)

        assert response.status_code == 400
        assert set(response.json()["detail"]["missingFields"]) == {"sku", "price"}
        assert count_products(db_session) == 0

    def test_snake_case_input_is_accepted(self, client, admin_headers, product_payload):
        payload = {"name": "Rice", "sku": "RICE", "price": 2.0, "stock_quantity": 7}
        response = client.post("/api/products/", json=payload, headers=admin_headers)
        assert response.json()["stockQuantity"] == 7

    def test_cashier_cannot_create(self, client, headers_for, product_payload):
        response = client.post("/api/products/", json=product_payload, headers=headers_for("cashier"))
        assert response.status_code == 403
        assert response.json()["detail"]["required"] == "MANAGE_PRODUCTS"


class TestProductUpsert:
    """Replays with a client generated uuid"""

    def test_same_payload_twice_is_idempotent(self, client, db_session, admin_headers, product_payload):
        uuid = str(uuid4())
        payload = {**product_payload, "uuid": uuid}

        first = client.post("/api/products/", json=payload, headers=admin_headers)
        second = client.post("/api/products/", json=payload, headers=admin_headers)

        assert first.status_code == 201
        assert second.status_code == 200
        assert first.json()["uuid"] == second.json()["uuid"] == uuid
        assert count_products(db_session) == 1

    def test_second_payload_merges_over_first(self, client, db_session, admin_headers, product_payload):
        uuid = str(uuid4())
        client.post("/api/products/", json={**product_payload, "uuid": uuid}, headers=admin_headers)

        response = client.post(
            "/api/products/",
            json={"uuid": uuid, "price": 12.25, "description": "Cold pressed"},
            headers=admin_headers
        )

        body = response.json()
        assert response.status_code == 200
        assert body["price"] == 12.25
        assert body["description"] == "Cold pressed"
        # Untouched fields keep their values
        assert body["name"] == "Olive Oil 1L"
        assert body["stockQuantity"] == 20
        assert count_products(db_session) == 1

    def test_update_bumps_updated_at(self, client, admin_headers, product_payload):
        uuid = str(uuid4())
        first = client.post("/api/products/", json={**product_payload, "uuid": uuid}, headers=admin_headers).json()
        second = client.post("/api/products/", json={"uuid": uuid, "price": 1.0}, headers=admin_headers).json()

        assert second["updatedAt"] > first["updatedAt"]
        assert second["createdAt"] == first["createdAt"]

    def test_new_uuid_requires_all_fields(self, client, db_session, admin_headers):
        response = client.post(
            "/api/products/", json={"uuid": str(uuid4()), "price": 3.0}, headers=admin_headers
        )
        assert response.status_code == 400
        assert count_products(db_session) == 0

    def test_required_field_cannot_be_nulled(self, client, admin_headers, product_payload):
        uuid = str(uuid4())
        client.post("/api/products/", json={**product_payload, "uuid": uuid}, headers=admin_headers)

        response = client.post("/api/products/", json={"uuid": uuid, "name": None}, headers=admin_headers)
        assert response.status_code == 400

    def test_same_uuid_in_other_company_creates_separate_row(
        self, client, db_session, company, other_company, admin_headers, other_admin_headers, product_payload
    ):
        uuid = str(uuid4())
        client.post("/api/products/", json={**product_payload, "uuid": uuid}, headers=admin_headers)

        response = client.post(
            "/api/products/",
            json={**product_payload, "uuid": uuid, "name": "Rival Oil"},
            headers=other_admin_headers
        )
        assert response.status_code == 201

        db_session.expire_all()
        ours = db_session.query(Product).filter_by(company_id=company.id).one()
        theirs = db_session.query(Product).filter_by(company_id=other_company.id).one()
        assert ours.name == "Olive Oil 1L"
        assert theirs.name == "Rival Oil"
        assert str(ours.uuid) == str(theirs.uuid) == uuid

    def test_put_only_changes_sent_fields(self, client, admin_headers, product_payload):
        uuid = client.post("/api/products/", json=product_payload, headers=admin_headers).json()["uuid"]

        response = client.put(f"/api/products/{uuid}", json={"stockQuantity": 3}, headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["stockQuantity"] == 3
        assert response.json()["price"] == 9.5

    def test_put_unknown_uuid_is_404(self, client, admin_headers):
        response = client.put(f"/api/products/{uuid4()}", json={"price": 1.0}, headers=admin_headers)
        assert response.status_code == 404

    def test_put_on_other_company_row_is_404(self, client, admin_headers, other_admin_headers, product_payload):
        uuid = client.post("/api/products/", json=product_payload, headers=admin_headers).json()["uuid"]

        response = client.put(f"/api/products/{uuid}", json={"price": 0.01}, headers=other_admin_headers)
        assert response.status_code == 404
        assert client.get(f"/api/products/{uuid}", headers=admin_headers).json()["price"] == 9.5


class TestProductReferences:
    """Category, unit and brand references"""

    def test_references_resolve_within_company(self, client, admin_headers, product_payload):
        category = client.post("/api/categories/", json={"name": "Pantry"}, headers=admin_headers).json()
        unit = client.post("/api/units/", json={"name": "Litre", "symbol": "L"}, headers=admin_headers).json()
        brand = client.post("/api/brands/", json={"name": "Oliva"}, headers=admin_headers).json()

        response = client.post(
            "/api/products/",
            json={
                **product_payload,
                "categoryUuid": category["uuid"],
                "unitUuid": unit["uuid"],
                "brandUuid": brand["uuid"],
            },
            headers=admin_headers
        )

        body = response.json()
        assert response.status_code == 201
        assert body["categoryUuid"] == category["uuid"]
        assert body["unitUuid"] == unit["uuid"]
        assert body["brandUuid"] == brand["uuid"]

    def test_other_company_category_is_rejected(
        self, client, db_session, admin_headers, other_admin_headers, product_payload
    ):
        foreign = client.post("/api/categories/", json={"name": "Theirs"}, headers=other_admin_headers).json()

        response = client.post(
            "/api/products/",
            json={**product_payload, "categoryUuid": foreign["uuid"]},
            headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["detail"]["unresolvedReferences"] == [
            {"field": "categoryUuid", "uuid": foreign["uuid"]}
        ]
        assert count_products(db_session) == 0

    def test_lenient_mode_keeps_previous_reference(self, client, admin_headers, product_payload, monkeypatch):
        category = client.post("/api/categories/", json={"name": "Pantry"}, headers=admin_headers).json()
        uuid = str(uuid4())
        client.post(
            "/api/products/",
            json={**product_payload, "uuid": uuid, "categoryUuid": category["uuid"]},
            headers=admin_headers
        )

        monkeypatch.setattr(settings, "STRICT_REFERENCES", False)
        response = client.post(
            "/api/products/",
            json={"uuid": uuid, "categoryUuid": str(uuid4()), "price": 7.0},
            headers=admin_headers
        )

        assert response.status_code == 200
        assert response.json()["categoryUuid"] == category["uuid"]
        assert response.json()["price"] == 7.0

    def test_null_reference_clears_it(self, client, admin_headers, product_payload):
        category = client.post("/api/categories/", json={"name": "Pantry"}, headers=admin_headers).json()
        uuid = client.post(
            "/api/products/", json={**product_payload, "categoryUuid": category["uuid"]}, headers=admin_headers
        ).json()["uuid"]

        response = client.put(f"/api/products/{uuid}", json={"categoryUuid": None}, headers=admin_headers)
        assert response.json()["categoryUuid"] is None


class TestProductListAndDelete:
    """Listing, filtering and soft delete"""

    def test_list_only_shows_own_active_products(self, client, admin_headers, other_admin_headers, product_payload):
        keep = client.post("/api/products/", json=product_payload, headers=admin_headers).json()
        gone = client.post("/api/products/", json={**product_payload, "sku": "X"}, headers=admin_headers).json()
        client.post("/api/products/", json={**product_payload, "sku": "THEIRS"}, headers=other_admin_headers)

        client.delete(f"/api/products/{gone['uuid']}", headers=admin_headers)

        listed = client.get("/api/products/", headers=admin_headers).json()
        assert [p["uuid"] for p in listed] == [keep["uuid"]]

    def test_soft_delete_keeps_row_and_bumps_timestamp(self, client, db_session, admin_headers, product_payload):
        created = client.post("/api/products/", json=product_payload, headers=admin_headers).json()

        response = client.delete(f"/api/products/{created['uuid']}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["isDeleted"] is True
        assert response.json()["updatedAt"] > created["updatedAt"]
        assert count_products(db_session, is_deleted=True) == 1
        assert client.get(f"/api/products/{created['uuid']}", headers=admin_headers).status_code == 404

    def test_updated_since_filter(self, client, admin_headers, product_payload):
        first = client.post("/api/products/", json=product_payload, headers=admin_headers).json()
        second = client.post("/api/products/", json={**product_payload, "sku": "B"}, headers=admin_headers).json()

        listed = client.get(
            "/api/products/", params={"updatedSince": first["updatedAt"]}, headers=admin_headers
        ).json()

        assert [p["uuid"] for p in listed] == [second["uuid"]]
