"""
Tests for the offline sync delta

Covers:
- First sync returns everything of the caller's company
- Later syncs return only rows touched after the previous server time
- Soft-deleted rows are reported so clients can drop them
- No secrets and no other company's data leak into the payload
- Entity groups the role may not view come back empty
"""
from backoffice.conftest import make_employee


def sync(client, headers, last_sync_time=None):
    body = {"lastSyncTime": last_sync_time} if last_sync_time else {}
    response = client.post("/api/sync/", json=body, headers=headers)
    assert response.status_code == 200
    return response.json()


class TestSyncDelta:

    def test_first_sync_returns_all_rows(self, client, admin, admin_headers):
        category = client.post("/api/categories/", json={"name": "Drinks"}, headers=admin_headers).json()
        product = client.post(
            "/api/products/", json={"name": "Cola", "sku": "COLA", "price": 1.5}, headers=admin_headers
        ).json()

        body = sync(client, admin_headers)

        updates = body["updates"]
        assert body["serverTime"]
        assert [c["uuid"] for c in updates["categories"]] == [category["uuid"]]
        assert [p["uuid"] for p in updates["products"]] == [product["uuid"]]
        assert [e["uuid"] for e in updates["employees"]] == [str(admin.uuid)]
        assert set(updates) == {
            "products", "categories", "units", "brands", "customers",
            "suppliers", "employees", "invoices", "invoiceItems",
        }

    def test_missing_body_is_first_sync(self, client, admin_headers):
        client.post("/api/brands/", json={"name": "Acme"}, headers=admin_headers)

        response = client.post("/api/sync/", headers=admin_headers)

        assert response.status_code == 200
        assert len(response.json()["updates"]["brands"]) == 1

    def test_incremental_sync(self, client, admin_headers):
        old = client.post("/api/units/", json={"name": "Kilogram", "symbol": "kg"}, headers=admin_headers).json()
        watermark = sync(client, admin_headers)["serverTime"]

        new = client.post("/api/units/", json={"name": "Gram", "symbol": "g"}, headers=admin_headers).json()
        client.put(f"/api/units/{old['uuid']}", json={"symbol": "KG"}, headers=admin_headers)

        updates = sync(client, admin_headers, watermark)["updates"]
        assert {u["uuid"] for u in updates["units"]} == {old["uuid"], new["uuid"]}
        assert updates["employees"] == []

    def test_nothing_changed(self, client, admin_headers):
        client.post("/api/customers/", json={"name": "Ada"}, headers=admin_headers)
        watermark = sync(client, admin_headers)["serverTime"]

        body = sync(client, admin_headers, watermark)

        assert all(rows == [] for rows in body["updates"].values())

    def test_deleted_rows_are_reported(self, client, admin_headers):
        supplier = client.post("/api/suppliers/", json={"name": "Wholesale Co"}, headers=admin_headers).json()
        watermark = sync(client, admin_headers)["serverTime"]

        client.delete(f"/api/suppliers/{supplier['uuid']}", headers=admin_headers)

        suppliers = sync(client, admin_headers, watermark)["updates"]["suppliers"]
        assert len(suppliers) == 1
        assert suppliers[0]["uuid"] == supplier["uuid"]
        assert suppliers[0]["isDeleted"] is True

    def test_invoice_items_are_included(self, client, admin_headers):
        product = client.post(
            "/api/products/", json={"name": "Cola", "sku": "COLA", "price": 1.5}, headers=admin_headers
        ).json()
        invoice = client.post(
            "/api/invoices/",
            json={
                "subtotal": 3.0, "tax": 0.0, "total": 3.0,
                "items": [{"productUuid": product["uuid"], "quantity": 2, "unitPrice": 1.5}],
            },
            headers=admin_headers
        ).json()

        updates = sync(client, admin_headers)["updates"]

        assert [i["uuid"] for i in updates["invoices"]] == [invoice["uuid"]]
        assert updates["invoiceItems"][0]["invoiceUuid"] == invoice["uuid"]
        assert updates["invoiceItems"][0]["productUuid"] == product["uuid"]

    def test_replaced_invoice_items_arrive_as_a_full_set(self, client, admin_headers):
        cola = client.post(
            "/api/products/", json={"name": "Cola", "sku": "COLA", "price": 1.5}, headers=admin_headers
        ).json()
        chips = client.post(
            "/api/products/", json={"name": "Chips", "sku": "CHIPS", "price": 2.0}, headers=admin_headers
        ).json()
        invoice = {
            "uuid": "6f1c2a4e-0d3b-4c1e-9a57-3f2b8e9d1c00",
            "subtotal": 1.5, "tax": 0.0, "total": 1.5,
            "items": [{"productUuid": cola["uuid"], "quantity": 1, "unitPrice": 1.5}],
        }
        client.post("/api/invoices/", json=invoice, headers=admin_headers)
        watermark = sync(client, admin_headers)["serverTime"]

        invoice.update(subtotal=5.5, total=5.5, items=[
            {"productUuid": cola["uuid"], "quantity": 1, "unitPrice": 1.5},
            {"productUuid": chips["uuid"], "quantity": 2, "unitPrice": 2.0},
        ])
        assert client.post("/api/invoices/", json=invoice, headers=admin_headers).status_code == 200

        updates = sync(client, admin_headers, watermark)["updates"]
        assert [i["uuid"] for i in updates["invoices"]] == [invoice["uuid"]]
        assert sorted(i["productUuid"] for i in updates["invoiceItems"]) == sorted([cola["uuid"], chips["uuid"]])
        assert all(i["invoiceUuid"] == invoice["uuid"] for i in updates["invoiceItems"])


class TestSyncIsolation:

    def test_other_company_rows_are_not_returned(self, client, db_session, other_company,
                                                  admin_headers, other_admin_headers):
        client.post("/api/categories/", json={"name": "Theirs"}, headers=other_admin_headers)
        make_employee(db_session, other_company, role="cashier")

        updates = sync(client, admin_headers)["updates"]

        assert updates["categories"] == []
        assert len(updates["employees"]) == 1

    def test_no_credentials_in_payload(self, client, db_session, company, admin_headers):
        make_employee(db_session, company, role="cashier", password="till-pass")

        response = client.post("/api/sync/", json={}, headers=admin_headers)

        for employee in response.json()["updates"]["employees"]:
            assert "password" not in employee
            assert "passwordResetToken" not in employee
            assert "emailVerificationToken" not in employee
        assert "$2b$" not in response.text

    def test_sync_requires_authentication(self, client):
        assert client.post("/api/sync/", json={}).status_code == 401


class TestSyncPermissions:
    """Entity groups follow the caller's VIEW_* permissions"""

    def test_cashier_sees_catalog_and_sales_only(self, client, admin_headers, headers_for):
        client.post("/api/products/", json={"name": "Cola", "sku": "COLA", "price": 1.5}, headers=admin_headers)
        client.post("/api/customers/", json={"name": "Ada"}, headers=admin_headers)
        client.post("/api/suppliers/", json={"name": "Wholesale Co"}, headers=admin_headers)

        updates = sync(client, headers_for("cashier"))["updates"]

        assert len(updates["products"]) == 1
        assert len(updates["customers"]) == 1
        assert updates["suppliers"] == []
        assert updates["employees"] == []

    def test_invoices_and_items_need_view_invoices(self, client, admin_headers, headers_for):
        product = client.post(
            "/api/products/", json={"name": "Cola", "sku": "COLA", "price": 1.5}, headers=admin_headers
        ).json()
        client.post(
            "/api/invoices/",
            json={
                "subtotal": 1.5, "tax": 0.0, "total": 1.5,
                "items": [{"productUuid": product["uuid"], "quantity": 1, "unitPrice": 1.5}],
            },
            headers=admin_headers
        )
        client.post("/api/roles/cashier/permissions", json={"permissions": ["VIEW_PRODUCTS"]}, headers=admin_headers)

        updates = sync(client, headers_for("cashier"))["updates"]

        assert [p["uuid"] for p in updates["products"]] == [product["uuid"]]
        assert updates["invoices"] == []
        assert updates["invoiceItems"] == []

    def test_role_configured_without_permissions_gets_nothing(self, client, admin_headers, headers_for):
        client.post("/api/categories/", json={"name": "Drinks"}, headers=admin_headers)
        response = client.post("/api/roles/cashier/permissions", json={"permissions": []}, headers=admin_headers)
        assert response.status_code == 200

        body = sync(client, headers_for("cashier"))

        assert body["serverTime"]
        assert all(rows == [] for rows in body["updates"].values())

    def test_unconfigured_custom_role_gets_nothing(self, client, admin_headers, headers_for):
        client.post("/api/brands/", json={"name": "Acme"}, headers=admin_headers)

        updates = sync(client, headers_for("auditor"))["updates"]

        assert all(rows == [] for rows in updates.values())
