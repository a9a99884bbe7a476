"""
Tests for invoices

Covers:
- Walk-in customer fallback
- Atomic rejection of invoices referencing unknown products
- Item replacement on re-sync
- Per-company invoice numbering
"""
from uuid import uuid4

import pytest

from backoffice.modules.customers.models import Customer
from backoffice.modules.invoices.models import Invoice, InvoiceItem


def create_product(client, headers, sku="SKU-1", price=3.5):
    response = client.post(
        "/api/products/", json={"name": f"Product {sku}", "sku": sku, "price": price}, headers=headers
    )
    assert response.status_code == 201
    return response.json()


def invoice_payload(*products, **extra):
    items = [
        {"productUuid": product["uuid"], "quantity": 2, "unitPrice": product["price"]}
        for product in products
    ]
    subtotal = sum(2 * product["price"] for product in products)
    return {"subtotal": subtotal, "tax": 0.0, "total": subtotal, "items": items, **extra}


@pytest.fixture
def product(client, admin_headers):
    return create_product(client, admin_headers)


class TestInvoiceCreate:
    """Creating invoices"""

    def test_create_with_items(self, client, admin_headers, product):
        response = client.post("/api/invoices/", json=invoice_payload(product), headers=admin_headers)

        assert response.status_code == 201
        body = response.json()
        assert len(body["items"]) == 1
        item = body["items"][0]
        assert item["productUuid"] == product["uuid"]
        assert item["invoiceUuid"] == body["uuid"]
        assert item["totalPrice"] == 7.0

    def test_missing_customer_bills_walk_in(self, client, db_session, company, admin_headers, product):
        first = client.post("/api/invoices/", json=invoice_payload(product), headers=admin_headers).json()
        second = client.post(
            "/api/invoices/", json=invoice_payload(product, customerUuid=None), headers=admin_headers
        ).json()

        db_session.expire_all()
        walk_in = db_session.query(Customer).filter(Customer.company_id == company.id).one()
        assert walk_in.name == "Walk-in Customer"
        assert first["customerUuid"] == second["customerUuid"] == str(walk_in.uuid)

    def test_named_customer(self, client, admin_headers, product):
        customer = client.post("/api/customers/", json={"name": "Ada"}, headers=admin_headers).json()

        response = client.post(
            "/api/invoices/", json=invoice_payload(product, customerUuid=customer["uuid"]), headers=admin_headers
        )
        assert response.json()["customerUuid"] == customer["uuid"]

    def test_invoice_numbers_are_sequential_per_company(self, client, admin_headers, other_admin_headers, product):
        first = client.post("/api/invoices/", json=invoice_payload(product), headers=admin_headers).json()
        second = client.post("/api/invoices/", json=invoice_payload(product), headers=admin_headers).json()

        other_product = create_product(client, other_admin_headers)
        other = client.post("/api/invoices/", json=invoice_payload(other_product), headers=other_admin_headers).json()

        assert first["invoiceNumber"] == "INV-000001"
        assert second["invoiceNumber"] == "INV-000002"
        assert other["invoiceNumber"] == "INV-000001"

    def test_client_invoice_number_is_kept(self, client, admin_headers, product):
        response = client.post(
            "/api/invoices/", json=invoice_payload(product, invoiceNumber="POS1-0042"), headers=admin_headers
        )
        assert response.json()["invoiceNumber"] == "POS1-0042"


class TestInvoiceAtomicity:
    """Nothing is written when an item is invalid"""

    def test_one_unknown_product_rejects_everything(self, client, db_session, admin_headers, product):
        ghost = {"uuid": str(uuid4()), "price": 1.0}

        response = client.post("/api/invoices/", json=invoice_payload(product, ghost), headers=admin_headers)

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert detail["error"] == "Invalid product IDs"
        assert detail["invalidProductUuids"] == [ghost["uuid"]]

        db_session.expire_all()
        assert db_session.query(Invoice).count() == 0
        assert db_session.query(InvoiceItem).count() == 0
        assert db_session.query(Customer).count() == 0

    def test_product_of_other_company_is_rejected(self, client, db_session, admin_headers, other_admin_headers):
        foreign = create_product(client, other_admin_headers, sku="THEIRS")

        response = client.post("/api/invoices/", json=invoice_payload(foreign), headers=admin_headers)

        assert response.status_code == 400
        db_session.expire_all()
        assert db_session.query(Invoice).count() == 0

    def test_rejected_resync_keeps_previous_items(self, client, db_session, admin_headers, product):
        uuid = str(uuid4())
        client.post("/api/invoices/", json=invoice_payload(product, uuid=uuid), headers=admin_headers)

        ghost = {"uuid": str(uuid4()), "price": 1.0}
        response = client.post(
            "/api/invoices/", json=invoice_payload(ghost, uuid=uuid, total=99.0), headers=admin_headers
        )
        assert response.status_code == 400

        body = client.get(f"/api/invoices/{uuid}", headers=admin_headers).json()
        assert body["total"] == 7.0
        assert [item["productUuid"] for item in body["items"]] == [product["uuid"]]


class TestInvoiceResync:
    """Replaying invoices created offline"""

    def test_replay_converges_on_one_invoice(self, client, db_session, admin_headers, product):
        payload = invoice_payload(product, uuid=str(uuid4()))

        first = client.post("/api/invoices/", json=payload, headers=admin_headers)
        second = client.post("/api/invoices/", json=payload, headers=admin_headers)

        assert first.status_code == 201
        assert second.status_code == 200
        assert second.json()["invoiceNumber"] == first.json()["invoiceNumber"]
        db_session.expire_all()
        assert db_session.query(Invoice).count() == 1
        assert db_session.query(InvoiceItem).count() == 1

    def test_items_are_replaced(self, client, db_session, admin_headers, product):
        other = create_product(client, admin_headers, sku="SKU-2", price=1.25)
        uuid = str(uuid4())
        client.post("/api/invoices/", json=invoice_payload(product, other, uuid=uuid), headers=admin_headers)

        response = client.post("/api/invoices/", json=invoice_payload(other, uuid=uuid), headers=admin_headers)

        items = response.json()["items"]
        assert [item["productUuid"] for item in items] == [other["uuid"]]
        db_session.expire_all()
        assert db_session.query(InvoiceItem).count() == 1

    def test_header_update_without_items_keeps_items(self, client, admin_headers, product):
        uuid = str(uuid4())
        client.post("/api/invoices/", json=invoice_payload(product, uuid=uuid), headers=admin_headers)

        response = client.put(f"/api/invoices/{uuid}", json={"signUrl": "https://cdn/sig.png"}, headers=admin_headers)

        body = response.json()
        assert body["signUrl"] == "https://cdn/sig.png"
        assert len(body["items"]) == 1

    def test_cashier_can_invoice(self, client, headers_for, product):
        response = client.post("/api/invoices/", json=invoice_payload(product), headers=headers_for("cashier"))
        assert response.status_code == 201

    def test_delete_is_soft(self, client, db_session, admin_headers, product):
        created = client.post("/api/invoices/", json=invoice_payload(product), headers=admin_headers).json()

        client.delete(f"/api/invoices/{created['uuid']}", headers=admin_headers)

        assert client.get("/api/invoices/", headers=admin_headers).json() == []
        db_session.expire_all()
        assert db_session.query(Invoice).filter(Invoice.is_deleted == True).count() == 1
