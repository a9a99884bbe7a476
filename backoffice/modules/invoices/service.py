"""
Invoices and their line items.

An invoice and its items are written in one transaction: every product
referenced by the items is checked before anything is persisted, and a
re-synced invoice that carries items replaces the previous ones.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID, uuid4

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.common.mixins import as_utc, utcnow
from backoffice.common.service import TenantResourceService
from backoffice.core.config import settings
from backoffice.modules.customers.models import Customer
from backoffice.modules.customers.service import CustomerService
from backoffice.modules.invoices.models import Invoice, InvoiceItem, InvoiceSequence
from backoffice.modules.invoices.schemas import InvoiceUpdate
from backoffice.modules.products.models import Product

logger = logging.getLogger(__name__)


class InvoiceService(TenantResourceService):
    model = Invoice
    label = "Invoice"
    required_fields = ("invoice_number", "customer_id", "subtotal", "tax", "total")
    references = {
        "customer_uuid": ("customer_id", Customer),
    }

    def __init__(self, db: Session):
        super().__init__(db)
        self.customers = CustomerService(db)

    def save(self, payload: InvoiceUpdate, company_id: int) -> Tuple[Invoice, bool]:
        return self._write(getattr(payload, "uuid", None), payload, company_id)

    def update(self, uuid: UUID, payload: InvoiceUpdate, company_id: int) -> Invoice:
        self.get(uuid, company_id)
        row, _ = self._write(uuid, payload, company_id)
        return row

    def _write(self, uuid: Optional[UUID], payload: InvoiceUpdate, company_id: int) -> Tuple[Invoice, bool]:
        reconciler = self._reconciler(company_id)
        try:
            values = payload.changes()
            items = values.pop("items", None)
            existing = reconciler.find(uuid) if uuid else None

            # Validate everything that can fail before the first write
            product_ids = self._resolve_products(items, company_id) if items is not None else {}

            walk_in = "customer_uuid" in values and values["customer_uuid"] is None
            if walk_in:
                values.pop("customer_uuid")
            values = reconciler.resolve_references(values, self.references)

            if existing is None or walk_in:
                if walk_in or values.get("customer_id") is None:
                    values["customer_id"] = self.customers.get_walk_in_customer(company_id).id
            if existing is None and not values.get("invoice_number"):
                values["invoice_number"] = self._next_invoice_number(company_id)
            if values.get("date") is not None:
                values["date"] = as_utc(values["date"])

            row, created = reconciler.upsert(uuid, values, self.required_fields)
            if items is not None:
                self._replace_items(row, items, product_ids, company_id)

            self.db.commit()
            self.db.refresh(row)
            logger.info(
                f"{'Created' if created else 'Updated'} invoice {row.invoice_number} "
                f"({row.uuid}) for company {company_id}"
            )
            return row, created
        except HTTPException:
            self.db.rollback()
            raise
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Integrity error saving invoice {uuid} for company {company_id}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Invoice conflicts with existing data"
            )
        except Exception:
            self.db.rollback()
            logger.error(f"Error saving invoice {uuid} for company {company_id}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Error saving invoice"
            )

    def _resolve_products(self, items: List[Dict[str, Any]], company_id: int) -> Dict[UUID, int]:
        """Map product uuids to ids; any product outside the company rejects the whole invoice."""
        requested = {item["product_uuid"] for item in items}
        if not requested:
            return {}

        rows = self.db.query(Product.uuid, Product.id).filter(
            Product.company_id == company_id,
            Product.uuid.in_(requested)
        ).all()
        found = {row.uuid: row.id for row in rows}

        invalid = sorted(str(u) for u in requested if u not in found)
        if invalid:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"error": "Invalid product IDs", "invalidProductUuids": invalid}
            )
        return found

    def _replace_items(self, invoice: Invoice, items: List[Dict[str, Any]],
                       product_ids: Dict[UUID, int], company_id: int):
        self.db.query(InvoiceItem).filter(
            InvoiceItem.invoice_id == invoice.id,
            InvoiceItem.company_id == company_id
        ).delete(synchronize_session=False)

        now = utcnow()
        for item in items:
            quantity = item["quantity"]
            unit_price = item["unit_price"]
            discount = item.get("discount") or 0.0
            total_price = item.get("total_price")
            if total_price is None:
                total_price = round(quantity * unit_price - discount, 2)

            self.db.add(InvoiceItem(
                uuid=item.get("uuid") or uuid4(),
                company_id=company_id,
                invoice_id=invoice.id,
                product_id=product_ids[item["product_uuid"]],
                quantity=quantity,
                bonus=item.get("bonus") or 0.0,
                unit_price=unit_price,
                discount=discount,
                total_price=total_price,
                created_at=now
            ))
        self.db.flush()
        self.db.expire(invoice, ["items"])

    def _next_invoice_number(self, company_id: int) -> str:
        sequence = self.db.query(InvoiceSequence).filter(
            InvoiceSequence.company_id == company_id
        ).with_for_update().first()

        if not sequence:
            sequence = InvoiceSequence(
                company_id=company_id,
                prefix=settings.INVOICE_NUMBER_PREFIX,
                current_number=0
            )
            self.db.add(sequence)
            self.db.flush()

        sequence.current_number += 1
        sequence.updated_at = utcnow()
        self.db.flush()

        return f"{sequence.prefix or ''}{sequence.current_number:06d}"
