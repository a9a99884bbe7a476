"""
Delta computation for offline clients.

A client sends the server time it received on its previous sync and gets
back every row of its company touched after that instant, soft-deleted rows
included, plus a new server time to send next time.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from backoffice.common.mixins import as_utc, utcnow
from backoffice.modules.brands.models import Brand
from backoffice.modules.categories.models import Category
from backoffice.modules.customers.models import Customer
from backoffice.modules.employees.models import Employee
from backoffice.modules.invoices.models import Invoice, InvoiceItem
from backoffice.modules.products.models import Product
from backoffice.modules.rbac.registry import Permission
from backoffice.modules.rbac.store import RolePermissionStore
from backoffice.modules.suppliers.models import Supplier
from backoffice.modules.units.models import Unit

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Entity key in the response -> (model carrying updated_at, permission to see it)
SYNCED_MODELS = {
    "products": (Product, Permission.VIEW_PRODUCTS),
    "categories": (Category, Permission.VIEW_PRODUCTS),
    "units": (Unit, Permission.VIEW_PRODUCTS),
    "brands": (Brand, Permission.VIEW_PRODUCTS),
    "customers": (Customer, Permission.VIEW_CUSTOMERS),
    "suppliers": (Supplier, Permission.VIEW_SUPPLIERS),
    "employees": (Employee, Permission.VIEW_EMPLOYEES),
    "invoices": (Invoice, Permission.VIEW_INVOICES),
}


class SyncService:
    def __init__(self, db: Session):
        self.db = db

    def delta(self, company_id: int, role: str, watermark: Optional[datetime] = None) -> dict:
        """
        Rows changed after `watermark`, grouped by entity. Groups the role may
        not view come back empty.
        """
        watermark = as_utc(watermark) if watermark is not None else EPOCH
        permissions = RolePermissionStore(self.db).effective_permissions(role, company_id)
        # Taken before querying, so any row stamped after this instant is
        # returned by the next sync. A write stamped earlier whose transaction
        # commits after these reads is not seen by either sync.
        server_time = utcnow()

        updates = {}
        for key, (model, permission) in SYNCED_MODELS.items():
            updates[key] = self._changed(model, company_id, watermark) if permission in permissions else []

        # Items are never modified in place, so their creation time is their change time
        if Permission.VIEW_INVOICES in permissions:
            updates["invoice_items"] = self.db.query(InvoiceItem).filter(
                InvoiceItem.company_id == company_id,
                InvoiceItem.created_at > watermark
            ).order_by(InvoiceItem.created_at, InvoiceItem.id).all()
        else:
            updates["invoice_items"] = []

        logger.debug(
            f"Sync for company {company_id} as {role} since {watermark.isoformat()}: "
            + ", ".join(f"{key}={len(rows)}" for key, rows in updates.items())
        )
        return {"server_time": server_time, "updates": updates}

    def _changed(self, model, company_id: int, watermark: datetime) -> list:
        return self.db.query(model).filter(
            model.company_id == company_id,
            model.updated_at > watermark
        ).order_by(model.updated_at, model.id).all()
