from datetime import datetime
from typing import List, Optional

from backoffice.common.schemas import CamelModel, UtcDatetime
from backoffice.modules.brands.schemas import BrandOut
from backoffice.modules.categories.schemas import CategoryOut
from backoffice.modules.customers.schemas import CustomerOut
from backoffice.modules.employees.schemas import EmployeeOut
from backoffice.modules.invoices.schemas import InvoiceItemOut, InvoiceOut
from backoffice.modules.products.schemas import ProductOut
from backoffice.modules.suppliers.schemas import SupplierOut
from backoffice.modules.units.schemas import UnitOut


class SyncRequest(CamelModel):
    # Server time returned by the previous sync; omitted on first sync
    last_sync_time: Optional[datetime] = None


class SyncUpdates(CamelModel):
    products: List[ProductOut] = []
    categories: List[CategoryOut] = []
    units: List[UnitOut] = []
    brands: List[BrandOut] = []
    customers: List[CustomerOut] = []
    suppliers: List[SupplierOut] = []
    employees: List[EmployeeOut] = []
    invoices: List[InvoiceOut] = []
    invoice_items: List[InvoiceItemOut] = []


class SyncResponse(CamelModel):
    server_time: UtcDatetime
    updates: SyncUpdates
