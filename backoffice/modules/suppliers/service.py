from backoffice.common.service import TenantResourceService
from backoffice.modules.suppliers.models import Supplier


class SupplierService(TenantResourceService):
    model = Supplier
    label = "Supplier"
    required_fields = ("name",)
