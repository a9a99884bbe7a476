from backoffice.common.service import TenantResourceService
from backoffice.modules.units.models import Unit


class UnitService(TenantResourceService):
    model = Unit
    label = "Unit"
    required_fields = ("name", "symbol")
