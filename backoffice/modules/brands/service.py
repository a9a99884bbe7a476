from backoffice.common.service import TenantResourceService
from backoffice.modules.brands.models import Brand


class BrandService(TenantResourceService):
    """Brands that products can be filed under"""

    model = Brand
    label = "Brand"
    required_fields = ("name",)
