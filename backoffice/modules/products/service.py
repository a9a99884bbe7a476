from backoffice.common.service import TenantResourceService
from backoffice.modules.brands.models import Brand
from backoffice.modules.categories.models import Category
from backoffice.modules.products.models import Product
from backoffice.modules.units.models import Unit


class ProductService(TenantResourceService):
    """
    Products of a company.

    Category, unit and brand are referenced by uuid and must belong to the
    same company as the product.
    """

    model = Product
    label = "Product"
    required_fields = ("name", "sku", "price")
    references = {
        "category_uuid": ("category_id", Category),
        "unit_uuid": ("unit_id", Unit),
        "brand_uuid": ("brand_id", Brand),
    }
