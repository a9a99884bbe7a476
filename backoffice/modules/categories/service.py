from backoffice.common.service import TenantResourceService
from backoffice.modules.categories.models import Category


class CategoryService(TenantResourceService):
    """Product categories of a company"""

    model = Category
    label = "Category"
    required_fields = ("name",)
