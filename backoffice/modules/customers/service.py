import logging

from backoffice.common.service import TenantResourceService
from backoffice.core.config import settings
from backoffice.modules.customers.models import Customer

logger = logging.getLogger(__name__)


class CustomerService(TenantResourceService):
    model = Customer
    label = "Customer"
    required_fields = ("name",)

    def get_walk_in_customer(self, company_id: int) -> Customer:
        """
        Customer that invoices without a named customer are billed to.

        Created on first use inside the caller's transaction; nothing is
        committed here.
        """
        customer = self._base_query(company_id).filter(
            Customer.name == settings.WALK_IN_CUSTOMER_NAME,
            Customer.is_deleted == False
        ).order_by(Customer.id).first()
        if customer:
            return customer

        customer = Customer(
            name=settings.WALK_IN_CUSTOMER_NAME,
            company_id=company_id,
            credit_limit=0.0,
            current_balance=0.0
        )
        self.db.add(customer)
        self.db.flush()
        logger.info(f"Created walk-in customer for company {company_id}")
        return customer
