from sqlalchemy import Column, String, Integer, Float, DateTime, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from uuid import uuid4

from backoffice.database.database import Base
from backoffice.common.mixins import BaseMixin, TenantMixin, utcnow


class Invoice(Base, BaseMixin):
    __tablename__ = "invoices"

    invoice_number = Column(String(50), nullable=False)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False)
    date = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    subtotal = Column(Float, nullable=False)
    tax = Column(Float, nullable=False)
    discount = Column(Float, default=0.0, nullable=False)
    total = Column(Float, nullable=False)
    sign_url = Column(String(500), nullable=True)

    # Relationships
    customer = relationship("Customer")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        order_by="InvoiceItem.id",
        passive_deletes=True,
    )

    @property
    def customer_uuid(self):
        return self.customer.uuid if self.customer else None


class InvoiceItem(Base, TenantMixin):
    """Invoice line. Lines are written once and only replaced together with their invoice."""

    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uuid = Column(Uuid, default=uuid4, nullable=False)
    invoice_id = Column(Integer, ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False)
    quantity = Column(Float, nullable=False)
    bonus = Column(Float, default=0.0, nullable=False)
    unit_price = Column(Float, nullable=False)
    discount = Column(Float, default=0.0, nullable=False)
    total_price = Column(Float, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    # Relationships
    invoice = relationship("Invoice", back_populates="items")
    product = relationship("Product")

    __table_args__ = (
        UniqueConstraint("company_id", "uuid", name="uq_invoice_items_company_uuid"),
    )

    @property
    def invoice_uuid(self):
        return self.invoice.uuid if self.invoice else None

    @property
    def product_uuid(self):
        return self.product.uuid if self.product else None


class InvoiceSequence(Base, TenantMixin):
    """Per-company counter for invoice numbers the client did not assign."""

    __tablename__ = "invoice_sequences"

    id = Column(Integer, primary_key=True, autoincrement=True)
    prefix = Column(String(20), nullable=True)
    current_number = Column(Integer, default=0, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("company_id", name="uq_invoice_sequence_company"),
    )
