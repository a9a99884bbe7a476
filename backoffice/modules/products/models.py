from sqlalchemy import Column, String, Boolean, Integer, Float, Text, ForeignKey
from sqlalchemy.orm import relationship

from backoffice.database.database import Base
from backoffice.common.mixins import BaseMixin


class Product(Base, BaseMixin):
    __tablename__ = "products"

    name = Column(String(255), nullable=False)
    sku = Column(String(100), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    unit_id = Column(Integer, ForeignKey("units.id"), nullable=True)
    brand_id = Column(Integer, ForeignKey("brands.id"), nullable=True)
    type = Column(String(50), nullable=True)
    pack_size = Column(String(50), nullable=True)
    price = Column(Float, nullable=False)
    cost = Column(Float, nullable=True)
    stock_quantity = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    gst_type = Column(String(50), nullable=True)
    gst_rate = Column(Float, nullable=True)
    image_url = Column(String(500), nullable=True)
    description = Column(Text, nullable=True)
    discount = Column(Float, default=0.0, nullable=False)
    is_percent_discount = Column(Boolean, default=False, nullable=False)

    # Relationships
    category = relationship("Category")
    unit = relationship("Unit")
    brand = relationship("Brand")

    # Clients only ever see uuids of related rows
    @property
    def category_uuid(self):
        return self.category.uuid if self.category else None

    @property
    def unit_uuid(self):
        return self.unit.uuid if self.unit else None

    @property
    def brand_uuid(self):
        return self.brand.uuid if self.brand else None
