from sqlalchemy import Column, String, Boolean

from backoffice.database.database import Base
from backoffice.common.mixins import BaseMixin


class Category(Base, BaseMixin):
    __tablename__ = "categories"

    name = Column(String(255), nullable=False)
    subcategory = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
