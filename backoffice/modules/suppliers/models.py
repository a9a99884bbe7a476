from sqlalchemy import Column, String, Text

from backoffice.database.database import Base
from backoffice.common.mixins import BaseMixin


class Supplier(Base, BaseMixin):
    __tablename__ = "suppliers"

    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
