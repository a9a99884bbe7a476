from uuid import uuid4

from sqlalchemy import Column, Integer, String, Boolean, Uuid

from backoffice.database.database import Base
from backoffice.common.mixins import TimestampMixin


class Company(Base, TimestampMixin):
    __tablename__ = "companies"

    id = Column(Integer, primary_key=True, autoincrement=True)
    uuid = Column(Uuid, default=uuid4, nullable=False, unique=True)
    business_name = Column(String(255), nullable=False)
    business_address = Column(String(500), nullable=True)
    tax_id = Column(String(50), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    logo_url = Column(String(500), nullable=True)
    is_deleted = Column(Boolean, default=False, nullable=False)
