from sqlalchemy import Column, String, Boolean, DateTime, Float, Text
from sqlalchemy.orm import relationship

from backoffice.database.database import Base
from backoffice.common.mixins import BaseMixin


class Employee(Base, BaseMixin):
    """Staff member of a company. Also the authenticated principal of the API."""

    __tablename__ = "employees"

    name = Column(String(255), nullable=False)
    # Login identifier, unique across all companies
    email = Column(String(255), nullable=False, unique=True)
    password = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    position = Column(String(100), nullable=True)
    salary = Column(Float, nullable=True)
    role = Column(String(50), nullable=False, default="employee")
    google_auth = Column(Boolean, default=False, nullable=False)
    is_owner = Column(Boolean, default=False, nullable=False)

    is_email_verified = Column(Boolean, default=False, nullable=False)
    email_verification_token = Column(String(128), nullable=True, index=True)
    email_verification_expires = Column(DateTime(timezone=True), nullable=True)
    password_reset_token = Column(String(128), nullable=True, index=True)
    password_reset_expires = Column(DateTime(timezone=True), nullable=True)

    company = relationship("Company")
