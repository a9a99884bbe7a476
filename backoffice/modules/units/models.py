from sqlalchemy import Column, String, Boolean

from backoffice.database.database import Base
from backoffice.common.mixins import BaseMixin


class Unit(Base, BaseMixin):
    """Unit of measure (kg, pcs, box...)."""

    __tablename__ = "units"

    name = Column(String(100), nullable=False)
    symbol = Column(String(20), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
