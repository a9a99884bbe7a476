from sqlalchemy import Column, String, Boolean

from backoffice.database.database import Base
from backoffice.common.mixins import BaseMixin


class Brand(Base, BaseMixin):
    __tablename__ = "brands"

    name = Column(String(100), nullable=False)
    description = Column(String(255), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
