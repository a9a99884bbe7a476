"""
Common mixins for multi-tenant models
"""
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import Column, DateTime, Boolean, Integer, ForeignKey, Uuid, UniqueConstraint
from sqlalchemy.orm import declared_attr


def utcnow() -> datetime:
    """Application clock. Every timestamp written by the API comes from here."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalise a datetime to aware UTC (naive values are assumed to be UTC)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TenantMixin:
    """Adds the owning company. Rows vanish with their company (ON DELETE CASCADE)."""

    @declared_attr
    def company_id(cls):
        return Column(
            Integer,
            ForeignKey("companies.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )


class TimestampMixin:
    """Mixin for models that need timestamp tracking"""

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False, index=True)


class SoftDeleteMixin:
    """Rows are flagged instead of removed so sync clients can see deletions."""

    is_deleted = Column(Boolean, default=False, nullable=False)

    def soft_delete(self):
        self.is_deleted = True
        self.updated_at = utcnow()


class BaseMixin(TenantMixin, TimestampMixin, SoftDeleteMixin):
    """Combines tenant, timestamps and soft delete for most business models"""

    id = Column(Integer, primary_key=True, autoincrement=True)
    uuid = Column(Uuid, default=uuid4, nullable=False)

    @declared_attr.directive
    def __table_args__(cls):
        # Upserts target this key, so it must be a real constraint
        return (
            UniqueConstraint("company_id", "uuid", name=f"uq_{cls.__tablename__}_company_uuid"),
        )
