"""
Base service for tenant-scoped resources.

Every resource exposed to the POS clients follows the same life cycle: list
(optionally changed since a timestamp), fetch by uuid, create-or-upsert,
partial update and soft delete. Subclasses declare the model and the
foreign keys they accept as uuids.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.common.mixins import as_utc
from backoffice.common.reconciler import ReferenceMap, UpsertReconciler
from backoffice.common.schemas import UpsertPayload

logger = logging.getLogger(__name__)


class TenantResourceService:
    model = None
    label = "Record"
    required_fields: Tuple[str, ...] = ()
    references: ReferenceMap = {}

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self, company_id: int):
        return self.db.query(self.model).filter(self.model.company_id == company_id)

    def _reconciler(self, company_id: int) -> UpsertReconciler:
        return UpsertReconciler(self.db, self.model, company_id)

    def list(self, company_id: int, updated_since: Optional[datetime] = None) -> List[Any]:
        """Active rows of the company, optionally only those changed after `updated_since`."""
        query = self._base_query(company_id).filter(self.model.is_deleted == False)
        if updated_since is not None:
            query = query.filter(self.model.updated_at > as_utc(updated_since))
        return query.order_by(self.model.updated_at, self.model.id).all()

    def get(self, uuid: UUID, company_id: int):
        row = self._base_query(company_id).filter(
            self.model.uuid == uuid,
            self.model.is_deleted == False
        ).first()
        if not row:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"{self.label} not found"
            )
        return row

    def prepare(self, values: Dict[str, Any], company_id: int, existing=None) -> Dict[str, Any]:
        """Hook for subclasses to normalise values before they are written."""
        return values

    def save(self, payload: UpsertPayload, company_id: int) -> Tuple[Any, bool]:
        """
        Create a row, or update the row with the payload's uuid if the
        company already has it. Returns (row, created).
        """
        reconciler = self._reconciler(company_id)
        uuid = getattr(payload, "uuid", None)
        try:
            existing = reconciler.find(uuid) if uuid else None
            values = reconciler.resolve_references(payload.changes(), self.references)
            values = self.prepare(values, company_id, existing)
            row, created = reconciler.upsert(uuid, values, self.required_fields)
            self.db.commit()
            self.db.refresh(row)
            return row, created
        except HTTPException:
            self.db.rollback()
            raise
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Integrity error saving {self.label.lower()} for company {company_id}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"{self.label} conflicts with existing data"
            )
        except Exception:
            self.db.rollback()
            logger.error(f"Error saving {self.label.lower()} for company {company_id}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error saving {self.label.lower()}"
            )

    def update(self, uuid: UUID, payload: UpsertPayload, company_id: int):
        """Partial update of an existing row; unknown uuids are 404."""
        existing = self.get(uuid, company_id)
        reconciler = self._reconciler(company_id)
        try:
            values = reconciler.resolve_references(payload.changes(), self.references)
            values = self.prepare(values, company_id, existing)
            row, _ = reconciler.upsert(uuid, values, self.required_fields)
            self.db.commit()
            self.db.refresh(row)
            return row
        except HTTPException:
            self.db.rollback()
            raise
        except IntegrityError:
            self.db.rollback()
            logger.warning(f"Integrity error updating {self.label.lower()} {uuid}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"{self.label} conflicts with existing data"
            )
        except Exception:
            self.db.rollback()
            logger.error(f"Error updating {self.label.lower()} {uuid}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error updating {self.label.lower()}"
            )

    def delete(self, uuid: UUID, company_id: int):
        """Soft delete. The row stays visible to sync with is_deleted set."""
        row = self.get(uuid, company_id)
        try:
            row.soft_delete()
            self.db.commit()
            self.db.refresh(row)
            return row
        except Exception:
            self.db.rollback()
            logger.error(f"Error deleting {self.label.lower()} {uuid}", exc_info=True)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error deleting {self.label.lower()}"
            )
