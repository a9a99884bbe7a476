"""
UUID-keyed insert-or-update for tenant-scoped rows.

Offline clients generate the uuid of every row they create and replay their
writes after reconnecting, so the same request may arrive more than once.
Replays must converge on one row per (company, uuid) and a partial update
must only touch the fields the client sent.
"""
import logging
from typing import Any, Dict, Iterable, Optional, Tuple, Type
from uuid import UUID, uuid4

from fastapi import HTTPException, status
from pydantic.alias_generators import to_camel
from sqlalchemy import update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from backoffice.common.mixins import utcnow
from backoffice.core.config import settings

logger = logging.getLogger(__name__)

# payload key -> (foreign key column, referenced model)
ReferenceMap = Dict[str, Tuple[str, Type]]

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class UpsertReconciler:
    def __init__(self, db: Session, model, company_id: int):
        self.db = db
        self.model = model
        self.company_id = company_id

    def find(self, uuid: UUID):
        """Row with this uuid in the company, soft-deleted or not."""
        return self.db.query(self.model).filter(
            self.model.uuid == uuid,
            self.model.company_id == self.company_id
        ).first()

    def resolve_references(self, values: Dict[str, Any], references: ReferenceMap,
                           strict: Optional[bool] = None) -> Dict[str, Any]:
        """
        Replace `<entity>_uuid` keys with the internal foreign key of the
        referenced row in the same company.

        An explicit null clears the reference. An unknown uuid is rejected
        when strict, otherwise it is dropped and the stored value is kept.
        """
        strict = settings.STRICT_REFERENCES if strict is None else strict
        resolved = dict(values)
        unresolved = []

        for key, (column, target) in references.items():
            if key not in resolved:
                continue
            ref_uuid = resolved.pop(key)
            if ref_uuid is None:
                resolved[column] = None
                continue

            target_id = self.db.query(target.id).filter(
                target.uuid == ref_uuid,
                target.company_id == self.company_id
            ).scalar()
            if target_id is None:
                unresolved.append({"field": to_camel(key), "uuid": str(ref_uuid)})
                continue
            resolved[column] = target_id

        if unresolved:
            if strict:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail={"error": "Unresolved references", "unresolvedReferences": unresolved}
                )
            logger.warning(
                f"Dropping unresolved references on {self.model.__tablename__} "
                f"for company {self.company_id}: {unresolved}"
            )

        return resolved

    def check_required(self, values: Dict[str, Any], required: Iterable[str], inserting: bool = True):
        if inserting:
            missing = [to_camel(field) for field in required if values.get(field) is None]
        else:
            # Updates may omit required fields but cannot null them out
            missing = [to_camel(field) for field in required if field in values and values[field] is None]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"error": "Missing required fields", "missingFields": missing}
            )

    def upsert(self, uuid: Optional[UUID], values: Dict[str, Any],
               required: Iterable[str] = ()) -> Tuple[Any, bool]:
        """
        Insert or update one row. Returns (row, created).

        The caller owns the transaction: nothing is committed here.
        """
        now = utcnow()

        if uuid is None:
            self.check_required(values, required)
            row = self.model(
                **values,
                uuid=uuid4(),
                company_id=self.company_id,
                created_at=now,
                updated_at=now
            )
            self.db.add(row)
            self.db.flush()
            return row, True

        existing = self.find(uuid)
        if existing is not None:
            self.check_required(values, required, inserting=False)
            # Only the supplied fields change; concurrent edits to other fields survive
            self.db.execute(
                update(self.model)
                .where(self.model.uuid == uuid, self.model.company_id == self.company_id)
                .values(**values, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            created = False
        else:
            self.check_required(values, required)
            self._insert_or_merge(uuid, values, now)
            created = True

        row = self.db.query(self.model).populate_existing().filter(
            self.model.uuid == uuid,
            self.model.company_id == self.company_id
        ).one()
        return row, created

    def _insert_or_merge(self, uuid: UUID, values: Dict[str, Any], now):
        insert = _DIALECT_INSERTS.get(self.db.get_bind().dialect.name)
        if insert is None:
            self.db.add(self.model(
                **values, uuid=uuid, company_id=self.company_id, created_at=now, updated_at=now
            ))
            self.db.flush()
            return

        # A concurrent request may insert the same uuid between our lookup and
        # this statement; the conflict clause turns that into a merge.
        stmt = insert(self.model).values(
            **values, uuid=uuid, company_id=self.company_id, created_at=now, updated_at=now
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["company_id", "uuid"],
            set_={**values, "updated_at": now}
        )
        self.db.execute(stmt)
