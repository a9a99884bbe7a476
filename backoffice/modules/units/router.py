from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from backoffice.database.database import get_db
from backoffice.modules.auth.dependencies import AuthDependencies
from backoffice.modules.auth.resolver import Identity
from backoffice.modules.units import service
from backoffice.modules.units.schemas import UnitCreate, UnitUpdate, UnitOut
from backoffice.modules.rbac.registry import Permission

units_router = APIRouter(tags=["Units"])


@units_router.get("/", response_model=List[UnitOut])
def list_units(
    updated_since: Optional[datetime] = Query(None, alias="updatedSince"),
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.VIEW_PRODUCTS))
):
    return service.UnitService(db).list(identity.company_id, updated_since)


@units_router.get("/{unit_uuid}", response_model=UnitOut)
def get_unit(
    unit_uuid: UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.VIEW_PRODUCTS))
):
    return service.UnitService(db).get(unit_uuid, identity.company_id)


@units_router.post("/", response_model=UnitOut, status_code=status.HTTP_201_CREATED)
def save_unit(
    unit: UnitCreate,
    response: Response,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_PRODUCTS))
):
    row, created = service.UnitService(db).save(unit, identity.company_id)
    if not created:
        response.status_code = status.HTTP_200_OK
    return row


@units_router.put("/{unit_uuid}", response_model=UnitOut)
def update_unit(
    unit_uuid: UUID,
    update: UnitUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_PRODUCTS))
):
    return service.UnitService(db).update(unit_uuid, update, identity.company_id)


@units_router.delete("/{unit_uuid}", response_model=UnitOut)
def delete_unit(
    unit_uuid: UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_PRODUCTS))
):
    return service.UnitService(db).delete(unit_uuid, identity.company_id)
