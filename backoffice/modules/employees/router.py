from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from backoffice.database.database import get_db
from backoffice.modules.auth.dependencies import AuthDependencies
from backoffice.modules.auth.resolver import Identity
from backoffice.modules.employees import service
from backoffice.modules.employees.schemas import EmployeeCreate, EmployeeUpdate, EmployeeOut
from backoffice.modules.rbac.registry import Permission

employees_router = APIRouter(tags=["Employees"])


@employees_router.get("/", response_model=List[EmployeeOut])
def list_employees(
    updated_since: Optional[datetime] = Query(None, alias="updatedSince"),
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.VIEW_EMPLOYEES))
):
    return service.EmployeeService(db, identity).list(identity.company_id, updated_since)


@employees_router.get("/{employee_uuid}", response_model=EmployeeOut)
def get_employee(
    employee_uuid: UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.VIEW_EMPLOYEES))
):
    return service.EmployeeService(db, identity).get(employee_uuid, identity.company_id)


@employees_router.post("/", response_model=EmployeeOut, status_code=status.HTTP_201_CREATED)
def save_employee(
    employee: EmployeeCreate,
    response: Response,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_EMPLOYEES))
):
    row, created = service.EmployeeService(db, identity).save(employee, identity.company_id)
    if not created:
        response.status_code = status.HTTP_200_OK
    return row


@employees_router.put("/{employee_uuid}", response_model=EmployeeOut)
def update_employee(
    employee_uuid: UUID,
    update: EmployeeUpdate,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_EMPLOYEES))
):
    return service.EmployeeService(db, identity).update(employee_uuid, update, identity.company_id)


@employees_router.delete("/{employee_uuid}", response_model=EmployeeOut)
def delete_employee(
    employee_uuid: UUID,
    db: Session = Depends(get_db),
    identity: Identity = Depends(AuthDependencies.require_permission(Permission.MANAGE_EMPLOYEES))
):
    return service.EmployeeService(db, identity).delete(employee_uuid, identity.company_id)
