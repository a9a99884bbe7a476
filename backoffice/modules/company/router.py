from fastapi import APIRouter

from backoffice.dependencies.dbDependencies import db_dependency
from backoffice.dependencies.identityDependencies import identity_dependency
from backoffice.modules.company.schemas import CompanyOut, CompanyUpdate, ProfileOut, ProfileUpdate
from backoffice.modules.company.service import ProfileService

profile_router = APIRouter(tags=["Profile"])


@profile_router.get("/", response_model=ProfileOut)
def get_profile(db: db_dependency, identity: identity_dependency):
    return ProfileService(db).get_profile(identity)


@profile_router.put("/", response_model=ProfileOut)
def update_profile(data: ProfileUpdate, db: db_dependency, identity: identity_dependency):
    return ProfileService(db).update_profile(identity, data)


@profile_router.put("/company", response_model=CompanyOut)
def update_company(data: CompanyUpdate, db: db_dependency, identity: identity_dependency):
    """Owners and roles with Manage Company only."""
    return ProfileService(db).update_company(identity, data)
