from typing import Optional

from fastapi import APIRouter

from backoffice.dependencies.dbDependencies import db_dependency
from backoffice.dependencies.identityDependencies import identity_dependency
from backoffice.modules.sync.schemas import SyncRequest, SyncResponse
from backoffice.modules.sync.service import SyncService

sync_router = APIRouter(tags=["Sync"])


@sync_router.post("/", response_model=SyncResponse)
def pull_changes(
    db: db_dependency,
    identity: identity_dependency,
    request: Optional[SyncRequest] = None
):
    """
    Every row of the caller's company changed after `lastSyncTime`, limited
    to the entity groups the caller's role may view (VIEW_PRODUCTS covers
    products, categories, units and brands; VIEW_INVOICES covers invoices and
    their items). Other groups are returned empty.

    Invoice items are replaced, not updated: an invoice upsert that carries
    items deletes the previous rows, and deleted rows are not reported. A
    client that finds rows for an invoice in `updates.invoiceItems` should
    replace all of its local items for that invoice with those rows.
    """
    watermark = request.last_sync_time if request else None
    return SyncService(db).delta(identity.company_id, identity.role, watermark)
