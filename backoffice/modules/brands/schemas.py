from typing import Optional

from backoffice.common.schemas import Identified, RecordOut, UpsertPayload


class BrandUpdate(UpsertPayload):
    name: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class BrandCreate(BrandUpdate, Identified):
    pass


class BrandOut(RecordOut):
    name: str
    description: Optional[str] = None
    is_active: bool
