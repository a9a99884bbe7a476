from typing import Optional

from backoffice.common.schemas import Identified, RecordOut, UpsertPayload


class CategoryUpdate(UpsertPayload):
    name: Optional[str] = None
    subcategory: Optional[str] = None
    is_active: Optional[bool] = None


class CategoryCreate(CategoryUpdate, Identified):
    pass


class CategoryOut(RecordOut):
    name: str
    subcategory: Optional[str] = None
    is_active: bool
