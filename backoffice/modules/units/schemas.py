from typing import Optional

from backoffice.common.schemas import Identified, RecordOut, UpsertPayload


class UnitUpdate(UpsertPayload):
    name: Optional[str] = None
    symbol: Optional[str] = None
    is_active: Optional[bool] = None


class UnitCreate(UnitUpdate, Identified):
    pass


class UnitOut(RecordOut):
    name: str
    symbol: str
    is_active: bool
