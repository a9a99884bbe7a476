"""
Shared pydantic building blocks.

The wire format is camelCase (what the POS clients send), while Python code
keeps snake_case; both spellings are accepted on input.
"""
from datetime import datetime
from typing import Annotated, Optional
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from backoffice.common.mixins import as_utc


UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class UpsertPayload(CamelModel):
    """
    Base for write bodies. Every field is optional at this level: which ones
    are required depends on whether the write turns out to be an insert.
    """

    is_deleted: Optional[bool] = None

    def changes(self) -> dict:
        """Fields the client actually sent, excluding the identifier."""
        values = self.model_dump(exclude_unset=True, exclude={"uuid"})
        if values.get("is_deleted") is None:
            values.pop("is_deleted", None)
        return values


class Identified(CamelModel):
    """Client-generated identifier. Without it the row is always new."""

    uuid: Optional[UUID] = None


class RecordOut(CamelModel):
    uuid: UUID
    is_deleted: bool = False
    created_at: UtcDatetime
    updated_at: UtcDatetime


class MessageOut(CamelModel):
    message: str
