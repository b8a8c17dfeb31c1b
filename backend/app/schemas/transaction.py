"""
Transaction Pydantic schemas.

Amount and party rules are checked by the ledger transaction rules on the
write path so they surface as ERR_LEDGER_004 rather than schema errors.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List
from backend.app.models.ledger_enums import TransactionType, EntityKind
from backend.app.domain.ledger.dates import parse_datetime


def _check_iso_date(value: Optional[str]) -> Optional[str]:
    if value is not None and parse_datetime(value) is None:
        raise ValueError("must be an ISO-8601 date")
    return value


def _reject_null(value):
    if value is None:
        raise ValueError("may be omitted but not null")
    return value


class TransactionCreate(BaseModel):
    date: str = Field(..., description="ISO-8601 date or timestamp, stored verbatim")
    type: TransactionType
    amount: float
    from_entity_id: str = Field(..., min_length=1)
    from_entity_type: EntityKind
    to_entity_id: str = Field(..., min_length=1)
    to_entity_type: EntityKind
    description: Optional[str] = Field(None, description="Defaults to '<Type> Transaction'")
    category: Optional[str] = Field(None, max_length=100)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        return _check_iso_date(v)


class TransactionUpdate(BaseModel):
    """Omitted fields keep their stored value; the merged row is re-validated."""
    date: Optional[str] = None
    type: Optional[TransactionType] = None
    amount: Optional[float] = None
    from_entity_id: Optional[str] = Field(None, min_length=1)
    from_entity_type: Optional[EntityKind] = None
    to_entity_id: Optional[str] = Field(None, min_length=1)
    to_entity_type: Optional[EntityKind] = None
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)

    @field_validator(
        "date", "type", "amount", "from_entity_id", "from_entity_type",
        "to_entity_id", "to_entity_type", mode="before"
    )
    @classmethod
    def reject_null(cls, v):
        return _reject_null(v)

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        return _check_iso_date(v)


class TransactionResponse(BaseModel):
    id: str
    date: str
    type: TransactionType
    amount: float
    from_entity_id: str
    from_entity_type: EntityKind
    to_entity_id: str
    to_entity_type: EntityKind
    description: str
    category: Optional[str] = None
    is_locked: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TransactionListResponse(BaseModel):
    """Schema for paginated transaction list, newest first."""
    transactions: List[TransactionResponse]
    total: int
    page: int
    page_size: int
