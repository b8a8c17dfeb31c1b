"""
Ledger account Pydantic schemas.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List
from backend.app.models.ledger_enums import AccountType
from backend.app.domain.ledger.dates import parse_datetime


def _check_iso_date(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    if parse_datetime(value) is None:
        raise ValueError("must be an ISO-8601 date")
    return value


class AccountBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    type: AccountType
    sub_type: Optional[str] = Field(None, max_length=100, description="e.g. Rent, Utilities")
    opening_balance: float = Field(0.0, description="Entered as a positive amount; Creditor/Salary count it as owed")
    description: Optional[str] = None
    recurring_amount: Optional[float] = Field(None, ge=0, description="Fixed monthly amount")
    recurring_start_date: Optional[str] = None
    recurring_end_date: Optional[str] = None
    recurring_due_day: Optional[int] = Field(None, ge=1, le=31)

    @field_validator("recurring_start_date", "recurring_end_date")
    @classmethod
    def validate_dates(cls, v):
        return _check_iso_date(v)


class AccountCreate(AccountBase):
    """Schema for creating a ledger account."""


class AccountUpdate(BaseModel):
    """Schema for updating a ledger account. Omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    type: Optional[AccountType] = None
    sub_type: Optional[str] = Field(None, max_length=100)
    opening_balance: Optional[float] = None
    description: Optional[str] = None
    recurring_amount: Optional[float] = Field(None, ge=0)
    recurring_start_date: Optional[str] = None
    recurring_end_date: Optional[str] = None
    recurring_due_day: Optional[int] = Field(None, ge=1, le=31)

    @field_validator("name", "type", "opening_balance", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may be omitted but not null")
        return v

    @field_validator("recurring_start_date", "recurring_end_date")
    @classmethod
    def validate_dates(cls, v):
        return _check_iso_date(v)


class AccountResponse(AccountBase):
    """Account with its derived balance."""
    id: str
    is_system: bool
    balance: float = 0.0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class AccountListResponse(BaseModel):
    accounts: List[AccountResponse]
    total: int
