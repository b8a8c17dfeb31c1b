"""
Candidate Pydantic schemas.
"""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List
from backend.app.models.ledger_enums import CandidateStatus, WorkSupportStatus
from backend.app.domain.ledger.dates import parse_datetime


def _check_work_support(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in {s.value for s in WorkSupportStatus}:
        raise ValueError("must be one of None, Active, Ended")
    return value


def _check_optional_date(value: Optional[str]) -> Optional[str]:
    if value and parse_datetime(value) is None:
        raise ValueError("must be an ISO-8601 date")
    return value or None


class CandidateFinancialsResponse(BaseModel):
    """
    Agreed / paid / due figures for one candidate.

    `due` is unclamped; `display_due` is None once the candidate is cleared.
    """
    candidate_id: str
    agreed_amount: float
    paid: float
    due: float
    display_due: Optional[float] = None
    is_cleared: bool


class CandidateCreate(BaseModel):
    """Schema for enrolling a candidate."""
    name: str = Field(..., min_length=1, max_length=200)
    batch_id: str = Field(..., min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    alternate_phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    referred_by: Optional[str] = Field(None, max_length=200)
    agreed_amount: float = Field(0.0, ge=0, description="Total fee under the agreement")
    status: str = Field(CandidateStatus.TRAINING.value, min_length=1, max_length=100)
    placed_company: Optional[str] = Field(None, max_length=200)
    package_details: Optional[str] = Field(None, max_length=200)
    agreement_text: Optional[str] = None
    work_support_status: str = Field(WorkSupportStatus.NONE.value, description="None, Active or Ended")
    work_support_start_date: Optional[str] = None
    work_support_end_date: Optional[str] = None
    work_support_monthly_amount: Optional[float] = Field(None, ge=0)
    resume: Optional[str] = Field(None, description="Base64-encoded file")
    resume_name: Optional[str] = Field(None, max_length=255)
    joined_date: Optional[str] = Field(None, description="ISO-8601 date, defaults to today")
    notes: Optional[str] = None

    @field_validator("joined_date", "work_support_start_date", "work_support_end_date")
    @classmethod
    def validate_dates(cls, v):
        return _check_optional_date(v)

    @field_validator("work_support_status")
    @classmethod
    def validate_work_support(cls, v):
        return _check_work_support(v)


class CandidateUpdate(BaseModel):
    """Schema for updating a candidate. Omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    batch_id: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    alternate_phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    referred_by: Optional[str] = Field(None, max_length=200)
    agreed_amount: Optional[float] = Field(None, ge=0)
    status: Optional[str] = Field(None, min_length=1, max_length=100)
    placed_company: Optional[str] = Field(None, max_length=200)
    package_details: Optional[str] = Field(None, max_length=200)
    agreement_text: Optional[str] = None
    work_support_status: Optional[str] = None
    work_support_start_date: Optional[str] = None
    work_support_end_date: Optional[str] = None
    work_support_monthly_amount: Optional[float] = Field(None, ge=0)
    resume: Optional[str] = None
    resume_name: Optional[str] = Field(None, max_length=255)
    notes: Optional[str] = None

    @field_validator("name", "batch_id", "agreed_amount", "status", "work_support_status", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may be omitted but not null")
        return v

    @field_validator("work_support_start_date", "work_support_end_date")
    @classmethod
    def validate_dates(cls, v):
        return _check_optional_date(v)

    @field_validator("work_support_status")
    @classmethod
    def validate_work_support(cls, v):
        return _check_work_support(v)


class AgreementMarker(BaseModel):
    date: Optional[str] = Field(None, description="ISO-8601 timestamp, defaults to now")

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        return _check_optional_date(v)


class CandidateResponse(BaseModel):
    """Candidate record. The resume body is only carried by backups; `resume_name` shows one is on file."""
    id: str
    name: str
    batch_id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    alternate_phone: Optional[str] = None
    address: Optional[str] = None
    referred_by: Optional[str] = None
    agreed_amount: float
    status: str
    placed_company: Optional[str] = None
    package_details: Optional[str] = None
    agreement_sent_date: Optional[str] = None
    agreement_accepted_date: Optional[str] = None
    agreement_text: Optional[str] = None
    work_support_status: str = WorkSupportStatus.NONE.value
    work_support_start_date: Optional[str] = None
    work_support_end_date: Optional[str] = None
    work_support_monthly_amount: Optional[float] = None
    resume_name: Optional[str] = None
    is_active: bool
    joined_date: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    financials: Optional[CandidateFinancialsResponse] = None

    class Config:
        from_attributes = True


class CandidateListResponse(BaseModel):
    candidates: List[CandidateResponse]
    total: int
