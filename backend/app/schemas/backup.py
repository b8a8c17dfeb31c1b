"""
Backup Pydantic schemas.

The export document uses the camelCase shape of the office's JSON backups:
{ users, candidates, accounts, transactions }. Unknown keys in older backups
are ignored.
"""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List
from backend.app.models.enums import UserRole
from backend.app.models.ledger_enums import AccountType, TransactionType, EntityKind, CandidateStatus, WorkSupportStatus


class BackupRecord(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class BackupUser(BackupRecord):
    id: str
    name: str
    username: str
    email: Optional[str] = None
    role: UserRole = UserRole.STAFF
    modules: List[str] = Field(default_factory=list)
    linked_candidate_id: Optional[str] = None
    is_active: bool = True
    hashed_password: Optional[str] = None
    # Legacy backups carry a plaintext password; it is hashed on import and never exported
    password: Optional[str] = Field(None, exclude=True)


class BackupCandidate(BackupRecord):
    """
    Every stored candidate field round-trips. A legacy `paidAmount` is
    dropped on import since paid figures are derived from transactions.
    """
    id: str
    name: str
    batch_id: str
    email: Optional[str] = None
    phone: Optional[str] = None
    alternate_phone: Optional[str] = None
    address: Optional[str] = None
    referred_by: Optional[str] = None
    agreed_amount: float = 0.0
    status: str = CandidateStatus.TRAINING.value
    placed_company: Optional[str] = None
    package_details: Optional[str] = None
    agreement_sent_date: Optional[str] = None
    agreement_accepted_date: Optional[str] = None
    agreement_text: Optional[str] = None
    work_support_status: Optional[str] = WorkSupportStatus.NONE.value
    work_support_start_date: Optional[str] = None
    work_support_end_date: Optional[str] = None
    work_support_monthly_amount: Optional[float] = None
    resume: Optional[str] = None
    resume_name: Optional[str] = None
    is_active: bool = True
    joined_date: Optional[str] = None
    notes: Optional[str] = None


class BackupAccount(BackupRecord):
    id: str
    name: str
    type: AccountType
    sub_type: Optional[str] = None
    is_system: bool = False
    opening_balance: float = 0.0
    description: Optional[str] = None
    recurring_amount: Optional[float] = None
    recurring_start_date: Optional[str] = None
    recurring_end_date: Optional[str] = None
    recurring_due_day: Optional[int] = None


class BackupTransaction(BackupRecord):
    id: str
    date: str
    type: TransactionType
    amount: float
    from_entity_id: str
    from_entity_type: EntityKind
    to_entity_id: str
    to_entity_type: EntityKind
    description: str = ""
    category: Optional[str] = None
    is_locked: bool = False


class BackupDocument(BackupRecord):
    users: List[BackupUser] = Field(default_factory=list)
    candidates: List[BackupCandidate] = Field(default_factory=list)
    accounts: List[BackupAccount] = Field(default_factory=list)
    transactions: List[BackupTransaction] = Field(default_factory=list)


class RestoreResponse(BaseModel):
    success: bool
    users: int
    candidates: int
    accounts: int
    transactions: int
