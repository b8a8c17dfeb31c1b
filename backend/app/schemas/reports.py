"""
Report Pydantic schemas.

Report payloads are built from the ledger selector dataclasses with
model_validate(..., from_attributes).
"""

from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from backend.app.models.ledger_enums import AccountType, EntityKind, TransactionType


class DashboardResponse(BaseModel):
    total_cash: float
    total_bank: float
    total_candidates: int
    placed_candidates: int
    active_candidates: int
    total_income: float = Field(..., description="All Income-typed inflow, loans included")
    total_expenses: float
    income_from_placed: float
    income_from_existing: float
    pending_receivables: float
    debtors_receivable: float
    creditors_payable: float
    estimated_profit: float = Field(..., description="Operating revenue minus expenses")

    class Config:
        from_attributes = True


class BalanceSheetResponse(BaseModel):
    cash: float
    bank: float
    debtors: float
    candidate_receivables: float
    total_assets: float
    creditors_payable: float
    total_liabilities: float
    equity: float

    class Config:
        from_attributes = True


class ProfitAndLossResponse(BaseModel):
    operating_revenue: float
    total_expenses: float
    net_profit: float
    expense_breakdown: Dict[str, float]

    class Config:
        from_attributes = True


class CandidateReceivable(BaseModel):
    candidate_id: str
    name: str
    batch_id: str
    status: str
    is_active: bool
    agreed_amount: float
    paid: float
    due: float
    display_due: Optional[float] = None
    is_cleared: bool


class AccountBalanceRow(BaseModel):
    account_id: str
    name: str
    type: AccountType
    balance: float


class ReceivablesResponse(BaseModel):
    candidates: List[CandidateReceivable]
    total_candidate_receivables: float
    debtors: List[AccountBalanceRow]
    total_debtors_receivable: float
    creditors: List[AccountBalanceRow]
    total_creditors_payable: float


class PayrollRow(BaseModel):
    account_id: str
    account_name: str
    account_type: str
    monthly_amount: float
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    due_day: int
    cycles_due: int
    total_payable: float
    total_paid: float
    arrears: float

    class Config:
        from_attributes = True


class PayrollResponse(BaseModel):
    as_of: str
    obligations: List[PayrollRow]
    total_payable: float
    total_paid: float
    total_arrears: float


class EntityBalanceResponse(BaseModel):
    entity_id: str
    entity_kind: EntityKind
    name: str
    balance: float


class StatementLineResponse(BaseModel):
    transaction_id: str
    date: str
    type: TransactionType
    description: str
    amount: float
    impact: float = Field(..., description="+amount inflow, -amount outflow")
    running_balance: float
    is_locked: bool


class StatementResponse(BaseModel):
    """Entity statement, newest first."""
    entity_id: str
    entity_kind: EntityKind
    name: str
    opening_balance: float
    closing_balance: float
    lines: List[StatementLineResponse]
