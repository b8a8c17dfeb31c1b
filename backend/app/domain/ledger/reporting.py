"""
Aggregate reporting selectors.

Every figure shown on more than one screen (amount paid, amount due,
receivables, debtors, creditors, operating revenue) is defined exactly once
here and reused by every endpoint. All functions are pure and synchronous;
they read a snapshot of rows and never touch the database.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from backend.app.models.ledger_enums import (
    AccountType,
    CandidateStatus,
    EntityKind,
    TransactionType,
    LIABILITY_ACCOUNT_TYPES,
)
from backend.app.domain.ledger.balance_engine import (
    enum_value,
    account_balance,
    is_destination,
    is_source,
)

GENERAL_EXPENSE = "General Expense"


def _is_type(transaction, transaction_type: TransactionType) -> bool:
    return enum_value(getattr(transaction, "type", None)) == transaction_type.value


def _sum_amounts(transactions: Iterable) -> float:
    return sum((t.amount or 0) for t in transactions)


def _accounts_of_type(accounts: Iterable, *types: AccountType) -> List:
    wanted = {t.value for t in types}
    return [a for a in accounts if enum_value(a.type) in wanted]


# Candidate fees

def candidate_paid(candidate_id: str, transactions: Iterable) -> float:
    """
    Net fees paid by a candidate.

    Income with the candidate as source, minus Refund with the candidate as
    destination. Transfer and Expense rows never count as fees.
    """
    paid = 0
    for t in transactions:
        if _is_type(t, TransactionType.INCOME) and is_source(t, candidate_id, EntityKind.CANDIDATE):
            paid += t.amount or 0
        elif _is_type(t, TransactionType.REFUND) and is_destination(t, candidate_id, EntityKind.CANDIDATE):
            paid -= t.amount or 0
    return paid


def candidate_due(candidate, transactions: Iterable) -> float:
    """Agreed amount minus net paid. Not clamped; overpayment is negative."""
    return (candidate.agreed_amount or 0) - candidate_paid(candidate.id, transactions)


@dataclass
class DisplayDue:
    amount: Optional[float]
    is_cleared: bool


def display_due(due: float) -> DisplayDue:
    """Presentation floor: anything at or below zero shows as cleared."""
    if due <= 0:
        return DisplayDue(amount=None, is_cleared=True)
    return DisplayDue(amount=due, is_cleared=False)


@dataclass
class CandidateFinancials:
    candidate_id: str
    agreed_amount: float
    paid: float
    due: float
    display_due: DisplayDue


def candidate_financials(candidate, transactions: Sequence) -> CandidateFinancials:
    """The one place any screen gets its agreed / paid / due figures from."""
    paid = candidate_paid(candidate.id, transactions)
    due = (candidate.agreed_amount or 0) - paid
    return CandidateFinancials(
        candidate_id=candidate.id,
        agreed_amount=candidate.agreed_amount or 0,
        paid=paid,
        due=due,
        display_due=display_due(due),
    )


def is_receivable_candidate(candidate) -> bool:
    """Everyone counts except candidates that are both inactive and Discontinued."""
    return not (not candidate.is_active and candidate.status == CandidateStatus.DISCONTINUED.value)


def receivable_candidates(candidates: Iterable) -> List:
    return [c for c in candidates if is_receivable_candidate(c)]


def total_candidate_receivables(candidates: Iterable, transactions: Sequence) -> float:
    """Sum of unclamped dues, so an overpaid candidate lowers the total."""
    return sum(candidate_due(c, transactions) for c in receivable_candidates(candidates))


# Account aggregates

def total_debtors_receivable(accounts: Iterable, transactions: Sequence) -> float:
    """Positive Debtor balances only; zero or negative ones drop out."""
    total = 0
    for account in _accounts_of_type(accounts, AccountType.DEBTOR):
        balance = account_balance(account, transactions)
        if balance > 0:
            total += balance
    return total


def total_creditors_payable(accounts: Iterable, transactions: Sequence) -> float:
    """Magnitude of negative Creditor and Salary balances only."""
    total = 0
    for account in _accounts_of_type(accounts, *LIABILITY_ACCOUNT_TYPES):
        balance = account_balance(account, transactions)
        if balance < 0:
            total += abs(balance)
    return total


def total_balance_of_type(accounts: Iterable, transactions: Sequence, account_type: AccountType) -> float:
    return sum(account_balance(a, transactions) for a in _accounts_of_type(accounts, account_type))


# Revenue and expenses

def is_operating_revenue(transaction, accounts_by_id: Dict[str, object]) -> bool:
    """
    Income from a candidate, or from an account classified Income.

    Income received from a Creditor (a loan) or Equity is not revenue.
    """
    if not _is_type(transaction, TransactionType.INCOME):
        return False

    source_kind = enum_value(transaction.from_entity_type)
    if source_kind == EntityKind.CANDIDATE.value:
        return True

    if source_kind == EntityKind.ACCOUNT.value:
        account = accounts_by_id.get(transaction.from_entity_id)
        return account is not None and enum_value(account.type) == AccountType.INCOME.value

    return False


def operating_revenue(transactions: Iterable, accounts: Iterable) -> float:
    accounts_by_id = {a.id: a for a in accounts}
    return _sum_amounts(t for t in transactions if is_operating_revenue(t, accounts_by_id))


def total_of_type(transactions: Iterable, transaction_type: TransactionType) -> float:
    return _sum_amounts(t for t in transactions if _is_type(t, transaction_type))


def expense_category(transaction, accounts_by_id: Dict[str, object]) -> str:
    """Destination account sub-type, else its name, else General Expense."""
    if enum_value(transaction.to_entity_type) == EntityKind.ACCOUNT.value:
        account = accounts_by_id.get(transaction.to_entity_id)
        if account is not None:
            return account.sub_type or account.name
    return GENERAL_EXPENSE


@dataclass
class ProfitAndLoss:
    operating_revenue: float
    total_expenses: float
    net_profit: float
    expense_breakdown: Dict[str, float] = field(default_factory=dict)


def profit_and_loss(transactions: Sequence, accounts: Sequence) -> ProfitAndLoss:
    accounts_by_id = {a.id: a for a in accounts}

    revenue = operating_revenue(transactions, accounts)

    breakdown: Dict[str, float] = OrderedDict()
    expenses = 0
    for t in transactions:
        if not _is_type(t, TransactionType.EXPENSE):
            continue
        category = expense_category(t, accounts_by_id)
        breakdown[category] = breakdown.get(category, 0) + (t.amount or 0)
        expenses += t.amount or 0

    return ProfitAndLoss(
        operating_revenue=revenue,
        total_expenses=expenses,
        net_profit=revenue - expenses,
        expense_breakdown=dict(breakdown),
    )


@dataclass
class BalanceSheet:
    cash: float
    bank: float
    debtors: float
    candidate_receivables: float
    total_assets: float
    creditors_payable: float
    total_liabilities: float
    equity: float


def balance_sheet(accounts: Sequence, candidates: Sequence, transactions: Sequence) -> BalanceSheet:
    """Simplified statement: equity is implied as assets minus liabilities."""
    cash = total_balance_of_type(accounts, transactions, AccountType.CASH)
    bank = total_balance_of_type(accounts, transactions, AccountType.BANK)
    debtors = total_debtors_receivable(accounts, transactions)
    receivables = total_candidate_receivables(candidates, transactions)
    total_assets = cash + bank + debtors + receivables

    creditors = total_creditors_payable(accounts, transactions)

    return BalanceSheet(
        cash=cash,
        bank=bank,
        debtors=debtors,
        candidate_receivables=receivables,
        total_assets=total_assets,
        creditors_payable=creditors,
        total_liabilities=creditors,
        equity=total_assets - creditors,
    )


@dataclass
class DashboardSummary:
    total_cash: float
    total_bank: float
    total_candidates: int
    placed_candidates: int
    active_candidates: int
    total_income: float
    total_expenses: float
    income_from_placed: float
    income_from_existing: float
    pending_receivables: float
    debtors_receivable: float
    creditors_payable: float
    estimated_profit: float


def is_existing_candidate(candidate) -> bool:
    """Active and still in the pipeline (neither placed nor discontinued)."""
    return (
        candidate.is_active
        and candidate.status not in (CandidateStatus.PLACED.value, CandidateStatus.DISCONTINUED.value)
    )


def dashboard_summary(accounts: Sequence, candidates: Sequence, transactions: Sequence) -> DashboardSummary:
    placed = [c for c in candidates if c.status == CandidateStatus.PLACED.value]
    existing = [c for c in candidates if is_existing_candidate(c)]
    expenses = total_of_type(transactions, TransactionType.EXPENSE)

    return DashboardSummary(
        total_cash=total_balance_of_type(accounts, transactions, AccountType.CASH),
        total_bank=total_balance_of_type(accounts, transactions, AccountType.BANK),
        total_candidates=len(candidates),
        placed_candidates=len(placed),
        active_candidates=sum(1 for c in candidates if c.is_active),
        total_income=total_of_type(transactions, TransactionType.INCOME),
        total_expenses=expenses,
        income_from_placed=sum(candidate_paid(c.id, transactions) for c in placed),
        income_from_existing=sum(candidate_paid(c.id, transactions) for c in existing),
        pending_receivables=total_candidate_receivables(candidates, transactions),
        debtors_receivable=total_debtors_receivable(accounts, transactions),
        creditors_payable=total_creditors_payable(accounts, transactions),
        estimated_profit=operating_revenue(transactions, accounts) - expenses,
    )
