"""
Reporting API Endpoints.

Each report loads the current ledger snapshot and runs the shared
selectors over it; nothing is cached or stored.
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.core.exceptions import ResourceNotFoundError
from backend.app.core.guards import require_module
from backend.app.domain.ledger import reporting
from backend.app.domain.ledger.balance_engine import account_balance, compute_balance
from backend.app.domain.ledger.dates import parse_date, utcnow
from backend.app.domain.ledger.recurring import payroll_report
from backend.app.models.ledger_enums import AccountType, EntityKind
from backend.app.schemas.reports import (
    DashboardResponse, BalanceSheetResponse, ProfitAndLossResponse,
    ReceivablesResponse, AccountBalanceRow, PayrollResponse, PayrollRow,
    EntityBalanceResponse, StatementResponse
)
from backend.app.services.ledger_store import load_snapshot, load_transactions, find_entity
from backend.app.services.ledger_views import receivable_row, statement_response

router = APIRouter(prefix="/reports", tags=["Reports"])

finance_user = require_module("finance")


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Office dashboard: liquid funds, candidate pipeline, fee income,
    receivables, payables and estimated profit.
    """
    snapshot = await load_snapshot(db)
    summary = reporting.dashboard_summary(snapshot.accounts, snapshot.candidates, snapshot.transactions)
    return DashboardResponse.model_validate(summary)


@router.get("/balance-sheet", response_model=BalanceSheetResponse)
async def get_balance_sheet(
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    snapshot = await load_snapshot(db)
    sheet = reporting.balance_sheet(snapshot.accounts, snapshot.candidates, snapshot.transactions)
    return BalanceSheetResponse.model_validate(sheet)


@router.get("/profit-loss", response_model=ProfitAndLossResponse)
async def get_profit_and_loss(
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Profit and loss. Revenue counts candidate fees and Income-account
    receipts only; loans and capital are excluded.
    """
    snapshot = await load_snapshot(db)
    statement = reporting.profit_and_loss(snapshot.transactions, snapshot.accounts)
    return ProfitAndLossResponse.model_validate(statement)


def _balance_rows(accounts, transactions, *types: AccountType):
    return [
        AccountBalanceRow(
            account_id=a.id,
            name=a.name,
            type=a.type,
            balance=account_balance(a, transactions),
        )
        for a in accounts if a.type in types
    ]


@router.get("/receivables", response_model=ReceivablesResponse)
async def get_receivables(
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Candidate dues, debtor balances and creditor balances with the same
    totals the dashboard and balance sheet show.
    """
    snapshot = await load_snapshot(db)
    transactions = snapshot.transactions

    return ReceivablesResponse(
        candidates=[
            receivable_row(c, transactions)
            for c in reporting.receivable_candidates(snapshot.candidates)
        ],
        total_candidate_receivables=reporting.total_candidate_receivables(snapshot.candidates, transactions),
        debtors=_balance_rows(snapshot.accounts, transactions, AccountType.DEBTOR),
        total_debtors_receivable=reporting.total_debtors_receivable(snapshot.accounts, transactions),
        creditors=_balance_rows(snapshot.accounts, transactions, AccountType.CREDITOR, AccountType.SALARY),
        total_creditors_payable=reporting.total_creditors_payable(snapshot.accounts, transactions),
    )


@router.get("/payroll", response_model=PayrollResponse)
async def get_payroll(
    as_of: Optional[str] = Query(None, description="ISO date to evaluate arrears at (defaults to today)"),
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Fixed monthly obligations (salaries, rent) with cycles due, amount
    paid and arrears.
    """
    reference = parse_date(as_of) if as_of else utcnow().date()
    if reference is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"as_of must be an ISO-8601 date, got '{as_of}'"
        )

    snapshot = await load_snapshot(db)
    rows = payroll_report(
        snapshot.accounts,
        snapshot.transactions,
        now=reference,
    )

    return PayrollResponse(
        as_of=reference.isoformat(),
        obligations=[PayrollRow.model_validate(r) for r in rows],
        total_payable=sum(r.total_payable for r in rows),
        total_paid=sum(r.total_paid for r in rows),
        total_arrears=sum(r.arrears for r in rows),
    )


async def _entity_or_404(db: AsyncSession, entity_kind: EntityKind, entity_id: str):
    entity = await find_entity(db, entity_id, entity_kind)
    if entity is None:
        raise ResourceNotFoundError(entity_kind.value, entity_id)
    return entity


@router.get("/balance/{entity_kind}/{entity_id}", response_model=EntityBalanceResponse)
async def get_entity_balance(
    entity_kind: EntityKind,
    entity_id: str,
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Balance of any ledger participant: account, candidate or staff member.
    """
    entity = await _entity_or_404(db, entity_kind, entity_id)
    transactions = await load_transactions(db)

    if entity_kind == EntityKind.ACCOUNT:
        balance = account_balance(entity, transactions)
    else:
        balance = compute_balance(entity.id, entity_kind, transactions)

    return EntityBalanceResponse(
        entity_id=entity.id,
        entity_kind=entity_kind,
        name=entity.name,
        balance=balance
    )


@router.get("/statement/{entity_kind}/{entity_id}", response_model=StatementResponse)
async def get_entity_statement(
    entity_kind: EntityKind,
    entity_id: str,
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    entity = await _entity_or_404(db, entity_kind, entity_id)
    return statement_response(entity, entity_kind, await load_transactions(db))
