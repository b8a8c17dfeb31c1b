"""
Ledger Account API Endpoints.

Balances are derived from the full transaction log on every read.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.models.ledger_account import LedgerAccount
from backend.app.models.ledger_enums import AccountType, EntityKind
from backend.app.schemas.account import AccountCreate, AccountUpdate, AccountResponse, AccountListResponse
from backend.app.schemas.reports import EntityBalanceResponse, StatementResponse
from backend.app.core.guards import require_module
from backend.app.domain.ledger.balance_engine import account_balance
from backend.app.services.activity import log_activity, ActivityAction, ActivityEntity
from backend.app.services.ledger_store import (
    load_accounts, load_transactions, get_account_or_404, ensure_account_deletable
)
from backend.app.services.ledger_views import account_response, statement_response

router = APIRouter(prefix="/accounts", tags=["Accounts"])

finance_user = require_module("finance")


@router.get("", response_model=AccountListResponse)
async def list_accounts(
    type: Optional[AccountType] = Query(None, description="Filter by account type"),
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    """
    List ledger accounts with their current balances.
    """
    accounts = await load_accounts(db)
    if type:
        accounts = [a for a in accounts if a.type == type]

    transactions = await load_transactions(db)

    return AccountListResponse(
        accounts=[account_response(a, transactions) for a in accounts],
        total=len(accounts)
    )


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: str,
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    account = await get_account_or_404(db, account_id)
    return account_response(account, await load_transactions(db))


@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def create_account(
    account_data: AccountCreate,
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a ledger account.

    Only the default Cash account is a system account; user-created
    accounts never are.
    """
    account = LedgerAccount(**account_data.model_dump(), is_system=False)

    db.add(account)
    await db.commit()
    await db.refresh(account)

    await log_activity(
        db,
        action=ActivityAction.CREATE,
        entity_type=ActivityEntity.ACCOUNT,
        entity_id=account.id,
        description=f"Created {account.type.value} account '{account.name}'",
        actor=current_user,
        metadata={"opening_balance": account.opening_balance}
    )

    return account_response(account, await load_transactions(db))


@router.put("/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: str,
    account_data: AccountUpdate,
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    account = await get_account_or_404(db, account_id)
    changes = account_data.model_dump(exclude_unset=True)

    for field, value in changes.items():
        setattr(account, field, value)

    await db.commit()
    await db.refresh(account)

    await log_activity(
        db,
        action=ActivityAction.UPDATE,
        entity_type=ActivityEntity.ACCOUNT,
        entity_id=account.id,
        description=f"Updated account '{account.name}'",
        actor=current_user,
        metadata={"fields": sorted(changes.keys())}
    )

    return account_response(account, await load_transactions(db))


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    account_id: str,
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a ledger account.

    Raises:
        409 ERR_LEDGER_002 for system accounts
        409 ERR_LEDGER_001 if any transaction references the account
    """
    account = await get_account_or_404(db, account_id)
    await ensure_account_deletable(db, account)

    name = account.name
    await db.delete(account)
    await db.commit()

    await log_activity(
        db,
        action=ActivityAction.DELETE,
        entity_type=ActivityEntity.ACCOUNT,
        entity_id=account_id,
        description=f"Deleted account '{name}'",
        actor=current_user
    )


@router.get("/{account_id}/balance", response_model=EntityBalanceResponse)
async def get_account_balance(
    account_id: str,
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    account = await get_account_or_404(db, account_id)
    return EntityBalanceResponse(
        entity_id=account.id,
        entity_kind=EntityKind.ACCOUNT,
        name=account.name,
        balance=account_balance(account, await load_transactions(db))
    )


@router.get("/{account_id}/statement", response_model=StatementResponse)
async def get_account_statement(
    account_id: str,
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Account statement, newest first, with a running balance from the
    signed opening balance.
    """
    account = await get_account_or_404(db, account_id)
    return statement_response(account, EntityKind.ACCOUNT, await load_transactions(db))
