"""
Ledger store.

Loads the snapshot of records the pure ledger selectors read, resolves
transaction parties, and guards the mutations that would break the
ledger's consistency (deleting referenced records, editing locked rows).
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy import select, func, or_, and_
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import (
    ResourceNotFoundError,
    EntityInUseError,
    SystemAccountError,
    TransactionLockedError,
    InvalidTransactionError,
)
from backend.app.core.guards import is_admin
from backend.app.domain.ledger.transaction_rules import Party
from backend.app.models.candidate import Candidate
from backend.app.models.ledger_account import LedgerAccount
from backend.app.models.ledger_enums import EntityKind
from backend.app.models.transaction import Transaction
from backend.app.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class LedgerSnapshot:
    """Every record a report needs, read in one go."""
    accounts: List[LedgerAccount] = field(default_factory=list)
    candidates: List[Candidate] = field(default_factory=list)
    users: List[User] = field(default_factory=list)
    transactions: List[Transaction] = field(default_factory=list)

    def accounts_by_id(self) -> Dict[str, LedgerAccount]:
        return {a.id: a for a in self.accounts}

    def candidates_by_id(self) -> Dict[str, Candidate]:
        return {c.id: c for c in self.candidates}


async def load_transactions(db: AsyncSession) -> List[Transaction]:
    """Full transaction log, oldest first."""
    result = await db.execute(select(Transaction).order_by(Transaction.date, Transaction.created_at))
    return list(result.scalars().all())


async def load_accounts(db: AsyncSession) -> List[LedgerAccount]:
    result = await db.execute(select(LedgerAccount).order_by(LedgerAccount.name))
    return list(result.scalars().all())


async def load_candidates(db: AsyncSession) -> List[Candidate]:
    result = await db.execute(select(Candidate).order_by(Candidate.name))
    return list(result.scalars().all())


async def load_snapshot(db: AsyncSession, include_users: bool = False) -> LedgerSnapshot:
    snapshot = LedgerSnapshot(
        accounts=await load_accounts(db),
        candidates=await load_candidates(db),
        transactions=await load_transactions(db),
    )
    if include_users:
        result = await db.execute(select(User).order_by(User.name))
        snapshot.users = list(result.scalars().all())
    return snapshot


# Lookups

async def get_account_or_404(db: AsyncSession, account_id: str) -> LedgerAccount:
    account = await db.get(LedgerAccount, account_id)
    if not account:
        raise ResourceNotFoundError("Account", account_id)
    return account


async def get_candidate_or_404(db: AsyncSession, candidate_id: str) -> Candidate:
    candidate = await db.get(Candidate, candidate_id)
    if not candidate:
        raise ResourceNotFoundError("Candidate", candidate_id)
    return candidate


async def get_user_or_404(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise ResourceNotFoundError("User", user_id)
    return user


async def get_transaction_or_404(db: AsyncSession, transaction_id: str) -> Transaction:
    transaction = await db.get(Transaction, transaction_id)
    if not transaction:
        raise ResourceNotFoundError("Transaction", transaction_id)
    return transaction


async def find_entity(db: AsyncSession, entity_id: str, kind: EntityKind):
    """Return the record an (id, kind) reference points at, or None."""
    if kind == EntityKind.ACCOUNT:
        return await db.get(LedgerAccount, entity_id)
    if kind == EntityKind.CANDIDATE:
        return await db.get(Candidate, entity_id)
    if kind == EntityKind.STAFF:
        return await db.get(User, entity_id)
    return None


async def resolve_party(db: AsyncSession, entity_id: str, kind: EntityKind, side: str) -> Party:
    """
    Resolve one side of a transaction to a Party.

    Raises:
        InvalidTransactionError: If the referenced record does not exist
    """
    entity = await find_entity(db, entity_id, kind)
    if entity is None:
        raise InvalidTransactionError(
            f"Invalid {side} entity: {kind.value} {entity_id} does not exist",
            details={"side": side, "entity_id": entity_id, "entity_kind": kind.value},
        )

    return Party(
        entity_id=entity.id,
        kind=kind,
        name=entity.name,
        account_type=entity.type if kind == EntityKind.ACCOUNT else None,
    )


# Referential integrity

async def count_references(db: AsyncSession, entity_id: str, kind: EntityKind) -> int:
    """Number of transactions naming the entity on either side."""
    query = select(func.count(Transaction.id)).where(
        or_(
            and_(Transaction.from_entity_id == entity_id, Transaction.from_entity_type == kind),
            and_(Transaction.to_entity_id == entity_id, Transaction.to_entity_type == kind),
        )
    )
    result = await db.execute(query)
    return result.scalar() or 0


async def ensure_unreferenced(db: AsyncSession, entity_id: str, kind: EntityKind) -> None:
    references = await count_references(db, entity_id, kind)
    if references:
        logger.info("Refusing to delete %s %s: %d transaction(s) reference it", kind.value, entity_id, references)
        raise EntityInUseError(kind.value, entity_id, references)


async def ensure_account_deletable(db: AsyncSession, account: LedgerAccount) -> None:
    """
    Raises:
        SystemAccountError: For the built-in system accounts
        EntityInUseError: If any transaction references the account
    """
    if account.is_system:
        raise SystemAccountError(account.id)
    await ensure_unreferenced(db, account.id, EntityKind.ACCOUNT)


async def ensure_candidate_deletable(db: AsyncSession, candidate: Candidate) -> None:
    """Candidates with financial history are deactivated, never deleted."""
    await ensure_unreferenced(db, candidate.id, EntityKind.CANDIDATE)


async def ensure_staff_deletable(db: AsyncSession, user: User) -> None:
    await ensure_unreferenced(db, user.id, EntityKind.STAFF)


def ensure_transaction_mutable(transaction: Transaction, current_user: dict) -> None:
    """
    Locked transactions may only be changed or deleted by an admin.

    Raises:
        TransactionLockedError: If locked and the caller is not an admin
    """
    if transaction.is_locked and not is_admin(current_user):
        raise TransactionLockedError(transaction.id)


async def find_user_by_username(db: AsyncSession, username: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()
