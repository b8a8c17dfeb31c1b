"""
Backup export and restore.

The JSON backup is the office's disaster-recovery and migration path, so
every ledger field round-trips verbatim: ids, ISO date strings, lock flags,
opening balances and recurring settings.
"""

import logging
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.security import get_password_hash, unusable_password_hash
from backend.app.domain.ledger.dates import utcnow
from backend.app.models.candidate import Candidate
from backend.app.models.ledger_account import LedgerAccount
from backend.app.models.ledger_enums import WorkSupportStatus
from backend.app.models.transaction import Transaction
from backend.app.models.user import User
from backend.app.schemas.backup import (
    BackupDocument,
    BackupUser,
    BackupCandidate,
    BackupAccount,
    BackupTransaction,
    RestoreResponse,
)
from backend.app.services.activity import log_activity, ActivityAction, ActivityEntity
from backend.app.services.bootstrap import ensure_default_accounts
from backend.app.services.ledger_store import load_snapshot

logger = logging.getLogger(__name__)


async def export_backup(db: AsyncSession) -> BackupDocument:
    snapshot = await load_snapshot(db, include_users=True)
    return BackupDocument(
        users=[BackupUser.model_validate(u) for u in snapshot.users],
        candidates=[BackupCandidate.model_validate(c) for c in snapshot.candidates],
        accounts=[BackupAccount.model_validate(a) for a in snapshot.accounts],
        transactions=[BackupTransaction.model_validate(t) for t in snapshot.transactions],
    )


def _user_password_hash(record: BackupUser) -> str:
    if record.hashed_password:
        return record.hashed_password
    if record.password:
        return get_password_hash(record.password)
    return unusable_password_hash()


def _keep_actor(document: BackupDocument, actor_id: Optional[str], actor_username: Optional[str]) -> bool:
    """The restoring admin survives unless the backup brings its own copy of them."""
    if not actor_id:
        return False
    return not any(u.id == actor_id or u.username == actor_username for u in document.users)


async def restore_backup(db: AsyncSession, document: BackupDocument, current_user: dict) -> RestoreResponse:
    """
    Replace all users, candidates, accounts and transactions with the backup.

    The acting admin is kept when the backup does not contain them, and the
    default Cash account is re-created if the backup lacks it.
    """
    actor_id = current_user.get("user_id")
    keep_actor = _keep_actor(document, actor_id, current_user.get("sub"))

    # Rows loaded earlier in this request would clash with restored primary keys
    db.expunge_all()

    await db.execute(delete(Transaction))
    await db.execute(delete(LedgerAccount))
    await db.execute(delete(Candidate))
    if keep_actor:
        await db.execute(delete(User).where(User.id != actor_id))
    else:
        await db.execute(delete(User))

    for record in document.users:
        db.add(User(
            id=record.id,
            name=record.name,
            username=record.username,
            email=record.email,
            hashed_password=_user_password_hash(record),
            role=record.role,
            modules=list(record.modules),
            linked_candidate_id=record.linked_candidate_id,
            is_active=record.is_active,
        ))

    today = utcnow().date().isoformat()
    for record in document.candidates:
        fields = record.model_dump()
        fields["joined_date"] = record.joined_date or today
        fields["work_support_status"] = record.work_support_status or WorkSupportStatus.NONE.value
        db.add(Candidate(**fields))

    for record in document.accounts:
        db.add(LedgerAccount(**record.model_dump()))

    for record in document.transactions:
        db.add(Transaction(**record.model_dump()))

    await db.commit()
    await ensure_default_accounts(db)

    logger.info(
        "Restored backup: %d users, %d candidates, %d accounts, %d transactions",
        len(document.users), len(document.candidates),
        len(document.accounts), len(document.transactions),
    )

    await log_activity(
        db,
        action=ActivityAction.RESTORE,
        entity_type=ActivityEntity.SYSTEM,
        description="Restored data from backup",
        actor=current_user,
        metadata={
            "users": len(document.users),
            "candidates": len(document.candidates),
            "accounts": len(document.accounts),
            "transactions": len(document.transactions),
            "kept_acting_admin": keep_actor,
        },
    )

    return RestoreResponse(
        success=True,
        users=len(document.users),
        candidates=len(document.candidates),
        accounts=len(document.accounts),
        transactions=len(document.transactions),
    )
