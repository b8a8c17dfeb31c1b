"""
Transaction API Endpoints.

Creation and edits go through the ledger transaction rules. Locked
transactions can only be changed, deleted or unlocked by an admin.
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, or_, and_
from backend.app.db.session import get_db
from backend.app.models.transaction import Transaction
from backend.app.models.ledger_enums import TransactionType, EntityKind
from backend.app.schemas.transaction import (
    TransactionCreate, TransactionUpdate, TransactionResponse, TransactionListResponse
)
from backend.app.core.guards import require_module, require_admin
from backend.app.domain.ledger.transaction_rules import validate_transaction, default_description
from backend.app.services.activity import log_activity, ActivityAction, ActivityEntity
from backend.app.services.ledger_store import (
    get_transaction_or_404, resolve_party, ensure_transaction_mutable
)

router = APIRouter(prefix="/transactions", tags=["Transactions"])

finance_user = require_module("finance")


async def _check_transaction(
    db: AsyncSession,
    transaction_type: TransactionType,
    amount: float,
    from_entity_id: str,
    from_entity_type: EntityKind,
    to_entity_id: str,
    to_entity_type: EntityKind,
):
    source = await resolve_party(db, from_entity_id, from_entity_type, "from")
    destination = await resolve_party(db, to_entity_id, to_entity_type, "to")
    validate_transaction(transaction_type, amount, source, destination)
    return source, destination


def _summary(transaction: Transaction) -> str:
    return (
        f"{transaction.type.value} of {transaction.amount:g} from "
        f"{transaction.from_entity_type.value} {transaction.from_entity_id} to "
        f"{transaction.to_entity_type.value} {transaction.to_entity_id}"
    )


@router.get("", response_model=TransactionListResponse)
async def list_transactions(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=500, description="Items per page"),
    type: Optional[TransactionType] = Query(None, description="Filter by transaction type"),
    is_locked: Optional[bool] = Query(None, description="Filter by lock state"),
    entity_id: Optional[str] = Query(None, description="Only transactions naming this entity"),
    entity_type: Optional[EntityKind] = Query(None, description="Kind of entity_id"),
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    """
    List transactions, newest first.
    """
    conditions = []
    if type:
        conditions.append(Transaction.type == type)
    if is_locked is not None:
        conditions.append(Transaction.is_locked == is_locked)
    if entity_id:
        from_match = [Transaction.from_entity_id == entity_id]
        to_match = [Transaction.to_entity_id == entity_id]
        if entity_type:
            from_match.append(Transaction.from_entity_type == entity_type)
            to_match.append(Transaction.to_entity_type == entity_type)
        conditions.append(or_(and_(*from_match), and_(*to_match)))

    count_query = select(func.count(Transaction.id)).where(*conditions)
    total = (await db.execute(count_query)).scalar()

    offset = (page - 1) * page_size
    query = (
        select(Transaction)
        .where(*conditions)
        .order_by(Transaction.date.desc(), Transaction.created_at.desc())
        .offset(offset)
        .limit(page_size)
    )
    result = await db.execute(query)

    return TransactionListResponse(
        transactions=[TransactionResponse.model_validate(t) for t in result.scalars().all()],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{transaction_id}", response_model=TransactionResponse)
async def get_transaction(
    transaction_id: str,
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    return TransactionResponse.model_validate(await get_transaction_or_404(db, transaction_id))


@router.post("", response_model=TransactionResponse, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    transaction_data: TransactionCreate,
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Record a money movement.

    Validates:
    1. Amount is positive
    2. Source and destination exist and are different entities
    3. Both parties are allowed for the transaction type

    Raises:
        400 ERR_LEDGER_004 on any rule violation
    """
    await _check_transaction(
        db,
        transaction_data.type,
        transaction_data.amount,
        transaction_data.from_entity_id,
        transaction_data.from_entity_type,
        transaction_data.to_entity_id,
        transaction_data.to_entity_type,
    )

    fields = transaction_data.model_dump()
    fields["description"] = default_description(transaction_data.type, transaction_data.description)

    transaction = Transaction(**fields, is_locked=False)

    db.add(transaction)
    await db.commit()
    await db.refresh(transaction)

    await log_activity(
        db,
        action=ActivityAction.CREATE,
        entity_type=ActivityEntity.TRANSACTION,
        entity_id=transaction.id,
        description=_summary(transaction),
        actor=current_user,
        metadata={"amount": transaction.amount, "type": transaction.type.value}
    )

    return TransactionResponse.model_validate(transaction)


@router.put("/{transaction_id}", response_model=TransactionResponse)
async def update_transaction(
    transaction_id: str,
    transaction_data: TransactionUpdate,
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Edit a transaction. The merged record is validated like a new one.

    Raises:
        403 ERR_LEDGER_003 if the transaction is locked and the caller is not an admin
    """
    transaction = await get_transaction_or_404(db, transaction_id)
    ensure_transaction_mutable(transaction, current_user)

    changes = transaction_data.model_dump(exclude_unset=True)
    merged_type = changes.get("type", transaction.type)

    await _check_transaction(
        db,
        merged_type,
        changes.get("amount", transaction.amount),
        changes.get("from_entity_id", transaction.from_entity_id),
        changes.get("from_entity_type", transaction.from_entity_type),
        changes.get("to_entity_id", transaction.to_entity_id),
        changes.get("to_entity_type", transaction.to_entity_type),
    )

    if "description" in changes:
        changes["description"] = default_description(merged_type, changes["description"])

    for field, value in changes.items():
        setattr(transaction, field, value)

    await db.commit()
    await db.refresh(transaction)

    await log_activity(
        db,
        action=ActivityAction.UPDATE,
        entity_type=ActivityEntity.TRANSACTION,
        entity_id=transaction.id,
        description=_summary(transaction),
        actor=current_user,
        metadata={"fields": sorted(changes.keys()), "is_locked": transaction.is_locked}
    )

    return TransactionResponse.model_validate(transaction)


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(
    transaction_id: str,
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a transaction.

    Raises:
        403 ERR_LEDGER_003 if the transaction is locked and the caller is not an admin
    """
    transaction = await get_transaction_or_404(db, transaction_id)
    ensure_transaction_mutable(transaction, current_user)

    summary = _summary(transaction)
    await db.delete(transaction)
    await db.commit()

    await log_activity(
        db,
        action=ActivityAction.DELETE,
        entity_type=ActivityEntity.TRANSACTION,
        entity_id=transaction_id,
        description=summary,
        actor=current_user
    )


@router.post("/{transaction_id}/lock", response_model=TransactionResponse)
async def lock_transaction(
    transaction_id: str,
    current_user: dict = Depends(finance_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Lock a transaction against further edits by staff.
    """
    transaction = await get_transaction_or_404(db, transaction_id)

    if transaction.is_locked:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Transaction is already locked"
        )

    transaction.is_locked = True
    await db.commit()
    await db.refresh(transaction)

    await log_activity(
        db,
        action=ActivityAction.LOCK,
        entity_type=ActivityEntity.TRANSACTION,
        entity_id=transaction.id,
        description=f"Locked {_summary(transaction)}",
        actor=current_user
    )

    return TransactionResponse.model_validate(transaction)


@router.post("/{transaction_id}/unlock", response_model=TransactionResponse)
async def unlock_transaction(
    transaction_id: str,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Unlock a transaction (admin-only).
    """
    transaction = await get_transaction_or_404(db, transaction_id)

    if not transaction.is_locked:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Transaction is not locked"
        )

    transaction.is_locked = False
    await db.commit()
    await db.refresh(transaction)

    await log_activity(
        db,
        action=ActivityAction.UNLOCK,
        entity_type=ActivityEntity.TRANSACTION,
        entity_id=transaction.id,
        description=f"Unlocked {_summary(transaction)}",
        actor=admin
    )

    return TransactionResponse.model_validate(transaction)
