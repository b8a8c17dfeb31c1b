"""
Balance Engine.

The single primitive every balance in the system is derived from: a pure
fold over the transaction log. Nothing here touches the database, awaits,
raises on odd input or mutates its arguments.

Transactions and accounts are read by attribute, so ORM rows and any
object exposing the same fields (amount, from_entity_id, from_entity_type,
to_entity_id, to_entity_type, date) are accepted.
"""

import enum
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Union

from backend.app.models.ledger_enums import AccountType, EntityKind, LIABILITY_ACCOUNT_TYPES
from backend.app.domain.ledger.dates import sort_key

KindLike = Union[EntityKind, str]
ClassificationLike = Union[AccountType, str, None]

_LIABILITY_VALUES = frozenset(t.value for t in LIABILITY_ACCOUNT_TYPES)


def enum_value(member: Any) -> Any:
    """Enum members and their raw string values compare the same way."""
    if isinstance(member, enum.Enum):
        return member.value
    return member


def _amount(transaction) -> float:
    return getattr(transaction, "amount", None) or 0


def is_liability(account_classification: ClassificationLike) -> bool:
    """Creditor and Salary accounts carry their opening balance as money owed."""
    return enum_value(account_classification) in _LIABILITY_VALUES


def signed_opening_balance(
    entity_kind: KindLike,
    opening_balance: Optional[float] = 0,
    account_classification: ClassificationLike = None,
) -> float:
    """Opening balance as it enters the fold. Only accounts carry one."""
    if enum_value(entity_kind) != EntityKind.ACCOUNT.value:
        return 0
    opening_balance = opening_balance or 0
    if is_liability(account_classification):
        return -opening_balance
    return opening_balance


def is_destination(transaction, entity_id: str, entity_kind: KindLike) -> bool:
    return (
        getattr(transaction, "to_entity_id", None) == entity_id
        and enum_value(getattr(transaction, "to_entity_type", None)) == enum_value(entity_kind)
    )


def is_source(transaction, entity_id: str, entity_kind: KindLike) -> bool:
    return (
        getattr(transaction, "from_entity_id", None) == entity_id
        and enum_value(getattr(transaction, "from_entity_type", None)) == enum_value(entity_kind)
    )


def transaction_impact(transaction, entity_id: str, entity_kind: KindLike) -> float:
    """
    Net effect of one transaction on an entity's balance.

    +amount as destination, -amount as source. A transaction naming the
    entity on both sides nets to zero.
    """
    impact = 0
    if is_destination(transaction, entity_id, entity_kind):
        impact += _amount(transaction)
    if is_source(transaction, entity_id, entity_kind):
        impact -= _amount(transaction)
    return impact


def compute_balance(
    entity_id: str,
    entity_kind: KindLike,
    transactions: Iterable,
    opening_balance: Optional[float] = 0,
    account_classification: ClassificationLike = None,
) -> float:
    """
    Compute the derived balance of an entity.

    Args:
        entity_id: Id of the account, candidate or staff member
        entity_kind: EntityKind (or its string value) the id refers to
        transactions: Full transaction log; type is ignored, direction is not
        opening_balance: Applied only when entity_kind is Account
        account_classification: AccountType of the account; Creditor and
            Salary subtract the opening balance instead of adding it

    Returns:
        Opening balance plus inflows minus outflows. Unknown ids and empty
        logs simply yield the (signed) opening balance.
    """
    balance = signed_opening_balance(entity_kind, opening_balance, account_classification)

    for transaction in transactions:
        balance += transaction_impact(transaction, entity_id, entity_kind)

    return balance


def account_balance(account, transactions: Iterable) -> float:
    """compute_balance for a LedgerAccount row."""
    return compute_balance(
        account.id,
        EntityKind.ACCOUNT,
        transactions,
        opening_balance=account.opening_balance,
        account_classification=account.type,
    )


def entity_transactions(entity_id: str, entity_kind: KindLike, transactions: Iterable) -> List:
    """Transactions naming the entity on either side, in log order."""
    return [
        t for t in transactions
        if is_destination(t, entity_id, entity_kind) or is_source(t, entity_id, entity_kind)
    ]


@dataclass
class StatementLine:
    transaction: Any
    impact: float
    running_balance: float


@dataclass
class Statement:
    """
    Per-entity statement.

    `lines` are newest first; each running balance is the balance right
    after that transaction, accumulated oldest first from the opening balance.
    """
    entity_id: str
    entity_kind: str
    opening_balance: float
    closing_balance: float
    lines: List[StatementLine] = field(default_factory=list)


def build_statement(
    entity_id: str,
    entity_kind: KindLike,
    transactions: Iterable,
    opening_balance: Optional[float] = 0,
    account_classification: ClassificationLike = None,
) -> Statement:
    """
    Build a running-balance statement for one entity.

    The closing balance equals compute_balance() for the same inputs.
    """
    opening = signed_opening_balance(entity_kind, opening_balance, account_classification)

    # sorted() is stable, so same-day rows keep their log order
    history = sorted(
        entity_transactions(entity_id, entity_kind, transactions),
        key=lambda t: sort_key(getattr(t, "date", None)),
    )

    running = opening
    lines = []
    for transaction in history:
        impact = transaction_impact(transaction, entity_id, entity_kind)
        running += impact
        lines.append(StatementLine(transaction=transaction, impact=impact, running_balance=running))

    lines.reverse()

    return Statement(
        entity_id=entity_id,
        entity_kind=enum_value(entity_kind),
        opening_balance=opening,
        closing_balance=running,
        lines=lines,
    )
