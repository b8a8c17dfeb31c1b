"""
Transaction creation rules.

The balance engine folds whatever it is given; these checks run on the
write path only (create and update) so that malformed rows never reach
the log in the first place.
"""

from dataclasses import dataclass
from typing import Optional

from backend.app.core.exceptions import InvalidTransactionError
from backend.app.models.ledger_enums import AccountType, EntityKind, LIQUID_ACCOUNT_TYPES, TransactionType

A, C, S = EntityKind.ACCOUNT, EntityKind.CANDIDATE, EntityKind.STAFF

_WALLETS = frozenset((A, account_type) for account_type in LIQUID_ACCOUNT_TYPES)

# (kind, account type) pairs allowed on each side; account type is None for non-accounts
ALLOWED_SOURCES = {
    TransactionType.INCOME: frozenset({
        (C, None),
        (A, AccountType.DEBTOR),
        (A, AccountType.INCOME),
        (A, AccountType.CREDITOR),
        (A, AccountType.EQUITY),
    }),
    TransactionType.EXPENSE: _WALLETS,
    TransactionType.TRANSFER: _WALLETS,
    TransactionType.REFUND: _WALLETS,
}

ALLOWED_DESTINATIONS = {
    TransactionType.INCOME: _WALLETS,
    TransactionType.EXPENSE: frozenset({
        (A, AccountType.EXPENSE),
        (A, AccountType.CREDITOR),
        (A, AccountType.SALARY),
        (S, None),
    }),
    TransactionType.TRANSFER: _WALLETS,
    TransactionType.REFUND: frozenset({
        (C, None),
        (A, AccountType.DEBTOR),
    }),
}


@dataclass(frozen=True)
class Party:
    """A resolved transaction participant."""
    entity_id: str
    kind: EntityKind
    name: str
    account_type: Optional[AccountType] = None

    @property
    def rule_key(self):
        return (self.kind, self.account_type if self.kind == EntityKind.ACCOUNT else None)

    def describe(self) -> str:
        if self.account_type is not None:
            return f"{self.kind.value} '{self.name}' ({self.account_type.value})"
        return f"{self.kind.value} '{self.name}'"


def default_description(transaction_type: TransactionType, description: Optional[str]) -> str:
    if description and description.strip():
        return description
    return f"{transaction_type.value} Transaction"


def validate_transaction(
    transaction_type: TransactionType,
    amount: float,
    source: Party,
    destination: Party,
) -> None:
    """
    Check amount, distinct parties and the allowed-party matrix for a type.

    Raises:
        InvalidTransactionError: If any rule is broken
    """
    if amount is None or amount <= 0:
        raise InvalidTransactionError("Valid amount is required", details={"amount": amount})

    if source.entity_id == destination.entity_id and source.kind == destination.kind:
        raise InvalidTransactionError(
            "Source and Destination cannot be the same",
            details={"entity_id": source.entity_id, "entity_kind": source.kind.value},
        )

    if source.rule_key not in ALLOWED_SOURCES[transaction_type]:
        raise InvalidTransactionError(
            f"{source.describe()} cannot be the source of a {transaction_type.value} transaction",
            details={"side": "from", "entity_id": source.entity_id, "type": transaction_type.value},
        )

    if destination.rule_key not in ALLOWED_DESTINATIONS[transaction_type]:
        raise InvalidTransactionError(
            f"{destination.describe()} cannot be the destination of a {transaction_type.value} transaction",
            details={"side": "to", "entity_id": destination.entity_id, "type": transaction_type.value},
        )
