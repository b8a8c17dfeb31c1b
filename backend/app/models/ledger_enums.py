"""
Ledger enumerations.
"""

import enum


class AccountType(str, enum.Enum):
    """Economic classification of a ledger account."""
    BANK = "Bank"
    CASH = "Cash"
    DEBTOR = "Debtor"
    CREDITOR = "Creditor"
    EXPENSE = "Expense"
    SALARY = "Salary"
    INCOME = "Income"
    EQUITY = "Equity"


# Opening balances of these kinds are carried as negative (money owed)
LIABILITY_ACCOUNT_TYPES = frozenset({AccountType.CREDITOR, AccountType.SALARY})

# Wallet accounts that money is physically held in
LIQUID_ACCOUNT_TYPES = frozenset({AccountType.BANK, AccountType.CASH})


class TransactionType(str, enum.Enum):
    """Reporting tag of a transaction. Does not affect balance sign."""
    INCOME = "Income"
    EXPENSE = "Expense"
    TRANSFER = "Transfer"
    REFUND = "Refund"


class EntityKind(str, enum.Enum):
    """Role a participant plays in a transaction."""
    ACCOUNT = "Account"
    CANDIDATE = "Candidate"
    STAFF = "Staff"


class CandidateStatus(str, enum.Enum):
    """Default candidate statuses. Candidate.status is free text."""
    TRAINING = "Training"
    READY_FOR_INTERVIEW = "Ready for Interview"
    PLACED = "Placed"
    DISCONTINUED = "Discontinued"


class WorkSupportStatus(str, enum.Enum):
    """Post-placement job support billed monthly on top of the agreed fee."""
    NONE = "None"
    ACTIVE = "Active"
    ENDED = "Ended"
