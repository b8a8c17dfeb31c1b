"""
Recurring obligations (payroll, rent).

An account with a fixed monthly amount and a start date owes that amount
once per monthly cycle whose due date has been reached. Arrears are the
cycles owed so far, less the Expense payments made into the account.
"""

import calendar
from dataclasses import dataclass
from datetime import MAXYEAR, date
from typing import Iterable, List, Optional, Sequence

from backend.app.core.config import settings
from backend.app.models.ledger_enums import AccountType, EntityKind, TransactionType
from backend.app.domain.ledger.balance_engine import enum_value, is_destination
from backend.app.domain.ledger.dates import DateLike, parse_date, utcnow


def due_date_for(year: int, month: int, due_day: int) -> date:
    """Due date in a given month; days past the month's end clamp to its last day."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(max(due_day, 1), last_day))


def count_due_cycles(
    start_date: DateLike,
    due_day: Optional[int] = None,
    end_date: DateLike = None,
    now: DateLike = None,
    max_months: Optional[int] = None,
) -> int:
    """
    Count monthly cycles whose due date has been reached.

    Walks month by month from the start month and counts each month whose
    (clamped) due date is on or before the reference date. The reference is
    `end_date` when given, otherwise `now`. The walk stops at the first month
    not yet due, or after `max_months` months.

    Args:
        start_date: First month of the obligation
        due_day: Day of month the amount falls due (defaults to the start day)
        end_date: Optional last date of the obligation
        now: Reference "today"; defaults to the current UTC date
        max_months: Upper bound on months scanned, defaults to
            `settings.recurring_scan_limit_months`

    Returns:
        Number of cycles due, 0 for a missing or malformed start date
    """
    start = parse_date(start_date)
    if start is None:
        return 0

    reference = parse_date(end_date) if end_date else None
    if reference is None:
        reference = parse_date(now) if now is not None else utcnow().date()
    if reference is None:
        return 0

    if due_day is None:
        due_day = start.day
    if max_months is None:
        max_months = settings.recurring_scan_limit_months

    year, month = start.year, start.month
    cycles = 0

    for _ in range(max_months):
        if reference < due_date_for(year, month, due_day):
            break
        cycles += 1

        month += 1
        if month > 12:
            month = 1
            year += 1
            if year > MAXYEAR:
                break

    return cycles


def is_recurring_obligation(account) -> bool:
    """Salary accounts, or any account with a positive monthly amount, once started."""
    if not account.recurring_start_date:
        return False
    return (
        enum_value(account.type) == AccountType.SALARY.value
        or (account.recurring_amount or 0) > 0
    )


def payroll_accounts(accounts: Iterable) -> List:
    return [a for a in accounts if is_recurring_obligation(a)]


def total_paid_to(account_id: str, transactions: Iterable) -> float:
    """Expense payments recorded into the obligation's account."""
    return sum(
        (t.amount or 0) for t in transactions
        if enum_value(t.type) == TransactionType.EXPENSE.value
        and is_destination(t, account_id, EntityKind.ACCOUNT)
    )


@dataclass
class ObligationArrears:
    account_id: str
    account_name: str
    account_type: str
    monthly_amount: float
    start_date: Optional[str]
    end_date: Optional[str]
    due_day: int
    cycles_due: int
    total_payable: float
    total_paid: float
    arrears: float


def obligation_arrears(
    account,
    transactions: Sequence,
    now: DateLike = None,
    max_months: Optional[int] = None,
) -> ObligationArrears:
    start = parse_date(account.recurring_start_date)
    due_day = account.recurring_due_day or (start.day if start else 1)

    cycles = count_due_cycles(
        account.recurring_start_date,
        due_day,
        end_date=account.recurring_end_date,
        now=now,
        max_months=max_months,
    )
    monthly = account.recurring_amount or 0
    payable = cycles * monthly
    paid = total_paid_to(account.id, transactions)

    return ObligationArrears(
        account_id=account.id,
        account_name=account.name,
        account_type=enum_value(account.type),
        monthly_amount=monthly,
        start_date=account.recurring_start_date,
        end_date=account.recurring_end_date,
        due_day=due_day,
        cycles_due=cycles,
        total_payable=payable,
        total_paid=paid,
        arrears=payable - paid,
    )


def payroll_report(
    accounts: Sequence,
    transactions: Sequence,
    now: DateLike = None,
    max_months: Optional[int] = None,
) -> List[ObligationArrears]:
    return [
        obligation_arrears(account, transactions, now=now, max_months=max_months)
        for account in payroll_accounts(accounts)
    ]
