"""
Unit tests for the aggregate reporting selectors.
"""

import pytest

from backend.app.domain.ledger import reporting
from backend.app.models.ledger_enums import AccountType, EntityKind, TransactionType, CandidateStatus
from backend.tests.factories import txn, account, candidate, fee, refund, expense

A, C, S = EntityKind.ACCOUNT, EntityKind.CANDIDATE, EntityKind.STAFF


@pytest.fixture
def ledger():
    accounts = [
        account("cash", AccountType.CASH, opening_balance=1000),
        account("bank", AccountType.BANK, opening_balance=5000),
        account("rent", AccountType.EXPENSE, sub_type="Rent"),
        account("misc", AccountType.EXPENSE, name="Sundries"),
        account("loan", AccountType.CREDITOR, opening_balance=0),
        account("salary", AccountType.SALARY, opening_balance=2000),
        account("client", AccountType.DEBTOR, opening_balance=700),
        account("owed-us-nothing", AccountType.DEBTOR, opening_balance=-50),
        account("consulting", AccountType.INCOME),
        account("capital", AccountType.EQUITY),
    ]
    candidates = [
        candidate("alice", agreed_amount=50000, status=CandidateStatus.PLACED.value),
        candidate("bob", agreed_amount=40000),
        candidate("carol", agreed_amount=30000, status=CandidateStatus.DISCONTINUED.value, is_active=False),
        candidate("dave", agreed_amount=10000),
        candidate("erin", agreed_amount=20000, status=CandidateStatus.DISCONTINUED.value, is_active=True),
    ]
    transactions = [
        fee("alice", "bank", 30000),
        fee("alice", "cash", 5000),
        refund("bank", "alice", 2000, date="2024-02-01"),
        fee("bob", "cash", 10000),
        fee("carol", "cash", 4000),
        fee("dave", "bank", 12000),
        txn(25000, "loan", A, "bank", A, type=TransactionType.INCOME),
        txn(3000, "consulting", A, "bank", A, type=TransactionType.INCOME),
        txn(1000, "capital", A, "cash", A, type=TransactionType.INCOME),
        expense("bank", "rent", 8000),
        expense("cash", "misc", 500),
        expense("bank", "salary", 1500),
        txn(600, "bank", A, "u1", S, type=TransactionType.EXPENSE),
        txn(2000, "bank", A, "cash", A, type=TransactionType.TRANSFER),
        txn(700, "bob", C, "cash", A, type=TransactionType.TRANSFER),
    ]
    return accounts, candidates, transactions


def _by_id(items, id):
    return next(i for i in items if i.id == id)


# Paid / due

def test_candidate_paid_is_income_minus_refunds(ledger):
    _, _, transactions = ledger
    assert reporting.candidate_paid("alice", transactions) == 33000


def test_candidate_paid_excludes_transfers(ledger):
    _, _, transactions = ledger
    assert reporting.candidate_paid("bob", transactions) == 10000


def test_candidate_paid_ignores_accounts_with_same_id():
    transactions = [txn(900, "bank", A, "cash", A, type=TransactionType.INCOME)]
    assert reporting.candidate_paid("bank", transactions) == 0


def test_candidate_due_is_unclamped(ledger):
    _, candidates, transactions = ledger
    assert reporting.candidate_due(_by_id(candidates, "dave"), transactions) == -2000
    assert reporting.candidate_due(_by_id(candidates, "alice"), transactions) == 17000


def test_display_due_floors_at_cleared():
    assert reporting.display_due(0).is_cleared
    assert reporting.display_due(-10).amount is None
    shown = reporting.display_due(125.5)
    assert shown.amount == 125.5 and not shown.is_cleared


def test_candidate_financials_consistent(ledger):
    _, candidates, transactions = ledger
    for c in candidates:
        financials = reporting.candidate_financials(c, transactions)
        assert financials.due == financials.agreed_amount - financials.paid
        assert financials.due == reporting.candidate_due(c, transactions)
        assert financials.display_due.is_cleared == (financials.due <= 0)


# Receivables

def test_receivable_candidates_skip_only_inactive_discontinued(ledger):
    _, candidates, _ = ledger
    ids = [c.id for c in reporting.receivable_candidates(candidates)]
    assert ids == ["alice", "bob", "dave", "erin"]


def test_total_candidate_receivables_lets_overpayment_reduce_total(ledger):
    _, candidates, transactions = ledger
    # alice 17000 + bob 30000 + dave -2000 + erin 20000
    assert reporting.total_candidate_receivables(candidates, transactions) == 65000


def test_debtors_keep_positive_balances_only(ledger):
    accounts, _, transactions = ledger
    assert reporting.total_debtors_receivable(accounts, transactions) == 700


def test_creditors_keep_negative_liability_balances(ledger):
    accounts, _, transactions = ledger
    # loan: 0 - 25000 = -25000, salary: -2000 + 1500 = -500
    assert reporting.total_creditors_payable(accounts, transactions) == 25500


def test_creditor_in_credit_drops_out():
    accounts = [account("vendor", AccountType.CREDITOR)]
    transactions = [expense("bank", "vendor", 300)]
    assert reporting.total_creditors_payable(accounts, transactions) == 0


# Revenue / P&L

def test_operating_revenue_excludes_loans_and_capital(ledger):
    accounts, _, transactions = ledger
    # candidate fees 30000+5000+10000+4000+12000 plus 3000 consulting
    assert reporting.operating_revenue(transactions, accounts) == 64000


def test_is_operating_revenue_requires_income_type(ledger):
    accounts, _, _ = ledger
    by_id = {a.id: a for a in accounts}
    assert not reporting.is_operating_revenue(refund("bank", "alice", 1), by_id)
    assert not reporting.is_operating_revenue(txn(5, "ghost", A, "bank", A), by_id)
    assert reporting.is_operating_revenue(fee("alice", "bank", 1), by_id)


def test_profit_and_loss(ledger):
    accounts, _, transactions = ledger
    statement = reporting.profit_and_loss(transactions, accounts)

    assert statement.operating_revenue == 64000
    assert statement.total_expenses == 10600
    assert statement.net_profit == 53400
    assert statement.expense_breakdown == {
        "Rent": 8000,
        "Sundries": 500,
        "salary": 1500,
        reporting.GENERAL_EXPENSE: 600,
    }


# Balance sheet / dashboard

def test_balance_sheet(ledger):
    accounts, candidates, transactions = ledger
    sheet = reporting.balance_sheet(accounts, candidates, transactions)

    # cash: 1000 + 5000 + 10000 + 4000 + 1000 - 500 + 2000 + 700
    assert sheet.cash == 23200
    # bank: 5000 + 30000 - 2000 + 12000 + 25000 + 3000 - 8000 - 1500 - 600 - 2000
    assert sheet.bank == 60900
    assert sheet.debtors == 700
    assert sheet.candidate_receivables == 65000
    assert sheet.total_assets == 23200 + 60900 + 700 + 65000
    assert sheet.creditors_payable == 25500
    assert sheet.equity == sheet.total_assets - sheet.total_liabilities


def test_dashboard_summary(ledger):
    accounts, candidates, transactions = ledger
    summary = reporting.dashboard_summary(accounts, candidates, transactions)

    assert summary.total_candidates == 5
    assert summary.placed_candidates == 1
    assert summary.active_candidates == 4
    assert summary.total_cash == 23200
    assert summary.total_bank == 60900
    assert summary.total_income == 30000 + 5000 + 10000 + 4000 + 12000 + 25000 + 3000 + 1000
    assert summary.total_expenses == 10600
    assert summary.income_from_placed == 33000
    # bob and dave; erin is discontinued, carol inactive
    assert summary.income_from_existing == 22000
    assert summary.pending_receivables == 65000
    assert summary.debtors_receivable == 700
    assert summary.creditors_payable == 25500
    assert summary.estimated_profit == 64000 - 10600


def test_dashboard_and_balance_sheet_share_receivables(ledger):
    accounts, candidates, transactions = ledger
    summary = reporting.dashboard_summary(accounts, candidates, transactions)
    sheet = reporting.balance_sheet(accounts, candidates, transactions)
    assert summary.pending_receivables == sheet.candidate_receivables


def test_empty_ledger():
    summary = reporting.dashboard_summary([], [], [])
    assert summary.total_candidates == 0
    assert summary.estimated_profit == 0
    assert reporting.profit_and_loss([], []).expense_breakdown == {}
