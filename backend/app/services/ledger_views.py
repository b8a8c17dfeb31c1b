"""
Response builders shared by the ledger endpoints.

Each builder attaches the derived figures (balance, financials, statement)
to a stored record, always through the ledger selectors.
"""

from typing import Sequence

from backend.app.domain.ledger.balance_engine import account_balance, build_statement
from backend.app.domain.ledger.reporting import candidate_financials
from backend.app.models.ledger_enums import EntityKind
from backend.app.schemas.account import AccountResponse
from backend.app.schemas.candidate import CandidateResponse, CandidateFinancialsResponse
from backend.app.schemas.reports import StatementResponse, StatementLineResponse, CandidateReceivable


def account_response(account, transactions: Sequence) -> AccountResponse:
    response = AccountResponse.model_validate(account)
    response.balance = account_balance(account, transactions)
    return response


def financials_response(candidate, transactions: Sequence) -> CandidateFinancialsResponse:
    financials = candidate_financials(candidate, transactions)
    return CandidateFinancialsResponse(
        candidate_id=financials.candidate_id,
        agreed_amount=financials.agreed_amount,
        paid=financials.paid,
        due=financials.due,
        display_due=financials.display_due.amount,
        is_cleared=financials.display_due.is_cleared,
    )


def candidate_response(candidate, transactions: Sequence) -> CandidateResponse:
    response = CandidateResponse.model_validate(candidate)
    response.financials = financials_response(candidate, transactions)
    return response


def receivable_row(candidate, transactions: Sequence) -> CandidateReceivable:
    financials = financials_response(candidate, transactions)
    return CandidateReceivable(
        candidate_id=candidate.id,
        name=candidate.name,
        batch_id=candidate.batch_id,
        status=candidate.status,
        is_active=candidate.is_active,
        agreed_amount=financials.agreed_amount,
        paid=financials.paid,
        due=financials.due,
        display_due=financials.display_due,
        is_cleared=financials.is_cleared,
    )


def statement_response(entity, kind: EntityKind, transactions: Sequence) -> StatementResponse:
    """Statement for an account, candidate or staff member."""
    if kind == EntityKind.ACCOUNT:
        statement = build_statement(
            entity.id, kind, transactions,
            opening_balance=entity.opening_balance,
            account_classification=entity.type,
        )
    else:
        statement = build_statement(entity.id, kind, transactions)

    return StatementResponse(
        entity_id=entity.id,
        entity_kind=kind,
        name=entity.name,
        opening_balance=statement.opening_balance,
        closing_balance=statement.closing_balance,
        lines=[
            StatementLineResponse(
                transaction_id=line.transaction.id,
                date=line.transaction.date,
                type=line.transaction.type,
                description=line.transaction.description or "",
                amount=line.transaction.amount,
                impact=line.impact,
                running_balance=line.running_balance,
                is_locked=bool(line.transaction.is_locked),
            )
            for line in statement.lines
        ],
    )
