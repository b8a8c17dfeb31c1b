"""
Candidate API Endpoints.

Every due figure returned here comes from the shared candidate financials
selector, so the list, the detail view and the reports always agree.
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.models.candidate import Candidate
from backend.app.models.ledger_enums import EntityKind
from backend.app.schemas.candidate import (
    CandidateCreate, CandidateUpdate, CandidateResponse, CandidateListResponse,
    CandidateFinancialsResponse, AgreementMarker
)
from backend.app.schemas.reports import StatementResponse
from backend.app.core.dependencies import get_current_user
from backend.app.core.guards import require_module, ensure_candidate_access
from backend.app.domain.ledger.dates import utcnow
from backend.app.services.activity import log_activity, ActivityAction, ActivityEntity
from backend.app.services.ledger_store import (
    load_candidates, load_transactions, get_candidate_or_404, ensure_candidate_deletable
)
from backend.app.services.ledger_views import candidate_response, financials_response, statement_response

router = APIRouter(prefix="/candidates", tags=["Candidates"])

candidates_user = require_module("candidates")
office_user = require_module("candidates", "finance")


def _matches(candidate: Candidate, search: str) -> bool:
    needle = search.lower()
    return any(
        needle in (value or "").lower()
        for value in (candidate.name, candidate.batch_id, candidate.email, candidate.phone)
    )


@router.get("", response_model=CandidateListResponse)
async def list_candidates(
    search: Optional[str] = Query(None, description="Match name, batch, email or phone"),
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status"),
    is_active: Optional[bool] = Query(None, description="Filter by active flag"),
    current_user: dict = Depends(office_user),
    db: AsyncSession = Depends(get_db)
):
    """
    List candidates with agreed / paid / due figures.
    """
    candidates = await load_candidates(db)

    if search:
        candidates = [c for c in candidates if _matches(c, search)]
    if status_filter:
        candidates = [c for c in candidates if c.status == status_filter]
    if is_active is not None:
        candidates = [c for c in candidates if c.is_active == is_active]

    transactions = await load_transactions(db)

    return CandidateListResponse(
        candidates=[candidate_response(c, transactions) for c in candidates],
        total=len(candidates)
    )


@router.get("/{candidate_id}", response_model=CandidateResponse)
async def get_candidate(
    candidate_id: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Candidate detail. Candidate users may only read their own record.
    """
    ensure_candidate_access(candidate_id, current_user)
    candidate = await get_candidate_or_404(db, candidate_id)
    return candidate_response(candidate, await load_transactions(db))


@router.post("", response_model=CandidateResponse, status_code=status.HTTP_201_CREATED)
async def create_candidate(
    candidate_data: CandidateCreate,
    current_user: dict = Depends(candidates_user),
    db: AsyncSession = Depends(get_db)
):
    fields = candidate_data.model_dump()
    fields["joined_date"] = fields["joined_date"] or utcnow().date().isoformat()

    candidate = Candidate(**fields, is_active=True)

    db.add(candidate)
    await db.commit()
    await db.refresh(candidate)

    await log_activity(
        db,
        action=ActivityAction.CREATE,
        entity_type=ActivityEntity.CANDIDATE,
        entity_id=candidate.id,
        description=f"Enrolled candidate '{candidate.name}' in batch {candidate.batch_id}",
        actor=current_user,
        metadata={"agreed_amount": candidate.agreed_amount}
    )

    return candidate_response(candidate, await load_transactions(db))


@router.put("/{candidate_id}", response_model=CandidateResponse)
async def update_candidate(
    candidate_id: str,
    candidate_data: CandidateUpdate,
    current_user: dict = Depends(candidates_user),
    db: AsyncSession = Depends(get_db)
):
    candidate = await get_candidate_or_404(db, candidate_id)
    changes = candidate_data.model_dump(exclude_unset=True)

    for field, value in changes.items():
        setattr(candidate, field, value)

    await db.commit()
    await db.refresh(candidate)

    await log_activity(
        db,
        action=ActivityAction.UPDATE,
        entity_type=ActivityEntity.CANDIDATE,
        entity_id=candidate.id,
        description=f"Updated candidate '{candidate.name}'",
        actor=current_user,
        metadata={"fields": sorted(changes.keys())}
    )

    return candidate_response(candidate, await load_transactions(db))


async def _set_active(db: AsyncSession, candidate_id: str, active: bool, current_user: dict) -> CandidateResponse:
    candidate = await get_candidate_or_404(db, candidate_id)

    if candidate.is_active == active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Candidate is already {'active' if active else 'inactive'}"
        )

    candidate.is_active = active
    await db.commit()
    await db.refresh(candidate)

    await log_activity(
        db,
        action=ActivityAction.UPDATE,
        entity_type=ActivityEntity.CANDIDATE,
        entity_id=candidate.id,
        description=f"{'Activated' if active else 'Deactivated'} candidate '{candidate.name}'",
        actor=current_user,
        metadata={"is_active": active}
    )

    return candidate_response(candidate, await load_transactions(db))


@router.post("/{candidate_id}/deactivate", response_model=CandidateResponse)
async def deactivate_candidate(
    candidate_id: str,
    current_user: dict = Depends(candidates_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Soft-delete a candidate. Their payment history stays in the ledger.
    """
    return await _set_active(db, candidate_id, False, current_user)


@router.post("/{candidate_id}/activate", response_model=CandidateResponse)
async def activate_candidate(
    candidate_id: str,
    current_user: dict = Depends(candidates_user),
    db: AsyncSession = Depends(get_db)
):
    return await _set_active(db, candidate_id, True, current_user)


@router.delete("/{candidate_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_candidate(
    candidate_id: str,
    current_user: dict = Depends(candidates_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Permanently delete a candidate without financial history.

    Raises:
        409 ERR_LEDGER_001 if any transaction references the candidate;
        deactivate the candidate instead.
    """
    candidate = await get_candidate_or_404(db, candidate_id)
    await ensure_candidate_deletable(db, candidate)

    name = candidate.name
    await db.delete(candidate)
    await db.commit()

    await log_activity(
        db,
        action=ActivityAction.DELETE,
        entity_type=ActivityEntity.CANDIDATE,
        entity_id=candidate_id,
        description=f"Deleted candidate '{name}'",
        actor=current_user
    )


@router.get("/{candidate_id}/financials", response_model=CandidateFinancialsResponse)
async def get_candidate_financials(
    candidate_id: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    ensure_candidate_access(candidate_id, current_user)
    candidate = await get_candidate_or_404(db, candidate_id)
    return financials_response(candidate, await load_transactions(db))


@router.get("/{candidate_id}/statement", response_model=StatementResponse)
async def get_candidate_statement(
    candidate_id: str,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Candidate statement, newest first. Candidates carry no opening balance.
    """
    ensure_candidate_access(candidate_id, current_user)
    candidate = await get_candidate_or_404(db, candidate_id)
    return statement_response(candidate, EntityKind.CANDIDATE, await load_transactions(db))


async def _mark_agreement(
    db: AsyncSession,
    candidate_id: str,
    field: str,
    label: str,
    marker: Optional[AgreementMarker],
    current_user: dict
) -> CandidateResponse:
    candidate = await get_candidate_or_404(db, candidate_id)
    stamp = (marker.date if marker else None) or utcnow().isoformat()
    setattr(candidate, field, stamp)

    await db.commit()
    await db.refresh(candidate)

    await log_activity(
        db,
        action=ActivityAction.UPDATE,
        entity_type=ActivityEntity.CANDIDATE,
        entity_id=candidate.id,
        description=f"Agreement {label} for '{candidate.name}'",
        actor=current_user,
        metadata={field: stamp}
    )

    return candidate_response(candidate, await load_transactions(db))


@router.post("/{candidate_id}/agreement/sent", response_model=CandidateResponse)
async def mark_agreement_sent(
    candidate_id: str,
    marker: Optional[AgreementMarker] = None,
    current_user: dict = Depends(candidates_user),
    db: AsyncSession = Depends(get_db)
):
    return await _mark_agreement(db, candidate_id, "agreement_sent_date", "sent", marker, current_user)


@router.post("/{candidate_id}/agreement/accepted", response_model=CandidateResponse)
async def mark_agreement_accepted(
    candidate_id: str,
    marker: Optional[AgreementMarker] = None,
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Record acceptance of the fee agreement.

    Candidate users accept their own agreement; office staff may record it
    on their behalf.
    """
    ensure_candidate_access(candidate_id, current_user)
    return await _mark_agreement(db, candidate_id, "agreement_accepted_date", "accepted", marker, current_user)
