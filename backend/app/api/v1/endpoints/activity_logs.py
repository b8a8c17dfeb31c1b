"""
Activity Log API Endpoints (admin only).
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.core.guards import require_admin
from backend.app.schemas.activity import ActivityLogResponse, ActivityLogListResponse
from backend.app.services.activity import get_activity_logs

router = APIRouter(prefix="/activity-logs", tags=["Activity Logs"])


@router.get("", response_model=ActivityLogListResponse)
async def list_activity_logs(
    entity_type: Optional[str] = Query(None, description="Filter by entity type, e.g. Transaction"),
    entity_id: Optional[str] = Query(None, description="Filter by entity id"),
    action: Optional[str] = Query(None, description="Filter by action, e.g. LOCK"),
    actor_id: Optional[str] = Query(None, description="Filter by acting user"),
    limit: int = Query(100, ge=1, le=1000, description="Maximum number of records"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Recent activity, most recent first.
    """
    logs = await get_activity_logs(
        db,
        entity_type=entity_type,
        entity_id=entity_id,
        action=action,
        actor_id=actor_id,
        limit=limit
    )

    return ActivityLogListResponse(
        logs=[ActivityLogResponse.model_validate(log) for log in logs],
        total=len(logs)
    )
