"""
Activity logging service.

Records who created, changed, locked, deleted or restored ledger records,
and authentication events, in the activity_logs table.
"""

import logging
from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from backend.app.models.activity_log import ActivityLog

logger = logging.getLogger(__name__)


class ActivityAction:
    """Standardized activity action constants."""
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOCK = "LOCK"
    UNLOCK = "UNLOCK"
    LOGIN = "LOGIN"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGOUT = "LOGOUT"
    BLOCK = "BLOCK"
    UNBLOCK = "UNBLOCK"
    RESTORE = "RESTORE"
    OTHER = "OTHER"


class ActivityEntity:
    """Entity type labels used in the activity log."""
    ACCOUNT = "Account"
    CANDIDATE = "Candidate"
    TRANSACTION = "Transaction"
    USER = "User"
    SYSTEM = "System"


async def log_activity(
    db: AsyncSession,
    action: str,
    entity_type: str,
    entity_id: Optional[str] = None,
    description: str = "",
    actor: Optional[Dict[str, Any]] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> ActivityLog:
    """
    Write an activity log entry and commit.

    Args:
        db: Database session
        action: Action performed (use ActivityAction constants)
        entity_type: Kind of record acted upon (use ActivityEntity constants)
        entity_id: Id of the record, if any
        description: Human readable summary
        actor: Current user payload from get_current_user (None for system actions)
        metadata: Additional context as JSON

    Returns:
        Created ActivityLog instance
    """
    activity = ActivityLog(
        actor_id=actor.get("user_id") if actor else None,
        actor_name=actor.get("sub") if actor else None,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        description=description,
        meta_data=metadata
    )

    db.add(activity)
    await db.commit()
    await db.refresh(activity)

    logger.info(
        "activity %s %s:%s by %s",
        action, entity_type, entity_id, activity.actor_name or "system"
    )
    return activity


async def get_activity_logs(
    db: AsyncSession,
    entity_type: Optional[str] = None,
    entity_id: Optional[str] = None,
    action: Optional[str] = None,
    actor_id: Optional[str] = None,
    limit: int = 100
) -> list[ActivityLog]:
    """
    Retrieve activity logs with optional filtering, most recent first.
    """
    query = select(ActivityLog).order_by(desc(ActivityLog.timestamp), desc(ActivityLog.id))

    if entity_type:
        query = query.where(ActivityLog.entity_type == entity_type)

    if entity_id:
        query = query.where(ActivityLog.entity_id == entity_id)

    if action:
        query = query.where(ActivityLog.action == action)

    if actor_id:
        query = query.where(ActivityLog.actor_id == actor_id)

    query = query.limit(limit)

    result = await db.execute(query)
    return result.scalars().all()
