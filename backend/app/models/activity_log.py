"""
Activity Log Database Model.

Tracks who created, changed, locked, deleted or restored ledger records.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON, Text
from sqlalchemy.sql import func
from backend.app.db.session import Base


class ActivityLog(Base):
    """
    Activity log model.

    Actions: CREATE, UPDATE, DELETE, LOCK, UNLOCK, LOGIN, LOGIN_FAILED,
    LOGOUT, BLOCK, UNBLOCK, RESTORE, OTHER.
    """
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Who performed the action (None for system actions)
    actor_id = Column(String(64), index=True, nullable=True)
    actor_name = Column(String(255), nullable=True)

    action = Column(String(50), nullable=False, index=True)

    # What was acted upon
    entity_type = Column(String(50), nullable=False, index=True)
    entity_id = Column(String(64), nullable=True, index=True)
    description = Column(Text, nullable=False, default="")

    meta_data = Column(JSON, nullable=True)

    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<ActivityLog(id={self.id}, action='{self.action}', entity={self.entity_type}:{self.entity_id})>"
