"""
Activity log Pydantic schemas.
"""

from pydantic import BaseModel
from datetime import datetime
from typing import Optional, List, Dict, Any


class ActivityLogResponse(BaseModel):
    id: int
    actor_id: Optional[str]
    actor_name: Optional[str]
    action: str
    entity_type: str
    entity_id: Optional[str]
    description: str
    meta_data: Optional[Dict[str, Any]]
    timestamp: datetime

    class Config:
        from_attributes = True


class ActivityLogListResponse(BaseModel):
    logs: List[ActivityLogResponse]
    total: int
