"""
User management Pydantic schemas.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List
from backend.app.models.enums import UserRole
from backend.app.schemas.auth import UserResponse


class UserCreate(BaseModel):
    """Schema for creating a staff, admin or candidate portal user."""
    name: str = Field(..., min_length=1, max_length=200)
    username: str = Field(..., min_length=3, max_length=50, description="Unique username")
    password: str = Field(..., min_length=6, description="Password (min 6 characters)")
    email: Optional[EmailStr] = None
    role: UserRole = Field(default=UserRole.STAFF)
    modules: List[str] = Field(default_factory=list, description="e.g. candidates, finance, users")
    linked_candidate_id: Optional[str] = Field(None, description="Required for candidate users")


class UserUpdate(BaseModel):
    """Schema for updating a user. Omitted fields are left unchanged."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    role: Optional[UserRole] = None
    modules: Optional[List[str]] = None
    linked_candidate_id: Optional[str] = None

    @field_validator("name", "password", "role", "modules", mode="before")
    @classmethod
    def reject_null(cls, v):
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class UserListResponse(BaseModel):
    """Schema for paginated user list."""
    users: List[UserResponse]
    total: int
    page: int
    page_size: int


class BlockUserRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500, description="Reason for blocking")


class UserActionResponse(BaseModel):
    """Response for block / unblock / delete."""
    success: bool
    message: str
    user_id: str
    action: str
