"""
Authentication Pydantic schemas.

Defines request and response schemas for authentication endpoints.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from backend.app.models.enums import UserRole


class UserLogin(BaseModel):
    """
    Schema for user login.

    Used by POST /auth/login endpoint.
    Supports login with either username or email.
    """
    username: str = Field(..., description="Username or email")
    password: str = Field(..., description="Password")


class TokenResponse(BaseModel):
    """
    Schema for JWT token response.

    Returned by a successful login.
    """
    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    user_id: str = Field(..., description="User ID")
    username: str = Field(..., description="Username")
    name: str = Field(..., description="Display name")
    role: UserRole = Field(..., description="User role")
    modules: List[str] = Field(default_factory=list, description="Enabled modules (staff)")
    linked_candidate_id: Optional[str] = Field(default=None, description="Candidate record (candidate users)")


class UserResponse(BaseModel):
    """
    Schema for user information response.

    Used by GET /auth/me and the user management endpoints.
    """
    id: str
    name: str
    username: str
    email: Optional[str] = None
    role: UserRole
    modules: List[str] = []
    linked_candidate_id: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True  # Pydantic v2 (was orm_mode in v1)


class LogoutResponse(BaseModel):
    success: bool
    message: str
