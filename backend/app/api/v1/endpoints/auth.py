"""
Authentication API endpoints.

Provides login, logout and current user endpoints.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.auth import UserLogin, TokenResponse, UserResponse, LogoutResponse
from backend.app.core.security import verify_password
from backend.app.core.jwt import create_user_token
from backend.app.core.dependencies import get_current_user
from backend.app.core.token_revocation import revoke_token
from backend.app.services.activity import log_activity, ActivityAction, ActivityEntity

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """
    Login user and return JWT token.

    Accepts username or email for login.
    Logs successful and failed login attempts.
    """
    result = await db.execute(
        select(User).where(
            or_(User.username == credentials.username, User.email == credentials.username)
        )
    )
    user = result.scalars().first()

    if not user or not verify_password(credentials.password, user.hashed_password):
        await log_activity(
            db,
            action=ActivityAction.LOGIN_FAILED,
            entity_type=ActivityEntity.USER,
            entity_id=user.id if user else None,
            description=f"Failed login for '{credentials.username}'",
            metadata={"reason": "Invalid password" if user else "User not found"}
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        await log_activity(
            db,
            action=ActivityAction.LOGIN_FAILED,
            entity_type=ActivityEntity.USER,
            entity_id=user.id,
            description=f"Blocked user '{user.username}' attempted to log in",
            metadata={"reason": "Account is inactive/blocked"}
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user account"
        )

    access_token = create_user_token(user)

    await log_activity(
        db,
        action=ActivityAction.LOGIN,
        entity_type=ActivityEntity.USER,
        entity_id=user.id,
        description=f"{user.name} logged in",
        actor={"user_id": user.id, "sub": user.username}
    )

    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        user_id=user.id,
        username=user.username,
        name=user.name,
        role=user.role,
        modules=list(user.modules or []),
        linked_candidate_id=user.linked_candidate_id
    )


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get current authenticated user information.

    Requires valid JWT token in Authorization header.
    """
    user = await db.get(User, current_user["user_id"])

    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found"
        )

    return UserResponse.model_validate(user)


@router.post("/logout", response_model=LogoutResponse)
async def logout(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Revoke the presented token.

    Other sessions of the same user stay valid.
    """
    await revoke_token(current_user["token"], current_user["user_id"])

    await log_activity(
        db,
        action=ActivityAction.LOGOUT,
        entity_type=ActivityEntity.USER,
        entity_id=current_user["user_id"],
        description=f"{current_user['sub']} logged out",
        actor=current_user
    )

    return LogoutResponse(success=True, message="Logged out")
