"""
User management API endpoints (admin only).

Staff users are ledger participants too, so deleting one that transactions
reference is refused; block them instead.
"""

from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.models.enums import UserRole
from backend.app.schemas.auth import UserResponse
from backend.app.schemas.user import (
    UserCreate, UserUpdate, UserListResponse, BlockUserRequest, UserActionResponse
)
from backend.app.core.guards import require_admin
from backend.app.core.security import get_password_hash
from backend.app.core.token_revocation import revoke_all_user_tokens, clear_user_token_revocation
from backend.app.services.activity import log_activity, ActivityAction, ActivityEntity
from backend.app.services.ledger_store import (
    get_user_or_404, get_candidate_or_404, ensure_staff_deletable, find_user_by_username
)

router = APIRouter(prefix="/users", tags=["Users"])


async def _active_admin_count(db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count(User.id)).where(User.role == UserRole.ADMIN, User.is_active == True)
    )
    return result.scalar() or 0


async def _validate_candidate_link(db: AsyncSession, role: UserRole, linked_candidate_id):
    if role == UserRole.CANDIDATE:
        if not linked_candidate_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Candidate users must be linked to a candidate (missing linked_candidate_id)"
            )
        await get_candidate_or_404(db, linked_candidate_id)


@router.get("", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(50, ge=1, le=100, description="Items per page"),
    role: Optional[UserRole] = Query(None, description="Filter by role"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    List users (admin-only).
    """
    count_query = select(func.count(User.id))
    query = select(User).order_by(User.created_at.desc(), User.name)

    if role:
        count_query = count_query.where(User.role == role)
        query = query.where(User.role == role)

    total = (await db.execute(count_query)).scalar()

    offset = (page - 1) * page_size
    result = await db.execute(query.offset(offset).limit(page_size))
    users = result.scalars().all()

    return UserListResponse(
        users=[UserResponse.model_validate(user) for user in users],
        total=total,
        page=page,
        page_size=page_size
    )


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: str,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    return UserResponse.model_validate(await get_user_or_404(db, user_id))


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a user (admin-only).

    Candidate users must point at an existing candidate record.
    """
    if await find_user_by_username(db, user_data.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already registered"
        )

    await _validate_candidate_link(db, user_data.role, user_data.linked_candidate_id)

    new_user = User(
        name=user_data.name,
        username=user_data.username,
        email=user_data.email,
        hashed_password=get_password_hash(user_data.password),
        role=user_data.role,
        modules=list(user_data.modules),
        linked_candidate_id=user_data.linked_candidate_id,
        is_active=True
    )

    db.add(new_user)
    await db.commit()
    await db.refresh(new_user)

    await log_activity(
        db,
        action=ActivityAction.CREATE,
        entity_type=ActivityEntity.USER,
        entity_id=new_user.id,
        description=f"Created {new_user.role.value} user '{new_user.username}'",
        actor=admin
    )

    return UserResponse.model_validate(new_user)


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: str,
    user_data: UserUpdate,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Update a user (admin-only).

    Role or module changes take effect on the user's next request.
    """
    user = await get_user_or_404(db, user_id)
    changes = user_data.model_dump(exclude_unset=True)

    new_role = changes.get("role", user.role)
    if user.role == UserRole.ADMIN and new_role != UserRole.ADMIN and await _active_admin_count(db) <= 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot demote the last admin"
        )

    await _validate_candidate_link(db, new_role, changes.get("linked_candidate_id", user.linked_candidate_id))

    password = changes.pop("password", None)
    if password:
        user.hashed_password = get_password_hash(password)

    for field, value in changes.items():
        setattr(user, field, value)

    await db.commit()
    await db.refresh(user)

    await log_activity(
        db,
        action=ActivityAction.UPDATE,
        entity_type=ActivityEntity.USER,
        entity_id=user.id,
        description=f"Updated user '{user.username}'",
        actor=admin,
        metadata={"fields": sorted(user_data.model_dump(exclude_unset=True).keys())}
    )

    return UserResponse.model_validate(user)


@router.post("/{user_id}/block", response_model=UserActionResponse)
async def block_user(
    user_id: str,
    request: BlockUserRequest,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Block a user and revoke all their active tokens (admin-only).

    This immediately terminates all user sessions.
    """
    target_user = await get_user_or_404(db, user_id)

    # Prevent blocking self
    if target_user.id == admin["user_id"]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot block yourself"
        )

    if not target_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User is already blocked"
        )

    target_user.is_active = False
    await db.commit()

    await revoke_all_user_tokens(user_id)

    await log_activity(
        db,
        action=ActivityAction.BLOCK,
        entity_type=ActivityEntity.USER,
        entity_id=target_user.id,
        description=f"Blocked user '{target_user.username}'",
        actor=admin,
        metadata={"reason": request.reason} if request.reason else None
    )

    return UserActionResponse(
        success=True,
        message=f"User '{target_user.username}' has been blocked",
        user_id=user_id,
        action=ActivityAction.BLOCK
    )


@router.post("/{user_id}/unblock", response_model=UserActionResponse)
async def unblock_user(
    user_id: str,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Unblock a user and clear token revocations (admin-only).
    """
    target_user = await get_user_or_404(db, user_id)

    if target_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User is already active"
        )

    target_user.is_active = True
    await db.commit()

    await clear_user_token_revocation(user_id)

    await log_activity(
        db,
        action=ActivityAction.UNBLOCK,
        entity_type=ActivityEntity.USER,
        entity_id=target_user.id,
        description=f"Unblocked user '{target_user.username}'",
        actor=admin
    )

    return UserActionResponse(
        success=True,
        message=f"User '{target_user.username}' has been unblocked",
        user_id=user_id,
        action=ActivityAction.UNBLOCK
    )


@router.delete("/{user_id}", response_model=UserActionResponse)
async def delete_user(
    user_id: str,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete a user (admin-only).

    Refused for yourself, for the last admin, and for staff that
    transactions reference.
    """
    target_user = await get_user_or_404(db, user_id)

    if target_user.id == admin["user_id"]:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete yourself"
        )

    if target_user.role == UserRole.ADMIN and await _active_admin_count(db) <= 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete the last admin"
        )

    await ensure_staff_deletable(db, target_user)

    username = target_user.username
    await db.delete(target_user)
    await db.commit()

    await revoke_all_user_tokens(user_id)

    await log_activity(
        db,
        action=ActivityAction.DELETE,
        entity_type=ActivityEntity.USER,
        entity_id=user_id,
        description=f"Deleted user '{username}'",
        actor=admin
    )

    return UserActionResponse(
        success=True,
        message=f"User '{username}' has been deleted",
        user_id=user_id,
        action=ActivityAction.DELETE
    )
