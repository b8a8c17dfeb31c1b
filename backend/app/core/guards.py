"""
Security guards for role-based and module-based access control.

Provides dependencies for protecting endpoints.
"""

from typing import List
from fastapi import Depends, HTTPException, status
from backend.app.models.enums import UserRole
from backend.app.core.dependencies import get_current_user


def require_role(allowed_roles: List[UserRole]):
    """
    Dependency factory for role-based access control.

    Usage:
        @router.get("/users")
        async def list_users(current_user: dict = Depends(require_role([UserRole.ADMIN]))):
            ...

    Raises:
        HTTPException 403 if user role is not in allowed_roles
    """
    async def role_checker(current_user: dict = Depends(get_current_user)) -> dict:
        user_role_str = current_user.get("role")

        if not user_role_str:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Role information missing from token"
            )

        try:
            user_role = UserRole(user_role_str)
        except ValueError:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Invalid role in token"
            )

        if user_role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Required role: {', '.join([r.value for r in allowed_roles])}"
            )

        return current_user

    return role_checker


def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    """Dependency for admin-only endpoints."""
    if current_user.get("role") != UserRole.ADMIN.value:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )

    return current_user


def require_module(*modules: str):
    """
    Dependency factory for staff module permissions.

    Admins pass unconditionally. Staff must have at least one of `modules`
    in their module list. Candidate users never pass.

    Usage:
        @router.get("/accounts")
        async def list_accounts(current_user: dict = Depends(require_module("finance"))):
            ...
    """
    async def module_checker(current_user: dict = Depends(get_current_user)) -> dict:
        role = current_user.get("role")

        if role == UserRole.ADMIN.value:
            return current_user

        enabled = current_user.get("modules") or []
        if role == UserRole.STAFF.value and any(m in enabled for m in modules):
            return current_user

        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Access denied. Module '{', '.join(modules)}' is not enabled for this user"
        )

    return module_checker


def is_admin(current_user: dict) -> bool:
    return current_user.get("role") == UserRole.ADMIN.value


def ensure_candidate_access(candidate_id: str, current_user: dict) -> None:
    """
    Allow staff with the candidates or finance module, admins, and the
    candidate user linked to `candidate_id`.

    Raises:
        HTTPException 403 if access is denied
    """
    role = current_user.get("role")

    if role == UserRole.ADMIN.value:
        return

    if role == UserRole.STAFF.value:
        modules = current_user.get("modules") or []
        if "candidates" in modules or "finance" in modules:
            return

    if role == UserRole.CANDIDATE.value and current_user.get("linked_candidate_id") == candidate_id:
        return

    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Access denied. You do not have permission to access this candidate."
    )
