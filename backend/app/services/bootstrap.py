"""
First-run bootstrap.

Creates the default Office Cash account and, on an empty users table,
the initial administrator.
"""

import logging
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.security import get_password_hash
from backend.app.models.enums import UserRole
from backend.app.models.ledger_account import LedgerAccount
from backend.app.models.ledger_enums import AccountType
from backend.app.models.user import User

logger = logging.getLogger(__name__)

ALL_MODULES = ["candidates", "finance", "users"]


async def ensure_default_accounts(db: AsyncSession) -> bool:
    """
    Create the system Cash account if it is missing.

    Returns:
        True if the account was created
    """
    existing = await db.get(LedgerAccount, settings.default_cash_account_id)
    if existing:
        return False

    db.add(LedgerAccount(
        id=settings.default_cash_account_id,
        name=settings.default_cash_account_name,
        type=AccountType.CASH,
        opening_balance=0.0,
        is_system=True,
    ))
    await db.commit()
    logger.info("Created default cash account '%s'", settings.default_cash_account_id)
    return True


async def ensure_default_admin(db: AsyncSession) -> bool:
    """
    Create the bootstrap administrator when no user exists yet.

    Returns:
        True if the admin was created
    """
    result = await db.execute(select(func.count(User.id)))
    if result.scalar():
        return False

    db.add(User(
        name=settings.bootstrap_admin_name,
        username=settings.bootstrap_admin_username,
        hashed_password=get_password_hash(settings.bootstrap_admin_password),
        role=UserRole.ADMIN,
        modules=list(ALL_MODULES),
        is_active=True,
    ))
    await db.commit()
    logger.warning(
        "Created bootstrap admin '%s'; change its password", settings.bootstrap_admin_username
    )
    return True


async def bootstrap_ledger(db: AsyncSession) -> None:
    await ensure_default_accounts(db)
    await ensure_default_admin(db)
