"""
Database seeding script.

Creates the tables, the default Office Cash account, the bootstrap admin
and a demo finance staff user. Safe to run repeatedly.
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from backend.app.db.session import AsyncSessionLocal, engine, Base
from backend.app.models.user import User
from backend.app.models.candidate import Candidate  # noqa: F401
from backend.app.models.transaction import Transaction  # noqa: F401
from backend.app.models.activity_log import ActivityLog  # noqa: F401
from backend.app.models.enums import UserRole
from backend.app.core.config import settings
from backend.app.core.security import get_password_hash
from backend.app.services.bootstrap import ensure_default_accounts, ensure_default_admin
from backend.app.services.ledger_store import find_user_by_username


async def seed_data():
    """
    Seed the ledger.

    Creates:
    - the system Cash account
    - 1 ADMIN user (only on an empty users table)
    - 1 STAFF user with the candidates and finance modules
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("Starting seeding...")

        if await ensure_default_accounts(db):
            print(f"Created system account '{settings.default_cash_account_name}'")
        else:
            print("System cash account already exists, skipping")

        if await ensure_default_admin(db):
            print(
                f"Created ADMIN user (username: {settings.bootstrap_admin_username}, "
                f"password: {settings.bootstrap_admin_password})"
            )
        else:
            print("Users already exist, skipping admin creation")

        if await find_user_by_username(db, "accounts"):
            print("Staff user 'accounts' already exists, skipping")
        else:
            db.add(User(
                name="Accounts Desk",
                username="accounts",
                hashed_password=get_password_hash("accounts123"),
                role=UserRole.STAFF,
                modules=["candidates", "finance"],
                is_active=True
            ))
            await db.commit()
            print("Created STAFF user (username: accounts, password: accounts123)")

        print("Seeding completed.")


if __name__ == "__main__":
    asyncio.run(seed_data())
