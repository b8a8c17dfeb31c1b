"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from backend.app.api.v1.endpoints import (
    auth, users, accounts, candidates, transactions,
    reports, backup, activity_logs
)

router = APIRouter()

# Authentication endpoints
router.include_router(auth.router)

# Admin endpoints
router.include_router(users.router)
router.include_router(backup.router)
router.include_router(activity_logs.router)

# Ledger records
router.include_router(accounts.router)
router.include_router(candidates.router)
router.include_router(transactions.router)

# Derived reports
router.include_router(reports.router)
