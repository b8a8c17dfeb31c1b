"""
Backup API Endpoints (admin only).

Export and restore the full ledger as one camelCase JSON document.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from backend.app.db.session import get_db
from backend.app.core.guards import require_admin
from backend.app.schemas.backup import BackupDocument, RestoreResponse
from backend.app.services.backup import export_backup, restore_backup

router = APIRouter(prefix="/backup", tags=["Backup"])


@router.get("/export", response_model=BackupDocument, response_model_by_alias=True)
async def export_data(
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Export users, candidates, accounts and transactions.

    The document includes password hashes; store it accordingly.
    """
    return await export_backup(db)


@router.post("/import", response_model=RestoreResponse)
async def import_data(
    document: BackupDocument,
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Replace all ledger data with a backup document.

    The acting admin is kept if the backup does not contain them.
    """
    return await restore_backup(db, document, admin)
