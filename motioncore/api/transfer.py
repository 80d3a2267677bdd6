"""
Backup / Restore API endpoints.

Failures surface as `DataIOError` and are rendered by the application's
exception handler.
"""
from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from motioncore.core.database import get_db
from motioncore.core.logging import get_logger
from motioncore.services.transfer import DataIOService, TransferKind

logger = get_logger(__name__)
router = APIRouter()


@router.post("/{kind}/export")
async def export_data(
    kind: TransferKind,
    db: AsyncSession = Depends(get_db),
):
    """
    Export every entity of a kind as a downloadable JSON backup.
    """
    result = await DataIOService(db).export(kind)
    return FileResponse(
        result.path,
        media_type="application/json",
        filename=result.path.name,
        headers={"X-Export-Count": str(result.count)},
    )


@router.post("/{kind}/import")
async def import_data(
    kind: TransferKind,
    file: UploadFile = File(..., description="JSON backup file"),
    db: AsyncSession = Depends(get_db),
):
    """
    Import a JSON backup. All items are added as new entities.
    """
    raw = await file.read()
    result = await DataIOService(db).import_bytes(kind, raw)

    logger.info(
        "Backup imported",
        kind=kind.value,
        filename=file.filename,
        imported=result.imported,
        warnings=len(result.warnings),
    )
    return result.to_dict()


@router.delete("/{kind}")
async def delete_data(
    kind: TransferKind,
    db: AsyncSession = Depends(get_db),
):
    """
    Delete every entity of a kind.
    """
    deleted = await DataIOService(db).delete_all(kind)
    return {"deleted": deleted}
