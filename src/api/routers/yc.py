from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from src.api.dependencies import get_sync_service
from src.api.schemas import SyncResponse
from src.companies import CompanySyncService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/yc", tags=["yc"])


@router.get("/sync", summary="Sync the YC directory into the database and vector index", response_model=SyncResponse)
async def sync_yc_companies(
    service: CompanySyncService = Depends(get_sync_service),
) -> SyncResponse:
    """Sequential sync; the first failing company aborts the whole run."""
    try:
        result = await service.sync()
    except Exception as exc:
        logger.exception("YC sync failed")
        raise HTTPException(status_code=500, detail=f"Sync failed: {exc}") from exc
    return SyncResponse(**result)
