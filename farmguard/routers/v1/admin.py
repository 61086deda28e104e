from fastapi import APIRouter, Body, Depends, HTTPException
import logging
from typing import Optional

from farmguard.constants.pipeline import ACTION_SYSTEM
from farmguard.dependencies import get_admin_stats_service, get_activity_manager
from farmguard.managers import ActivityLogManager
from farmguard.schemas.admin import AdminStats, AccuracyCorrection, AccuracyCorrectionAck
from farmguard.services.admin_stats import AdminStatsService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/admin/stats", response_model=AdminStats)
async def get_admin_stats(service: AdminStatsService = Depends(get_admin_stats_service)):
    try:
        return await service.stats()
    except Exception as e:
        logger.error(f"Failed to build admin stats: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load admin statistics")


@router.post("/admin/scans/{scan_id}/accuracy", response_model=AccuracyCorrectionAck)
async def submit_accuracy_correction(
    scan_id: str,
    payload: Optional[AccuracyCorrection] = Body(None),
    activity: ActivityLogManager = Depends(get_activity_manager),
):
    # Corrections are only logged; nothing feeds back into stored analyses yet
    meta = {"scanId": scan_id, **(payload.model_dump(by_alias=True, exclude_none=True) if payload else {})}
    await activity.record(ACTION_SYSTEM, f"Accuracy correction received for scan {scan_id}", meta)
    return AccuracyCorrectionAck(message="Correction recorded", scan_id=scan_id)
