from fastapi import APIRouter, Depends, HTTPException
import logging

from farmguard.constants.pipeline import ACTION_SYSTEM
from farmguard.dependencies import (
    get_admin_stats_service,
    get_deterrent_settings_manager,
    get_activity_manager,
)
from farmguard.managers import ActivityLogManager, DeterrentSettingsManager, DeterrentSettingsSnapshot
from farmguard.schemas.admin import AutomationStatus
from farmguard.schemas.detection import DeterrentSettingsUpdate, DeterrentSettingsResponse
from farmguard.services.admin_stats import AdminStatsService

logger = logging.getLogger(__name__)

router = APIRouter()


def _settings_response(snapshot: DeterrentSettingsSnapshot) -> DeterrentSettingsResponse:
    return DeterrentSettingsResponse(
        is_enabled=snapshot.is_enabled,
        auto_activate=snapshot.auto_activate,
        volume=snapshot.volume,
        sound_type=snapshot.sound_type,
        activation_distance=snapshot.activation_distance,
        persisted=snapshot.persisted,
    )


@router.get("/automation/status", response_model=AutomationStatus)
async def automation_status(service: AdminStatsService = Depends(get_admin_stats_service)):
    """Deterrent mode plus detection and activity counts over the last 24 hours."""
    try:
        return await service.automation_status()
    except Exception as e:
        logger.error(f"Failed to build automation status: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load automation status")


@router.get("/deterrent/settings", response_model=DeterrentSettingsResponse)
async def get_deterrent_settings(
    settings_manager: DeterrentSettingsManager = Depends(get_deterrent_settings_manager),
):
    return _settings_response(await settings_manager.snapshot())


@router.put("/deterrent/settings", response_model=DeterrentSettingsResponse)
async def update_deterrent_settings(
    payload: DeterrentSettingsUpdate,
    settings_manager: DeterrentSettingsManager = Depends(get_deterrent_settings_manager),
    activity: ActivityLogManager = Depends(get_activity_manager),
):
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    snapshot = await settings_manager.save(updates)
    await activity.record(
        ACTION_SYSTEM,
        f"Deterrent settings updated: {', '.join(sorted(updates)) or 'no changes'}",
        {"updates": payload.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)},
    )
    logger.info(f"⚙️ Deterrent settings now enabled={snapshot.is_enabled} auto={snapshot.auto_activate} "
                f"distance={snapshot.activation_distance:g}m")
    return _settings_response(snapshot)
