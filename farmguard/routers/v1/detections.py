import random
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends

from farmguard.constants.pipeline import (
    ACTION_DETECTION,
    DETECTION_SOURCE_MANUAL,
    DETECTION_SOURCE_SIMULATED,
)
from farmguard.constants.wildlife import SPECIES_CATALOGUE
from farmguard.dependencies import (
    get_deterrent_cascade,
    get_deterrent_settings_manager,
    get_detection_manager,
    get_activity_manager,
)
from farmguard.managers import AnimalDetectionManager, DeterrentSettingsManager, ActivityLogManager
from farmguard.schemas.detection import (
    DetectionRequest,
    SimulateCameraRequest,
    AnimalDetectionResponse,
    DeterrentOutcome,
    SimulatedCameraResponse,
)
from farmguard.services.deterrent import DeterrentCascade, CascadeResult

logger = logging.getLogger(__name__)

router = APIRouter()

SIMULATED_DISTANCE_RANGE = (5.0, 120.0)
SIMULATED_CONFIDENCE_RANGE = (0.6, 0.99)


def _outcome_fields(result: CascadeResult) -> dict:
    return dict(
        detection=AnimalDetectionResponse.from_record(result.detection),
        deterrent_activated=result.activated,
        species_name=result.profile.name,
        frequency=result.profile.frequency_hz,
        effectiveness=result.profile.effectiveness,
        volume=result.volume,
        reason=result.reason,
    )


@router.post("/detections", response_model=DeterrentOutcome, status_code=201)
async def submit_detection(
    payload: DetectionRequest,
    cascade: DeterrentCascade = Depends(get_deterrent_cascade),
    settings_manager: DeterrentSettingsManager = Depends(get_deterrent_settings_manager),
    activity: ActivityLogManager = Depends(get_activity_manager),
):
    """Manual wildlife sighting; fires the deterrent when the animal is inside the activation radius."""
    settings = await settings_manager.snapshot()
    result = await cascade.run(
        animal_type=payload.type,
        distance=payload.distance,
        confidence=payload.confidence,
        settings=settings,
        source=DETECTION_SOURCE_MANUAL,
        latitude=payload.latitude,
        longitude=payload.longitude,
    )
    await activity.record(
        ACTION_DETECTION,
        f"Manual detection: {result.profile.name} at {payload.distance:g}m ({result.reason})",
        {"detectionId": result.detection.uid, "animalType": result.detection.animal_type,
         "distance": payload.distance, "deterrentActivated": result.activated},
    )
    return DeterrentOutcome(**_outcome_fields(result))


@router.post("/detections/simulate-camera", response_model=SimulatedCameraResponse)
async def simulate_camera(
    payload: Optional[SimulateCameraRequest] = Body(None),
    cascade: DeterrentCascade = Depends(get_deterrent_cascade),
    settings_manager: DeterrentSettingsManager = Depends(get_deterrent_settings_manager),
    activity: ActivityLogManager = Depends(get_activity_manager),
):
    """Synthetic camera trigger; any field left out is randomised."""
    payload = payload or SimulateCameraRequest()
    animal_type = payload.type or random.choice(list(SPECIES_CATALOGUE))
    distance = payload.distance or round(random.uniform(*SIMULATED_DISTANCE_RANGE), 1)
    confidence = payload.confidence if payload.confidence is not None \
        else round(random.uniform(*SIMULATED_CONFIDENCE_RANGE), 2)

    logger.info(f"📹 Simulated trigger on {payload.camera_id}: {animal_type} at {distance:g}m")
    settings = await settings_manager.snapshot()
    result = await cascade.run(
        animal_type=animal_type,
        distance=distance,
        confidence=confidence,
        settings=settings,
        source=DETECTION_SOURCE_SIMULATED,
    )
    await activity.record(
        ACTION_DETECTION,
        f"Camera {payload.camera_id} (simulated): {result.profile.name} at {distance:g}m ({result.reason})",
        {"detectionId": result.detection.uid, "cameraId": payload.camera_id, "simulated": True,
         "deterrentActivated": result.activated},
    )
    return SimulatedCameraResponse(**_outcome_fields(result), camera_id=payload.camera_id)


@router.get("/detections", response_model=list[AnimalDetectionResponse])
async def list_detections(
    limit: int = 50,
    detections: AnimalDetectionManager = Depends(get_detection_manager),
):
    records = await detections.fetch_all(max(1, min(limit, 500)), sorts=["-created_at"])
    return [AnimalDetectionResponse.from_record(record) for record in records.items]
