from datetime import datetime
from typing import Optional

from pydantic import Field

from farmguard.schemas.report import CamelModel


# --- Requests ---

class DetectionRequest(CamelModel):
    type: str = Field(..., min_length=1, max_length=100, description="Animal type code, e.g. wild_boar")
    distance: float = Field(..., gt=0, description="Distance from the deterrent in meters")
    confidence: float = Field(0.9, ge=0, le=1)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)


class SimulateCameraRequest(CamelModel):
    type: Optional[str] = Field(None, min_length=1, max_length=100)
    distance: Optional[float] = Field(None, gt=0)
    confidence: Optional[float] = Field(None, ge=0, le=1)
    camera_id: str = "sim-cam-01"


class DeterrentSettingsUpdate(CamelModel):
    is_enabled: Optional[bool] = None
    auto_activate: Optional[bool] = None
    volume: Optional[int] = Field(None, ge=0, le=100)
    sound_type: Optional[str] = Field(None, min_length=1, max_length=50)
    activation_distance: Optional[float] = Field(None, gt=0)


# --- API Response ---

class AnimalDetectionResponse(CamelModel):
    id: str
    animal_type: str
    distance: Optional[float] = None
    confidence: float
    status: str
    deterrent_activated: bool
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    source: str
    report_id: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record) -> "AnimalDetectionResponse":
        return cls(
            id=record.uid,
            animal_type=record.animal_type,
            distance=record.distance,
            confidence=record.confidence,
            status=record.status,
            deterrent_activated=bool(record.deterrent_activated),
            latitude=record.latitude,
            longitude=record.longitude,
            source=record.source,
            report_id=record.report_id,
            created_at=record.created_at,
        )


class DeterrentOutcome(CamelModel):
    detection: AnimalDetectionResponse
    deterrent_activated: bool
    species_name: str
    frequency: int  # Hz
    effectiveness: str
    volume: Optional[int] = None
    reason: str


class SimulatedCameraResponse(DeterrentOutcome):
    camera_id: str
    simulated: bool = True


class DeterrentSettingsResponse(CamelModel):
    is_enabled: bool
    auto_activate: bool
    volume: int
    sound_type: str
    activation_distance: float
    persisted: bool
