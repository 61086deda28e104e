"""
Deterrent cascade: turns one wildlife sighting into an optional, automatic
countermeasure.

Each sighting is persisted as ``detected`` first. It is then activated
(``detected -> deterred``) when the subsystem is enabled, auto-activation is
on, and the animal is inside the activation radius. The settings are a
snapshot handed in by the caller, never re-read here.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from farmguard.constants.pipeline import (
    ACTION_DETERRENT,
    DETECTION_DETECTED,
    DETECTION_SOURCE_ANALYSIS,
)
from farmguard.constants.wildlife import normalize_species, get_species_profile, SpeciesProfile
from farmguard.managers.activity import ActivityLogManager
from farmguard.managers.detections import AnimalDetectionManager, DeterrentSettingsSnapshot
from farmguard.models.detection import AnimalDetection

logger = logging.getLogger(__name__)


@dataclass
class CascadeResult:
    detection: AnimalDetection
    activated: bool
    profile: SpeciesProfile
    volume: Optional[int]
    reason: str


def compute_volume(base_volume: int, distance: float) -> int:
    """Louder for closer animals, saturating at 100; anything inside a meter counts as one meter."""
    scaled = base_volume * max(1.0, 100.0 / max(distance, 1.0)) / 2
    return max(0, min(100, round(scaled)))


def activation_decision(settings: DeterrentSettingsSnapshot, distance: Optional[float]) -> tuple[bool, str]:
    # Sightings without a distance estimate cannot be range-gated
    if not settings.is_enabled:
        return False, "deterrent disabled"
    if not settings.auto_activate:
        return False, "auto-activation off"
    if distance is not None and distance > settings.activation_distance:
        return False, f"out of range ({distance:g}m > {settings.activation_distance:g}m)"
    return True, "activated"


class DeterrentCascade:
    def __init__(self, detections: AnimalDetectionManager, activity: ActivityLogManager):
        self.detections = detections
        self.activity = activity

    async def run(
            self,
            *,
            animal_type: str,
            distance: Optional[float],
            confidence: float,
            settings: DeterrentSettingsSnapshot,
            source: str,
            name: Optional[str] = None,
            latitude: Optional[float] = None,
            longitude: Optional[float] = None,
            report_id: Optional[str] = None,
    ) -> CascadeResult:
        code = normalize_species(animal_type)
        profile = get_species_profile(code)

        # 1. Persist the sighting
        detection = await self.detections.create(AnimalDetection(
            animal_type=code,
            distance=distance,
            confidence=max(0.0, min(1.0, confidence)),
            status=DETECTION_DETECTED,
            deterrent_activated=False,
            latitude=latitude,
            longitude=longitude,
            source=source,
            report_id=report_id,
        ))

        # 2. Decide
        activate, reason = activation_decision(settings, distance)
        if not activate:
            logger.info(f"🐾 {code} recorded ({detection.uid}), deterrent not fired: {reason}")
            return CascadeResult(detection=detection, activated=False, profile=profile, volume=None, reason=reason)

        volume = compute_volume(settings.volume, distance) if distance is not None else settings.volume

        # 3. detected -> deterred, only once
        async with self.detections.session_factory() as session:
            swapped = await self.detections.mark_deterred(detection.uid, session=session)
            if not swapped:
                await session.rollback()
                logger.warning(f"Detection {detection.uid} was already handled, skipping activation")
                return CascadeResult(detection=detection, activated=False, profile=profile, volume=None,
                                     reason="already handled")

            # 4. Audit
            await self.activity.record(
                ACTION_DETERRENT,
                f"Deterrent activated for {name or profile.name} at "
                f"{f'{distance:g}m' if distance is not None else 'unknown distance'}: "
                f"{profile.frequency_hz}Hz, volume {volume}, effectiveness {profile.effectiveness}",
                {
                    "detectionId": detection.uid,
                    "animalType": code,
                    "distance": distance,
                    "frequency": profile.frequency_hz,
                    "effectiveness": profile.effectiveness,
                    "volume": volume,
                    "soundType": settings.sound_type,
                    "source": source,
                    "reportId": report_id,
                },
                session=session,
            )
            await session.commit()

        detection = await self.detections.fetch(detection.uid)
        logger.info(f"🔊 Deterrent fired for {code} ({detection.uid}) at {profile.frequency_hz}Hz, volume {volume}")
        return CascadeResult(detection=detection, activated=True, profile=profile, volume=volume, reason=reason)

    async def run_for_analysis(self, animal: dict, settings: DeterrentSettingsSnapshot,
                               report_id: str) -> CascadeResult:
        """Cascade for one animal entry of an analysis payload (confidence 0-100)."""
        confidence = animal.get("confidence")
        return await self.run(
            animal_type=animal.get("type") or animal.get("name"),
            distance=animal.get("estimatedDistance"),
            confidence=(confidence / 100.0) if confidence is not None else 0.0,
            settings=settings,
            source=DETECTION_SOURCE_ANALYSIS,
            name=animal.get("name"),
            report_id=report_id,
        )
