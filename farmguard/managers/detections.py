from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, AsyncEngine

from farmguard.constants.pipeline import DETECTION_DETECTED, DETECTION_DETERRED
from farmguard.managers.base import GenericManager
from farmguard.models.detection import AnimalDetection, DeterrentSetting


@dataclass(frozen=True)
class DeterrentSettingsSnapshot:
    """Immutable view of the deterrent configuration taken once per cascade."""
    is_enabled: bool
    auto_activate: bool
    volume: int
    sound_type: str
    activation_distance: float
    persisted: bool = True

    @property
    def armed(self) -> bool:
        return self.is_enabled and self.auto_activate


class AnimalDetectionManager(GenericManager[AnimalDetection]):
    async def mark_deterred(self, uid: str, *, session: AsyncSession = None) -> bool:
        """detected -> deterred, at most once per detection."""
        return await self.compare_and_swap(
            uid,
            {"status": DETECTION_DETECTED},
            {"status": DETECTION_DETERRED, "deterrent_activated": True},
            session=session,
        )


class DeterrentSettingsManager(GenericManager[DeterrentSetting]):
    def __init__(self, engine: AsyncEngine, *, default_volume: int = 70, default_sound_type: str = "ultrasonic",
                 default_activation_distance: float = 50.0):
        super().__init__(engine)
        self.defaults = DeterrentSettingsSnapshot(
            is_enabled=False,
            auto_activate=False,
            volume=default_volume,
            sound_type=default_sound_type,
            activation_distance=default_activation_distance,
            persisted=False,
        )

    async def _current(self, session: AsyncSession = None) -> DeterrentSetting | None:
        records = await self.fetch_all(1, sorts=["created_at"], session=session)
        return records.items[0] if records.count else None

    async def snapshot(self, *, session: AsyncSession = None) -> DeterrentSettingsSnapshot:
        record = await self._current(session)
        if record is None:
            return self.defaults
        return DeterrentSettingsSnapshot(
            is_enabled=bool(record.is_enabled),
            auto_activate=bool(record.auto_activate),
            volume=int(record.volume),
            sound_type=record.sound_type,
            activation_distance=float(record.activation_distance),
        )

    async def save(self, updates: dict) -> DeterrentSettingsSnapshot:
        async with self.session_factory() as session:
            record = await self._current(session)
            if record is None:
                values = {
                    "is_enabled": self.defaults.is_enabled,
                    "auto_activate": self.defaults.auto_activate,
                    "volume": self.defaults.volume,
                    "sound_type": self.defaults.sound_type,
                    "activation_distance": self.defaults.activation_distance,
                    **updates,
                }
                await self.create(DeterrentSetting(**values), session=session)
            else:
                await self.update(record.uid, updates, session=session)
            await session.commit()
            return await self.snapshot(session=session)
