from sqlalchemy.ext.asyncio import AsyncSession

from farmguard.managers.base import GenericManager
from farmguard.models.activity import ActivityLog, ScanAnalytic


class ActivityLogManager(GenericManager[ActivityLog]):
    async def record(self, action: str, details: str, meta: dict = None,
                     *, session: AsyncSession = None) -> ActivityLog:
        return await self.create(ActivityLog(action=action, details=details, meta=meta or {}), session=session)


class ScanAnalyticManager(GenericManager[ScanAnalytic]):
    async def record(self, report_id: str, category: str, detection_name: str, confidence: float,
                     processing_time_ms: int, *, session: AsyncSession = None) -> ScanAnalytic:
        return await self.create(ScanAnalytic(
            report_id=report_id,
            category=category,
            detection_name=detection_name,
            confidence=confidence,
            processing_time_ms=processing_time_ms,
        ), session=session)
