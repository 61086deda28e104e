from sqlalchemy.ext.asyncio import AsyncSession

from farmguard.constants.pipeline import REPORT_PENDING, REPORT_COMPLETE
from farmguard.managers.base import GenericManager, ListModel
from farmguard.models.report import Report


class ReportManager(GenericManager[Report]):
    async def capture(self, image_url: str, crop_type: str = None, language: str = "en") -> Report:
        report = Report(
            image_url=image_url,
            status=REPORT_PENDING,
            analysis={},
            crop_type=crop_type or "unknown",
            language=language,
        )
        return await self.create(report)

    async def complete(self, uid: str, analysis: dict, severity: str, crop_type: str,
                       *, session: AsyncSession = None) -> bool:
        """pending -> complete; False when the report is no longer pending."""
        return await self.compare_and_swap(
            uid,
            {"status": REPORT_PENDING},
            {"status": REPORT_COMPLETE, "analysis": analysis, "severity": severity, "crop_type": crop_type},
            session=session,
        )

    async def list_recent(self) -> ListModel:
        return await self.fetch_all(sorts=["-created_at"])

    async def list_complete(self, *, session: AsyncSession = None) -> ListModel:
        return await self.fetch_all(filters={"status": REPORT_COMPLETE}, sorts=["-created_at"], session=session)

    async def bulk_delete(self, uids: list[str]) -> int:
        if not uids:
            return 0
        return await self.delete_all({"uid": list(uids)})
