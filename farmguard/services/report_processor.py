"""
Report processing state machine.

    pending --process--> complete

A report is moved to ``complete`` by a single compare-and-swap on its status,
in the same transaction as its scan analytic and activity log rows. Any
failure before that commit leaves the report ``pending`` with nothing
written. The wildlife cascade runs after the commit and cannot undo it.
"""
import logging
from dataclasses import dataclass, field

from fastapi import HTTPException

from farmguard.constants.languages import DEFAULT_LANGUAGE
from farmguard.constants.pipeline import REPORT_PENDING, ACTION_DETECTION, ACTION_DETERRENT
from farmguard.exceptions import ReportNotPending, ReportProcessingFailed
from farmguard.managers.activity import ActivityLogManager, ScanAnalyticManager
from farmguard.managers.detections import DeterrentSettingsManager
from farmguard.managers.reports import ReportManager
from farmguard.models.report import Report
from farmguard.services.detection import enrich_analysis, primary_detection
from farmguard.services.deterrent import DeterrentCascade, CascadeResult
from farmguard.services.gemini import GeminiService

logger = logging.getLogger(__name__)


@dataclass
class CascadeSummary:
    results: list[CascadeResult] = field(default_factory=list)
    failures: list[str] = field(default_factory=list)

    @property
    def activated(self) -> int:
        return sum(1 for result in self.results if result.activated)


class ReportProcessor:
    def __init__(
            self,
            reports: ReportManager,
            analytics: ScanAnalyticManager,
            activity: ActivityLogManager,
            deterrent_settings: DeterrentSettingsManager,
            cascade: DeterrentCascade,
            gemini: GeminiService,
    ):
        self.reports = reports
        self.analytics = analytics
        self.activity = activity
        self.deterrent_settings = deterrent_settings
        self.cascade = cascade
        self.gemini = gemini

    async def process(self, report_id: str, language: str = None) -> Report:
        try:
            # 1. Load; 404 and 409 are terminal and write nothing
            report = await self.reports.fetch(report_id)
            if report.status != REPORT_PENDING:
                raise ReportNotPending(report.uid, report.status)

            analysis = await self._analyse_and_commit(report, language or report.language or DEFAULT_LANGUAGE)
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"❌ Processing failed for report {report_id}: {e}", exc_info=True)
            raise ReportProcessingFailed() from e

        # 7. Wildlife cascade, after the report is committed
        animals = analysis.get("animals") or []
        if analysis.get("animalsDetected") and animals:
            try:
                await self._run_cascade(report.uid, animals)
            except Exception as e:
                logger.error(f"Deterrent cascade aborted for report {report.uid}: {e}", exc_info=True)

        return await self.reports.fetch(report.uid)

    async def _analyse_and_commit(self, report: Report, language: str) -> dict:
        # 2. Analyse (never raises for model problems)
        outcome = await self.gemini.analyze_image(report.image_url, language=language)
        payload = outcome.analysis.to_payload()

        # 3. Derived metrics
        analysis = enrich_analysis(
            payload,
            model=outcome.model,
            processing_time_ms=outcome.processing_time_ms,
            language=language,
        )
        severity = analysis.get("severity") or "none"
        crop_type = analysis.get("cropType")
        if not crop_type or crop_type == "unknown":
            crop_type = report.crop_type or "unknown"
        category, name, confidence = primary_detection(analysis)
        if confidence is None:
            confidence = analysis["avgConfidence"]

        # 4.-6. One transaction: status swap, scan analytic, activity log
        async with self.reports.session_factory() as session:
            swapped = await self.reports.complete(report.uid, analysis, severity, crop_type, session=session)
            if not swapped:
                await session.rollback()
                current = await self.reports.fetch(report.uid)
                raise ReportNotPending(report.uid, current.status)

            await self.analytics.record(
                report.uid,
                category,
                name,
                round(confidence / 100.0, 4),
                outcome.processing_time_ms,
                session=session,
            )
            await self.activity.record(
                ACTION_DETECTION,
                self._describe(analysis, category, name),
                {
                    "reportId": report.uid,
                    "category": category,
                    "detection": name,
                    "severity": severity,
                    "overallHealth": analysis["overallHealth"],
                    "avgConfidence": analysis["avgConfidence"],
                    "degraded": outcome.degraded,
                },
                session=session,
            )
            await session.commit()

        logger.info(f"📋 Report {report.uid} complete: {category}/{name}, health {analysis['overallHealth']}")
        return analysis

    @staticmethod
    def _describe(analysis: dict, category: str, name: str) -> str:
        if analysis.get("degraded"):
            return "Scan completed without analysis (image could not be analysed)"
        if category == "healthy":
            return f"Scan completed: crop healthy (health {analysis['overallHealth']}/100)"
        return (
            f"Scan completed: {category} '{name}' detected, severity {analysis.get('severity', 'none')} "
            f"(health {analysis['overallHealth']}/100)"
        )

    async def _run_cascade(self, report_id: str, animals: list[dict]) -> CascadeSummary:
        # Settings are read once for the whole batch
        settings = await self.deterrent_settings.snapshot()
        summary = CascadeSummary()

        for animal in animals:
            try:
                summary.results.append(await self.cascade.run_for_analysis(animal, settings, report_id))
            except Exception as e:
                logger.error(f"Deterrent cascade failed for {animal.get('name') or animal.get('type')}: {e}",
                             exc_info=True)
                summary.failures.append(str(animal.get("name") or animal.get("type")))

        names = [str(animal.get("name") or animal.get("type")) for animal in animals]
        await self.activity.record(
            ACTION_DETERRENT,
            f"Wildlife detected in report {report_id}: {', '.join(names)} "
            f"({summary.activated} deterrent activation(s))",
            {
                "reportId": report_id,
                "animals": names,
                "activated": summary.activated,
                "detectionIds": [result.detection.uid for result in summary.results],
                "failed": summary.failures,
                "settingsEnabled": settings.is_enabled,
            },
        )
        return summary
