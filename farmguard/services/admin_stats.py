from datetime import datetime, timedelta, UTC
from typing import Iterable

from farmguard.constants.pipeline import (
    ACCURACY_RATE_PLACEHOLDER,
    ACTIVITY_ACTIONS,
    AUTOMATION_WINDOW_HOURS,
    CATEGORY_DISEASE,
    CATEGORY_HEALTHY,
    CATEGORY_INSECT,
    CATEGORY_WILDLIFE,
    DETECTION_DETERRED,
    RECENT_SCANS_LIMIT,
    SCAN_CATEGORIES,
)
from farmguard.managers.activity import ActivityLogManager, ScanAnalyticManager
from farmguard.managers.detections import AnimalDetectionManager, DeterrentSettingsManager
from farmguard.managers.reports import ReportManager
from farmguard.models.report import Report
from farmguard.schemas.admin import AdminStats, AutomationStatus, CategoryCount, RecentScan
from farmguard.schemas.analysis import clamp_confidence
from farmguard.services.detection import collect_confidences


def _sort_key(report: Report) -> float:
    created = report.created_at
    if created is None:
        return 0.0
    if created.tzinfo is None:
        created = created.replace(tzinfo=UTC)
    return created.timestamp()


def build_admin_stats(reports: Iterable[Report]) -> AdminStats:
    """
    Re-derive dashboard statistics from each report's embedded analysis.
    The scan_analytics table is deliberately not consulted.
    """
    counts = {category: 0 for category in SCAN_CATEGORIES}
    confidences: list[float] = []
    rows: list[tuple[float, RecentScan]] = []
    total = 0

    for report in reports:
        total += 1
        analysis = report.analysis if isinstance(report.analysis, dict) else {}
        flags = {
            CATEGORY_DISEASE: bool(analysis.get("diseaseDetected")),
            CATEGORY_INSECT: bool(analysis.get("pestsDetected")),
            CATEGORY_WILDLIFE: bool(analysis.get("animalsDetected")),
        }
        for category, flagged in flags.items():
            if flagged:
                counts[category] += 1
        if not any(flags.values()):
            counts[CATEGORY_HEALTHY] += 1

        confidences.extend(collect_confidences(analysis, keys=("diseases", "pests")))

        key = _sort_key(report)
        for source, category in (("diseases", CATEGORY_DISEASE), ("pests", CATEGORY_INSECT)):
            entries = analysis.get(source) if isinstance(analysis.get(source), list) else []
            for index, entry in enumerate(e for e in entries if isinstance(e, dict)):
                rows.append((key, RecentScan(
                    id=f"{report.uid}-{source}-{index}",
                    report_id=report.uid,
                    category=category,
                    name=str(entry.get("name") or category),
                    confidence=clamp_confidence(entry.get("confidence")),
                    crop_type=report.crop_type or "unknown",
                    created_at=report.created_at,
                )))

    # Stable sort keeps each report's diseases before its pests
    rows.sort(key=lambda row: row[0], reverse=True)

    return AdminStats(
        total_scans=total,
        avg_confidence=round(sum(confidences) / len(confidences), 1) if confidences else 0,
        accuracy_rate=ACCURACY_RATE_PLACEHOLDER,
        category_breakdown=[
            CategoryCount(category=category, count=count) for category, count in counts.items() if count
        ],
        recent_scans=[row for _, row in rows[:RECENT_SCANS_LIMIT]],
    )


class AdminStatsService:
    def __init__(
            self,
            reports: ReportManager,
            detections: AnimalDetectionManager,
            deterrent_settings: DeterrentSettingsManager,
            analytics: ScanAnalyticManager,
            activity: ActivityLogManager,
    ):
        self.reports = reports
        self.detections = detections
        self.deterrent_settings = deterrent_settings
        self.analytics = analytics
        self.activity = activity

    async def stats(self) -> AdminStats:
        records = await self.reports.list_complete()
        return build_admin_stats(records.items)

    async def automation_status(self, now: datetime = None) -> AutomationStatus:
        now = now or datetime.now(UTC)
        since = now - timedelta(hours=AUTOMATION_WINDOW_HOURS)
        window = {"created_at": {">=": since}}

        settings = await self.deterrent_settings.snapshot()
        detections = await self.detections.fetch_all(filters=dict(window), sorts=["-created_at"])
        deterred = sum(1 for d in detections.items if d.status == DETECTION_DETERRED)
        scans = await self.analytics.count(dict(window))
        activity_counts = {
            action: await self.activity.count({**window, "action": action}) for action in ACTIVITY_ACTIONS
        }

        if settings.armed:
            mode = "active"
        elif settings.is_enabled:
            mode = "monitoring"
        else:
            mode = "disabled"

        return AutomationStatus(
            window_hours=AUTOMATION_WINDOW_HOURS,
            mode=mode,
            deterrent_enabled=settings.is_enabled,
            auto_activate=settings.auto_activate,
            activation_distance=settings.activation_distance,
            detections_total=detections.count,
            detections_deterred=deterred,
            activation_rate=round(deterred / detections.count * 100, 1) if detections.count else 0.0,
            last_detection_at=detections.items[0].created_at if detections.count else None,
            scans_processed=scans,
            activity_counts=activity_counts,
        )
