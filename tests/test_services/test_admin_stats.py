import unittest
from datetime import datetime, timedelta, UTC

from farmguard.constants.pipeline import ACCURACY_RATE_PLACEHOLDER, REPORT_COMPLETE
from farmguard.models import Report
from farmguard.services.admin_stats import AdminStatsService, build_admin_stats
from tests.helpers import DatabaseTestCase


def _report(analysis: dict, minutes_ago: int = 0, crop_type: str = "maize") -> Report:
    return Report(
        image_url="https://example.com/a.jpg",
        status=REPORT_COMPLETE,
        crop_type=crop_type,
        analysis=analysis,
        created_at=datetime.now(UTC) - timedelta(minutes=minutes_ago),
    )


class TestBuildAdminStats(unittest.TestCase):

    def test_empty(self):
        stats = build_admin_stats([])
        self.assertEqual(stats.total_scans, 0)
        self.assertEqual(stats.avg_confidence, 0)
        self.assertEqual(stats.accuracy_rate, ACCURACY_RATE_PLACEHOLDER)
        self.assertEqual(stats.category_breakdown, [])
        self.assertEqual(stats.recent_scans, [])

    def test_counts_confidence_and_recent_rows(self):
        reports = [
            _report({"diseaseDetected": True, "diseases": [{"name": "Rust", "confidence": 80}]}, minutes_ago=10),
            _report({"pestsDetected": True, "animalsDetected": True,
                     "pests": [{"name": "Aphid", "confidence": 65}]}, minutes_ago=5),
            _report({}, minutes_ago=1),
        ]
        stats = build_admin_stats(reports)

        self.assertEqual(stats.total_scans, 3)
        self.assertEqual(stats.avg_confidence, 72.5)
        breakdown = {c.category: c.count for c in stats.category_breakdown}
        self.assertEqual(breakdown, {"disease": 1, "insect": 1, "wildlife": 1, "healthy": 1})
        self.assertEqual([row.name for row in stats.recent_scans], ["Aphid", "Rust"])
        self.assertEqual(stats.recent_scans[0].category, "insect")

    def test_recent_rows_limited(self):
        reports = [_report({"diseases": [{"name": f"D{i}", "confidence": 50}]}, minutes_ago=i) for i in range(15)]
        stats = build_admin_stats(reports)
        self.assertEqual(len(stats.recent_scans), 10)
        self.assertEqual(stats.recent_scans[0].name, "D0")


class TestAdminStatsService(DatabaseTestCase):

    async def asyncSetUp(self):
        await super().asyncSetUp()
        self.service = AdminStatsService(self.reports, self.detections, self.deterrent_settings,
                                         self.analytics, self.activity)

    async def test_stats_ignore_pending_reports(self):
        await self.reports.capture("https://example.com/pending.jpg")
        await self.reports.create(_report({"diseases": [{"name": "Rust", "confidence": 90}]}))

        stats = await self.service.stats()
        self.assertEqual(stats.total_scans, 1)
        self.assertEqual(stats.avg_confidence, 90.0)

    async def test_automation_status(self):
        status = await self.service.automation_status()
        self.assertEqual(status.mode, "disabled")
        self.assertEqual(status.detections_total, 0)
        self.assertEqual(status.activation_rate, 0.0)
        self.assertIsNone(status.last_detection_at)

        await self.arm_deterrent()
        settings = await self.deterrent_settings.snapshot()
        await self.cascade.run(animal_type="deer", distance=10, confidence=0.9, settings=settings, source="manual")
        await self.cascade.run(animal_type="deer", distance=90, confidence=0.9, settings=settings, source="manual")

        status = await self.service.automation_status()
        self.assertEqual(status.mode, "active")
        self.assertEqual(status.detections_total, 2)
        self.assertEqual(status.detections_deterred, 1)
        self.assertEqual(status.activation_rate, 50.0)
        self.assertIsNotNone(status.last_detection_at)
        self.assertEqual(status.activity_counts["deterrent"], 1)


if __name__ == "__main__":
    unittest.main()
