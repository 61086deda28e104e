import asyncio
import json
import unittest

from fastapi import HTTPException

from farmguard.constants.pipeline import (
    ACTION_DETECTION,
    ACTION_DETERRENT,
    DETECTION_DETERRED,
    REPORT_COMPLETE,
    REPORT_PENDING,
)
from farmguard.services.gemini import GeminiService
from tests.helpers import DISEASE_ANALYSIS, DatabaseTestCase, fake_genai_client, png_data_url


class TestReportProcessor(DatabaseTestCase):
    gemini_response = DISEASE_ANALYSIS

    async def test_process_completes_report(self):
        report = await self.reports.capture(png_data_url(), crop_type="tomato plant")
        processed = await self.processor.process(report.uid)

        self.assertEqual(processed.status, REPORT_COMPLETE)
        self.assertEqual(processed.severity, "medium")
        self.assertEqual(processed.crop_type, "tomato")
        self.assertEqual(processed.analysis["overallHealth"], 60 - 5 - 3)
        self.assertEqual(processed.analysis["avgConfidence"], 80.0)
        self.assertTrue(processed.analysis["leafDamage"])

        analytics = await self.analytics.fetch_all()
        self.assertEqual(analytics.count, 1)
        self.assertEqual(analytics.items[0].category, "disease")
        self.assertEqual(analytics.items[0].detection_name, "Early Blight")
        self.assertAlmostEqual(analytics.items[0].confidence, 0.9)
        self.assertEqual(await self.activity.count({"action": ACTION_DETECTION}), 1)

    async def test_missing_report_writes_nothing(self):
        with self.assertRaises(HTTPException) as ctx:
            await self.processor.process("reports_missing")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(await self.analytics.count(), 0)
        self.assertEqual(await self.activity.count(), 0)

    async def test_second_process_conflicts(self):
        report = await self.reports.capture(png_data_url())
        await self.processor.process(report.uid)

        with self.assertRaises(HTTPException) as ctx:
            await self.processor.process(report.uid)
        self.assertEqual(ctx.exception.status_code, 409)
        self.assertEqual(await self.analytics.count(), 1)

    async def test_unexpected_failure_leaves_report_pending(self):
        report = await self.reports.capture(png_data_url())

        async def broken_record(*args, **kwargs):
            raise RuntimeError("disk full")

        self.analytics.record = broken_record
        with self.assertRaises(HTTPException) as ctx:
            await self.processor.process(report.uid)
        self.assertEqual(ctx.exception.status_code, 500)

        stored = await self.reports.fetch(report.uid)
        self.assertEqual(stored.status, REPORT_PENDING)
        self.assertEqual(stored.analysis, {})
        self.assertEqual(await self.activity.count(), 0)

    async def test_model_failure_completes_degraded(self):
        self.processor.gemini = GeminiService(self.settings, client=fake_genai_client(error=RuntimeError("down")),
                                              image_service=self.image_service)
        report = await self.reports.capture(png_data_url(), crop_type="wheat")
        processed = await self.processor.process(report.uid)

        self.assertEqual(processed.status, REPORT_COMPLETE)
        self.assertTrue(processed.analysis["degraded"])
        self.assertTrue(processed.analysis["modelMetadata"]["degraded"])
        self.assertEqual(processed.analysis["overallHealth"], 100)
        self.assertEqual(processed.crop_type, "wheat")

        analytics = await self.analytics.fetch_all()
        self.assertEqual(analytics.items[0].category, "healthy")
        self.assertAlmostEqual(analytics.items[0].confidence, 1.0)

    async def test_unparseable_output_completes_degraded(self):
        self.processor.gemini = GeminiService(self.settings, client=fake_genai_client("Sorry, I cannot help."),
                                              image_service=self.image_service)
        report = await self.reports.capture(png_data_url())
        processed = await self.processor.process(report.uid)

        self.assertEqual(processed.status, REPORT_COMPLETE)
        self.assertEqual(processed.severity, "none")
        self.assertFalse(processed.analysis["diseaseDetected"])
        self.assertTrue(processed.analysis["degraded"])
        self.assertEqual(processed.analysis["avgConfidence"], 100.0)

    async def test_concurrent_process_completes_once(self):
        report = await self.reports.capture(png_data_url())
        results = await asyncio.gather(self.processor.process(report.uid), self.processor.process(report.uid),
                                       return_exceptions=True)

        completed = [r for r in results if not isinstance(r, BaseException)]
        rejected = [r for r in results if isinstance(r, HTTPException)]
        self.assertEqual(len(completed), 1)
        self.assertEqual(completed[0].status, REPORT_COMPLETE)
        self.assertEqual(len(rejected), 1)
        self.assertEqual(rejected[0].status_code, 409)
        self.assertEqual(await self.analytics.count(), 1)
        self.assertEqual(await self.activity.count({"action": ACTION_DETECTION}), 1)

    async def test_load_failure_is_processing_error(self):
        report = await self.reports.capture(png_data_url())

        async def broken_fetch(*args, **kwargs):
            raise RuntimeError("connection reset")

        self.reports.fetch = broken_fetch
        with self.assertRaises(HTTPException) as ctx:
            await self.processor.process(report.uid)
        self.assertEqual(ctx.exception.status_code, 500)
        del self.reports.fetch

        stored = await self.reports.fetch(report.uid)
        self.assertEqual(stored.status, REPORT_PENDING)
        self.assertEqual(await self.analytics.count(), 0)
        self.client.aio.models.generate_content.assert_not_awaited()

    async def test_non_finite_model_numbers_never_stored(self):
        raw = '{"animalsDetected": true, "animals": [{"type": "deer", "estimatedDistance": NaN}]}'
        self.processor.gemini = GeminiService(self.settings, client=fake_genai_client(raw),
                                              image_service=self.image_service)
        report = await self.reports.capture(png_data_url())
        processed = await self.processor.process(report.uid)

        self.assertEqual(processed.status, REPORT_COMPLETE)
        self.assertTrue(processed.analysis["degraded"])
        self.assertEqual(processed.analysis["animals"], [])
        json.dumps(processed.analysis, allow_nan=False)
        self.assertEqual(await self.detections.count(), 0)


class TestReportProcessorWildlife(DatabaseTestCase):

    async def test_wildlife_triggers_cascade(self):
        await self.arm_deterrent()
        report = await self.reports.capture(png_data_url())
        processed = await self.processor.process(report.uid)

        self.assertEqual(processed.status, REPORT_COMPLETE)
        detections = await self.detections.fetch_all(filters={"report_id": report.uid})
        self.assertEqual(detections.count, 1)
        self.assertEqual(detections.items[0].animal_type, "wild_boar")
        self.assertEqual(detections.items[0].status, DETECTION_DETERRED)

        # One activation log plus the per-report summary
        self.assertEqual(await self.activity.count({"action": ACTION_DETERRENT}), 2)

    async def test_wildlife_recorded_when_disarmed(self):
        report = await self.reports.capture(png_data_url())
        await self.processor.process(report.uid)

        detections = await self.detections.fetch_all(filters={"report_id": report.uid})
        self.assertEqual(detections.count, 1)
        self.assertFalse(detections.items[0].deterrent_activated)
        self.assertEqual(await self.activity.count({"action": ACTION_DETERRENT}), 1)

    async def test_cascade_failure_does_not_undo_report(self):
        async def broken_run(*args, **kwargs):
            raise RuntimeError("speaker offline")

        self.cascade.run_for_analysis = broken_run
        report = await self.reports.capture(png_data_url())
        processed = await self.processor.process(report.uid)

        self.assertEqual(processed.status, REPORT_COMPLETE)
        summary = await self.activity.fetch_one({"action": ACTION_DETERRENT})
        self.assertEqual(summary.meta["failed"], ["Wild Boar"])
        self.assertEqual(summary.meta["activated"], 0)


if __name__ == "__main__":
    unittest.main()
