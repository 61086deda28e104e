import unittest

from fastapi import HTTPException

from farmguard.constants.pipeline import REPORT_PENDING, REPORT_COMPLETE
from farmguard.models import Report
from tests.helpers import DatabaseTestCase


class TestGenericManager(DatabaseTestCase):

    async def test_create(self):
        """Test creating a new record."""
        report = await self.reports.create(Report(image_url="https://example.com/a.jpg"))
        self.assertTrue(report.uid.startswith("reports_"))
        self.assertEqual(report.status, REPORT_PENDING)
        self.assertIsNotNone(report.created_at)

    async def test_fetch(self):
        """Test fetching a record by UID."""
        created = await self.reports.capture("https://example.com/a.jpg", crop_type="wheat")
        fetched = await self.reports.fetch(created.uid)
        self.assertEqual(created.uid, fetched.uid)
        self.assertEqual(fetched.crop_type, "wheat")

    async def test_fetch_missing(self):
        with self.assertRaises(HTTPException) as ctx:
            await self.reports.fetch("reports_missing")
        self.assertEqual(ctx.exception.status_code, 404)
        self.assertEqual(ctx.exception.detail["name"], "DB_NOT_FOUND")

    async def test_update(self):
        """Test updating a record."""
        created = await self.reports.capture("https://example.com/a.jpg")
        updated = await self.reports.update(created.uid, {"severity": "low"})
        self.assertEqual(updated.severity, "low")
        self.assertIsNotNone(updated.updated_at)

    async def test_fetch_all_filters_and_sorts(self):
        first = await self.reports.capture("https://example.com/1.jpg")
        second = await self.reports.capture("https://example.com/2.jpg")
        await self.reports.update(first.uid, {"status": REPORT_COMPLETE})

        newest_first = await self.reports.fetch_all(sorts=["-created_at"])
        self.assertEqual([r.uid for r in newest_first.items], [second.uid, first.uid])

        complete = await self.reports.fetch_all(filters={"status": REPORT_COMPLETE})
        self.assertEqual(len(complete), 1)
        self.assertEqual(complete.items[0].uid, first.uid)

        either = await self.reports.fetch_all(filters={"uid": [first.uid, second.uid]})
        self.assertEqual(either.count, 2)

    async def test_count(self):
        await self.reports.capture("https://example.com/1.jpg")
        await self.reports.capture("https://example.com/2.jpg")
        self.assertEqual(await self.reports.count(), 2)
        self.assertEqual(await self.reports.count({"status": REPORT_COMPLETE}), 0)

    async def test_delete(self):
        """Test deleting a record."""
        created = await self.reports.capture("https://example.com/a.jpg")
        self.assertEqual(await self.reports.delete(created.uid), 1)
        with self.assertRaises(HTTPException):
            await self.reports.fetch(created.uid)

    async def test_delete_missing_is_noop(self):
        self.assertEqual(await self.reports.delete("reports_missing"), 0)

    async def test_compare_and_swap(self):
        created = await self.reports.capture("https://example.com/a.jpg")

        swapped = await self.reports.compare_and_swap(
            created.uid, {"status": REPORT_PENDING}, {"status": REPORT_COMPLETE})
        self.assertTrue(swapped)

        # The row no longer matches the expectation
        swapped_again = await self.reports.compare_and_swap(
            created.uid, {"status": REPORT_PENDING}, {"status": REPORT_COMPLETE})
        self.assertFalse(swapped_again)
        self.assertEqual((await self.reports.fetch(created.uid)).status, REPORT_COMPLETE)


if __name__ == "__main__":
    unittest.main()
