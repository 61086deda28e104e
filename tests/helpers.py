import base64
import io
import json
import os
import tempfile
import unittest
from types import SimpleNamespace
from unittest.mock import AsyncMock

from PIL import Image
from sqlalchemy.pool import NullPool

from farmguard.config import Settings
from farmguard.database import build_engine
from farmguard.managers import (
    BaseSchema,
    ReportManager,
    AnimalDetectionManager,
    DeterrentSettingsManager,
    ActivityLogManager,
    ScanAnalyticManager,
)
from farmguard.services.deterrent import DeterrentCascade
from farmguard.services.gemini import GeminiService
from farmguard.services.image import ImageService
from farmguard.services.report_processor import ReportProcessor


def png_data_url(color: str = "green") -> str:
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), color).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode()


def fake_genai_client(response=None, error: Exception = None):
    """Stand-in for genai.Client exposing only client.aio.models.generate_content."""
    if isinstance(response, (dict, list)):
        response = json.dumps(response)
    generate = AsyncMock(side_effect=error) if error else AsyncMock(return_value=SimpleNamespace(text=response))
    return SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content=generate)))


WILDLIFE_ANALYSIS = {
    "cropType": "maize",
    "diseaseDetected": False,
    "pestsDetected": False,
    "animalsDetected": True,
    "severity": "medium",
    "summary": "A wild boar is rooting at the edge of the field.",
    "diseases": [],
    "pests": [],
    "animals": [
        {"type": "wild_boar", "name": "Wild Boar", "confidence": 88, "estimatedDistance": 20, "count": 1},
    ],
    "whatToDoNow": ["Check the fence line"],
}

DISEASE_ANALYSIS = {
    "cropType": "tomato",
    "diseaseDetected": True,
    "pestsDetected": True,
    "animalsDetected": False,
    "severity": "moderate",
    "summary": "Early blight with aphids.",
    "diseases": [{"name": "Early Blight", "category": "fungal", "confidence": 90, "symptoms": ["brown rings"]}],
    "pests": [{"name": "Aphid", "type": "insect", "confidence": 70, "damageType": "sucking"}],
    "animals": [],
}


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    """Fresh file-backed SQLite database per test, with every manager and service wired up."""

    gemini_response = WILDLIFE_ANALYSIS
    gemini_error: Exception = None

    async def asyncSetUp(self):
        fd, self.db_path = tempfile.mkstemp(suffix=".db")
        os.close(fd)
        self.settings = Settings(
            GEMINI_API_KEY="test-key",
            DATABASE_URL=f"sqlite+aiosqlite:///{self.db_path}",
        )
        self.engine = build_engine(self.settings, poolclass=NullPool)

        self.reports = ReportManager(self.engine)
        self.detections = AnimalDetectionManager(self.engine)
        self.deterrent_settings = DeterrentSettingsManager(self.engine)
        self.activity = ActivityLogManager(self.engine)
        self.analytics = ScanAnalyticManager(self.engine)
        await self.reports.init_db()

        self.image_service = ImageService()
        self.client = fake_genai_client(self.gemini_response, self.gemini_error)
        self.gemini = GeminiService(self.settings, client=self.client, image_service=self.image_service)
        self.cascade = DeterrentCascade(self.detections, self.activity)
        self.processor = ReportProcessor(
            reports=self.reports,
            analytics=self.analytics,
            activity=self.activity,
            deterrent_settings=self.deterrent_settings,
            cascade=self.cascade,
            gemini=self.gemini,
        )

    async def asyncTearDown(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(BaseSchema.metadata.drop_all)
        await self.engine.dispose()
        os.remove(self.db_path)

    async def arm_deterrent(self, **overrides):
        return await self.deterrent_settings.save({
            "is_enabled": True,
            "auto_activate": True,
            "volume": 70,
            "activation_distance": 50.0,
            **overrides,
        })
