import asyncio
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.exceptions import HTTPException as StarletteHTTPException

from farmguard.config import Settings, init_settings
from farmguard.database import build_engine, ping, wait_for_db
from farmguard.managers import (
    BaseSchema,
    ReportManager,
    AnimalDetectionManager,
    DeterrentSettingsManager,
    ActivityLogManager,
    ScanAnalyticManager,
)
from farmguard.routers.v1 import api_router
from farmguard.services.admin_stats import AdminStatsService
from farmguard.services.deterrent import DeterrentCascade
from farmguard.services.gemini import GeminiService
from farmguard.services.image import ImageService
from farmguard.services.report_processor import ReportProcessor

logger = logging.getLogger(__name__)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # EnumException details are already dicts with a message key
    body = exc.detail if isinstance(exc.detail, dict) else {"message": str(exc.detail)}
    return JSONResponse(status_code=exc.status_code, content=body, headers=getattr(exc, "headers", None))


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    loc = [str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path")]
    return JSONResponse(
        status_code=400,
        content={
            "message": first.get("msg", "Invalid request"),
            "field": ".".join(loc) or None,
        },
    )


def create_app(
        settings: Optional[Settings] = None,
        *,
        engine: Optional[AsyncEngine] = None,
        gemini_service: Optional[GeminiService] = None,
) -> FastAPI:
    settings = settings or init_settings()
    engine = engine or build_engine(settings)

    app = FastAPI(
        title=settings.PROJECT_NAME,
        openapi_url=f"{settings.API_STR}/openapi.json"
    )

    # Managers
    report_manager = ReportManager(engine)
    detection_manager = AnimalDetectionManager(engine)
    deterrent_settings_manager = DeterrentSettingsManager(
        engine,
        default_volume=settings.DETERRENT_DEFAULT_VOLUME,
        default_sound_type=settings.DETERRENT_DEFAULT_SOUND_TYPE,
        default_activation_distance=settings.DETERRENT_DEFAULT_ACTIVATION_DISTANCE,
    )
    activity_manager = ActivityLogManager(engine)
    analytics_manager = ScanAnalyticManager(engine)

    # Services
    image_service = ImageService(fetch_timeout=settings.IMAGE_FETCH_TIMEOUT, max_bytes=settings.MAX_IMAGE_BYTES)
    gemini_service = gemini_service or GeminiService(settings, image_service=image_service)
    cascade = DeterrentCascade(detection_manager, activity_manager)

    app.state.settings = settings
    app.state.engine = engine
    app.state.db_ready = False
    app.state.report_manager = report_manager
    app.state.detection_manager = detection_manager
    app.state.deterrent_settings_manager = deterrent_settings_manager
    app.state.activity_manager = activity_manager
    app.state.image_service = image_service
    app.state.deterrent_cascade = cascade
    app.state.report_processor = ReportProcessor(
        reports=report_manager,
        analytics=analytics_manager,
        activity=activity_manager,
        deterrent_settings=deterrent_settings_manager,
        cascade=cascade,
        gemini=gemini_service,
    )
    app.state.admin_stats_service = AdminStatsService(
        reports=report_manager,
        detections=detection_manager,
        deterrent_settings=deterrent_settings_manager,
        analytics=analytics_manager,
        activity=activity_manager,
    )

    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    async def connect():
        app.state.db_ready = await wait_for_db(engine)

    @app.on_event("startup")
    async def startup():
        if settings.AUTO_CREATE_TABLES:
            async with engine.begin() as conn:
                await conn.run_sync(BaseSchema.metadata.create_all)
            app.state.db_ready = True
            logger.info("✅ Tables created")
        else:
            # Tables should exist via Alembic migrations; only verify the connection
            asyncio.create_task(connect())

    @app.on_event("shutdown")
    async def shutdown():
        await engine.dispose()

    app.include_router(api_router, prefix=settings.API_STR)

    @app.get("/")
    async def read_index():
        return {"message": f"{settings.PROJECT_NAME} is running"}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @app.get("/health/db")
    async def db_health():
        if app.state.db_ready:
            return {"db": "ok"}

        # One active check if the startup probe has not succeeded yet
        try:
            await ping(engine)
            return {"db": "ok"}
        except Exception as e:
            return {"db": "connecting", "detail": str(e) or repr(e)}

    return app
