import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine

from farmguard.config import Settings

logger = logging.getLogger(__name__)


def build_engine(settings: Settings, **kwargs) -> AsyncEngine:
    uri = settings.SQLALCHEMY_DATABASE_URI
    if uri.startswith("postgresql+asyncpg"):
        connect_args = {
            "timeout": 60,
            "server_settings": {
                "application_name": settings.PROJECT_NAME
            }
        }
        if settings.DB_SSL_REQUIRE:
            connect_args["ssl"] = "require"
        kwargs.setdefault("connect_args", connect_args)
    return create_async_engine(
        uri,
        echo=settings.DB_ECHO,
        pool_pre_ping=True,
        **kwargs
    )


async def ping(engine: AsyncEngine) -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def wait_for_db(engine: AsyncEngine, max_retries: int = 10) -> bool:
    delay = 2  # seconds

    for attempt in range(1, max_retries + 1):
        try:
            await ping(engine)
            logger.info("✅ Database connected successfully")
            return True
        except Exception as e:
            logger.warning(f"⏳ DB not ready (attempt {attempt}/{max_retries}): {e}")
            await asyncio.sleep(delay)
            delay = min(delay * 2, 30)  # exponential backoff

    logger.error("❌ Database failed to connect after retries")
    return False
