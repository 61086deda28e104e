from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator, ValidationError
import logging
import sys

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application Settings

    Required Environment Variables:
    - DATABASE_URL, or POSTGRES_SERVER, POSTGRES_USER, POSTGRES_PASSWORD, POSTGRES_DB
    - GEMINI_API_KEY
    """

    PROJECT_NAME: str = "FarmGuard Crop Intelligence Service"
    API_STR: str = "/api"

    # Database Configuration
    POSTGRES_SERVER: Optional[str] = None
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    POSTGRES_PORT: int = 5432
    DATABASE_URL: Optional[str] = None
    DB_ECHO: bool = False
    DB_SSL_REQUIRE: bool = True
    # Tables are normally created by Alembic migrations
    AUTO_CREATE_TABLES: bool = False

    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Build database URI from components or use DATABASE_URL directly"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Gemini AI Configuration
    GEMINI_API_KEY: str
    GEMINI_MODEL_VISION: str = "gemini-2.0-flash"

    # Image handling
    IMAGE_FETCH_TIMEOUT: float = 30.0
    MAX_IMAGE_BYTES: int = 20 * 1024 * 1024

    # Deterrent defaults, used while no settings row exists
    DETERRENT_DEFAULT_VOLUME: int = 70
    DETERRENT_DEFAULT_SOUND_TYPE: str = "ultrasonic"
    DETERRENT_DEFAULT_ACTIVATION_DISTANCE: float = 50.0

    # Application Configuration
    ENV_MODE: str = "dev"

    @field_validator('GEMINI_API_KEY')
    @classmethod
    def api_key_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("GEMINI_API_KEY is set but blank")
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding='utf-8',
        extra="ignore",
        case_sensitive=True,
    )


REQUIRED_VARIABLES = (
    "DATABASE_URL (or POSTGRES_SERVER/USER/PASSWORD/DB)",
    "GEMINI_API_KEY",
)


def _report_invalid_settings(error: ValidationError) -> None:
    rule = "-" * 60
    logger.error("❌ FarmGuard cannot start: invalid configuration")
    logger.error(rule)
    for problem in error.errors():
        name = problem['loc'][0] if problem['loc'] else '<settings>'
        logger.error(f"  ❌ {name}: {problem['msg']} ({problem['type']})")
    logger.error(rule)
    logger.error("Expected in the environment or .env:")
    for variable in REQUIRED_VARIABLES:
        logger.error(f"  • {variable}")
    logger.error(rule)


def get_settings() -> Settings:
    """
    Load settings from the environment, exiting with a readable report when
    required variables are missing or invalid.
    """
    try:
        loaded = Settings()
    except ValidationError as e:
        _report_invalid_settings(e)
        sys.exit(1)

    logger.info(f"✅ Settings loaded (env={loaded.ENV_MODE}, model={loaded.GEMINI_MODEL_VISION})")
    logger.info(f"🗄️  Database: {'DATABASE_URL' if loaded.DATABASE_URL else loaded.POSTGRES_SERVER}")
    return loaded


# Process-wide instance, filled by init_settings()
settings: Optional[Settings] = None


def init_settings() -> Settings:
    global settings
    if settings is None:
        settings = get_settings()
    return settings
