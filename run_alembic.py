#!/usr/bin/env python3
"""
Run Alembic migrations using Python
"""
import logging
import sys
from pathlib import Path

from alembic.config import Config
from alembic import command

from farmguard.config import init_settings

logger = logging.getLogger(__name__)


def main() -> None:
    init_settings()
    alembic_cfg = Config(str(Path(__file__).resolve().parent / "alembic.ini"))

    try:
        logger.info("Running Alembic migrations...")
        command.upgrade(alembic_cfg, "head")
        logger.info("✅ Migrations completed successfully!")
    except Exception as e:
        error_msg = str(e).lower()
        logger.error(f"❌ Migration failed: {e}")

        if "permission denied" in error_msg or "insufficient privilege" in error_msg:
            logger.error("⚠️  PERMISSION ERROR! The database user needs CREATE privileges to run migrations.")
            sys.exit(1)

        raise


if __name__ == "__main__":
    main()
