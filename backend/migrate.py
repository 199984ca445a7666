# backend/migrate.py
"""
Apply alembic migrations up to head.

    python -m backend.migrate
"""

import logging
from pathlib import Path

from alembic import command
from alembic.config import Config

from .app.config import settings

logger = logging.getLogger(__name__)

ALEMBIC_DIR = Path(__file__).resolve().parent / "alembic"


def alembic_config(database_url: str | None = None) -> Config:
    url = database_url or settings.resolved_database_url
    cfg = Config()
    cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    # ConfigParser interpolation: '%' in passwords must be doubled
    cfg.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
    return cfg


def apply_migrations(database_url: str | None = None) -> None:
    cfg = alembic_config(database_url)
    command.upgrade(cfg, "head")
    logger.info("Database schema is up to date")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    apply_migrations()
