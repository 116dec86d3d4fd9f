from __future__ import annotations

import logging
import os
from pathlib import Path

from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

from lokal.core.config import DATABASE_URL

logger = logging.getLogger(__name__)
MIGRATIONS_PREFIX = "[MIGRATIONS]"

REQUIRED_TABLES = {
    "businesses",
    "deals",
    "profiles",
    "saved_deals",
    "redemptions",
    "business_leads",
    "contracts",
    "contract_contacts",
    "contract_assignments",
    "consumer_usage_details",
}


def _environment() -> str:
    return os.getenv("ENVIRONMENT", os.getenv("ENV", "dev")).strip().lower()


def validate_database_environment() -> None:
    if _environment() in {"prod", "production"} and DATABASE_URL.startswith("sqlite"):
        logger.critical("%s SQLite is forbidden in production", MIGRATIONS_PREFIX)
        raise RuntimeError("SQLite is forbidden in production environment")


def ensure_migrations_applied(*, engine: Engine, alembic_config_path: Path) -> None:
    if _environment() == "test":
        logger.info("%s skipped migration check in test environment", MIGRATIONS_PREFIX)
        return

    inspector = inspect(engine)
    missing = sorted(table for table in REQUIRED_TABLES if not inspector.has_table(table))
    if missing:
        logger.critical("%s tables missing=%s", MIGRATIONS_PREFIX, ",".join(missing))
        raise RuntimeError("tables missing / migrations not applied")

    if not alembic_config_path.exists():
        logger.warning("%s alembic config not found path=%s", MIGRATIONS_PREFIX, alembic_config_path)
        return

    script = ScriptDirectory.from_config(Config(str(alembic_config_path)))
    head = script.get_current_head()
    if not inspector.has_table("alembic_version"):
        logger.warning("%s alembic_version table missing; schema not managed by alembic", MIGRATIONS_PREFIX)
        return

    with engine.connect() as connection:
        current = connection.execute(text("SELECT version_num FROM alembic_version")).scalar()
    if current != head:
        logger.critical("%s database at revision=%s head=%s", MIGRATIONS_PREFIX, current, head)
        raise RuntimeError("Database is not at the latest migration")
    logger.info("%s database at head revision=%s", MIGRATIONS_PREFIX, head)
