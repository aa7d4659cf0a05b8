"""Schema bootstrap.

sqlite (tests, local runs) gets ``create_all``. Every other database is owned
by Alembic alone: the app never creates tables behind the migrations' back.
"""

import logging
import time
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import text
from sqlalchemy.exc import OperationalError

from app.config import settings
from app.errors import StoreError
from app.models import Order, Payment, User  # noqa: F401 - register models
from app.models.database import Base, _normalize_database_url, engine

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def wait_for_db(retries: int, retry_delay_seconds: int) -> None:
    last_error = None
    for attempt in range(1, retries + 1):
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info(f"Record store reachable on attempt {attempt}")
            return
        except OperationalError as exc:
            last_error = exc
            logger.warning(f"Record store unreachable (attempt {attempt}/{retries}): {exc}")
            if attempt < retries:
                time.sleep(retry_delay_seconds)

    raise StoreError(
        f"Record store unreachable after {retries} attempts; check DATABASE_URL"
    ) from last_error


def alembic_config(database_url: str) -> Config:
    alembic_ini = PROJECT_ROOT / "alembic.ini"
    script_location = PROJECT_ROOT / "alembic"
    if not alembic_ini.exists() or not script_location.exists():
        raise RuntimeError("Alembic configuration is missing (alembic.ini or alembic/ directory not found).")

    config = Config(str(alembic_ini))
    config.set_main_option("script_location", str(script_location))
    config.set_main_option("sqlalchemy.url", _normalize_database_url(database_url))
    return config


def run_migrations() -> None:
    """Upgrade the orders/payments schema to the latest revision."""
    command.upgrade(alembic_config(settings.DATABASE_URL), "head")
    logger.info("Migrations applied up to head")


def init_db() -> None:
    wait_for_db(
        retries=settings.DB_CONNECT_RETRIES,
        retry_delay_seconds=settings.DB_CONNECT_RETRY_DELAY_SECONDS,
    )
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
        return
    run_migrations()
