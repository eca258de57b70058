"""Logging setup shared by the API process and Alembic."""

import logging

from app.core.config import Settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(settings: Settings) -> None:
    level = logging.DEBUG if settings.debug else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # SQL echo is controlled by the engine, keep the sqlalchemy logger quiet otherwise
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
