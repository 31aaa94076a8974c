from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv

from config import get_settings_module

from .container import Container, build_container
from .core.constants import DEFAULT_TIMEZONE
from .database.bootstrap import apply_schema, list_tables
from .database.connection import db_config_from_dict

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: str | int = "INFO") -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


def create_container() -> Container:
    """Composition root used by the messaging front-end and the scheduler."""
    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    db_config = getattr(settings, "DB_CONFIG")
    default_timezone = getattr(settings, "DEFAULT_TIMEZONE", DEFAULT_TIMEZONE)

    logger.info(
        "settings=%s db=%s@%s:%s/%s default_timezone=%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        default_timezone,
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        target = db_config_from_dict(db_config)
        apply_schema(target, schema_path=schema_path)
        logger.info("Schema ready (tables=%d)", len(list_tables(target)))

    return build_container(db_config=db_config, default_timezone=default_timezone)
