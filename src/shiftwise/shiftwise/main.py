from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .breaks.controller import register as register_breaks
from .common.web import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .payroll.controller import register as register_payroll
from .shifts.controller import register as register_shifts
from .timeclock.controller import register as register_timeclock

logger = logging.getLogger(__name__)


def register_routes(app: Flask, container: Container) -> None:
    register_error_handlers(app)
    register_timeclock(app, container)
    register_shifts(app, container)
    register_breaks(app, container)
    register_payroll(app, container)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    container = build_container(
        db_config=db_config,
        tax_year=getattr(settings, "PAYROLL_TAX_YEAR", None),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(container.conn, schema_path=schema_path)
        logger.info("schema ready (tables=%d)", len(list_tables(container.conn)))

    register_routes(app, container)
    return app
