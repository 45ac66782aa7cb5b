from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.datetime_utils import default_year_start, parse_iso_date, today_local
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables


def _year_start(settings):
    raw = getattr(settings, "YEAR_START", None)
    if raw:
        return parse_iso_date(str(raw))
    return default_year_start(today_local())


def create_app(container: Container | None = None, *, settings_module: str | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["AUTH_ENABLED"] = bool(getattr(settings, "AUTH_ENABLED", True))
    for key in ("AUTH_USER_HEADER", "AUTH_GROUPS_HEADER"):
        if hasattr(settings, key):
            app.config[key] = getattr(settings, key)

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        year_start = _year_start(settings)
        app.logger.info(
            "settings=%s db=%s@%s:%s/%s year_start=%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
            year_start.isoformat(),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            app.logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(db_config=db_config, year_start=year_start)

    app.config["YEAR_START"] = container.attendance_service.year_start
    register_attendance(app, container)

    return app
