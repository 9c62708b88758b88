from __future__ import annotations

import atexit
import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.logging_config import configure_logging
from .database.bootstrap import apply_schema, list_tables

from .container import build_container
from .attendance.controller import register as register_attendance
from .biotime.controller import register as register_biotime
from .employees.controller import register as register_employees
from .schedules.controller import register as register_schedules
from .pipeline.scheduler import build_scheduler

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.json.sort_keys = False

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("schema ready (tables=%s)", len(list_tables(db_config)))

    container = build_container(
        db_config=db_config,
        biotime_config=getattr(settings, "BIOTIME_CONFIG", {}),
        pipeline_config=getattr(settings, "PIPELINE_CONFIG", {}),
    )
    app.extensions["nexlinx_container"] = container

    register_biotime(app, container)
    register_attendance(app, container)
    register_employees(app, container)
    register_schedules(app, container)

    if bool(getattr(settings, "ENABLE_SCHEDULER", False)):
        scheduler = build_scheduler(container, container.pipeline_config)
        scheduler.start()
        atexit.register(lambda: scheduler.shutdown(wait=False))
        app.extensions["nexlinx_scheduler"] = scheduler
        logger.info("background scheduler started")

    return app
