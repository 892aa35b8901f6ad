from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import Container, build_container
from .core.constants import DEFAULT_REPORT_TIMEZONE
from .database.bootstrap import apply_schema, list_tables
from .slack.controller import register as register_slack


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["REPORT_TIMEZONE"] = getattr(settings, "REPORT_TIMEZONE", DEFAULT_REPORT_TIMEZONE)

    log_level = str(getattr(settings, "LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(level=log_level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    app.logger.setLevel(log_level)

    if container is None:
        app.logger.info(
            "[slack-attendance] settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            app.logger.info("[slack-attendance] schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(db_config=db_config, report_timezone=app.config["REPORT_TIMEZONE"])

    register_attendance(app, container)
    register_slack(app, container)

    return app
