from __future__ import annotations

import importlib
import logging
import logging.config
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .common.http import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .coverage.controller import register as register_coverage
from .database.bootstrap import apply_schema
from .shifts.controller import register as register_shifts
from .timeclock.controller import register as register_timeclock

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
            },
            "handlers": {
                "console": {"class": "logging.StreamHandler", "formatter": "plain"},
            },
            "loggers": {
                "staffing": {"handlers": ["console"], "level": level.upper(), "propagate": False},
            },
        }
    )


def create_app(settings_module: Optional[str] = None, *, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(str(getattr(settings, "LOG_LEVEL", "INFO")))

    if container is None:
        container = build_container(settings)
        if container.conn is not None and bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(container.conn)

    logger.info("app ready settings=%s backend=%s", settings_module, "mysql" if container.conn else "memory")
    app.extensions["staffing"] = container

    register_error_handlers(app)
    register_shifts(app, container)
    register_timeclock(app, container)
    register_coverage(app, container)

    return app
