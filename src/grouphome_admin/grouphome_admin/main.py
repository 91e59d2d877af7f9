from __future__ import annotations

import importlib
from types import SimpleNamespace
from typing import Any, Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .api.errors import register_error_handlers
from .attendance.controller import register as register_attendance
from .auth.controller import register as register_auth
from .container import Container, build_container
from .core.constants import (
    DEFAULT_KEEPALIVE_SECONDS,
    DEFAULT_POOL_SIZE,
    DEFAULT_RETRY_ATTEMPTS,
    DEFAULT_RETRY_DELAY_SECONDS,
)
from .core.logging import configure_logging, get_logger
from .database.bootstrap import SCHEMA_PATH, SEED_PATH, apply_schema, apply_seed_sql, ensure_default_roles, list_tables
from .database.keepalive import KeepAlive
from .departments.controller import register as register_departments
from .group_homes.controller import register as register_group_homes
from .residents.controller import register as register_residents
from .roles.controller import register as register_roles
from .shift_preferences.controller import register as register_shift_preferences
from .usage_records.controller import register as register_usage_records
from .users.controller import register as register_users

logger = get_logger(__name__)


def _load_settings(overrides: Optional[dict[str, Any]]) -> SimpleNamespace:
    module = importlib.import_module(get_settings_module())
    values = {k: getattr(module, k) for k in dir(module) if k.isupper()}
    values.update(overrides or {})
    return SimpleNamespace(**values)


def create_app(container: Optional[Container] = None, settings: Optional[dict[str, Any]] = None) -> Flask:
    """Build the Flask app.

    Tests pass a container assembled over in-memory repositories; the database
    bootstrap and keep-alive are skipped in that case.
    """

    load_dotenv(override=False)
    cfg = _load_settings(settings)
    configure_logging(getattr(cfg, "LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.secret_key = cfg.SECRET_KEY
    app.config["DEBUG"] = bool(getattr(cfg, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(cfg, "TESTING", False))
    app.json.ensure_ascii = False
    app.json.sort_keys = False

    if container is None:
        db_config = dict(cfg.DB_CONFIG)
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            get_settings_module(),
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if getattr(cfg, "AUTO_INIT_DB", False):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if getattr(cfg, "AUTO_SEED_DB", False):
            apply_seed_sql(db_config, seed_path=SEED_PATH)
            ensure_default_roles(db_config)
            logger.info("demo seed ready")

        container = build_container(
            db_config=db_config, pool_size=getattr(cfg, "DB_POOL_SIZE", DEFAULT_POOL_SIZE)
        )

        if not app.config["TESTING"]:
            keepalive = KeepAlive(
                container.conn.ping,
                interval_seconds=getattr(cfg, "DB_KEEPALIVE_SECONDS", DEFAULT_KEEPALIVE_SECONDS),
                attempts=getattr(cfg, "RETRY_ATTEMPTS", DEFAULT_RETRY_ATTEMPTS),
                delay_seconds=getattr(cfg, "RETRY_DELAY_SECONDS", DEFAULT_RETRY_DELAY_SECONDS),
            )
            keepalive.start()
            app.extensions["db_keepalive"] = keepalive

    app.extensions["container"] = container
    register_error_handlers(app)

    # Auth first: its before_request hook sets g.auth for every other route.
    register_auth(app, container)
    register_users(app, container)
    register_departments(app, container)
    register_roles(app, container)
    register_group_homes(app, container)
    register_residents(app, container)
    register_shift_preferences(app, container)
    register_usage_records(app, container)
    register_attendance(app, container)

    return app
