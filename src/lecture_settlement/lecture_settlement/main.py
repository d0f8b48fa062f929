from __future__ import annotations

import importlib
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import register_error_handlers
from .common.logger import setup_logger
from .core.constants import DEFAULT_LOCK_TIMEOUT_SECONDS, DEFAULT_RETRY_ATTEMPTS, DEFAULT_RETRY_BASE_DELAY
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables

from .container import build_container
from .attendance.controller import register as register_attendance
from .payments.controller import register as register_payments
from .roster.demo import seed_demo_roster

REPO_ROOT = Path(__file__).resolve().parents[3]


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    log = setup_logger(getattr(settings, "LOG_LEVEL", "INFO"))

    backend = str(getattr(settings, "STORAGE_BACKEND", "mysql")).lower()
    db_config = dict(getattr(settings, "DB_CONFIG", {}))
    db_config.setdefault("retry_attempts", getattr(settings, "DB_RETRY_ATTEMPTS", DEFAULT_RETRY_ATTEMPTS))
    db_config.setdefault("retry_base_delay", getattr(settings, "DB_RETRY_BASE_DELAY", DEFAULT_RETRY_BASE_DELAY))
    db_config.setdefault("lock_timeout", getattr(settings, "SETTLEMENT_LOCK_TIMEOUT", DEFAULT_LOCK_TIMEOUT_SECONDS))

    if backend == "mysql":
        log.info(
            "settings=%s backend=mysql db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
    else:
        log.info("settings=%s backend=%s", settings_module, backend)

    auto_init_db = bool(getattr(settings, "AUTO_INIT_DB", False))
    auto_seed_db = bool(getattr(settings, "AUTO_SEED_DB", False))
    if backend == "mysql" and auto_init_db:
        apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
        log.info("schema ready (tables=%d)", len(list_tables(db_config)))
    if backend == "mysql" and auto_seed_db:
        apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
        log.info("demo roster seeded")

    container = build_container(backend=backend, db_config=db_config)
    if backend == "memory" and auto_seed_db:
        seed_demo_roster(container.roster_repo)
        log.info("demo roster seeded (memory)")
    app.extensions["lecture_settlement"] = container

    register_error_handlers(app)
    register_attendance(app, container)
    register_payments(app, container)

    return app
