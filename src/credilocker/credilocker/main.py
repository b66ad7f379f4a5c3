from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, render_template

from config import get_settings_module

from .cep.controller import register as register_cep
from .cocurricular.controller import register as register_cocurricular
from .container import build_container
from .core.constants import DEFAULT_BUCKET, DEFAULT_SESSION_DAYS, DEFAULT_SIGNED_URL_SECONDS
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .database.connection import DBConfig
from .field_projects.controller import register as register_field_projects
from .reports.controller import register as register_reports
from .storage.controller import register as register_storage
from .students.controller import register as register_students
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).resolve().parents[3]


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__, template_folder="../../../templates", static_folder="../../../static")

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["MAX_CONTENT_LENGTH"] = getattr(settings, "MAX_CONTENT_LENGTH", None)
    app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

    # Helpful startup info to avoid "connected but no tables" confusion.
    logger.info("settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=ROOT_DIR / "database" / "schema.sql")
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=ROOT_DIR / "database" / "seed.sql")
        ensure_demo_users(db_config)
        logger.info("demo seed ready")

    storage_root = Path(getattr(settings, "STORAGE_ROOT", "storage"))
    if not storage_root.is_absolute():
        storage_root = ROOT_DIR / storage_root

    container = build_container(
        db_config=db_config,
        storage_root=str(storage_root),
        secret_key=app.secret_key,
        bucket=getattr(settings, "STORAGE_BUCKET", DEFAULT_BUCKET),
        signed_url_ttl=int(getattr(settings, "SIGNED_URL_TTL_SECONDS", DEFAULT_SIGNED_URL_SECONDS)),
    )
    app.extensions["credilocker"] = container

    @app.errorhandler(403)
    def forbidden(_e):
        return render_template("403.html"), 403

    register_users(app, container)
    register_dashboard(app, container)
    register_field_projects(app, container)
    register_cep(app, container)
    register_cocurricular(app, container)
    register_students(app, container)
    register_reports(app, container)
    register_storage(app, container)

    return app
