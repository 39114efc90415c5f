from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .audit.controller import register as register_audit
from .common.http import register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_MAX_UPLOAD_MB
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import apply_schema, ensure_founder, list_tables
from .notifications.controller import register as register_notifications
from .performance.controller import register as register_performance
from .requests.controller import register as register_requests
from .salary.controller import register as register_salary
from .tasks.controller import register as register_tasks
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the JSON API.

    Tests pass a ready ``container`` (in-memory repositories); otherwise one is
    built over MySQL from the settings module selected by ``APP_ENV``.
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["MAX_CONTENT_LENGTH"] = int(getattr(settings, "MAX_UPLOAD_MB", DEFAULT_MAX_UPLOAD_MB)) * 1024 * 1024 + 64 * 1024

    logging.basicConfig(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))

            founder_email = getattr(settings, "FOUNDER_EMAIL", "")
            founder_password = getattr(settings, "FOUNDER_PASSWORD", "")
            if founder_email and founder_password:
                created = ensure_founder(
                    db_config,
                    name=getattr(settings, "FOUNDER_NAME", "Founder"),
                    email=founder_email,
                    password=founder_password,
                )
                if created:
                    logger.info("founder account %s created", founder_email)

        container = build_container(db_config=db_config, settings=settings)

    app.extensions["company_management"] = container
    register_error_handlers(app)

    register_users(app, container)
    register_attendance(app, container)
    register_tasks(app, container)
    register_salary(app, container)
    register_requests(app, container)
    register_notifications(app, container)
    register_performance(app, container)
    register_audit(app, container)
    register_dashboard(app, container)

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return {"success": True, "status": "ok"}

    return app
