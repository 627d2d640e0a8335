from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask
from flask_socketio import SocketIO

from config import get_settings_module

from .common.datetime_utils import set_app_timezone
from .common.logging_utils import configure_logging
from .core.constants import QR_DEFAULT_VALIDITY_MINUTES
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_admin_lecturer, list_tables

from .container import Container, build_container
from .errors import register_error_handlers
from .attendance.controller import register as register_attendance
from .courses.controller import register as register_courses
from .notifications.controller import register as register_notifications
from .notifications.controller import register_socket_events
from .notifications.realtime import SocketIOBroadcaster
from .notifications.scheduler import start_daily_check
from .qrcodes.controller import register as register_qrcodes
from .reports.controller import register as register_reports
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app.

    Passing a container skips database bootstrap and the scheduler; tests
    use this to run the HTTP layer against in-memory services.
    """

    load_dotenv(override=False)
    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", "") or None)
    app_timezone = getattr(settings, "APP_TIMEZONE", "")
    set_app_timezone(app_timezone)

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["QR_DEFAULT_VALIDITY_MINUTES"] = int(getattr(settings, "QR_DEFAULT_VALIDITY_MINUTES", QR_DEFAULT_VALIDITY_MINUTES))
    app.config["VAPID_PUBLIC_KEY"] = getattr(settings, "VAPID_PUBLIC_KEY", "")

    socketio = SocketIO(app, cors_allowed_origins=getattr(settings, "CORS_ALLOWED_ORIGINS", "*"))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if getattr(settings, "AUTO_SEED_DB", False):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
            admin_email = getattr(settings, "ADMIN_EMAIL", "")
            admin_password = getattr(settings, "ADMIN_PASSWORD", "")
            if admin_email and admin_password:
                ensure_admin_lecturer(
                    db_config,
                    name=getattr(settings, "ADMIN_NAME", "Administrator"),
                    email=admin_email,
                    password=admin_password,
                )

        container = build_container(
            db_config=db_config,
            jwt_secret=getattr(settings, "JWT_SECRET"),
            jwt_expires_minutes=int(getattr(settings, "JWT_EXPIRES_MINUTES", 60)),
            vapid_private_key=getattr(settings, "VAPID_PRIVATE_KEY", "") or None,
            vapid_claim_email=getattr(settings, "VAPID_CLAIM_EMAIL", "") or None,
            broadcaster=SocketIOBroadcaster(socketio),
        )

        if getattr(settings, "DAILY_CHECK_ENABLED", False):
            start_daily_check(
                container.attendance_checker,
                hour=getattr(settings, "DAILY_CHECK_HOUR", 2),
                timezone=getattr(settings, "DAILY_CHECK_TIMEZONE", None) or app_timezone or "UTC",
            )

    register_error_handlers(app)
    # users first: it installs the before_request hook that resolves the actor
    register_users(app, container)
    register_courses(app, container)
    register_qrcodes(app, container)
    register_attendance(app, container)
    register_reports(app, container)
    register_notifications(app, container)
    register_socket_events(socketio)

    return app
