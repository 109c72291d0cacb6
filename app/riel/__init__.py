import logging
import os
from datetime import timedelta

from dotenv import load_dotenv
from flask import Flask, g, jsonify, request, session
from sqlalchemy import inspect as sa_inspect
from werkzeug.exceptions import HTTPException

from app.riel.config import is_production, load_config
from app.riel.db import init_db, rollback_db_session, teardown_db_session
from app.riel.errors import ApiError, InvalidInput
from app.riel.mailer import mailer_from_config
from app.riel.routes import bp as routes_bp
from app.riel.auth import bp as auth_bp, load_current_user
from app.riel.modules.films.routes import bp as films_bp
from app.riel.modules.productions.routes import bp as productions_bp
from app.riel.modules.stories.routes import bp as stories_bp
from app.riel.modules.users.routes import bp as users_bp, register_bp
from app.riel.modules.subscribers.routes import bp as subscribers_bp
from app.riel.modules.notifications.routes import bp as notifications_bp
from app.riel.modules.site_settings.routes import bp as settings_bp
from app.riel.modules.media.routes import bp as media_bp
from app.riel.modules.activity.routes import bp as activity_bp

# Mutations that run without a session identity.
CSRF_EXEMPT_ENDPOINTS = frozenset({"auth.login_post", "auth.logout", "subscribers.subscribe_post"})


def create_app() -> Flask:
    load_dotenv()
    app = Flask(__name__)
    app.config.from_mapping(load_config())
    app.config["PERMANENT_SESSION_LIFETIME"] = timedelta(hours=8)
    app.config["SESSION_REFRESH_EACH_REQUEST"] = True
    app.json.sort_keys = False

    logging.getLogger("app.riel").setLevel(app.config["LOG_LEVEL"])
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # Production guardrails (fail fast with clear logs)
    if is_production(app.config):
        if not app.config.get("DATABASE_URL") or str(app.config["DATABASE_URL"]).strip() == "":
            raise RuntimeError("DATABASE_URL is required in production.")
        if str(app.config["DATABASE_URL"]).startswith("sqlite"):
            raise RuntimeError("DATABASE_URL must be Postgres in production (not sqlite).")
        if not app.config.get("SECRET_KEY") or str(app.config["SECRET_KEY"]) in ("", "change-me"):
            raise RuntimeError("SECRET_KEY must be set to a strong value in production (not default).")

    init_db(app)
    app.extensions["mailer"] = mailer_from_config(app.config)

    def _dispose_engine_on_fork() -> None:
        if hasattr(os, "register_at_fork"):
            def _after_fork_child():
                engine = app.extensions.get("sqlalchemy_engine")
                if engine:
                    engine.dispose()
                    app.logger.info("Disposed DB engine after fork (pid=%s)", os.getpid())

            os.register_at_fork(after_in_child=_after_fork_child)

    _dispose_engine_on_fork()

    if app.config.get("STORAGE_BACKEND") == "s3":
        missing_s3 = [k for k in ("S3_BUCKET", "S3_ACCESS_KEY_ID", "S3_SECRET_ACCESS_KEY") if not app.config.get(k)]
        if missing_s3:
            app.logger.error("STORAGE CONFIG ERROR: Missing required S3 env vars: %s", ", ".join(missing_s3))

    app.register_blueprint(routes_bp)
    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(register_bp, url_prefix="/api/auth")
    app.register_blueprint(films_bp, url_prefix="/api/films")
    app.register_blueprint(productions_bp, url_prefix="/api/productions")
    app.register_blueprint(stories_bp, url_prefix="/api/stories")
    app.register_blueprint(users_bp, url_prefix="/api/users")
    app.register_blueprint(subscribers_bp, url_prefix="/api/subscribers")
    app.register_blueprint(notifications_bp, url_prefix="/api/notifications")
    app.register_blueprint(settings_bp, url_prefix="/api/settings")
    app.register_blueprint(media_bp, url_prefix="/api/upload")
    app.register_blueprint(activity_bp, url_prefix="/api/activity")

    app.before_request(load_current_user)

    @app.before_request
    def _csrf_guard():
        if not app.config.get("CSRF_ENABLED"):
            return None
        if request.method not in ("POST", "PUT", "PATCH", "DELETE"):
            return None
        if request.endpoint in CSRF_EXEMPT_ENDPOINTS:
            return None
        # Only cookie-authenticated requests can be forged; anonymous ones fall
        # through to the route's own 401.
        if getattr(g, "current_user", None) is None:
            return None
        session.permanent = True
        from app.riel.security import validate_csrf

        if not validate_csrf(request):
            raise InvalidInput("CSRF token missing or invalid.")
        return None

    app.teardown_appcontext(teardown_db_session)

    def _run_schema_health_check() -> None:
        from app.riel.models import Base

        try:
            insp = sa_inspect(app.extensions["sqlalchemy_engine"])
            missing = [t for t in Base.metadata.tables if not insp.has_table(t)]
        except Exception as e:
            app.logger.exception("Schema health check failed: %s", e)
            return
        if missing:
            app.logger.error("DB schema out of date; run `alembic upgrade head`. Missing tables: %s", ", ".join(missing))

    if not app.config.get("TESTING") and app.config.get("ENV") != "test":
        _run_schema_health_check()

    @app.errorhandler(ApiError)
    def _api_error(e: ApiError):  # type: ignore[no-redef]
        if e.status_code >= 500:
            rollback_db_session()
            app.logger.error("%s (request_id=%s)", e.message, getattr(g, "request_id", None))
        elif e.status_code == 401 and getattr(g, "missing_capability", None):
            app.logger.warning(
                "Unauthorized: missing_capability=%s request_id=%s",
                g.missing_capability,
                getattr(g, "request_id", None),
            )
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):  # type: ignore[no-redef]
        if e.code == 413:
            return jsonify({"error": "Request body too large."}), 413
        return jsonify({"error": e.description or e.name}), e.code or 500

    @app.errorhandler(Exception)
    def _err_500(e: Exception):  # type: ignore[no-redef]
        rollback_db_session()
        app.logger.exception("Unhandled 500 (request_id=%s)", getattr(g, "request_id", None))
        message = "Internal server error"
        if not is_production(app.config):
            message = f"{message}: {e}"
        return jsonify({"error": message}), 500

    logging.getLogger(__name__).info("create_app() complete; app ready to serve")

    return app
