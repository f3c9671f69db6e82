from __future__ import annotations

import importlib
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_cors import CORS
from flask_jwt_extended import JWTManager
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .container import Container, build_container
from .core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .export.controller import register as register_export
from .hierarchy.controller import register as register_hierarchy
from .messages.controller import register as register_messages
from .notifications.controller import register as register_notifications
from .positions.controller import register as register_positions
from .reports.controller import register as register_reports
from .users.controller import register as register_users

# Most specific first; a DomainError not listed here is a 400.
ERROR_STATUS = (
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 400),
    (ValidationError, 400),
)


def _status_for(exc: DomainError) -> int:
    for cls, status in ERROR_STATUS:
        if isinstance(exc, cls):
            return status
    return 400


def _register_error_handlers(app: Flask, jwt: JWTManager) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        return jsonify({"message": str(exc)}), _status_for(exc)

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        return jsonify({"message": exc.description}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        app.logger.exception("Unhandled error: %s", exc)
        message = f"Internal server error: {exc}" if app.config.get("DEBUG") else "Internal server error"
        return jsonify({"message": message}), 500

    @jwt.unauthorized_loader
    def missing_token(reason: str):
        return jsonify({"message": reason}), 401

    @jwt.invalid_token_loader
    def invalid_token(reason: str):
        return jsonify({"message": reason}), 401

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return jsonify({"message": "Token has expired"}), 401


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["JWT_SECRET_KEY"] = getattr(settings, "JWT_SECRET_KEY")
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = timedelta(hours=int(getattr(settings, "JWT_ACCESS_TOKEN_HOURS", 24)))
    app.config["DEFAULT_PAGE_SIZE"] = int(getattr(settings, "DEFAULT_PAGE_SIZE", 10))
    app.config["MAX_PAGE_SIZE"] = int(getattr(settings, "MAX_PAGE_SIZE", 100))
    app.json.sort_keys = False

    CORS(
        app,
        resources={r"/api/*": {"origins": list(getattr(settings, "CORS_ORIGINS", []))}},
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    )
    jwt = JWTManager(app)
    _register_error_handlers(app, jwt)

    if container is None:
        if app.config["DEBUG"]:
            print(
                "[rockview] settings=", settings_module,
                " db=", f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
            )

        database_dir = Path(__file__).resolve().parents[2] / "database"
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=database_dir / "schema.sql")
            if app.config["DEBUG"]:
                print(f"[rockview] schema ready (tables={len(list_tables(db_config))})")
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=database_dir / "seed.sql")
            ensure_demo_users(db_config)
            if app.config["DEBUG"]:
                print("[rockview] demo seed ready")

        container = build_container(db_config=db_config)

    app.extensions["rockview.container"] = container

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok"})

    register_users(app, container)
    register_positions(app, container)
    register_hierarchy(app, container)
    register_reports(app, container)
    register_notifications(app, container)
    register_messages(app, container)
    register_export(app, container)

    return app
