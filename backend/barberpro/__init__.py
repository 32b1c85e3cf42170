# backend/barberpro/__init__.py
from flask import Flask, current_app, request

from .config import Config
from .errors import DataAccessError, TenantAccessError
from .extensions import db, migrate


def register_error_handlers(app: Flask) -> None:
    """
    Translate data-layer failures into {"error", "code"} JSON bodies.

    The client gateway maps `code` back to the same exception class the
    embedded store raises, so callers cannot tell which backend failed.
    """

    @app.errorhandler(DataAccessError)
    def handle_data_access_error(exc: DataAccessError):
        db.session.rollback()
        if isinstance(exc, TenantAccessError):
            from .services.tenant_service import record_tenant_violation
            record_tenant_violation(exc)
            current_app.logger.warning("Cross-tenant write refused: %s", exc.message)
        elif exc.status_code >= 500:
            current_app.logger.exception("Data access failure")
        return exc.to_payload(), exc.status_code


def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    # Must be applied before init_app: the engine is built from this config
    if overrides:
        app.config.update(overrides)

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.staff import staff_bp
    from .routes.services import services_bp
    from .routes.products import products_bp
    from .routes.customers import customers_bp
    from .routes.appointments import appointments_bp
    from .routes.transactions import transactions_bp
    from .routes.settings import settings_bp
    from .routes.audit import audit_bp
    from .routes.public import public_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(staff_bp)
    app.register_blueprint(services_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(customers_bp)
    app.register_blueprint(appointments_bp)
    app.register_blueprint(transactions_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(audit_bp)
    app.register_blueprint(public_bp)

    register_error_handlers(app)

    allowed_origins = {
        origin.strip()
        for origin in app.config.get("CORS_ORIGINS", "").split(",")
        if origin.strip()
    }

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
