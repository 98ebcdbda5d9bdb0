"""
Host Group Admin
Flask Application Factory.

Usage:
    from groupadmin import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

import click
from flask import Flask
from flask_migrate import Migrate

from groupadmin.config import config
from groupadmin.models import db
from groupadmin.middleware.logging_config import configure_logging

logger = logging.getLogger(__name__)

# ── SQLite FK enforcement (global engine event) ─────────────────────────
from sqlalchemy import event as _sa_event, engine as _sa_engine


@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config[config_name])

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)

    # ── Import all models so Alembic can detect them ─────────────────────
    from groupadmin.models import hostgroup as _hostgroup_models    # noqa: F401
    from groupadmin.models import dependents as _dependent_models   # noqa: F401
    from groupadmin.models import permission as _permission_models  # noqa: F401

    # ── Auto-create tables (CREATE IF NOT EXISTS) ────────────────────────
    with app.app_context():
        if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///") and \
                ":memory:" not in app.config["SQLALCHEMY_DATABASE_URI"]:
            os.makedirs(app.instance_path, exist_ok=True)
        try:
            db.create_all()
            app.logger.info("db.create_all() completed successfully")
        except Exception as e:
            app.logger.warning("db.create_all() failed: %s", e)

    # ── Blueprints ───────────────────────────────────────────────────────
    from groupadmin.blueprints import register_blueprints
    register_blueprints(app)

    # ── CLI commands ─────────────────────────────────────────────────────
    @app.cli.command("seed-groups")
    def seed_groups_cmd():
        """Seed host group fixture data (groups, dependents, user group rights)."""
        from groupadmin.services.seed_service import seed_all
        context = seed_all()
        logger.info("Seeded fixtures: %s", context)

    @app.cli.command("run-conformance")
    @click.option(
        "--operation", "operations", multiple=True,
        type=click.Choice(["layout", "create", "update", "clone", "cancel", "delete", "subgroups"]),
        help="Restrict the run to these operations (repeatable).",
    )
    def run_conformance_cmd(operations):
        """Run the host group form scenarios against this application."""
        from groupadmin.conformance.runner import run_suite
        report = run_suite(app, operations or None, seed=app.config["CONFORMANCE_SEED"])
        if not report.ok:
            raise SystemExit(1)

    # ── Health check ─────────────────────────────────────────────────────
    @app.route("/api/v1/health")
    def health():
        return {"status": "ok", "app": "Host Group Admin"}

    # ── Error handlers ───────────────────────────────────────────────────
    @app.errorhandler(404)
    def not_found(e):
        from flask import request
        return {"error": "Not found", "path": request.path}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {"error": "Method not allowed"}, 405

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return {"error": "Internal server error"}, 500

    return app
